import argparse
import logging
import sys

from cilok import __version__
from cilok.agent.llm_interface import LLMInterface
from cilok.config.settings import ProviderSelection, settings, resolve_provider_selection
from cilok.exceptions import AIServiceError
from cilok.services.geo_provider import create_geo_provider
from cilok.ui.session import CilokSession

logger = logging.getLogger(__name__)


def start_session() -> int:
    selection = resolve_provider_selection(settings)
    if selection == ProviderSelection.FREE:
        logger.info("No premium map APIs detected, using free OpenStreetMap & Nominatim services")

    try:
        llm = LLMInterface(settings)
    except AIServiceError as e:
        logger.critical(f"Failed to initialize services: {e}")
        print(f"❌ {e}", file=sys.stderr)
        return 1

    geo_provider = create_geo_provider(settings, selection)
    try:
        CilokSession(settings, llm, geo_provider).run()
    finally:
        geo_provider.close()
    return 0


def serve() -> int:
    import uvicorn

    uvicorn.run("cilok.api.main:app", host=settings.api_host, port=settings.api_port)
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="cilok", description="AI-powered location toolkit CLI agent")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("start", help="Start Cilok interactive session")
    subparsers.add_parser("serve", help="Serve the HTTP API with uvicorn")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else settings.log_level.upper())

    if args.command == "serve":
        return serve()
    return start_session()


if __name__ == "__main__":
    sys.exit(main())
