import logging

from fastapi import FastAPI

from cilok.api.endpoints import router as api_router
from cilok.config.settings import settings

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Cilok Location API",
    description="AI-assisted resolution of Indonesian location queries over Google Maps or OpenStreetMap.",
    version="1.0.0",
)

@app.get("/health", status_code=200, tags=["Health"])
def healthcheck():
    return {"status": "ok"}

app.include_router(api_router)
