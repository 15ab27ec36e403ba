import logging
from typing import Optional

from openai import OpenAI, OpenAIError

from cilok.config.settings import Settings, settings
from cilok.exceptions import AIServiceError

logger = logging.getLogger(__name__)

APP_REFERER = "https://github.com/Cloud-Dark/cilok"
APP_TITLE = "Cilok Location Toolkit"


class LLMInterface:
    """Single chat-completion calls against OpenRouter through the OpenAI SDK."""

    def __init__(self, config: Settings = settings, client=None):
        self.config = config
        self.model = config.ai_model
        self.max_attempts = config.ai_max_attempts
        self.client = client or self._initialize_client()
        logger.info(f"LLMInterface initialized for model: {self.model}.")

    def _initialize_client(self) -> OpenAI:
        if not self.config.openrouter_api_key:
            raise AIServiceError("OpenRouter API key not found. Set OPENROUTER_API_KEY.")
        return OpenAI(
            api_key=self.config.openrouter_api_key,
            base_url=self.config.openrouter_base_url,
            timeout=self.config.ai_timeout,
            max_retries=0,
            default_headers={"HTTP-Referer": APP_REFERER, "X-Title": APP_TITLE},
        )

    def get_system_prompt(self, retry_count: int, context: Optional[str]) -> str:
        if retry_count == 0:
            return """
You are Cilok, an AI location assistant. Respond naturally in Indonesian with helpful location information.

When user asks about locations, provide detailed, conversational responses about:
- Location details and coordinates
- Travel time and distance (estimate if needed)
- Nearby places and recommendations
- Practical information

Always be conversational and helpful. Don't return JSON - just natural Indonesian text responses.

Examples:
User: "detail lokasi Monas Jakarta"
Response: "Saya akan mencari informasi detail lokasi Monumen Nasional (Monas) untuk Anda..."

User: "dari Johor Bahru ke Kuala Lumpur berapa jam?"
Response: "Perjalanan dari Johor Bahru ke Kuala Lumpur biasanya memakan waktu sekitar 4-5 jam dengan berkendara, tergantung kondisi lalu lintas. Jarak tempuhnya sekitar 350 km melalui jalur utama North-South Expressway."
"""
        return f"""
You are Cilok, an AI location assistant on retry attempt {retry_count}/{self.max_attempts}.

Previous search context: {context or 'Location not found'}

You need to be MORE CREATIVE and THOROUGH in finding locations:
1. Try alternative names, abbreviations, or common variations
2. Search for similar businesses or locations in the area
3. Consider nearby landmarks or areas
4. Provide multiple suggestions or alternatives

Put every place name you suggest in double quotes, e.g. "Stasiun Bandung".
If still not found, provide helpful alternatives or suggestions for similar places.

Respond naturally in Indonesian, be conversational and helpful.
"""

    def process_location_query(self, query: str, context: Optional[str] = None, retry_count: int = 0) -> str:
        """Returns the model's free-text narrative for one attempt."""
        messages = [
            {"role": "system", "content": self.get_system_prompt(retry_count, context)},
            {"role": "user", "content": query},
        ]
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=0.7,
                max_tokens=800,
            )
        except OpenAIError as e:
            logger.error(f"Chat completion failed on retry {retry_count}: {e}")
            raise AIServiceError(f"AI Service Error: {e}") from e

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            raise AIServiceError("AI Service Error: the model returned an empty response.")
        return content.strip()
