import base64

import httpx
from loguru import logger

from ..core.config import Settings, get_settings
from ..core.exceptions import UpstreamError

CAPTION_PROMPT = (
    "Given this image, generate a concise, friendly description in 3-4 lines "
    "suitable as an image caption."
)


class CaptionGenerationService:
    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or get_settings()

        if not self.settings.GEMINI_API_KEY:
            logger.warning(
                "GEMINI_API_KEY is not set. Image caption generation will be disabled."
            )

        self.http_client = http_client or httpx.AsyncClient(
            timeout=self.settings.CAPTION_TIMEOUT,
            limits=httpx.Limits(max_connections=5, max_keepalive_connections=2),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.GEMINI_API_KEY)

    @property
    def endpoint(self) -> str:
        return (
            f"{self.settings.GEMINI_API_URL}/models/"
            f"{self.settings.GEMINI_MODEL}:generateContent"
        )

    async def generate_caption(self, image_data: bytes, mime_type: str) -> str:
        if not self.is_configured:
            raise UpstreamError(
                "Caption generation is not configured. Missing GEMINI_API_KEY."
            )

        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": CAPTION_PROMPT},
                        {
                            "inline_data": {
                                "mime_type": mime_type,
                                "data": base64.b64encode(image_data).decode("ascii"),
                            }
                        },
                    ],
                }
            ]
        }

        try:
            response = await self.http_client.post(
                self.endpoint,
                headers={"x-goog-api-key": self.settings.GEMINI_API_KEY},
                json=payload,
                timeout=self.settings.CAPTION_TIMEOUT,
            )
            response.raise_for_status()

        except httpx.TimeoutException as e:
            logger.warning(f"Timeout generating image caption: {e}")
            raise UpstreamError("Image description request timed out.")
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Caption model returned HTTP {e.response.status_code}: {e.response.text}"
            )
            raise UpstreamError("Failed to generate image description.")
        except httpx.HTTPError as e:
            logger.error(f"Error calling caption model: {e}")
            raise UpstreamError("Failed to generate image description.")

        try:
            caption = self._extract_text(response.json())
        except (ValueError, AttributeError, TypeError) as e:
            logger.error(f"Caption model returned an unreadable body: {e}")
            raise UpstreamError("Failed to generate image description.")

        if not caption:
            raise UpstreamError("No description returned from caption model.")

        return caption

    @staticmethod
    def _extract_text(body: dict) -> str | None:
        for candidate in body.get("candidates") or []:
            parts = (candidate.get("content") or {}).get("parts") or []
            text = "".join(part.get("text", "") for part in parts).strip()
            if text:
                return text
        return None

    async def cleanup(self):
        """Cleanup resources when service is shutting down"""
        await self.http_client.aclose()
