"""AI chat assistant backed by the Gemini generateContent REST API.

``ChatService`` is the thin provider proxy used by the HTTP API.
``ChatPanel`` keeps a per-session transcript; provider failures only ever
show up there as a bot message.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

import httpx

from .models import Reading

logger = logging.getLogger(__name__)


SYSTEM_INSTRUCTION = (
    "You are a friendly and helpful Air Quality and Health Assistant for an app called "
    '"Aura Quality". Your goal is to answer user questions about air quality, its health '
    "impacts, and provide relevant advice. Use the provided context about the user's current "
    "view. Keep your answers concise, helpful, and easy to understand. Do not mention you "
    "are an AI model."
)
GREETING = (
    "Hello! I'm your air quality assistant. Ask me anything about the current conditions "
    "or health recommendations."
)
FALLBACK_REPLY = "Sorry, I could not process that."
FAILURE_REPLY = "Sorry, I'm having trouble connecting right now. Please try again later."


class ChatProviderError(Exception):
    """Raised when the chat provider is unavailable or fails."""
    pass


def build_context(reading: Optional[Reading]) -> str:
    """Describe what the user is looking at, for the assistant prompt."""
    if reading is None:
        return "The user has not selected a location yet."
    current = reading.current
    return (
        f"The user is currently viewing data for {reading.location_name}. "
        f"Current AQI is {current.aqi} ({current.category}) with "
        f"{current.primary_pollutant} as the primary pollutant."
    )


class ChatService:
    """Proxy to the Gemini model."""

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.0-flash-exp",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._transport = transport

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    async def ask(self, message: str, context: str = "") -> str:
        if not self.api_key:
            raise ChatProviderError("GEMINI_API_KEY is not configured")

        url = f"{self.BASE_URL}/{self.model}:generateContent"
        payload = {
            "contents": [{"parts": [{"text": f"Context: {context}\n\nUser question: {message}"}]}],
            "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, params={"key": self.api_key}, json=payload)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("[chat] Gemini request failed: %s", e)
            raise ChatProviderError(f"Failed to get response from AI: {e}") from e

        try:
            return data["candidates"][0]["content"]["parts"][0]["text"] or FALLBACK_REPLY
        except (KeyError, IndexError, TypeError):
            logger.warning("[chat] Gemini response had no text candidate")
            return FALLBACK_REPLY


@dataclass(frozen=True)
class ChatMessage:
    sender: str  # "user" | "bot"
    text: str


class ChatPanel:
    """Transcript of one user's conversation with the assistant."""

    def __init__(self, service: ChatService):
        self.service = service
        self.messages: List[ChatMessage] = [ChatMessage("bot", GREETING)]
        self.is_loading = False

    async def send(self, text: str, reading: Optional[Reading] = None) -> Optional[ChatMessage]:
        """Send a question and append the reply.

        Returns the bot message, or None when the input was ignored (blank,
        or a reply is still pending).
        """
        question = text.strip()
        if not question or self.is_loading:
            return None

        self.messages.append(ChatMessage("user", question))
        self.is_loading = True
        try:
            reply = await self.service.ask(question, build_context(reading))
        except ChatProviderError:
            reply = FAILURE_REPLY
        finally:
            self.is_loading = False

        message = ChatMessage("bot", reply)
        self.messages.append(message)
        return message
