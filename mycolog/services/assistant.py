"""Cultivation Q&A backed by the Gemini generateContent REST API."""

import logging

import httpx

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a mycologist who advises home growers. Ground your answers in "
    "sound biology and keep practical advice suited to a home setting such "
    "as a kitchen, balcony or grow tent. Whenever a question touches on "
    "eating mushrooms, remind the grower never to eat anything they cannot "
    "identify with complete certainty."
)


class AssistantError(Exception):
    """Raised when the assistant cannot produce an answer."""


class AssistantClient:
    """Stateless request/response client for the hosted text model."""

    def __init__(self, api_key: str, model: str, base_url: str, timeout: float = 30, transport=None):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_config(cls, config) -> "AssistantClient":
        return cls(
            api_key=config.get("GEMINI_API_KEY", ""),
            model=config.get("GEMINI_MODEL", "gemini-2.0-flash"),
            base_url=config.get(
                "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
            ),
            timeout=config.get("ASSISTANT_TIMEOUT", 30),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def ask(self, question: str) -> str:
        """Send one question and return the model's text answer."""
        if not isinstance(question, str) or not question.strip():
            raise ValueError("Question is required")
        if not self.is_configured:
            raise AssistantError("The assistant is not configured")

        payload = {
            "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
            "contents": [{"role": "user", "parts": [{"text": question.strip()}]}],
        }
        url = f"{self.base_url}/models/{self.model}:generateContent"

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(url, params={"key": self.api_key}, json=payload)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.exception("Assistant request failed")
            raise AssistantError(str(exc)) from exc

        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as exc:
            raise AssistantError("The assistant returned no answer") from exc

        answer = "".join(part.get("text", "") for part in parts).strip()
        if not answer:
            raise AssistantError("The assistant returned no answer")
        return answer
