from __future__ import annotations

from taskflow.adapters.http import post_json
from taskflow.core.errors import MalformedProviderResponse, NotConfiguredError
from taskflow.core.interfaces import ModelClient


GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_MODEL = "gemini-1.5-flash"


class GeminiClient(ModelClient):
    name = "Gemini"

    def send(self, prompt: str) -> str:
        if not self.is_configured():
            raise NotConfiguredError(self.name)
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.settings.temperature,
                "maxOutputTokens": self.settings.max_output_tokens,
            },
        }
        data = post_json(
            GEMINI_URL.format(model=self.settings.model or DEFAULT_MODEL),
            payload,
            headers={"x-goog-api-key": self.settings.api_key},
            timeout=self.settings.timeout,
            ca_bundle=self.settings.ca_bundle,
        )
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise MalformedProviderResponse("Invalid response format from Gemini API") from exc
        if not isinstance(text, str):
            raise MalformedProviderResponse("Gemini API returned non-text content")
        if not text.strip():
            raise MalformedProviderResponse("Empty response from Gemini API")
        return text
