from __future__ import annotations

from taskflow.adapters.http import post_json
from taskflow.core.errors import MalformedProviderResponse, NotConfiguredError
from taskflow.core.interfaces import ModelClient


OPENAI_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o-mini"


class OpenAIClient(ModelClient):
    name = "OpenAI"

    def send(self, prompt: str) -> str:
        if not self.is_configured():
            raise NotConfiguredError(self.name)
        payload = {
            "model": self.settings.model or DEFAULT_MODEL,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.settings.temperature,
            "max_tokens": self.settings.max_output_tokens,
        }
        data = post_json(
            OPENAI_URL,
            payload,
            headers={"Authorization": f"Bearer {self.settings.api_key}"},
            timeout=self.settings.timeout,
            ca_bundle=self.settings.ca_bundle,
        )
        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise MalformedProviderResponse("Invalid response format from OpenAI API") from exc
        if not isinstance(text, str):
            raise MalformedProviderResponse("OpenAI API returned non-text content")
        if not text.strip():
            raise MalformedProviderResponse("Empty response from OpenAI API")
        return text
