from __future__ import annotations

from taskflow.adapters.http import post_json
from taskflow.core.errors import MalformedProviderResponse, NotConfiguredError
from taskflow.core.interfaces import ModelClient


ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-3-5-sonnet-20240620"


class AnthropicClient(ModelClient):
    name = "Anthropic"

    def send(self, prompt: str) -> str:
        if not self.is_configured():
            raise NotConfiguredError(self.name)
        payload = {
            "model": self.settings.model or DEFAULT_MODEL,
            "max_tokens": self.settings.max_output_tokens,
            "temperature": self.settings.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        data = post_json(
            ANTHROPIC_URL,
            payload,
            headers={"x-api-key": self.settings.api_key, "anthropic-version": ANTHROPIC_VERSION},
            timeout=self.settings.timeout,
            ca_bundle=self.settings.ca_bundle,
        )
        try:
            blocks = data["content"]
            text = "".join(block["text"] for block in blocks if block.get("type", "text") == "text")
        except (KeyError, TypeError, AttributeError) as exc:
            raise MalformedProviderResponse("Invalid response format from Anthropic API") from exc
        if not text.strip():
            raise MalformedProviderResponse("Empty response from Anthropic API")
        return text
