import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from taskflow.core.errors import ConfigurationError


@dataclass
class AdapterConfig:
    class_path: str
    settings: Dict[str, Any]


@dataclass
class ModelSettings:
    api_key: str = ""
    model: str = ""
    timeout: float = 30.0
    temperature: float = 0.7
    max_output_tokens: int = 2048
    ca_bundle: Optional[str] = None

    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


@dataclass
class AppConfig:
    data_dir: str
    recent_task_limit: int
    model: AdapterConfig
    storage: AdapterConfig
    conversation_log: AdapterConfig


DEFAULT_CONFIG_PATH = "config.json"
EXAMPLE_CONFIG_PATH = "config.example.json"
ENV_CONFIG_PATH = "TASKFLOW_CONFIG_PATH"

DEFAULT_MODEL = "taskflow.adapters.ai_rules.RuleBasedClient"
DEFAULT_STORAGE = "taskflow.adapters.storage_json.JsonEntityStore"
DEFAULT_CONVERSATION_LOG = "taskflow.adapters.conversation_json.JsonConversationLog"


def load_dotenv(path: str = ".env") -> None:
    if not os.path.exists(path):
        return
    with open(path, "r", encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip("\"'")
            if key and key not in os.environ:
                os.environ[key] = value


def _resolve_env(value: Any) -> Any:
    # "$NAME" reads from the environment; unset means empty, never the literal
    if isinstance(value, str) and value.startswith("$"):
        return os.environ.get(value[1:], "")
    if isinstance(value, dict):
        return {k: _resolve_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env(v) for v in value]
    return value


def _find_config_path(path: Optional[str]) -> Optional[str]:
    if path:
        if not os.path.exists(path):
            raise ConfigurationError(f"Config file not found: {path}")
        return path
    config_path = os.environ.get(ENV_CONFIG_PATH, DEFAULT_CONFIG_PATH)
    if os.path.exists(config_path):
        return config_path
    if config_path == DEFAULT_CONFIG_PATH and os.path.exists(EXAMPLE_CONFIG_PATH):
        return EXAMPLE_CONFIG_PATH
    return None


def load_config(path: Optional[str] = None) -> AppConfig:
    load_dotenv()
    config_path = _find_config_path(path)
    raw: Dict[str, Any] = {}
    if config_path:
        with open(config_path, "r", encoding="utf-8") as handle:
            try:
                raw = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ConfigurationError(f"Invalid JSON in {config_path}: {exc}") from exc

    raw = _resolve_env(raw)
    data_dir = raw.get("data_dir", "data")

    def _adapter(key: str, default_class: str, default_settings: Dict[str, Any]) -> AdapterConfig:
        payload = raw.get(key, {})
        settings = dict(default_settings)
        settings.update(payload.get("settings", {}))
        return AdapterConfig(
            class_path=payload.get("class", default_class),
            settings=settings,
        )

    try:
        recent_task_limit = int(raw.get("recent_task_limit", 5))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError("recent_task_limit must be an integer") from exc
    if recent_task_limit < 0:
        raise ConfigurationError("recent_task_limit must not be negative")

    return AppConfig(
        data_dir=data_dir,
        recent_task_limit=recent_task_limit,
        model=_adapter("model", DEFAULT_MODEL, {}),
        storage=_adapter("storage", DEFAULT_STORAGE, {"base_dir": data_dir}),
        conversation_log=_adapter("conversation_log", DEFAULT_CONVERSATION_LOG, {"base_dir": data_dir}),
    )


def model_settings(adapter: AdapterConfig) -> ModelSettings:
    known = ModelSettings.__dataclass_fields__
    unknown = sorted(key for key in adapter.settings if key not in known)
    if unknown:
        raise ConfigurationError(f"Unknown model settings: {', '.join(unknown)}")
    return ModelSettings(**adapter.settings)
