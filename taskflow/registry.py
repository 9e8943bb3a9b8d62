import importlib
from typing import Any

from taskflow.config import AdapterConfig, AppConfig, model_settings
from taskflow.core.errors import ConfigurationError
from taskflow.core.interfaces import ConversationLog, EntityStore, ModelClient


def load_class(path: str) -> type:
    if not path or "." not in path:
        raise ConfigurationError(f"Invalid class path: {path}")
    module_path, class_name = path.rsplit(".", 1)
    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ConfigurationError(f"Cannot import {module_path}: {exc}") from exc
    try:
        return getattr(module, class_name)
    except AttributeError as exc:
        raise ConfigurationError(f"{module_path} has no attribute {class_name}") from exc


def build_adapter(adapter: AdapterConfig, expected: type) -> Any:
    klass = load_class(adapter.class_path)
    if not isinstance(klass, type) or not issubclass(klass, expected):
        raise ConfigurationError(f"{adapter.class_path} is not a {expected.__name__}")
    if expected is ModelClient:
        return klass(model_settings(adapter))
    return klass(**adapter.settings)


def build_model_client(config: AppConfig) -> ModelClient:
    return build_adapter(config.model, ModelClient)


def build_store(config: AppConfig) -> EntityStore:
    return build_adapter(config.storage, EntityStore)


def build_conversation_log(config: AppConfig) -> ConversationLog:
    return build_adapter(config.conversation_log, ConversationLog)
