"""
Provider registry with singleton pattern and auto-discovery.

Usage:
    from providers.registry import registry, ProviderType

    # Register a provider
    registry.register(ProviderType.STT, 'gemini', GeminiTranscriber)

    # Get a provider instance, optionally with per-call config
    stt = registry.get_provider(ProviderType.STT, 'gemini', {'api_key': key})
    tts = registry.get_provider(ProviderType.TTS)           # default
"""

from __future__ import annotations

import importlib
import logging
import os
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

logger = logging.getLogger(__name__)


class ProviderType(Enum):
    STT = "stt"
    TTS = "tts"


class ProviderRegistry:
    """Singleton registry for speech-to-text and speech-output providers.

    Providers are registered with a unique string ID per type.
    get_provider() returns an instantiated provider with config merged from
    the providers YAML (if loaded), any explicit config passed at
    register() time, and any overrides passed at call time.
    """

    _instance: Optional["ProviderRegistry"] = None

    def __init__(self) -> None:
        self._providers: Dict[ProviderType, Dict[str, Type]] = {
            ProviderType.STT: {},
            ProviderType.TTS: {},
        }
        self._static_configs: Dict[str, Dict] = {}
        self._yaml_config: Optional[Dict] = None

    # ------------------------------------------------------------------
    # Singleton
    # ------------------------------------------------------------------

    @classmethod
    def get_instance(cls) -> "ProviderRegistry":
        if cls._instance is None:
            cls._instance = ProviderRegistry()
        return cls._instance

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        provider_type: ProviderType,
        provider_id: str,
        provider_class: Type,
        config: Optional[Dict] = None,
    ) -> None:
        """Register a provider implementation.

        Args:
            provider_type:  STT or TTS.
            provider_id:    Unique string key (e.g. 'gemini', 'pyttsx3').
            provider_class: Class (not instance) implementing the base type.
            config:         Optional static config dict merged with YAML config.
        """
        self._providers[provider_type][provider_id] = provider_class
        if config:
            self._static_configs[provider_id] = config
        logger.debug("Registered %s provider: %s", provider_type.value, provider_id)

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    def get_provider(
        self,
        provider_type: ProviderType,
        provider_id: Optional[str] = None,
        overrides: Optional[Dict] = None,
    ) -> Any:
        """Return an instantiated provider.

        If provider_id is None, the default is read from providers YAML
        (<type>.default_provider) or falls back to the first registered
        provider for that type.

        Raises:
            ValueError: if the provider_id is not registered.
        """
        if provider_id is None:
            provider_id = self._get_default_id(provider_type)

        if provider_id not in self._providers[provider_type]:
            available = list(self._providers[provider_type].keys())
            raise ValueError(
                f"Unknown {provider_type.value} provider: '{provider_id}'. "
                f"Available: {available}"
            )

        provider_class = self._providers[provider_type][provider_id]
        merged_config = self._build_config(provider_type, provider_id)
        if overrides:
            merged_config.update(overrides)

        return provider_class(merged_config)

    # ------------------------------------------------------------------
    # Auto-discovery
    # ------------------------------------------------------------------

    def autodiscover(self, providers_yaml_path: Optional[str] = None) -> None:
        """Load providers.yaml and import the provider modules it lists.

        Importing a module fires its registry.register() call. Defaults to
        config/providers.yaml relative to the project root.
        """
        if providers_yaml_path is None:
            providers_yaml_path = self._default_yaml_path()

        import yaml

        path = Path(providers_yaml_path)
        if not path.exists():
            logger.debug("providers.yaml not found at %s — skipping autodiscover", path)
            return

        with open(path) as f:
            self._yaml_config = yaml.safe_load(f) or {}

        logger.info("Loaded providers config from %s", path)

        for ptype in ProviderType:
            section = self._yaml_config.get(ptype.value, {})
            for module_path in section.get("modules", []):
                try:
                    importlib.import_module(module_path)
                    logger.debug("Auto-imported provider module: %s", module_path)
                except ImportError as exc:
                    logger.warning("Could not import provider module %s: %s", module_path, exc)

    # Internal helpers
    # ------------------------------------------------------------------

    def _get_default_id(self, provider_type: ProviderType) -> str:
        if self._yaml_config:
            section = self._yaml_config.get(provider_type.value, {})
            default = section.get("default_provider")
            if default and default in self._providers[provider_type]:
                return default

        registered = list(self._providers[provider_type].keys())
        if registered:
            return registered[0]

        raise ValueError(
            f"No {provider_type.value} providers registered. "
            "Call registry.register() or registry.autodiscover() first."
        )

    def _build_config(self, provider_type: ProviderType, provider_id: str) -> Dict:
        """Merge static + YAML config for a provider ID."""
        config = dict(self._static_configs.get(provider_id, {}))

        if self._yaml_config:
            section = self._yaml_config.get(provider_type.value, {})
            yaml_provider_cfg = section.get("providers", {}).get(provider_id, {})
            config.update(yaml_provider_cfg)

        return _resolve_env_vars(config)

    def _default_yaml_path(self) -> str:
        project_root = Path(__file__).parent.parent
        return str(project_root / "config" / "providers.yaml")


# ---------------------------------------------------------------------------
# Env-var placeholder resolution
# ---------------------------------------------------------------------------

_PLACEHOLDER = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)\}")


def _resolve_env_vars(config: Dict) -> Dict:
    """Recursively resolve ${ENV_VAR} placeholders in string config values.

    Unset variables resolve to an empty string so a missing key reads as
    "not configured" rather than as the literal placeholder.
    """

    def _resolve(value: Any) -> Any:
        if isinstance(value, str):
            return _PLACEHOLDER.sub(lambda m: os.environ.get(m.group(1), ""), value)
        if isinstance(value, dict):
            return {k: _resolve(v) for k, v in value.items()}
        if isinstance(value, list):
            return [_resolve(v) for v in value]
        return value

    return _resolve(config)


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

registry = ProviderRegistry.get_instance()


__all__ = [
    "ProviderType",
    "ProviderRegistry",
    "registry",
]
