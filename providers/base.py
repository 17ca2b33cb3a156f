"""
Provider abstract base classes shared by the speech-to-text and
speech-output sides of the trainer.

Every provider carries a plain config dict (merged from config/providers.yaml,
register-time config and per-call overrides by the registry) and reports
its availability so health probes can tell what is usable right now.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class BaseProvider(ABC):
    """Common base for all provider types."""

    def __init__(self, config: Dict[str, Any] = None):
        self._config = config or {}

    @abstractmethod
    def is_available(self) -> bool:
        """Return True if the provider can handle requests right now."""
        pass

    @abstractmethod
    def get_info(self) -> Dict[str, Any]:
        """Return metadata dict with at minimum 'name' and 'status' keys."""
        pass

    def __repr__(self) -> str:
        info = self.get_info()
        return (
            f"{self.__class__.__name__}("
            f"name='{info.get('name', 'unknown')}', "
            f"available={self.is_available()})"
        )


class ProviderError(Exception):
    """Base exception for all provider errors.

    ``user_message`` is what the HTTP layer shows; it defaults to the
    plain message without the provider prefix.
    """

    def __init__(self, provider_name: str, message: str, user_message: str = None):
        self.provider_name = provider_name
        self.user_message = user_message or message
        super().__init__(f"[{provider_name}] {message}")


__all__ = [
    "BaseProvider",
    "ProviderError",
]
