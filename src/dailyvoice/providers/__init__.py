"""Narration providers, looked up by name.

Providers are registered as classes and only instantiated when a narration
or voice listing actually has to go upstream.
"""

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from .base import NarrationProvider

from .elevenlabs import ElevenLabsProvider

__all__ = ["ElevenLabsProvider", "ProviderRegistry"]


class ProviderRegistry:
    """Name to provider class mapping used by core and the CLI."""

    _providers: ClassVar[dict[str, type["NarrationProvider"]]] = {}

    @classmethod
    def register(
        cls, name: str, provider_class: type["NarrationProvider"]
    ) -> None:
        cls._providers[name] = provider_class

    @classmethod
    def get(cls, name: str) -> type["NarrationProvider"]:
        """Return the provider class registered under name.

        Raises:
            KeyError: If provider name not found
        """
        if name not in cls._providers:
            registered = ", ".join(sorted(cls._providers)) or "none"
            raise KeyError(
                f"Provider '{name}' not found. Available providers: {registered}"
            )
        return cls._providers[name]


ProviderRegistry.register("elevenlabs", ElevenLabsProvider)
