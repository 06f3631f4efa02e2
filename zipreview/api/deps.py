"""Shared route dependencies -- settings and the text-generation handle."""

from fastapi import Depends, Request

from zipreview.clients.llm_client import TextGenerator
from zipreview.config import Settings, settings
from zipreview.errors import ServiceUnavailableError


def get_settings() -> Settings:
    """Return the process-wide settings (overridable in tests)."""
    return settings


def get_text_generator(
    request: Request,
    current_settings: Settings = Depends(get_settings),
) -> TextGenerator:
    """Return the generator built at startup.

    Built on first use when the lifespan hook has not run (bare test
    clients).  Raises 503 when no credential is configured.
    """
    generator = getattr(request.app.state, "text_generator", None)
    if generator is None:
        generator = TextGenerator.from_settings(current_settings)
        request.app.state.text_generator = generator
    if not generator.enabled:
        raise ServiceUnavailableError(
            f"No API key configured for LLM provider '{generator.provider}'"
        )
    return generator
