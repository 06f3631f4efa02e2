"""LLM client -- text generation over Gemini or Anthropic.

A single ``TextGenerator`` is built from settings at startup, stored on
``app.state`` and handed to the review pipeline.  It is read-only after
construction; the only shared mutable piece is the pooled httpx client.
"""

import asyncio
import logging

import httpx

logger = logging.getLogger(__name__)

# Returned in place of review text when generation fails.
LLM_ERROR_SENTINEL = "[LLM API Error]"

# ── Shared HTTP client (connection pooling) ─────────────────────────────────

_client: httpx.AsyncClient | None = None


def _get_client() -> httpx.AsyncClient:
    """Return (or create) the shared httpx client for LLM API calls."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(timeout=120.0)
    return _client


async def close_client() -> None:
    """Close the shared LLM HTTP client.  Called during app shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None

# ---------------------------------------------------------------------------
# Retry configuration
# ---------------------------------------------------------------------------

MAX_RETRIES = 3
RETRY_BACKOFF_BASE = 2.0  # seconds -- exponential: 2, 4, 8
_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 529})


def _compute_wait(exc: httpx.HTTPStatusError | None, attempt: int) -> float:
    """Return seconds to wait before retrying.

    Prefers the ``retry-after`` header for 429s. Falls back to exponential
    backoff capped at 30 seconds.
    """
    if exc is not None and exc.response is not None:
        retry_after = exc.response.headers.get("retry-after")
        if retry_after:
            try:
                return min(float(retry_after), 60.0)
            except (ValueError, TypeError):
                pass
    return min(RETRY_BACKOFF_BASE ** (attempt + 1), 30.0)


async def _retry_on_transient(
    coro_factory,
    *,
    max_retries: int = MAX_RETRIES,
    backoff_base: float = RETRY_BACKOFF_BASE,
):
    """Retry a coroutine factory on transient HTTP / timeout errors.

    ``coro_factory`` is a zero-arg callable that returns a new awaitable each
    time (so we can retry fresh).
    """
    last_exc: Exception | None = None
    for attempt in range(max_retries + 1):
        try:
            return await coro_factory()
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            last_exc = exc
            if attempt < max_retries:
                wait = min(backoff_base ** (attempt + 1), 30.0)
                logger.warning(
                    "LLM request %s (attempt %d/%d), retrying in %.1fs",
                    type(exc).__name__, attempt + 1, max_retries + 1, wait,
                )
                await asyncio.sleep(wait)
            else:
                raise
        except httpx.HTTPStatusError as exc:
            last_exc = exc
            if exc.response.status_code in _RETRYABLE_STATUS_CODES and attempt < max_retries:
                wait = _compute_wait(exc, attempt)
                logger.warning(
                    "LLM request %d (attempt %d/%d), retrying in %.1fs",
                    exc.response.status_code, attempt + 1, max_retries + 1, wait,
                )
                await asyncio.sleep(wait)
            else:
                raise
    raise last_exc  # type: ignore[misc]  # pragma: no cover


def _raise_for_api_error(response: httpx.Response, provider: str) -> None:
    """Raise ``HTTPStatusError`` for retryable codes, ``ValueError`` otherwise."""
    if response.status_code < 400:
        return
    if response.status_code in _RETRYABLE_STATUS_CODES:
        raise httpx.HTTPStatusError(
            f"{provider} API {response.status_code}",
            request=response.request,
            response=response,
        )
    try:
        err_msg = response.json().get("error", {}).get("message", response.text)
    except Exception:
        err_msg = response.text
    raise ValueError(f"{provider} API {response.status_code}: {err_msg}")

# ---------------------------------------------------------------------------
# Gemini
# ---------------------------------------------------------------------------

GEMINI_URL_TEMPLATE = (
    "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
)


async def generate_gemini(
    api_key: str,
    model: str,
    prompt: str,
    max_tokens: int = 2048,
) -> str:
    """Send *prompt* to the Gemini ``generateContent`` endpoint, return the text."""
    body: dict = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {"maxOutputTokens": max_tokens},
    }

    async def _call():
        client = _get_client()
        response = await client.post(
            GEMINI_URL_TEMPLATE.format(model=model),
            headers={"x-goog-api-key": api_key, "Content-Type": "application/json"},
            json=body,
        )
        _raise_for_api_error(response, "Gemini")
        return _gemini_text(response.json())

    return await _retry_on_transient(_call)


def _gemini_text(data) -> str:
    """Pull the reply text out of a ``generateContent`` body.

    Any deviation from the documented shape is a ``ValueError``.
    """
    if not isinstance(data, dict):
        raise ValueError("Malformed Gemini API response")
    candidates = data.get("candidates") or []
    if not candidates:
        raise ValueError("Empty response from Gemini API")
    try:
        parts = candidates[0]["content"]["parts"]
        text = "".join(p.get("text", "") for p in parts)
    except (AttributeError, KeyError, IndexError, TypeError) as exc:
        raise ValueError(f"Malformed Gemini API response: {exc!r}") from exc
    if not text:
        raise ValueError("No text in Gemini API response")
    return text

# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_API_VERSION = "2023-06-01"


def _anthropic_headers(api_key: str) -> dict:
    """Return standard Anthropic API headers."""
    return {
        "x-api-key": api_key,
        "anthropic-version": ANTHROPIC_API_VERSION,
        "Content-Type": "application/json",
    }


async def generate_anthropic(
    api_key: str,
    model: str,
    prompt: str,
    max_tokens: int = 2048,
) -> str:
    """Send *prompt* as a single user message to the Anthropic Messages API."""
    body: dict = {
        "model": model,
        "max_tokens": max_tokens,
        "messages": [{"role": "user", "content": prompt}],
    }

    async def _call():
        client = _get_client()
        response = await client.post(
            ANTHROPIC_MESSAGES_URL,
            headers=_anthropic_headers(api_key),
            json=body,
        )
        _raise_for_api_error(response, "Anthropic")
        return _anthropic_text(response.json())

    return await _retry_on_transient(_call)


def _anthropic_text(data) -> str:
    """Join the text blocks of a Messages API body."""
    if not isinstance(data, dict):
        raise ValueError("Malformed Anthropic API response")
    content_blocks = data.get("content") or []
    if not content_blocks:
        raise ValueError("Empty response from Anthropic API")
    try:
        text_parts = [
            str(b.get("text", "")) for b in content_blocks if b.get("type") == "text"
        ]
    except (AttributeError, TypeError) as exc:
        raise ValueError(f"Malformed Anthropic API response: {exc!r}") from exc
    if not text_parts:
        raise ValueError("No text block in Anthropic API response")
    return "\n".join(text_parts)

# ---------------------------------------------------------------------------
# Service handle
# ---------------------------------------------------------------------------

_PROVIDERS = {
    "gemini": generate_gemini,
    "anthropic": generate_anthropic,
}


class TextGenerator:
    """Provider-bound text generator.

    Args:
        api_key: Credential for *provider*; blank disables generation.
        model: Model identifier passed to the provider.
        provider: ``"gemini"`` (default) or ``"anthropic"``.
        max_tokens: Output token cap per call.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        provider: str = "gemini",
        max_tokens: int = 2048,
    ) -> None:
        if provider not in _PROVIDERS:
            raise ValueError(f"Unknown LLM provider: {provider!r}")
        self.api_key = api_key
        self.model = model
        self.provider = provider
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings) -> "TextGenerator":
        return cls(
            api_key=settings.llm_api_key,
            model=settings.LLM_MODEL,
            provider=settings.LLM_PROVIDER,
            max_tokens=settings.LLM_MAX_TOKENS,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def generate(self, prompt: str) -> str:
        """Return generated text, or ``LLM_ERROR_SENTINEL`` on any API failure."""
        try:
            logger.info("[%s] Sending prompt (%d chars)", self.provider, len(prompt))
            text = await _PROVIDERS[self.provider](
                self.api_key, self.model, prompt, self.max_tokens,
            )
            logger.info("[%s] Received response (%d chars)", self.provider, len(text))
            return text
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("[%s] Generation failed: %s", self.provider, exc)
            return LLM_ERROR_SENTINEL
