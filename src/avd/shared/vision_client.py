"""Async OpenAI vision wrapper, plus a dry-run stand-in that makes no API calls."""

from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
import random
import re
from pathlib import Path
from typing import Any, Protocol

from openai import AsyncOpenAI, APIConnectionError, APITimeoutError, RateLimitError

from avd.analysis.prompts import SYSTEM_PROMPT
from avd.schemas.config import DebugConfig

logger = logging.getLogger(__name__)

_RATE_LIMIT_BASE_DELAY = 2  # seconds


class VisionAnalyzer(Protocol):
    """Anything that can turn a screenshot plus a prompt into model text."""

    async def analyze_image(self, path: str | Path, prompt: str) -> str: ...


def _parse_retry_after(exc: RateLimitError) -> float | None:
    """Extract the suggested retry delay from an OpenAI rate limit error.

    Checks the ``Retry-After`` header first, then the "try again in Xs / Xms"
    text in the error message. Returns seconds, or None if not found.
    """
    try:
        headers = exc.response.headers  # type: ignore[union-attr]
        if retry_after := headers.get("retry-after"):
            return float(retry_after)
    except (AttributeError, TypeError, ValueError):
        pass

    m = re.search(r"try again in (\d+(?:\.\d+)?)\s*(ms|s)\b", str(exc), re.IGNORECASE)
    if m:
        value = float(m.group(1))
        return value / 1000 if m.group(2).lower() == "ms" else value

    return None


def encode_image(path: str | Path) -> str:
    """Read an image file and return it as a ``data:`` URL."""
    path = Path(path)
    mime, _ = mimetypes.guess_type(path.name)
    data = base64.b64encode(path.read_bytes()).decode()
    return f"data:{mime or 'image/png'};base64,{data}"


class VisionClient:
    """Thin async wrapper around the OpenAI SDK for single-image analysis."""

    def __init__(self, config: DebugConfig | None = None, api_key: str | None = None) -> None:
        self.config = config or DebugConfig()
        self._client = AsyncOpenAI(api_key=api_key)

    async def _call_with_retry(self, **kwargs: Any) -> Any:
        """Call chat.completions.create, backing off on 429 and connection errors.

        Waits at least as long as the server's suggested retry-after time,
        with exponential backoff as a floor and ±25% jitter.
        """
        attempts = self.config.rate_limit_retries
        for attempt in range(attempts):
            try:
                return await self._client.chat.completions.create(**kwargs)
            except RateLimitError as exc:
                if attempt == attempts - 1:
                    raise
                backoff = _RATE_LIMIT_BASE_DELAY * (2 ** attempt)
                base_delay = max(_parse_retry_after(exc) or 0.0, backoff)
                delay = max(1.0, base_delay + random.uniform(-0.25 * base_delay, 0.25 * base_delay))
                logger.warning(
                    "Rate limited (429), retrying in %.1fs (attempt %d/%d): %s",
                    delay, attempt + 1, attempts, exc,
                )
                await asyncio.sleep(delay)
            except (APIConnectionError, APITimeoutError) as exc:
                if attempt == attempts - 1:
                    raise
                backoff = _RATE_LIMIT_BASE_DELAY * (2 ** min(attempt, 3))
                delay = max(1.0, backoff + random.uniform(-0.25 * backoff, 0.25 * backoff))
                logger.warning(
                    "Connection error, retrying in %.1fs (attempt %d/%d): %s",
                    delay, attempt + 1, attempts, exc,
                )
                await asyncio.sleep(delay)
        raise RuntimeError("unreachable")  # pragma: no cover

    async def analyze_image(self, path: str | Path, prompt: str) -> str:
        """Send one image with ``prompt`` and return the model's plain-text answer."""
        content: list[dict[str, Any]] = [
            {"type": "text", "text": prompt},
            {"type": "image_url", "image_url": {"url": encode_image(path), "detail": "high"}},
        ]
        logger.info("Sending %s to %s", Path(path).name, self.config.model)
        response = await self._call_with_retry(
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": content},
            ],
        )
        if not response.choices:
            raise RuntimeError("Vision model returned no choices")
        text = response.choices[0].message.content or ""
        logger.debug("Vision model raw output:\n%s", text[:500])
        return text


# ======================================================================
# Dry-run client
# ======================================================================

DRY_RUN_RESPONSE = """\
--- Description Start ---
A sign-in page with a dark header bar, a centered login card and a footer.
--- Description End ---

--- Element Start ---
id: 1
type: Heading
label: Page title
textContent: Welcome back
geometry: { x: 480, y: 96, width: 320, height: 40 }
typography: { fontFamily: "Inter", fontSize: 28, fontWeight: "700", color: "#ffffff" }
appearance: { backgroundColor: "#1e1e2e", borderColor: null, borderWidth: null, borderRadius: null }
state: active
description: Main heading of the sign-in card.
--- Element End ---

--- Element Start ---
id: 2
type: Input
label: Email field
textContent: null
geometry: { x: 480, y: 176, width: 320, height: 44 }
typography: { fontFamily: "Inter", fontSize: 16, fontWeight: "400", color: "#333333" }
appearance: { backgroundColor: "#f5f5f5", borderColor: "#cccccc", borderWidth: 1, borderRadius: 6 }
state: active
description: Text input for the account email address.
--- Element End ---

--- Element Start ---
id: 3
type: Button
label: Sign in
textContent: Sign in
geometry: { x: 480, y: 244, width: 320, height: 48 }
typography: { fontFamily: "Inter", fontSize: 16, fontWeight: "600", color: "#ffffff" }
appearance: { backgroundColor: "#2563eb", borderColor: null, borderWidth: 0, borderRadius: 8 }
state: active
description: Primary call to action that submits the form.
--- Element End ---

--- Color Palette Start ---
Backgrounds: #1e1e2e, #f5f5f5
TextColors: #ffffff, #333333
AccentColors: #2563eb
--- Color Palette End ---

--- Typography Start ---
- { fontFamily: Inter, fontSize: 28, fontWeight: 700 }
- { fontFamily: Inter, fontSize: 16, fontWeight: 400 }
--- Typography End ---

--- Visual Audit Start ---
Accessibility
- Text Contrast: { assessment: "good", details: "Body text is dark on light, headings light on dark." }
Consistency
- Component Styles: { assessment: "good", details: "Inputs and buttons share the same radius." }
Layout
- Alignment: { assessment: "good", details: "Card content is left-aligned on a single column." }
Clarity
- Call To Action: { assessment: "fair", details: "Secondary links are low-contrast." }
--- Visual Audit End ---
"""


class DryRunVisionClient:
    """Drop-in replacement for VisionClient that makes zero API calls."""

    def __init__(self, response: str = DRY_RUN_RESPONSE) -> None:
        self.response = response
        self.calls: list[str] = []

    async def analyze_image(self, path: str | Path, prompt: str) -> str:
        logger.info("[dry-run] Analyzing %s", path)
        self.calls.append(str(path))
        return self.response
