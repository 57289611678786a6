"""Claude access for the capture pipeline.

Summaries and intents are single-turn prompts with a small output budget.
They are sent through the Anthropic Messages API when an API key is
configured, and through the ``claude -p`` command otherwise. Every failure
surfaces as :class:`LLMError` so callers can fall back with one ``except``.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess

logger = logging.getLogger(__name__)

try:
    import anthropic

    _HAS_ANTHROPIC = True
except ImportError:
    anthropic = None  # type: ignore[assignment]
    _HAS_ANTHROPIC = False


class LLMError(Exception):
    """A Claude call failed or produced nothing usable."""


MODEL_ALIASES: dict[str, str] = {
    "haiku": "claude-haiku-4-5-20251001",
    "sonnet": "claude-sonnet-4-6",
    "opus": "claude-opus-4-6",
}
DEFAULT_MODEL = MODEL_ALIASES["haiku"]

_CLI = "claude"
_STDERR_LIMIT = 500


def _resolve_model(model: str | None) -> str:
    return MODEL_ALIASES.get(model, model) if model else DEFAULT_MODEL


def _api_key() -> str:
    return os.environ.get("ANTHROPIC_API_KEY", "").strip()


def _api_enabled() -> bool:
    """True when the Messages API should be used instead of the CLI."""
    forced_cli = os.environ.get("MINDMARK_USE_CLI", "").strip() == "1"
    return _HAS_ANTHROPIC and not forced_cli and bool(_api_key())


def _ask_api(
    prompt: str,
    *,
    model: str | None,
    timeout: int,
    max_tokens: int,
    temperature: float | None,
    label: str,
) -> str:
    client = anthropic.Anthropic(api_key=_api_key(), timeout=timeout)  # type: ignore[union-attr]
    request: dict[str, object] = {
        "model": _resolve_model(model),
        "max_tokens": max_tokens,
        "messages": [{"role": "user", "content": prompt}],
    }
    if temperature is not None:
        request["temperature"] = temperature

    logger.debug("Anthropic API request %s (model=%s)", label, request["model"])
    message = client.messages.create(**request)  # type: ignore[arg-type]

    text = "".join(b.text for b in message.content if b.type == "text").strip()
    if not text:
        raise LLMError(f"{label}: Anthropic API returned an empty response")
    return text


def _ask_cli(prompt: str, *, model: str | None, timeout: int, label: str) -> str:
    cmd = [_CLI, "-p", *(["--model", model] if model else [])]
    # A nested claude process must not think it runs inside another session
    env = {k: v for k, v in os.environ.items() if k != "CLAUDECODE"}

    logger.debug("claude CLI request %s", label)
    try:
        proc = subprocess.run(
            cmd,
            input=prompt,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
        )
    except FileNotFoundError as exc:
        raise LLMError(f"{label}: claude CLI not found on PATH") from exc
    except subprocess.TimeoutExpired as exc:
        raise LLMError(f"{label}: claude CLI timed out after {timeout}s") from exc

    if proc.returncode != 0:
        stderr = proc.stderr[:_STDERR_LIMIT]
        raise LLMError(f"{label}: claude CLI failed (exit {proc.returncode}): {stderr}")
    text = proc.stdout.strip()
    if not text:
        raise LLMError(f"{label}: claude CLI returned an empty response")
    return text


def claude_available() -> bool:
    """Return True when either the API or the ``claude`` command can be used."""
    return _api_enabled() or shutil.which(_CLI) is not None


def call_claude(
    prompt: str,
    *,
    model: str | None = None,
    timeout: int = 60,
    max_tokens: int = 250,
    temperature: float | None = None,
    label: str = "capture",
) -> str:
    """Send one prompt to Claude and return the reply text.

    Args:
        prompt: The complete user prompt.
        model: Alias ("haiku", "sonnet", "opus") or full model id.
        timeout: Seconds before the call is abandoned.
        max_tokens: Output budget (API only).
        temperature: Sampling temperature (API only).
        label: Short name of the calling task, used in logs and errors.

    Raises:
        LLMError: If no backend produced a non-empty reply.
    """
    if not _api_enabled():
        return _ask_cli(prompt, model=model, timeout=timeout, label=label)

    try:
        return _ask_api(
            prompt,
            model=model,
            timeout=timeout,
            max_tokens=max_tokens,
            temperature=temperature,
            label=label,
        )
    except LLMError:
        raise
    except Exception as exc:
        raise LLMError(f"{label}: Anthropic API failed: {exc}") from exc


_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


def strip_json_fences(text: str) -> str:
    """Return the body of the first markdown code fence, or the stripped text."""
    text = text.strip()
    fenced = _FENCE_RE.search(text)
    return fenced.group(1).strip() if fenced else text
