"""Utility helpers to scrub credentials from logs and diagnostics.

Document URLs handed to the JSON ingestion mode are frequently pre-signed
(Azure SAS, S3 presigned), and the vendor key travels in a request header.
Neither should ever reach a log sink.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

# Group 1 is the prefix kept in the output; the remainder of the match is replaced.
DEFAULT_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Azure SAS signature, S3 and GCS presigned signatures, generic token params
    re.compile(
        r"(?<=[?&])((?:sig|signature|x-amz-signature|x-amz-credential|x-goog-signature|token|code)=)[^&\s\"']+",
        re.IGNORECASE,
    ),
    re.compile(
        r"(ocp-apim-subscription-key[\"']?\s*[:=]\s*[\"']?)[^\"'\s,}]+",
        re.IGNORECASE,
    ),
)

REDACTION_TOKEN = "[REDACTED]"


def redact_text(
    value: str,
    *,
    patterns: Iterable[re.Pattern[str]] | None = None,
    replacement: str = REDACTION_TOKEN,
) -> str:
    """Redact signed-URL tokens and subscription keys from text payloads."""
    compiled = tuple(patterns or DEFAULT_PATTERNS)
    scrubbed = value
    for pattern in compiled:
        if pattern.groups:
            scrubbed = pattern.sub(lambda m: f"{m.group(1)}{replacement}", scrubbed)
        else:
            scrubbed = pattern.sub(replacement, scrubbed)
    return scrubbed


def redact_mapping(
    payload: Mapping[str, Any],
    *,
    patterns: Iterable[re.Pattern[str]] | None = None,
    replacement: str = REDACTION_TOKEN,
) -> dict[str, Any]:
    """Recursively redact mapping values."""
    result: dict[str, Any] = {}
    compiled = tuple(patterns or DEFAULT_PATTERNS)
    for key, value in payload.items():
        result[key] = _redact_value(value, compiled, replacement)
    return result


def _redact_value(
    value: Any,
    patterns: tuple[re.Pattern[str], ...],
    replacement: str,
) -> Any:
    if isinstance(value, str):
        return redact_text(value, patterns=patterns, replacement=replacement)
    if isinstance(value, Mapping):
        return {k: _redact_value(v, patterns, replacement) for k, v in value.items()}
    if isinstance(value, list):
        return [_redact_value(item, patterns, replacement) for item in value]
    if isinstance(value, tuple):
        return tuple(_redact_value(item, patterns, replacement) for item in value)
    return value


__all__ = ["redact_text", "redact_mapping", "REDACTION_TOKEN"]
