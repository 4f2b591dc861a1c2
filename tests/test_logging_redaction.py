from __future__ import annotations

import io
import logging
import uuid

from text_extraction.utils.logging_filter import SecretRedactFilter
from text_extraction.utils.redact import REDACTION_TOKEN


def _build_logger(format_str: str = "%(message)s") -> tuple[logging.Logger, logging.Handler, io.StringIO]:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(format_str))
    handler.addFilter(SecretRedactFilter())
    logger = logging.getLogger(f"secret-redaction-{uuid.uuid4()}")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.handlers.clear()
    logger.addHandler(handler)
    return logger, handler, stream


def test_secret_filter_redacts_message_and_args() -> None:
    logger, handler, stream = _build_logger()
    logger.info(
        "Submitting %s headers=%s",
        "https://acct.blob.core.windows.net/doc.pdf?sig=s3cr3t",
        "{'Ocp-Apim-Subscription-Key': 'k3y'}",
    )
    handler.flush()
    payload = stream.getvalue()
    assert REDACTION_TOKEN in payload
    assert "s3cr3t" not in payload
    assert "k3y" not in payload


def test_secret_filter_redacts_structured_extras() -> None:
    logger, handler, stream = _build_logger("%(detail)s %(context)s")
    logger.info(
        "structured",
        extra={
            "detail": "url https://x/doc.pdf?token=abc123",
            "context": {"source": "https://x/y.pdf?sig=def456", "notes": ["code=ghi789"]},
        },
    )
    handler.flush()
    payload = stream.getvalue()
    assert payload.count(REDACTION_TOKEN) >= 2
    assert "abc123" not in payload
    assert "def456" not in payload
