"""
Logging filters for context injection and secret redaction.
"""
from __future__ import annotations

import logging
import re
from typing import Any

from libs.logging.context import CONTEXT_FIELDS, get_context_ids


class ContextFilter(logging.Filter):
    """Copy the current context IDs onto every LogRecord."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, value in get_context_ids().items():
            # Explicit extra={...} values win over ambient context
            if getattr(record, name, None) is None:
                setattr(record, name, value)
        return True


class SecretRedactionFilter(logging.Filter):
    """
    Filter that redacts secrets from log messages and extra fields.

    Covers bearer tokens, provider API keys (``x-api-key`` headers and
    ``api_key=`` style pairs), generic secrets and tokens.
    """

    REDACTION_PATTERNS = [
        (re.compile(r'(?i)(authorization\s*:\s*bearer\s+)([^\s,;"\']+)'), r"\1[REDACTED]"),
        (re.compile(r'(?i)(bearer\s+)([^\s,;"\']+)'), r"\1[REDACTED]"),
        (re.compile(r'(?i)(x-api-key["\']?\s*[=:]\s*["\']?)([^\s,;"\']+)'), r"\1[REDACTED]"),
        (re.compile(r'(?i)(api[_-]?key["\']?\s*[=:]\s*["\']?)([^\s,;"\']+)'), r"\1[REDACTED]"),
        (re.compile(r'(?i)(secret[_-]?key\s*[=:]\s*)([^\s,;"\']+)'), r"\1[REDACTED]"),
        (re.compile(r'(?i)(password\s*[=:]\s*)([^\s,;"\']+)'), r"\1[REDACTED]"),
        (re.compile(r'(?i)(token\s*[=:]\s*)([^\s,;"\']+)'), r"\1[REDACTED]"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self._redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = ()

        for key, value in list(record.__dict__.items()):
            if key in CONTEXT_FIELDS:
                continue
            if isinstance(value, str):
                redacted_value = self._redact(value)
                if redacted_value != value:
                    setattr(record, key, redacted_value)
            elif isinstance(value, dict):
                setattr(record, key, self._redact_dict(value))

        return True

    def _redact(self, text: str) -> str:
        for pattern, replacement in self.REDACTION_PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def _redact_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        redacted: dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(key, str) and key.lower() in ("x-api-key", "authorization", "api_key"):
                redacted[key] = "[REDACTED]"
            elif isinstance(value, str):
                redacted[key] = self._redact(value)
            elif isinstance(value, dict):
                redacted[key] = self._redact_dict(value)
            else:
                redacted[key] = value
        return redacted
