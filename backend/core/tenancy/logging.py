from __future__ import annotations

import logging
import re
from typing import Any


_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
# International or local phone numbers: optional +, 10-15 digits with common separators.
_PHONE_RE = re.compile(r"(?<![\w.])\+?\d(?:[\s().-]*\d){9,14}(?![\w.:])")


def mask_contact_data(text: str) -> str:
    """Mask e-mail addresses and phone numbers in a string.

    Orders and sub-dealer records carry customer contact data; none of it
    should reach log sinks.
    """

    if not text:
        return text

    text = _EMAIL_RE.sub("***EMAIL***", text)
    text = _PHONE_RE.sub("***PHONE***", text)
    return text


class MaskContactDataFilter(logging.Filter):
    """Logging filter to mask e-mail addresses and phone numbers in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except Exception:  # pragma: no cover
            message = str(getattr(record, "msg", ""))

        record.msg = mask_contact_data(str(message))
        record.args = ()

        for key in ("email", "phone", "customer_email", "customer_phone"):
            if hasattr(record, key):
                value: Any = getattr(record, key)
                if isinstance(value, str):
                    setattr(record, key, mask_contact_data(value))

        return True
