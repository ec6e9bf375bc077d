"""Log filters for credential redaction."""

import logging
import re
from collections.abc import Iterable

REDACTED = "[REDACTED]"


class CredentialFilter(logging.Filter):
    """Masks routing credentials in log messages.

    Any configured secret is replaced verbatim, and ``Authorization`` header
    values are masked even when the secret itself is unknown to the filter.
    """

    AUTH_HEADER_PATTERN = re.compile(r"(?i)(authorization['\"]?\s*[:=]\s*['\"]?)([^\s'\",}]+)")

    def __init__(self, secrets: Iterable[str] = ()) -> None:
        super().__init__()
        # Longest first so a secret containing another is masked whole
        self.secrets = sorted({s for s in secrets if s and s.strip()}, key=len, reverse=True)

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = message
        for secret in self.secrets:
            if secret in masked:
                masked = masked.replace(secret, REDACTED)
        masked = self.AUTH_HEADER_PATTERN.sub(rf"\1{REDACTED}", masked)
        if masked != message:
            record.msg = masked
            record.args = None
        return True
