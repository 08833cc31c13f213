"""One-time email verification codes with expiry.

Codes live in a CodeStore keyed by lowercased email. The default store is
in-process, so codes are lost on restart and not shared between workers;
anything multi-process should pass a shared store to EmailVerifier.
"""

import os
import re
import secrets
import time
from dataclasses import dataclass
from typing import Callable

from dotenv import load_dotenv

load_dotenv()

CODE_TTL_SECONDS = int(os.getenv("VERIFICATION_CODE_TTL_SECONDS", "600"))
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Fixed code so demos and QA can complete the flow without an inbox.
TEST_EMAIL = "test@example.com"
TEST_CODE = "123456"


class VerificationError(Exception):
    """Raised when a code can't be issued or doesn't check out."""


@dataclass(frozen=True)
class StoredCode:
    code: str
    expires_at: float


class CodeStore:
    """Keyed store whose entries expire `ttl` seconds after they are set."""

    def __init__(self, ttl: float = CODE_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._codes: dict[str, StoredCode] = {}

    def set(self, key: str, code: str) -> StoredCode:
        entry = StoredCode(code=code, expires_at=self._clock() + self.ttl)
        self._codes[key] = entry
        return entry

    def get(self, key: str) -> StoredCode | None:
        return self._codes.get(key)

    def is_expired(self, entry: StoredCode) -> bool:
        return self._clock() > entry.expires_at

    def delete(self, key: str) -> None:
        self._codes.pop(key, None)

    def purge_expired(self) -> int:
        expired = [k for k, v in self._codes.items() if self.is_expired(v)]
        for key in expired:
            del self._codes[key]
        return len(expired)


def generate_code() -> str:
    return str(100000 + secrets.randbelow(900000))


class EmailVerifier:
    def __init__(self, store: CodeStore | None = None):
        self.store = store or CodeStore()

    def issue(self, email: str) -> str:
        """Create and store a code for `email`. Delivery is the caller's job."""
        email = email.strip()
        if not EMAIL_PATTERN.match(email):
            raise VerificationError("Invalid email format")

        key = email.lower()
        code = TEST_CODE if key == TEST_EMAIL else generate_code()
        self.store.purge_expired()
        self.store.set(key, code)
        return code

    def verify(self, email: str, code: str) -> None:
        """Consume the code for `email`. Raises VerificationError if it is missing, expired or wrong."""
        key = email.strip().lower()
        stored = self.store.get(key)
        if stored is None:
            raise VerificationError("No verification code found for this email. Please request a new code.")

        if self.store.is_expired(stored):
            self.store.delete(key)
            raise VerificationError("Verification code has expired. Please request a new code.")

        if not secrets.compare_digest(stored.code, code.strip()):
            raise VerificationError("Invalid verification code.")

        # One-time use
        self.store.delete(key)
