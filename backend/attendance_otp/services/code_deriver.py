"""Time-based one-time code derivation and validation."""
import hashlib
import re
from typing import Optional

import pyotp
from pyotp.utils import strings_equal

from attendance_otp.utils.clock import Clock


class CodeDeriver:
    """Derive rotating numeric codes from a session secret.

    Codes follow RFC 6238: HMAC-SHA1 over the 8-byte big-endian step index,
    dynamic truncation, reduced modulo 10**digits and zero-padded. The step
    index is ``floor(unix_seconds / step_seconds)`` of the injected clock.
    """

    def __init__(
        self,
        clock: Clock = None,
        step_seconds: int = 30,
        digits: int = 6,
        valid_window: int = 1
    ):
        if step_seconds <= 0:
            raise ValueError("step_seconds must be positive")
        if valid_window < 0:
            raise ValueError("valid_window cannot be negative")

        self.clock = clock or Clock()
        self.step_seconds = step_seconds
        self.digits = digits
        self.valid_window = valid_window
        self._code_pattern = re.compile(r'[0-9]{%d}' % digits)

    def step_index(self, timestamp: Optional[float] = None) -> int:
        """Return the time-step index for timestamp (defaults to now)."""
        if timestamp is None:
            timestamp = self.clock.time()
        return int(timestamp // self.step_seconds)

    def derive(self, secret: str, step_index: int) -> str:
        """Derive the code for a specific step index."""
        return pyotp.HOTP(secret, digits=self.digits, digest=hashlib.sha1).at(step_index)

    def current_code(self, secret: str) -> str:
        return self.derive(secret, self.step_index())

    def validate(self, secret: str, submitted_code: str, timestamp: Optional[float] = None) -> bool:
        """Check submitted_code against the steps within the valid window.

        Every candidate step is compared so the result does not depend on
        which step matched.
        """
        if not isinstance(submitted_code, str):
            return False
        submitted_code = submitted_code.strip()
        if not self._code_pattern.fullmatch(submitted_code):
            return False

        current = self.step_index(timestamp)
        matched = False
        for offset in range(-self.valid_window, self.valid_window + 1):
            if strings_equal(self.derive(secret, current + offset), submitted_code):
                matched = True
        return matched

    def milliseconds_remaining(self) -> int:
        """Milliseconds until the current step rolls over, in (0, step]."""
        step_ms = self.step_seconds * 1000
        now_ms = int(self.clock.time() * 1000)
        return step_ms - now_ms % step_ms
