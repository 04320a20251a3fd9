"""Per-session secret generation."""
import base64
import secrets


class SecretGenerator:
    """Produce fresh random secrets in unpadded base32 text."""

    MIN_BYTES = 20

    def __init__(self, num_bytes: int = MIN_BYTES):
        if num_bytes < self.MIN_BYTES:
            raise ValueError(f"Secrets need at least {self.MIN_BYTES} random bytes")
        self.num_bytes = num_bytes

    def generate(self) -> str:
        """Generate a new secret from the OS CSPRNG."""
        raw = secrets.token_bytes(self.num_bytes)
        return base64.b32encode(raw).decode('ascii').rstrip('=')
