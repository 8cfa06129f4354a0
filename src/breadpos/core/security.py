"""PIN hashing and verification utilities."""

from pwdlib import PasswordHash

# Argon2 (modern, GPU-resistant). PINs are short, so a slow hash matters.
pin_hash = PasswordHash.recommended()


def verify_pin(plain_pin: str, hashed_pin: str) -> bool:
    """Verify plain PIN against hashed PIN."""
    return pin_hash.verify(plain_pin, hashed_pin)


def hash_pin(pin: str) -> str:
    """Hash PIN using Argon2."""
    return pin_hash.hash(pin)
