# anistream/core/security.py
from __future__ import annotations

"""
🔐 AniStream: Credential & session-token primitives
====================================================

Passwords
---------
Stored as ``"<hex digest>.<hex salt>"``:

* salt   = 16 random bytes, hex-encoded; the hex *text* is the KDF salt input
* digest = scrypt(password, salt, N=16384, r=8, p=1, dklen=64), hex-encoded

Verification re-derives with the stored salt and compares with
``hmac.compare_digest``. Any malformed stored value simply fails.

Session tokens
--------------
Opaque URL-safe tokens travel in an HTTP-only cookie. Only ``sha256(token)`` is
persisted, so a leaked table cannot be replayed.
"""

import hashlib
import hmac
import secrets

from starlette.concurrency import run_in_threadpool

# ─────────────────────────────────────────────────────────────
# 🔧 KDF parameters
# ─────────────────────────────────────────────────────────────
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
KEY_LEN = 64
SALT_BYTES = 16
_SEPARATOR = "."
_HEX = frozenset("0123456789abcdefABCDEF")


def _derive(password: str, salt: str) -> bytes:
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=KEY_LEN,
    )


def hash_password(password: str) -> str:
    """Return ``"<hex digest>.<hex salt>"`` using a fresh random salt."""
    salt = secrets.token_hex(SALT_BYTES)
    return f"{_derive(password, salt).hex()}{_SEPARATOR}{salt}"


def compare_passwords(supplied: str, stored: str) -> bool:
    """Constant-time check of ``supplied`` against a stored digest; never raises on bad input."""
    if not isinstance(stored, str) or _SEPARATOR not in stored:
        return False
    digest_hex, salt = stored.split(_SEPARATOR, 1)
    if not salt or len(digest_hex) != KEY_LEN * 2 or not set(digest_hex) <= _HEX:
        return False
    expected = bytes.fromhex(digest_hex)
    return hmac.compare_digest(_derive(supplied, salt), expected)


async def hash_password_async(password: str) -> str:
    return await run_in_threadpool(hash_password, password)


async def compare_passwords_async(supplied: str, stored: str) -> bool:
    return await run_in_threadpool(compare_passwords, supplied, stored)


# ─────────────────────────────────────────────────────────────
# 🎟️ Session tokens
# ─────────────────────────────────────────────────────────────
def generate_session_token() -> str:
    return secrets.token_urlsafe(32)


def hash_session_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


__all__ = [
    "hash_password",
    "compare_passwords",
    "hash_password_async",
    "compare_passwords_async",
    "generate_session_token",
    "hash_session_token",
]
