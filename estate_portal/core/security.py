# estate_portal/core/security.py
"""
Password hashing for user accounts.

Hashes are Argon2id PHC strings ("$argon2id$v=19$m=...,t=...,p=...$salt$hash"):
algorithm, parameters and salt travel inside the stored value, so verification
never needs anything but the password and the stored string.
"""
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError
from starlette.concurrency import run_in_threadpool

_hasher = PasswordHasher()

# Verified when the requested account does not exist, so a missing user
# costs the same as a wrong password.
DUMMY_HASH = _hasher.hash("estate-portal-dummy-password")


def hash_password(password: str) -> str:
    """
    Hash a plaintext password with a fresh random salt.

    Raises:
        ValueError: if the password is empty or not encodable as UTF-8
            (e.g. contains a lone surrogate).
    """
    if not password:
        raise ValueError("password cannot be empty")
    if not is_encodable(password):
        raise ValueError("password must be valid UTF-8 text")
    return _hasher.hash(password)


def is_encodable(password: str) -> bool:
    """True if the password can be UTF-8 encoded for hashing."""
    try:
        password.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def verify_password(password: str, stored_hash: str) -> bool:
    """
    Check a plaintext password against a stored Argon2 hash.

    Fails closed: a mismatch, a malformed or non-ASCII hash, a password
    that cannot be encoded, or any other verification error all return
    False.
    """
    try:
        return _hasher.verify(stored_hash, password)
    # ValueError covers InvalidHashError and UnicodeEncodeError
    except (VerificationError, ValueError):
        return False


async def verify_password_async(password: str, stored_hash: str) -> bool:
    """verify_password off the event loop (Argon2 is CPU and memory bound)."""
    return await run_in_threadpool(verify_password, password, stored_hash)


def needs_rehash(stored_hash: str) -> bool:
    """True if the hash was made with weaker parameters than the current ones."""
    try:
        return _hasher.check_needs_rehash(stored_hash)
    except ValueError:  # InvalidHashError and friends
        return True
