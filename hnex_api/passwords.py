"""Argon2id hashing in the PHC string format."""

from __future__ import annotations

import base64
import binascii
import hmac
import logging
import re
import secrets

from cryptography.hazmat.primitives.kdf.argon2 import Argon2id

logger = logging.getLogger(__name__)

ARGON2_VERSION = 19

_MEMORY = 64 * 1024
_ITERATIONS = 3
_PARALLELISM = 2
_SALT_LENGTH = 16
_KEY_LENGTH = 32

_UINT32_MAX = 2**32 - 1
_UINT8_MAX = 2**8 - 1


class InvalidHashError(ValueError):
    """An encoded hash that cannot be parsed or used."""


def _derive(password: str, salt: bytes, iterations: int, memory: int, lanes: int, length: int) -> bytes:
    kdf = Argon2id(
        salt=salt,
        length=length,
        iterations=iterations,
        lanes=lanes,
        memory_cost=memory,
    )
    return kdf.derive(password.encode("utf-8"))


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii").rstrip("=")


def _b64decode(text: str) -> bytes:
    if "=" in text or len(text) % 4 == 1:
        raise ValueError("illegal base64 data")
    padded = text + "=" * (-len(text) % 4)
    return base64.b64decode(padded, validate=True)


def _scan(text: str, key: str, label: str, upper: int | None = None) -> int:
    match = re.match(rf"{key}=([+-]?[0-9]+)", text)
    if match is None:
        raise InvalidHashError(f"invalid {label} in hash: expected integer")
    value = int(match.group(1))
    if upper is not None and not 0 <= value <= upper:
        raise InvalidHashError(f"invalid {label} in hash: value out of range")
    return value


def hash_password(password: str) -> str:
    """Hash a password with a fresh random salt."""
    salt = secrets.token_bytes(_SALT_LENGTH)
    digest = _derive(password, salt, _ITERATIONS, _MEMORY, _PARALLELISM, _KEY_LENGTH)
    return (
        f"$argon2id$v={ARGON2_VERSION}$m={_MEMORY},t={_ITERATIONS},p={_PARALLELISM}"
        f"${_b64encode(salt)}${_b64encode(digest)}"
    )


def verify_password(password: str, encoded_hash: str) -> bool:
    """Check a password against an encoded hash; raise InvalidHashError if it is malformed."""
    parts = encoded_hash.split("$")
    if len(parts) != 6:
        raise InvalidHashError(
            f"invalid argon2id hash format: expected 6 parts, got {len(parts)}"
        )
    if parts[1] != "argon2id":
        raise InvalidHashError(f"unsupported argon2 variant: {parts[1]}")

    version = _scan(parts[2], "v", "version format")
    if version != ARGON2_VERSION:
        logger.warning(
            "Argon2 version mismatch. Hash version: %d, Current library version: %d",
            version,
            ARGON2_VERSION,
        )

    params = parts[3].split(",")
    if len(params) != 3:
        raise InvalidHashError(
            f"invalid parameter format in hash: expected 3 parts, got {len(params)}"
        )
    memory = _scan(params[0], "m", "memory parameter", _UINT32_MAX)
    iterations = _scan(params[1], "t", "iterations parameter", _UINT32_MAX)
    parallelism = _scan(params[2], "p", "parallelism parameter", _UINT8_MAX)

    try:
        salt = _b64decode(parts[4])
    except (ValueError, binascii.Error) as exc:
        raise InvalidHashError(f"failed to decode salt from hash: {exc}") from exc
    try:
        stored = _b64decode(parts[5])
    except (ValueError, binascii.Error) as exc:
        raise InvalidHashError(f"failed to decode hash from hash string: {exc}") from exc

    try:
        computed = _derive(password, salt, iterations, memory, parallelism, len(stored))
    except ValueError as exc:
        raise InvalidHashError(f"unusable argon2id parameters: {exc}") from exc

    return hmac.compare_digest(stored, computed)