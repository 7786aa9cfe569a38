"""Field-level encryption for candidate PII stored at rest.

``phone``, ``address`` and ``resume_text`` are written as Fernet tokens. The
Fernet key is derived from ``FIELD_ENCRYPTION_KEY``; without it a fixed
development key is used and a warning is logged.
"""
from __future__ import annotations

import base64
import hashlib
import logging
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken

from .config import Environment, settings

logger = logging.getLogger(__name__)

ENCRYPTED_CANDIDATE_FIELDS = ("phone", "address", "resume_text")

DEVELOPMENT_PASSPHRASE = "recruit-development-field-key"


def derive_key(passphrase: str) -> bytes:
    """Fernet key (urlsafe base64 of 32 bytes) for an arbitrary passphrase."""
    return base64.urlsafe_b64encode(hashlib.sha256(passphrase.encode("utf-8")).digest())


@lru_cache(maxsize=1)
def get_fernet() -> Fernet:
    secret = settings.encryption.key
    if secret is None:
        if settings.environment == Environment.PRODUCTION:
            logger.error("FIELD_ENCRYPTION_KEY is not set in production; candidate PII uses the development key")
        else:
            logger.warning("FIELD_ENCRYPTION_KEY is not set; using the development key")
        return Fernet(derive_key(DEVELOPMENT_PASSPHRASE))
    return Fernet(derive_key(secret.get_secret_value()))


def encrypt_field(value: str | None) -> str | None:
    """Encrypt a column value; None and empty strings are stored as is."""
    if not value:
        return value
    return get_fernet().encrypt(value.encode("utf-8")).decode("ascii")


def decrypt_field(value: str | None) -> str | None:
    """Decrypt a column value.

    Values that are not valid tokens for the current key (rows written before
    encryption was enabled, or under another key) are returned unchanged.
    """
    if not value:
        return value
    try:
        return get_fernet().decrypt(value.encode("utf-8")).decode("utf-8")
    except InvalidToken:
        logger.warning(f"Could not decrypt a {len(value)}-character field value; returning it unchanged")
        return value


def decrypt_candidate(candidate: object) -> object:
    """Decrypt the PII columns of a candidate in place and return it.

    Only use on instances detached from their session.
    """
    for field_name in ENCRYPTED_CANDIDATE_FIELDS:
        setattr(candidate, field_name, decrypt_field(getattr(candidate, field_name)))
    return candidate
