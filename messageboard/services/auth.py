"""API key issuing and checking."""

import logging
import secrets
from collections.abc import Iterable

from passlib.context import CryptContext
from sqlalchemy.orm import Session

from messageboard.models.api_key import ApiKey
from messageboard.models.enums import AccessDecision

logger = logging.getLogger(__name__)

# API key secret hashing context
key_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

PREFIX_BYTES = 6
SECRET_BYTES = 24

ADMIN_SCOPE = "admin"
PUBLIC_SCOPE = "public"


def hash_key_secret(secret: str) -> str:
    """Hash an API key secret."""
    return key_context.hash(secret)


def verify_key_secret(secret: str, key_hash: str) -> bool:
    """Verify an API key secret against its hash."""
    return key_context.verify(secret, key_hash)


def issue_api_key(db: Session, scopes: Iterable[str], description: str | None = None) -> str:
    """Create an API key and return its plaintext form.

    The plaintext is only available here; the database keeps the prefix and a
    hash of the secret.
    """
    prefix = secrets.token_hex(PREFIX_BYTES)
    secret = secrets.token_urlsafe(SECRET_BYTES)
    api_key = ApiKey(
        prefix=prefix,
        key_hash=hash_key_secret(secret),
        scopes=" ".join(sorted(set(scopes))),
        description=description,
    )
    db.add(api_key)
    db.commit()
    logger.info(f"Issued API key {prefix} with scopes '{api_key.scopes}'")
    return f"{prefix}.{secret}"


def check_access(
    db: Session, credential: str | None, required_scopes: Iterable[str]
) -> AccessDecision:
    """Decide whether a credential grants all of the required scopes."""
    if not credential or "." not in credential:
        return AccessDecision.INVALID_CREDENTIAL

    prefix, secret = credential.split(".", 1)
    api_key = db.query(ApiKey).filter(ApiKey.prefix == prefix).first()
    if api_key is None or api_key.revoked or not verify_key_secret(secret, api_key.key_hash):
        return AccessDecision.INVALID_CREDENTIAL

    if not set(required_scopes) <= api_key.scope_set:
        return AccessDecision.FORBIDDEN

    return AccessDecision.AUTHORIZED
