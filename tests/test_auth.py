"""Tests for API key issuing and checking."""

from messageboard.models.api_key import ApiKey
from messageboard.models.enums import AccessDecision
from messageboard.services.auth import check_access, issue_api_key


def test_issued_key_is_stored_hashed(db):
    """Only the prefix of an issued key is stored in clear."""
    key = issue_api_key(db, ["admin", "public"], "ops")
    prefix, secret = key.split(".", 1)

    stored = db.query(ApiKey).filter(ApiKey.prefix == prefix).one()
    assert secret not in stored.key_hash
    assert stored.scope_set == {"admin", "public"}


def test_key_with_scopes_is_authorized(db):
    key = issue_api_key(db, ["admin"])
    assert check_access(db, key, ["admin"]) == AccessDecision.AUTHORIZED


def test_key_without_scope_is_forbidden(db):
    key = issue_api_key(db, ["public"])
    assert check_access(db, key, ["admin"]) == AccessDecision.FORBIDDEN


def test_missing_or_malformed_key_is_invalid(db):
    assert check_access(db, None, ["admin"]) == AccessDecision.INVALID_CREDENTIAL
    assert check_access(db, "no-dot", ["admin"]) == AccessDecision.INVALID_CREDENTIAL
    assert check_access(db, "unknown.secret", ["admin"]) == AccessDecision.INVALID_CREDENTIAL


def test_revoked_key_is_invalid(db):
    key = issue_api_key(db, ["admin"])
    db.query(ApiKey).update({ApiKey.revoked: True})
    db.commit()

    assert check_access(db, key, ["admin"]) == AccessDecision.INVALID_CREDENTIAL
