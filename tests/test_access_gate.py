from datetime import datetime, timedelta, UTC

import pytest

from selfiq.models.access_grant import AccessGrant
from selfiq.models.user import User
from selfiq.services.access import AccessGate, has_test_access


@pytest.fixture
def free_user(db_session):
    user = User(id="free-1", name="Free", email="free@example.com", is_premium=False)
    db_session.add(user)
    db_session.commit()
    return user


def test_free_assessment_is_open(db_session, catalog, free_user):
    assert has_test_access(db_session, catalog, free_user.id, "two_step") is True


def test_premium_requires_grant_or_premium_account(db_session, catalog, free_user):
    assert has_test_access(db_session, catalog, free_user.id, "premium_deep") is False
    db_session.add(User(id="prem-1", name="Prem", email="prem@example.com", is_premium=True))
    db_session.commit()
    assert has_test_access(db_session, catalog, "prem-1", "premium_deep") is True


def test_grant_unlocks_until_expiry(db_session, catalog, free_user):
    now = datetime.now(UTC).replace(tzinfo=None)
    grant = AccessGrant(user_id=free_user.id, test_id="premium_deep", source="purchase", expires_at=now + timedelta(days=1))
    db_session.add(grant)
    db_session.commit()
    assert has_test_access(db_session, catalog, free_user.id, "premium_deep") is True
    grant.expires_at = now - timedelta(days=1)
    db_session.commit()
    assert has_test_access(db_session, catalog, free_user.id, "premium_deep") is False


def test_unknown_assessment_denied(db_session, catalog, free_user):
    assert has_test_access(db_session, catalog, free_user.id, "missing") is False


def test_gate_without_identity_denies():
    calls = []
    gate = AccessGate(lambda u, t: calls.append((u, t)) or True)
    assert gate.can_access(None, "two_step") is False
    assert gate.can_access("", "two_step") is False
    assert calls == []


def test_gate_fails_closed_on_error():
    def boom(user_id, test_id):
        raise RuntimeError("store unavailable")
    assert AccessGate(boom).can_access("u1", "two_step") is False


def test_gate_denies_non_boolean_results():
    assert AccessGate(lambda u, t: None).can_access("u1", "two_step") is False
    assert AccessGate(lambda u, t: "yes").can_access("u1", "two_step") is False
    assert AccessGate(lambda u, t: 1).can_access("u1", "two_step") is False
    assert AccessGate(lambda u, t: True).can_access("u1", "two_step") is True


def test_gate_for_session(db_session, catalog, free_user):
    gate = AccessGate.for_session(db_session, catalog)
    assert gate.can_access(free_user.id, "two_step") is True
    assert gate.can_access(free_user.id, "premium_deep") is False
