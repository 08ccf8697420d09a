"""Access gate: may the current identity start a given assessment?

``AccessGate.can_access`` fails closed. No identity, an exception from the
underlying check, or any return value other than a literal ``True`` all
mean "denied". Nothing raises past this boundary.
"""
from __future__ import annotations
import logging
from typing import Callable, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from selfiq.core.assessment_catalog import AssessmentCatalog
from selfiq.models.access_grant import AccessGrant
from selfiq.models.user import User
from selfiq.services.audit import log_access_denied
from selfiq.utils.datetime import utc_now, to_naive_utc

logger = logging.getLogger("selfiq.access")

AccessCheck = Callable[[str, str], object]


def has_test_access(db: Session, catalog: AssessmentCatalog, user_id: str, test_id: str) -> bool:
    """Store-side access rule.

    Free assessments are open to every authenticated user. Premium ones need
    a premium account or an unexpired grant row for (user, test).
    """
    definition = catalog.find(test_id)
    if definition is None:
        return False
    if not definition.is_premium:
        return True
    user = db.get(User, user_id)
    if user is not None and user.is_premium:
        return True
    now = to_naive_utc(utc_now())
    grant = (
        db.query(AccessGrant)
        .filter(
            AccessGrant.user_id == user_id,
            AccessGrant.test_id == test_id,
            or_(AccessGrant.expires_at.is_(None), AccessGrant.expires_at > now),
        )
        .first()
    )
    return grant is not None


class AccessGate:
    def __init__(self, check: AccessCheck):
        self._check = check

    @classmethod
    def for_session(cls, db: Session, catalog: AssessmentCatalog) -> "AccessGate":
        return cls(lambda user_id, test_id: has_test_access(db, catalog, user_id, test_id))

    def can_access(self, identity: Optional[str], assessment_id: str) -> bool:
        if not identity:
            logger.warning(f"No authenticated user for access check on {assessment_id}")
            log_access_denied(None, assessment_id, "no_identity")
            return False
        try:
            granted = self._check(identity, assessment_id)
        except Exception as e:
            logger.error(f"Access check failed for user={identity} test={assessment_id}: {e}")
            log_access_denied(identity, assessment_id, "check_failed")
            return False
        if granted is True:
            return True
        if granted is not False:
            logger.warning(
                f"Access check for user={identity} test={assessment_id} returned non-boolean {granted!r}; denying"
            )
        log_access_denied(identity, assessment_id, "not_granted")
        return False
