from sqlalchemy import Column, String, DateTime, UniqueConstraint
from selfiq.db import Base
from datetime import datetime, UTC
import uuid

class AccessGrant(Base):
    """Explicit unlock of a premium assessment for one user (purchase, promo)."""
    __tablename__ = "test_access_grants"
    __table_args__ = (
        UniqueConstraint("user_id", "test_id", name="uq_test_access_grants_user_test"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    test_id = Column(String, nullable=False)
    source = Column(String, nullable=True)  # e.g. "purchase", "promo"
    granted_at = Column(DateTime, default=lambda: datetime.now(UTC).replace(tzinfo=None))
    expires_at = Column(DateTime, nullable=True)  # null = never expires
