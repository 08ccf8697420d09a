from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin import auth as firebase_auth
from sqlalchemy.orm import Session
import logging

from selfiq.core.settings import settings
from selfiq.db import get_db
from selfiq.models.user import User
from selfiq.utils.datetime import utc_now, to_naive_utc

logger = logging.getLogger("selfiq.auth")

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)

# Development/test tokens (never honoured in production)
MOCK_TOKENS = {
    "mock-user-token": ("user-1", "Test User", "user@example.com", False),
    "mock-premium-token": ("premium-1", "Premium User", "premium@example.com", True),
}


def _user_from_token(token: str, db: Session) -> User:
    if not settings.is_production and token in MOCK_TOKENS:
        uid, name, email, premium = MOCK_TOKENS[token]
        user = db.query(User).filter(User.id == uid).first()
        if not user:
            user = User(id=uid, name=name, email=email, is_premium=premium, created_at=to_naive_utc(utc_now()))
            db.add(user)
            db.commit()
            db.refresh(user)
        return user

    try:
        decoded_token = firebase_auth.verify_id_token(token)
        user_id = decoded_token["uid"]
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired Firebase token",
        )
    email = decoded_token.get("email")
    full_name = decoded_token.get("name")
    if not full_name:
        full_name = email.split("@")[0].title() if email else "Guest"

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        user = User(
            id=user_id,
            email=email,
            name=full_name,
            is_premium=bool(decoded_token.get("premium", False)),
            created_at=to_naive_utc(utc_now()),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    return _user_from_token(credentials.credentials, db)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Current user, or None when the request carries no usable identity."""
    if credentials is None:
        return None
    try:
        return _user_from_token(credentials.credentials, db)
    except HTTPException:
        logger.info("Ignoring invalid bearer token on optional-identity endpoint")
        return None
