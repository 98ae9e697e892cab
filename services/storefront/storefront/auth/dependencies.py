from typing import Optional
from fastapi import HTTPException, status, Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from storefront.auth.jwt_validator import jwt_validator
from storefront.db.database import get_db
from storefront.models.user import User
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _user_from_token(token: str, db: Session) -> User:
    payload = jwt_validator.verify_token(token)

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        logger.warning("Token has a malformed sub claim")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing user id"
        )

    # Tokens outlive accounts; always resolve the user from the store
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"Token references unknown user {user_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists"
        )
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    db: Session = Depends(get_db)
) -> User:
    """Dependency to extract and validate the bearer token"""
    if not credentials:
        logger.warning("Authentication credentials missing")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing",
            headers={"WWW-Authenticate": "Bearer"}
        )

    user = _user_from_token(credentials.credentials, db)
    logger.debug(f"Authenticated user: {user.email} (user_id: {user.id}, role: {user.role})")
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Like get_current_user, but anonymous requests pass through as None"""
    if not credentials:
        return None
    return _user_from_token(credentials.credentials, db)


async def require_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Dependency to require the admin role"""
    if current_user.role != "admin":
        logger.warning(f"User {current_user.id} denied admin-only operation")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Requires admin role"
        )
    return current_user
