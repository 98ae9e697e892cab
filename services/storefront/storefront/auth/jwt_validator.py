"""
JWT issuance and verification for storefront access tokens (HS256)
"""
import jwt
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict
from fastapi import HTTPException, status
from storefront.config import settings

logger = logging.getLogger(__name__)


class JWTValidator:
    def __init__(self):
        self.secret_key = settings.jwt_secret_key
        self.algorithm = settings.jwt_algorithm
        self.expires_minutes = settings.jwt_expires_minutes
        self.issuer = settings.app_name

    @property
    def expires_in_seconds(self) -> int:
        return self.expires_minutes * 60

    def issue_token(self, user_id: int, email: str, role: str) -> str:
        """Sign an access token for an authenticated user"""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "iss": self.issuer,
            "iat": now,
            "exp": now + timedelta(minutes=self.expires_minutes),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Dict:
        """
        Verify JWT token.
        Returns decoded token payload if valid.
        """
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={
                    "verify_signature": True,
                    "verify_iss": True,
                    "verify_exp": True,
                    "require": ["sub", "exp"],
                }
            )
        except jwt.ExpiredSignatureError:
            logger.warning("JWT token has expired")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired"
            )
        except jwt.InvalidTokenError as e:
            logger.warning(f"JWT verification failed: {e}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication credentials"
            )


jwt_validator = JWTValidator()
