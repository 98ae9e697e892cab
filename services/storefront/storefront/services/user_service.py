from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional
import logging

from storefront.auth.jwt_validator import jwt_validator
from storefront.auth.passwords import hash_password, verify_password
from storefront.config import settings
from storefront.exceptions import ConflictError, NotFoundError, UnauthorizedError
from storefront.models.user import User

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for accounts and authentication"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found", user_id=user_id)
        return user

    def register(
        self,
        email: str,
        password: str,
        first_name: str = "",
        last_name: str = "",
        role: str = "customer"
    ) -> User:
        """Create an account; emails are unique case-insensitively"""
        email = email.strip().lower()
        if self.get_by_email(email):
            raise ConflictError("User with this email already exists", code="EMAIL_TAKEN")

        user = User(
            email=email,
            password_hash=hash_password(password),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            role=role,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("User with this email already exists", code="EMAIL_TAKEN")

        self.db.refresh(user)
        logger.info(f"Registered user {user.id} ({user.email}) with role {user.role}")
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self.get_by_email(email)
        # Same error for unknown email and wrong password
        if not user or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login attempt for {email}")
            raise UnauthorizedError("Invalid credentials")
        return user

    def login(self, email: str, password: str) -> dict:
        """Check credentials and issue an access token"""
        user = self.authenticate(email, password)
        token = jwt_validator.issue_token(user_id=user.id, email=user.email, role=user.role)
        logger.info(f"User {user.id} logged in")
        return {
            "access_token": token,
            "token_type": "bearer",
            "expires_in": jwt_validator.expires_in_seconds,
            "user": user,
        }

    def ensure_admin(self) -> Optional[User]:
        """Create the configured admin account when no admin exists"""
        existing_admin = self.db.query(User).filter(User.role == "admin").first()
        if existing_admin:
            return existing_admin

        if not settings.admin_password:
            logger.warning("No admin account exists and ADMIN_PASSWORD is not set; skipping admin bootstrap")
            return None

        if self.get_by_email(settings.admin_email):
            logger.warning(f"{settings.admin_email} is registered as a customer; not promoting it to admin")
            return None

        admin = self.register(
            email=settings.admin_email,
            password=settings.admin_password,
            first_name=settings.admin_first_name,
            last_name=settings.admin_last_name,
            role="admin",
        )
        logger.info(f"Bootstrapped admin account {admin.email}")
        return admin
