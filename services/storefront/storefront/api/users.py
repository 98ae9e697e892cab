from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from storefront.db.database import get_db
from storefront.schemas.user import UserRegister, UserLogin, UserResponse, TokenResponse
from storefront.auth.dependencies import get_current_user
from storefront.exceptions import ConflictError, UnauthorizedError
from storefront.models.user import User
from storefront.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Users"]
)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency to get user service"""
    return UserService(db)


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a customer account",
    description="""
    Register a new customer account and return an access token for it.

    Emails are unique regardless of case.
    """,
    responses={
        201: {"description": "Account created"},
        409: {"description": "Email already registered"},
        422: {"description": "Invalid email or password too short"}
    }
)
async def register(
    payload: UserRegister,
    user_service: UserService = Depends(get_user_service)
):
    try:
        user_service.register(
            email=payload.email,
            password=payload.password,
            first_name=payload.first_name,
            last_name=payload.last_name
        )
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    return user_service.login(payload.email, payload.password)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log in",
    description="""
    Exchange email and password for a bearer token.

    Use the token in the Authorization header:
    ```
    Authorization: Bearer <access_token>
    ```
    """,
    responses={
        200: {"description": "Token issued"},
        401: {"description": "Invalid credentials"}
    }
)
async def login(
    payload: UserLogin,
    user_service: UserService = Depends(get_user_service)
):
    try:
        return user_service.login(payload.email, payload.password)
    except UnauthorizedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"}
        )


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Current account",
    responses={
        200: {"description": "The authenticated user"},
        401: {"description": "Authentication required"}
    }
)
async def me(current_user: User = Depends(get_current_user)):
    return current_user
