from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.core.security import verify_password, create_access_token
from app.core.logging_config import logger
from app.crud.user import user as user_crud
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.auth import LoginRequest, LoginResponse, UserResponse

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """
    Verify user credentials and issue an access token.

    Args:
        credentials: Email and password
        db: Database session

    Returns:
        User info and a bearer token

    Raises:
        HTTPException: If credentials are invalid or the user is inactive
    """
    user = user_crud.get_by_email(db, email=credentials.email)

    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.warning(f"Failed login for {credentials.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    # Generate JWT access token with user claims
    access_token = create_access_token(
        data={
            "id": str(user.id),
            "email": user.email,
            "role": user.role.value,
        }
    )

    logger.info(f"User {user.id} logged in")
    return LoginResponse(user=UserResponse.model_validate(user), access_token=access_token)


@router.get("/me", response_model=UserResponse)
def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user
