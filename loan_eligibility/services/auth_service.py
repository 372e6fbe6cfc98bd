from fastapi import HTTPException, status
from typing import Dict, Optional
from datetime import datetime
import logging

from loan_eligibility.database.models import User
from loan_eligibility.schemas import UserCreate
from loan_eligibility.core.security import hash_password, verify_password, create_access_token, is_valid_password
from loan_eligibility.core.config import settings

logger = logging.getLogger(__name__)


def _user_dict(user: User) -> Dict:
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "created_at": user.created_at,
    }


class AuthService:
    # Register a new user, or claim a passwordless account created by an application
    @staticmethod
    async def register_user(user_data: UserCreate) -> Dict:
        existing_user = await User.find_one(User.email == user_data.email)

        if existing_user and existing_user.hashed_password:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User with this email already exists"
            )

        if not is_valid_password(user_data.password):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long"
            )

        try:
            hashed_password = hash_password(user_data.password)
        except ValueError:
            logger.warning("Password hashing failed")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid password format"
            )

        now = datetime.now()
        if existing_user:
            existing_user.name = user_data.name
            existing_user.phone = user_data.phone or existing_user.phone
            existing_user.hashed_password = hashed_password
            existing_user.updated_at = now
            await existing_user.save()
            logger.info("Claimed existing applicant account: %s", existing_user.id)
            return _user_dict(existing_user)

        new_user = User(
            email=user_data.email,
            name=user_data.name,
            phone=user_data.phone,
            hashed_password=hashed_password,
            created_at=now,
            updated_at=now,
        )
        await new_user.insert()
        logger.info("User saved with ID: %s", new_user.id)
        return _user_dict(new_user)

    # Authenticate user and generate access token
    @staticmethod
    async def login_user(email: str, password: str) -> Dict:
        logger.debug("Login attempt for email: %s", email)

        user = await User.find_one(User.email == email)
        if not user or not verify_password(password, user.hashed_password):
            logger.warning("Invalid credentials for email: %s", email)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="User account is disabled"
            )

        try:
            access_token = create_access_token(data={"sub": user.email})
        except ValueError as e:
            logger.error("Token creation failed: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not create access token"
            )
        return {
            "access_token": access_token,
            "token_type": "bearer",
            "user": _user_dict(user)
        }

    # Retrieve user information by email address
    @staticmethod
    async def get_user_by_email(email: str) -> Optional[Dict]:
        user = await User.find_one(User.email == email)
        if not user or not user.is_active:
            return None
        return _user_dict(user)

    # Generate a new access token for existing user
    @staticmethod
    async def refresh_user_token(email: str) -> Dict:
        user = await User.find_one(User.email == email)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )

        try:
            access_token = create_access_token(data={"sub": email})
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not create access token"
            )

        return {
            "access_token": access_token,
            "token_type": "bearer"
        }

auth_service = AuthService()
