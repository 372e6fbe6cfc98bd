from fastapi import APIRouter, Depends, HTTPException, status
from typing import Dict

from loan_eligibility.services.auth_service import auth_service
from loan_eligibility.schemas import UserCreate, LoginRequest, UserResponse, SignupResponse, Token
from loan_eligibility.core.auth_dependencies import get_current_user
from loan_eligibility.services.audit_service import audit_service

router = APIRouter(
    prefix="/api/auth",
    tags=["Authentication"]
)

# Registers a new user account
@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup_user(user_data: UserCreate) -> SignupResponse:
    try:
        created_user = await auth_service.register_user(user_data)
    except HTTPException:
        await audit_service.record("signup", actor=user_data.email, status="failed")
        raise

    await audit_service.record("signup", actor=created_user["email"], acted=created_user["id"])
    return SignupResponse(message="User created successfully", user=UserResponse(**created_user))

# Authenticates user credentials and returns an access token
@router.post("/login", response_model=Token, status_code=status.HTTP_200_OK)
async def login_user(credentials: LoginRequest) -> Token:
    try:
        token_data = await auth_service.login_user(credentials.email, credentials.password)
    except HTTPException:
        await audit_service.record("login", actor=credentials.email, status="failed")
        raise

    await audit_service.record("login", actor=credentials.email)
    return Token(
        access_token=token_data["access_token"],
        token_type=token_data["token_type"],
        user=UserResponse(**token_data["user"])
    )

# Retrieves the authenticated user's profile information
@router.get("/me", response_model=UserResponse, status_code=status.HTTP_200_OK)
async def get_current_user_info(current_user: Dict = Depends(get_current_user)) -> UserResponse:
    return UserResponse(**current_user)

# Generates a new access token for the authenticated user
@router.post("/refresh", response_model=Token, status_code=status.HTTP_200_OK)
async def refresh_token(current_user: Dict = Depends(get_current_user)) -> Token:
    token_data = await auth_service.refresh_user_token(current_user["email"])
    return Token(
        access_token=token_data["access_token"],
        token_type=token_data["token_type"]
    )
