from .eligibility_schema import (
    ApplicantProfile,
    EligibilityVerdict,
    EligibilityRequest,
    ApplicationRequest,
    SaveApplicationRequest,
    EligibilityResponse,
)
from .loan_schema import ApplicationStatusEnum, StatusUpdateRequest, ApplicationStats
from .user_schemas import UserCreate, LoginRequest, UserResponse, SignupResponse, Token
