from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi import status
from pydantic import EmailStr
from typing import Dict, Any
from uuid import UUID
import logging

from loan_eligibility.core.auth_dependencies import get_current_user
from loan_eligibility.core.config import settings
from loan_eligibility.database.connection import get_database
from loan_eligibility.helpers.response_builder import (
    build_application_response,
    build_list_response,
    build_user_response,
    timestamp,
)
from loan_eligibility.schemas.eligibility_schema import (
    EligibilityRequest,
    EligibilityResponse,
    ApplicationRequest,
    SaveApplicationRequest,
)
from loan_eligibility.services.audit_service import audit_service
from loan_eligibility.services.eligibility_service import EligibilityService, eligibility_service
from loan_eligibility.services.loan_service import LoanApplicationService, loan_application_service

logger = logging.getLogger(__name__)


def get_eligibility_service() -> EligibilityService:
    return eligibility_service


def get_loan_application_service() -> LoanApplicationService:
    return loan_application_service


router = APIRouter(prefix="/api", tags=["Loan Applications"])

# Checks eligibility without storing anything
@router.post("/check-eligibility", response_model=EligibilityResponse, status_code=status.HTTP_200_OK)
async def check_eligibility(
    request_data: EligibilityRequest,
    evaluator: EligibilityService = Depends(get_eligibility_service)
) -> EligibilityResponse:
    verdict = evaluator.evaluate(request_data.to_profile())
    return EligibilityResponse(**verdict.model_dump())

# Stores an application together with the outcome of an earlier eligibility check
@router.post("/save-application", response_model=Dict[str, Any], status_code=status.HTTP_200_OK)
async def save_application(
    request_data: SaveApplicationRequest,
    service: LoanApplicationService = Depends(get_loan_application_service)
):
    application = await service.save_application(request_data, request_data.to_verdict())
    await audit_service.record("save_application", actor=request_data.email, acted=str(application.application_id))
    return {
        "success": True,
        "message": "Application saved successfully",
        "applicationId": str(application.application_id),
        "status": application.status,
        "timestamp": timestamp(),
    }

# Evaluates eligibility server-side, then stores the application with that verdict
@router.post("/check-eligibility-and-save", response_model=Dict[str, Any], status_code=status.HTTP_200_OK)
async def check_eligibility_and_save(
    request_data: ApplicationRequest,
    service: LoanApplicationService = Depends(get_loan_application_service)
):
    application, verdict = await service.evaluate_and_save(request_data)
    await audit_service.record("save_application", actor=request_data.email, acted=str(application.application_id))
    return {
        "success": True,
        **verdict.model_dump(by_alias=True),
        "applicationId": str(application.application_id),
        "applicationStatus": application.status,
        "timestamp": timestamp(),
    }

# Lists applications submitted with an email address, newest first
@router.get("/get-applications", response_model=Dict[str, Any])
async def get_applications(
    email: EmailStr = Query(..., description="Applicant email"),
    service: LoanApplicationService = Depends(get_loan_application_service)
):
    applications = await service.get_applications_by_email(email)
    return build_list_response("applications", [build_application_response(a) for a in applications])

# Lists applications owned by the authenticated user
@router.get("/my-applications", response_model=Dict[str, Any])
async def get_my_applications(
    current_user: Dict = Depends(get_current_user),
    service: LoanApplicationService = Depends(get_loan_application_service)
):
    applications = await service.get_applications_by_user_id(current_user["id"])
    return build_list_response("applications", [build_application_response(a) for a in applications])

@router.get("/application/{application_id}", response_model=Dict[str, Any])
async def get_application(
    application_id: UUID,
    service: LoanApplicationService = Depends(get_loan_application_service)
):
    application = await service.get_application(application_id)
    if not application:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No application found with ID: {application_id}"
        )
    return {
        "success": True,
        "application": build_application_response(application),
        "timestamp": timestamp(),
    }

@router.get("/user", response_model=Dict[str, Any])
async def get_user_by_email(
    email: EmailStr = Query(..., description="User email"),
    service: LoanApplicationService = Depends(get_loan_application_service)
):
    user = await service.get_user_by_email(email)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No user found with email: {email}"
        )
    return {
        "success": True,
        "user": build_user_response(user),
        "timestamp": timestamp(),
    }

@router.get("/health")
async def health_check():
    return {
        "status": "UP",
        "message": "Loan Eligibility API is running",
        "version": settings.VERSION,
        "timestamp": timestamp(),
    }

# Pings MongoDB through the initialised Beanie database
@router.get("/health/db")
async def database_health_check():
    try:
        await get_database().command("ping")
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection failed"
        )
    return {"status": "UP", "message": "Database connection successful", "timestamp": timestamp()}
