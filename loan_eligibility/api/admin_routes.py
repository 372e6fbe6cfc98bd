from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi import status
from typing import Optional, Dict, Any
from datetime import datetime
from uuid import UUID
import logging

from loan_eligibility.api.loan_routes import get_loan_application_service
from loan_eligibility.core.auth_dependencies import get_admin_user
from loan_eligibility.helpers.response_builder import (
    build_application_response,
    build_list_response,
    build_user_response,
    timestamp,
)
from loan_eligibility.schemas.loan_schema import ApplicationStatusEnum, StatusUpdateRequest
from loan_eligibility.services.audit_service import audit_service
from loan_eligibility.services.loan_service import LoanApplicationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Administration"], dependencies=[Depends(get_admin_user)])


def _parse_date(value: Optional[str], field: str, end_of_day: bool = False) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {field} format, expected YYYY-MM-DD")
    if end_of_day:
        parsed = parsed.replace(hour=23, minute=59, second=59, microsecond=999999)
    return parsed


@router.get("/applications", response_model=Dict[str, Any])
async def get_all_applications(
    status_filter: Optional[str] = Query(default=None, alias="status", description="Only applications in this status"),
    service: LoanApplicationService = Depends(get_loan_application_service)
):
    status_value = None
    if status_filter:
        status_value = ApplicationStatusEnum.parse(status_filter)
        if status_value is None:
            raise HTTPException(status_code=400, detail=f"Unknown status: {status_filter}")

    applications = await service.get_all_applications(status_value)
    return build_list_response("applications", [build_application_response(a) for a in applications])

@router.put("/application/{application_id}/status", response_model=Dict[str, Any])
async def update_application_status(
    application_id: UUID,
    status_update: StatusUpdateRequest,
    admin: Dict = Depends(get_admin_user),
    service: LoanApplicationService = Depends(get_loan_application_service)
):
    if not status_update.status or not status_update.status.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Status is required")

    new_status = ApplicationStatusEnum.parse(status_update.status)
    if new_status is None:
        allowed = ", ".join(s.value for s in ApplicationStatusEnum)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status '{status_update.status}'. Allowed: {allowed}"
        )

    application = await service.update_application_status(application_id, new_status)
    if not application:
        await audit_service.record("update_status", actor=admin.get("email"), acted=str(application_id), status="failed")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Application not found with ID: {application_id}"
        )

    await audit_service.record("update_status", actor=admin.get("email"), acted=str(application_id))
    return {
        "success": True,
        "message": "Application status updated successfully",
        "application": build_application_response(application),
        "timestamp": timestamp(),
    }

@router.delete("/application/{application_id}", response_model=Dict[str, Any])
async def delete_application(
    application_id: UUID,
    admin: Dict = Depends(get_admin_user),
    service: LoanApplicationService = Depends(get_loan_application_service)
):
    deleted = await service.delete_application(application_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Application not found with ID: {application_id}"
        )

    await audit_service.record("delete_application", actor=admin.get("email"), acted=str(application_id))
    return {"success": True, "message": "Application deleted successfully", "timestamp": timestamp()}

@router.get("/stats", response_model=Dict[str, Any])
async def get_application_stats(
    service: LoanApplicationService = Depends(get_loan_application_service)
):
    stats = await service.get_application_stats()
    return {"success": True, "stats": stats.model_dump(by_alias=True), "timestamp": timestamp()}

@router.get("/users", response_model=Dict[str, Any])
async def get_all_users(
    service: LoanApplicationService = Depends(get_loan_application_service)
):
    users = await service.get_all_users()
    return build_list_response("users", [build_user_response(u) for u in users])

@router.get("/audits", response_model=Dict[str, Any])
async def list_audits(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=1000),
    action: Optional[str] = Query(default=None),
    actor: Optional[str] = Query(default=None),
    acted: Optional[str] = Query(default=None),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    start_date: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(default=None, description="YYYY-MM-DD")
):
    filters: Dict[str, Any] = {
        "action": action,
        "actor": actor,
        "acted": acted,
        "status": status_filter,
        "start_date": _parse_date(start_date, "start_date"),
        "end_date": _parse_date(end_date, "end_date", end_of_day=True),
    }
    return await audit_service.get_audits(skip=skip, limit=limit, filters=filters)
