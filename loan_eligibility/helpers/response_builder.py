from datetime import datetime
from typing import Any, Dict, Optional

from loan_eligibility.utils.loan_application_utils import profile_from_record, verdict_from_record


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def timestamp() -> str:
    return datetime.now().isoformat()


def build_application_response(application) -> Dict[str, Any]:
    """Flatten a stored application into the camelCase shape the front-end reads."""
    profile = profile_from_record(application.profile).model_dump(by_alias=True)
    verdict = verdict_from_record(application.verdict).model_dump(by_alias=True)

    response = {
        "id": str(application.id) if getattr(application, "id", None) else None,
        "applicationId": str(application.application_id),
        "userId": application.user_id,
        "applicantName": application.name,
        "email": application.email,
        "phone": application.phone,
        "loanPurpose": application.loan_purpose,
        **profile,
        **verdict,
        "status": application.status,
        "appliedDate": _isoformat(application.created_at),
        "lastUpdated": _isoformat(application.updated_at),
    }
    return response


def build_user_response(user) -> Dict[str, Any]:
    # Never expose the password hash
    return {
        "id": str(user.id) if getattr(user, "id", None) else None,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "createdAt": _isoformat(user.created_at),
        "updatedAt": _isoformat(user.updated_at),
    }


def build_list_response(key: str, items) -> Dict[str, Any]:
    return {
        "success": True,
        key: items,
        "count": len(items),
        "timestamp": timestamp(),
    }
