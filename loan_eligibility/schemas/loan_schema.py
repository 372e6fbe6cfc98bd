from pydantic import BaseModel, Field
from enum import Enum
from typing import Optional

from loan_eligibility.schemas.eligibility_schema import CAMEL_CASE_CONFIG


class ApplicationStatusEnum(str, Enum):
    pending = "PENDING"
    approved = "APPROVED"
    rejected = "REJECTED"
    under_review = "UNDER_REVIEW"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ApplicationStatusEnum"]:
        """Case-insensitive lookup; returns None for blank or unknown values."""
        if not value or not value.strip():
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class StatusUpdateRequest(BaseModel):
    status: Optional[str] = Field(None, description="New status, case-insensitive")


class ApplicationStats(BaseModel):
    model_config = CAMEL_CASE_CONFIG

    total_applications: int = 0
    approved_applications: int = 0
    pending_applications: int = 0
    rejected_applications: int = 0
    total_requested_amount: float = 0.0
    total_approved_amount: float = 0.0
