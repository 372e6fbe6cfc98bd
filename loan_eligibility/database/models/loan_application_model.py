from beanie import Document, Indexed
from pydantic import BaseModel, EmailStr, Field
from pymongo import ASCENDING, IndexModel
from typing import Optional
from datetime import datetime
from uuid import UUID, uuid4

from loan_eligibility.schemas.loan_schema import ApplicationStatusEnum


class ApplicantProfile(BaseModel):
    age: int = Field(..., description="Applicant age in years")
    annual_income: float = Field(..., description="Gross annual income")
    credit_score: int = Field(..., description="Credit bureau score")
    monthly_debt_payments: float = Field(..., description="Existing monthly debt obligations")
    requested_amount: float = Field(..., description="Loan amount requested")
    loan_tenure_months: int = Field(..., description="Repayment term in months")
    employment_type: Optional[str] = Field(None, description="Employment category")


class EligibilityVerdict(BaseModel):
    eligible: bool = Field(..., description="Outcome of the eligibility check")
    reason: str = Field(default="", description="Reason reported to the applicant")
    max_loan_amount: float = Field(default=0.0, description="Ceiling the applicant qualified for")
    approved_amount: float = Field(default=0.0, description="Approved principal")
    interest_rate: float = Field(default=0.0, description="Annual interest rate in percent")
    monthly_emi: float = Field(default=0.0, description="Monthly installment")


class LoanApplication(Document):
    application_id: UUID = Field(default_factory=uuid4, description="Unique identifier of the loan application")
    user_id: Optional[str] = Field(None, description="ID of the user who owns the application")
    name: str = Field(..., description="Applicant name")
    email: Indexed(EmailStr) = Field(..., description="Applicant email, used to look applications up")
    phone: str = Field(..., description="Applicant contact number")
    loan_purpose: Optional[str] = Field(None, description="Stated purpose of the loan")

    profile: ApplicantProfile = Field(..., description="Financial data the application was evaluated on")
    verdict: EligibilityVerdict = Field(..., description="Eligibility outcome stored with the application")

    status: Indexed(str) = Field(default=ApplicationStatusEnum.pending.value, description="Current status of the loan application")
    created_at: datetime = Field(default_factory=datetime.now, description="Timestamp when the application was created")
    updated_at: datetime = Field(default_factory=datetime.now, description="Timestamp when the application was last updated")

    class Settings:
        name = "loan_applications"
        indexes = [
            IndexModel([("application_id", ASCENDING)], unique=True),
        ]
