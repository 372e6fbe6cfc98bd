from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

CAMEL_CASE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
)


class ApplicantProfile(BaseModel):
    """Financial profile scored by the eligibility evaluator.

    Values are taken as given; range checks belong to the request schemas.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    age: int = Field(..., description="Applicant age in years")
    annual_income: float = Field(..., description="Gross annual income")
    credit_score: int = Field(..., description="Credit bureau score (300-850)")
    monthly_debt_payments: float = Field(..., description="Existing monthly debt obligations")
    requested_amount: float = Field(..., description="Loan amount requested")
    loan_tenure_months: int = Field(..., alias="loanTenure", description="Repayment term in months")
    employment_type: Optional[str] = Field(None, description="Employment category, not used in scoring")


class EligibilityVerdict(BaseModel):
    model_config = CAMEL_CASE_CONFIG

    eligible: bool = Field(..., description="Whether the applicant passed every policy gate")
    reason: str = Field(..., description="First failing rule, success message or cap message")
    max_loan_amount: float = Field(default=0.0, description="Ceiling the applicant qualifies for")
    approved_amount: float = Field(default=0.0, description="Amount approved, never above max_loan_amount")
    interest_rate: float = Field(default=0.0, description="Annual interest rate in percent")
    monthly_emi: float = Field(default=0.0, description="Equated monthly installment on the approved amount")


class EligibilityRequest(BaseModel):
    """Request body for an eligibility check."""
    model_config = CAMEL_CASE_CONFIG

    name: str = Field(..., min_length=1, description="Applicant name")
    # Age bounds are a policy rule, so out-of-policy ages still reach the evaluator
    age: int = Field(..., ge=0, le=120)
    annual_income: float = Field(..., ge=0)
    credit_score: int = Field(..., ge=300, le=850)
    monthly_debt_payments: float = Field(..., ge=0)
    requested_amount: float = Field(..., ge=1000)
    loan_tenure: int = Field(..., ge=6, le=360, description="Repayment term in months")
    employment_type: str = Field(..., min_length=1)

    def to_profile(self) -> ApplicantProfile:
        return ApplicantProfile(
            age=self.age,
            annual_income=self.annual_income,
            credit_score=self.credit_score,
            monthly_debt_payments=self.monthly_debt_payments,
            requested_amount=self.requested_amount,
            loan_tenure_months=self.loan_tenure,
            employment_type=self.employment_type,
        )


class ApplicationRequest(EligibilityRequest):
    """Eligibility request plus the contact details needed to store an application."""
    email: EmailStr
    phone: str = Field(..., min_length=1)
    loan_purpose: Optional[str] = None


class SaveApplicationRequest(ApplicationRequest):
    """Application whose eligibility outcome was computed by an earlier check."""
    eligible: bool = False
    eligibility_reason: Optional[str] = None
    max_loan_amount: float = Field(default=0.0, ge=0)
    approved_amount: float = Field(default=0.0, ge=0)
    interest_rate: float = Field(default=0.0, ge=0)
    monthly_emi: float = Field(default=0.0, ge=0)

    def to_verdict(self) -> EligibilityVerdict:
        return EligibilityVerdict(
            eligible=self.eligible,
            reason=self.eligibility_reason or "",
            max_loan_amount=self.max_loan_amount,
            approved_amount=self.approved_amount,
            interest_rate=self.interest_rate,
            monthly_emi=self.monthly_emi,
        )


class EligibilityResponse(EligibilityVerdict):
    timestamp: datetime = Field(default_factory=datetime.now)
