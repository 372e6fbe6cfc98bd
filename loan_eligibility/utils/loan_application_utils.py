from loan_eligibility.database.models.loan_application_model import (
    ApplicantProfile as DbApplicantProfile,
    EligibilityVerdict as DbEligibilityVerdict,
)
from loan_eligibility.schemas.eligibility_schema import ApplicantProfile, EligibilityVerdict

def convert_profile(profile: ApplicantProfile) -> DbApplicantProfile:
    return DbApplicantProfile(**profile.model_dump())

def convert_verdict(verdict: EligibilityVerdict) -> DbEligibilityVerdict:
    return DbEligibilityVerdict(**verdict.model_dump())

def profile_from_record(record: DbApplicantProfile) -> ApplicantProfile:
    return ApplicantProfile(**record.model_dump())

def verdict_from_record(record: DbEligibilityVerdict) -> EligibilityVerdict:
    return EligibilityVerdict(**record.model_dump())
