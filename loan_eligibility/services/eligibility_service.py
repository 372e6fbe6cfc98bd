import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, List, Tuple, Callable

from loan_eligibility.policy import EligibilityPolicy, DEFAULT_POLICY
from loan_eligibility.schemas.eligibility_schema import ApplicantProfile, EligibilityVerdict

logger = logging.getLogger(__name__)

INVALID_REQUEST_REASON = "Invalid request data"
ELIGIBLE_REASON = "Congratulations! You are eligible for a loan"


# Rounds a currency value to 2 decimal places, halves away from zero
def round_currency(value: float) -> float:
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


# Standard amortizing-loan installment for a principal over tenure_months
def calculate_emi(principal: float, annual_rate: float, tenure_months: int) -> float:
    monthly_rate = annual_rate / (12 * 100)

    if monthly_rate == 0:
        return round_currency(principal / tenure_months)

    try:
        growth = (1 + monthly_rate) ** tenure_months
    except OverflowError:
        # Installment tends to the monthly interest as the term grows
        return round_currency(principal * monthly_rate)

    emi = principal * monthly_rate * growth / (growth - 1)
    return round_currency(emi)


class EligibilityService:
    """Deterministic loan eligibility evaluator.

    Policy gates run in a fixed order and the first failure decides the
    reason reported to the applicant. Applicants that pass every gate get
    a loan ceiling, an interest rate and an installment for the approved
    amount. The service holds no mutable state, so one instance is shared
    by all requests.
    """

    def __init__(self, policy: EligibilityPolicy = DEFAULT_POLICY):
        self.policy = policy
        self._rules: List[Tuple[Callable[[ApplicantProfile], bool], str]] = [
            (self._age_in_range, f"Age must be between {policy.min_age} and {policy.max_age} years"),
            (self._meets_min_income, f"Annual income must be at least {policy.format_amount(policy.min_annual_income)}"),
            (self._meets_min_credit_score, f"Credit score must be at least {policy.min_credit_score}"),
            (self._within_debt_to_income, f"Debt-to-income ratio too high. Maximum allowed: {policy.max_debt_to_income_ratio * 100:g}%"),
        ]
        logger.info("EligibilityService initialized")

    def evaluate(self, profile: Optional[ApplicantProfile]) -> EligibilityVerdict:
        if profile is None:
            return self._ineligible(INVALID_REQUEST_REASON)

        failure = self.first_failing_rule(profile)
        if failure:
            logger.info("Applicant ineligible: %s", failure)
            return self._ineligible(failure)

        max_loan_amount = self.calculate_max_loan_amount(profile)
        interest_rate = self.calculate_interest_rate(profile.credit_score)

        reason = ELIGIBLE_REASON
        approved_amount = 0.0
        monthly_emi = 0.0

        if profile.requested_amount > 0 and profile.loan_tenure_months > 0:
            if profile.requested_amount <= max_loan_amount:
                approved_amount = profile.requested_amount
            else:
                approved_amount = max_loan_amount
                reason = f"Approved for maximum eligible amount of {self.policy.format_amount(max_loan_amount, 2)}"
            monthly_emi = calculate_emi(approved_amount, interest_rate, profile.loan_tenure_months)

        logger.info(
            "Applicant eligible: max=%.2f approved=%.2f rate=%.2f emi=%.2f",
            max_loan_amount, approved_amount, interest_rate, monthly_emi
        )
        return EligibilityVerdict(
            eligible=True,
            reason=reason,
            max_loan_amount=max_loan_amount,
            approved_amount=approved_amount,
            interest_rate=interest_rate,
            monthly_emi=monthly_emi,
        )

    # Returns the reason of the first policy gate the profile fails, in gate order
    def first_failing_rule(self, profile: ApplicantProfile) -> Optional[str]:
        for passes, reason in self._rules:
            if not passes(profile):
                return reason
        return None

    def debt_to_income_ratio(self, profile: ApplicantProfile) -> float:
        monthly_income = profile.annual_income / 12
        if monthly_income <= 0:
            return float("inf") if profile.monthly_debt_payments > 0 else 0.0
        return profile.monthly_debt_payments / monthly_income

    def calculate_max_loan_amount(self, profile: ApplicantProfile) -> float:
        multiplier = self.policy.income_multiplier(profile.credit_score)
        available_income = profile.annual_income - (profile.monthly_debt_payments * 12)
        return min(
            profile.annual_income * multiplier,
            available_income * self.policy.available_income_factor,
        )

    def calculate_interest_rate(self, credit_score: int) -> float:
        return self.policy.interest_rate(credit_score)

    def _age_in_range(self, profile: ApplicantProfile) -> bool:
        return self.policy.min_age <= profile.age <= self.policy.max_age

    def _meets_min_income(self, profile: ApplicantProfile) -> bool:
        return profile.annual_income >= self.policy.min_annual_income

    def _meets_min_credit_score(self, profile: ApplicantProfile) -> bool:
        return profile.credit_score >= self.policy.min_credit_score

    def _within_debt_to_income(self, profile: ApplicantProfile) -> bool:
        return self.debt_to_income_ratio(profile) <= self.policy.max_debt_to_income_ratio

    @staticmethod
    def _ineligible(reason: str) -> EligibilityVerdict:
        return EligibilityVerdict(eligible=False, reason=reason)


eligibility_service = EligibilityService()
