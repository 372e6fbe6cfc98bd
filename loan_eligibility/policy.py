# loan_eligibility/policy.py

"""
Centralized lending policy used by the eligibility evaluator.

The thresholds are fixed for the life of the process: a single
``EligibilityPolicy`` is built at import time and handed to the
evaluator. Tier tables are ordered highest threshold first and the first
matching tier wins; tiers never stack.
"""

from dataclasses import dataclass
from typing import Tuple

# (minimum credit score, annual income multiplier)
INCOME_MULTIPLIER_TIERS: Tuple[Tuple[int, float], ...] = (
    (750, 6.0),
    (700, 5.5),
)

# (minimum credit score, discount off the base annual rate)
INTEREST_DISCOUNT_TIERS: Tuple[Tuple[int, float], ...] = (
    (800, 1.5),  # Excellent
    (750, 1.0),  # Very good
    (700, 0.5),  # Good
)


@dataclass(frozen=True)
class EligibilityPolicy:
    min_age: int = 18
    max_age: int = 65
    min_annual_income: float = 25000.0
    min_credit_score: int = 650
    max_debt_to_income_ratio: float = 0.40
    base_interest_rate: float = 8.5
    base_income_multiplier: float = 5.0
    income_multiplier_tiers: Tuple[Tuple[int, float], ...] = INCOME_MULTIPLIER_TIERS
    interest_discount_tiers: Tuple[Tuple[int, float], ...] = INTEREST_DISCOUNT_TIERS
    # Cap on the loan relative to income left after existing debt service
    available_income_factor: float = 4.0
    currency_symbol: str = "₹"

    def income_multiplier(self, credit_score: int) -> float:
        for threshold, multiplier in self.income_multiplier_tiers:
            if credit_score >= threshold:
                return multiplier
        return self.base_income_multiplier

    def interest_rate(self, credit_score: int) -> float:
        for threshold, discount in self.interest_discount_tiers:
            if credit_score >= threshold:
                return self.base_interest_rate - discount
        return self.base_interest_rate

    def format_amount(self, amount: float, decimals: int = 0) -> str:
        return f"{self.currency_symbol}{amount:,.{decimals}f}"


DEFAULT_POLICY = EligibilityPolicy()
