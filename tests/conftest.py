import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-jwt-signing")
os.environ.setdefault("ADMIN_EMAILS", "admin@example.com")
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")

from datetime import datetime
from types import SimpleNamespace
from typing import Optional
from uuid import uuid4

import pytest
from beanie import PydanticObjectId
from beanie.odm.fields import ExpressionField
from fastapi.testclient import TestClient

from loan_eligibility.api.loan_routes import get_loan_application_service
from loan_eligibility.core.auth_dependencies import get_current_user
from loan_eligibility.database.models import LoanApplication, User
from loan_eligibility.database.models.loan_application_model import (
    ApplicantProfile as DbApplicantProfile,
    EligibilityVerdict as DbEligibilityVerdict,
)
from loan_eligibility.main import app
from loan_eligibility.schemas.loan_schema import ApplicationStatusEnum, ApplicationStats
from loan_eligibility.services.audit_service import audit_service
from loan_eligibility.services.eligibility_service import eligibility_service
from loan_eligibility.utils.loan_application_utils import convert_profile, convert_verdict

REGULAR_USER = {
    "id": "user-1",
    "name": "Jane Doe",
    "email": "jane@example.com",
    "phone": "9876543210",
    "created_at": None,
}

ADMIN_USER = {
    "id": "admin-1",
    "name": "Admin",
    "email": "admin@example.com",
    "phone": None,
    "created_at": None,
}

SCENARIO_A_BODY = {
    "name": "Jane Doe",
    "age": 30,
    "annualIncome": 600000,
    "creditScore": 780,
    "monthlyDebtPayments": 5000,
    "requestedAmount": 2000000,
    "loanTenure": 60,
    "employmentType": "SALARIED",
}


def make_application(
    email: str = "jane@example.com",
    status: str = ApplicationStatusEnum.pending.value,
    user_id: Optional[str] = "user-1",
    requested_amount: float = 2000000,
    approved_amount: float = 2000000,
    eligible: bool = True,
):
    now = datetime(2025, 1, 15, 10, 30)
    return SimpleNamespace(
        id="65a1b2c3d4e5f60718293a4b",
        application_id=uuid4(),
        user_id=user_id,
        name="Jane Doe",
        email=email,
        phone="9876543210",
        loan_purpose="Home renovation",
        profile=DbApplicantProfile(
            age=30,
            annual_income=600000,
            credit_score=780,
            monthly_debt_payments=5000,
            requested_amount=requested_amount,
            loan_tenure_months=60,
            employment_type="SALARIED",
        ),
        verdict=DbEligibilityVerdict(
            eligible=eligible,
            reason="Congratulations! You are eligible for a loan" if eligible else "Credit score must be at least 650",
            max_loan_amount=2160000 if eligible else 0,
            approved_amount=approved_amount,
            interest_rate=7.5 if eligible else 0,
            monthly_emi=40075.9 if eligible else 0,
        ),
        status=status,
        created_at=now,
        updated_at=now,
    )


def make_user(email: str = "jane@example.com"):
    now = datetime(2025, 1, 15, 10, 30)
    return SimpleNamespace(
        id="user-1",
        name="Jane Doe",
        email=email,
        phone="9876543210",
        hashed_password="$2b$12$not-a-real-hash",
        created_at=now,
        updated_at=now,
    )


class FakeLoanApplicationService:
    """In-memory stand-in for LoanApplicationService."""

    def __init__(self):
        self.applications = []
        self.users = {}

    async def save_application(self, request_data, verdict):
        application = make_application(email=request_data.email)
        application.name = request_data.name
        application.phone = request_data.phone
        application.loan_purpose = request_data.loan_purpose
        application.profile = convert_profile(request_data.to_profile())
        application.verdict = convert_verdict(verdict)
        self.applications.append(application)
        self.users.setdefault(request_data.email, make_user(request_data.email))
        return application

    async def evaluate_and_save(self, request_data):
        verdict = eligibility_service.evaluate(request_data.to_profile())
        application = await self.save_application(request_data, verdict)
        return application, verdict

    async def get_applications_by_email(self, email):
        return [a for a in self.applications if a.email == email]

    async def get_applications_by_user_id(self, user_id):
        return [a for a in self.applications if a.user_id == user_id]

    async def get_all_applications(self, status=None):
        if status is None:
            return list(self.applications)
        return [a for a in self.applications if a.status == status.value]

    async def get_application(self, application_id):
        return next((a for a in self.applications if a.application_id == application_id), None)

    async def update_application_status(self, application_id, status):
        application = await self.get_application(application_id)
        if application:
            application.status = status.value
        return application

    async def delete_application(self, application_id):
        application = await self.get_application(application_id)
        if not application:
            return False
        self.applications.remove(application)
        return True

    async def get_user_by_email(self, email):
        return self.users.get(email)

    async def get_all_users(self):
        return list(self.users.values())

    async def get_application_stats(self):
        def count(status):
            return sum(1 for a in self.applications if a.status == status.value)

        return ApplicationStats(
            total_applications=len(self.applications),
            approved_applications=count(ApplicationStatusEnum.approved),
            pending_applications=count(ApplicationStatusEnum.pending),
            rejected_applications=count(ApplicationStatusEnum.rejected),
            total_requested_amount=sum(a.profile.requested_amount for a in self.applications),
            total_approved_amount=sum(a.verdict.approved_amount for a in self.applications if a.verdict.approved_amount > 0),
        )


@pytest.fixture(autouse=True)
def audit_events(monkeypatch):
    events = []

    async def fake_record(action, actor=None, acted=None, status="successful"):
        events.append({"action": action, "actor": actor, "acted": acted, "status": status})

    monkeypatch.setattr(audit_service, "record", fake_record)
    return events


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def fake_loan_service():
    service = FakeLoanApplicationService()
    app.dependency_overrides[get_loan_application_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_loan_application_service, None)


@pytest.fixture
def as_user():
    app.dependency_overrides[get_current_user] = lambda: dict(REGULAR_USER)
    yield REGULAR_USER
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture
def as_admin():
    app.dependency_overrides[get_current_user] = lambda: dict(ADMIN_USER)
    yield ADMIN_USER
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture
def scenario_a_body():
    return dict(SCENARIO_A_BODY)


@pytest.fixture
def application_body(scenario_a_body):
    return {
        **scenario_a_body,
        "email": "jane@example.com",
        "phone": "9876543210",
        "loanPurpose": "Home renovation",
    }


@pytest.fixture
def detached_documents(monkeypatch):
    """Lets Beanie documents be built, looked up and written without a database.

    ``User.find_one`` returns ``store.existing_user``; inserted and saved
    documents are collected on the store.
    """
    store = SimpleNamespace(existing_user=None, inserted=[], saved=[])

    async def fake_find_one(*args, **kwargs):
        return store.existing_user

    async def fake_insert(self, *args, **kwargs):
        if self.id is None:
            self.id = PydanticObjectId()
        store.inserted.append(self)
        return self

    async def fake_save(self, *args, **kwargs):
        store.saved.append(self)
        return self

    for model in (User, LoanApplication):
        monkeypatch.setattr(model, "get_motor_collection", classmethod(lambda cls: None))
        monkeypatch.setattr(model, "insert", fake_insert)
        monkeypatch.setattr(model, "save", fake_save)
        monkeypatch.setattr(model, "email", ExpressionField("email"), raising=False)
    monkeypatch.setattr(User, "find_one", staticmethod(fake_find_one))
    return store
