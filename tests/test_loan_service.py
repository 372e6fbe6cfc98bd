from uuid import UUID

import pytest

from loan_eligibility.database.models import User
from loan_eligibility.database.models.loan_application_model import LoanApplication
from loan_eligibility.schemas.eligibility_schema import ApplicationRequest
from loan_eligibility.services.eligibility_service import EligibilityService
from loan_eligibility.services.loan_service import STATS_PIPELINE, LoanApplicationService


class FakeAgg:
    def __init__(self, result):
        self._result = result

    async def to_list(self):
        return self._result


@pytest.fixture
def service():
    return LoanApplicationService(EligibilityService())


@pytest.mark.asyncio
async def test_application_stats_from_aggregation(service, monkeypatch):
    row = {
        "_id": None,
        "total_applications": 5,
        "approved_applications": 2,
        "pending_applications": 2,
        "rejected_applications": 1,
        "total_requested_amount": 4500000.0,
        "total_approved_amount": 2100000.0,
    }
    pipelines = []

    def fake_aggregate(pipeline):
        pipelines.append(pipeline)
        return FakeAgg([row])

    monkeypatch.setattr(LoanApplication, "aggregate", staticmethod(fake_aggregate))

    stats = await service.get_application_stats()

    assert pipelines == [STATS_PIPELINE]
    assert stats.total_applications == 5
    assert stats.approved_applications == 2
    assert stats.rejected_applications == 1
    assert stats.total_approved_amount == 2100000.0


@pytest.mark.asyncio
async def test_application_stats_empty_collection(service, monkeypatch):
    monkeypatch.setattr(LoanApplication, "aggregate", staticmethod(lambda pipeline: FakeAgg([])))

    stats = await service.get_application_stats()

    assert stats.total_applications == 0
    assert stats.total_requested_amount == 0.0


@pytest.mark.asyncio
async def test_evaluate_and_save_stores_server_verdict(service, monkeypatch):
    saved = {}

    async def fake_save(request_data, verdict):
        saved["verdict"] = verdict
        return "stored-application"

    monkeypatch.setattr(service, "save_application", fake_save)
    request = ApplicationRequest(
        name="Jane Doe",
        age=30,
        annual_income=600000,
        credit_score=780,
        monthly_debt_payments=5000,
        requested_amount=2000000,
        loan_tenure=60,
        employment_type="SALARIED",
        email="jane@example.com",
        phone="9876543210",
    )

    application, verdict = await service.evaluate_and_save(request)

    assert application == "stored-application"
    assert verdict is saved["verdict"]
    assert verdict.eligible is True
    assert verdict.max_loan_amount == 2160000


def test_stats_pipeline_only_sums_positive_approved_amounts():
    group = STATS_PIPELINE[0]["$group"]

    assert group["total_approved_amount"]["$sum"]["$cond"][0] == {"$gt": ["$verdict.approved_amount", 0]}
    assert group["approved_applications"]["$sum"]["$cond"][0] == {"$eq": ["$status", "APPROVED"]}


def make_request(**overrides):
    data = dict(
        name="Jane Doe",
        age=30,
        annual_income=600000,
        credit_score=780,
        monthly_debt_payments=5000,
        requested_amount=2000000,
        loan_tenure=60,
        employment_type="SALARIED",
        email="jane@example.com",
        phone="9876543210",
        loan_purpose="Home renovation",
    )
    data.update(overrides)
    return ApplicationRequest(**data)


@pytest.mark.asyncio
async def test_save_application_updates_existing_user(service, detached_documents):
    existing = User(
        id="65a1b2c3d4e5f60718293a4b",
        email="jane@example.com",
        name="J. Doe",
        phone="0000000000",
        hashed_password="$2b$12$existing-hash",
    )
    detached_documents.existing_user = existing
    request = make_request()

    application = await service.save_application(request, service.eligibility_service.evaluate(request.to_profile()))

    assert existing.name == "Jane Doe"
    assert existing.phone == "9876543210"
    assert existing.hashed_password == "$2b$12$existing-hash"
    assert detached_documents.saved == [existing]

    assert detached_documents.inserted == [application]
    assert application.user_id == "65a1b2c3d4e5f60718293a4b"
    assert application.status == "PENDING"
    assert application.loan_purpose == "Home renovation"
    assert application.profile.loan_tenure_months == 60
    assert application.verdict.approved_amount == 2000000


@pytest.mark.asyncio
async def test_save_application_creates_passwordless_user(service, detached_documents):
    request = make_request(email="new@example.com", name="New Applicant")

    application = await service.save_application(request, service.eligibility_service.evaluate(request.to_profile()))

    new_user, stored = detached_documents.inserted
    assert isinstance(new_user, User)
    assert new_user.email == "new@example.com"
    assert new_user.name == "New Applicant"
    assert new_user.hashed_password is None
    assert detached_documents.saved == []

    assert stored is application
    assert application.user_id == str(new_user.id)


def test_application_id_is_uniquely_indexed():
    (index,) = LoanApplication.Settings.indexes

    assert index.document["key"] == {"application_id": 1}
    assert index.document["unique"] is True


@pytest.mark.asyncio
async def test_new_applications_get_distinct_ids(service, detached_documents):
    request = make_request()
    verdict = service.eligibility_service.evaluate(request.to_profile())

    first = await service.save_application(request, verdict)
    second = await service.save_application(request, verdict)

    assert isinstance(first.application_id, UUID)
    assert first.application_id != second.application_id
