import logging
from typing import Optional, List, Dict, Any, Tuple
from uuid import UUID
from datetime import datetime

from loan_eligibility.database.models import User, LoanApplication
from loan_eligibility.schemas.eligibility_schema import ApplicationRequest, EligibilityVerdict
from loan_eligibility.schemas.loan_schema import ApplicationStatusEnum, ApplicationStats
from loan_eligibility.services.eligibility_service import EligibilityService, eligibility_service
from loan_eligibility.utils.loan_application_utils import convert_profile, convert_verdict

logger = logging.getLogger(__name__)


def _count_status(status: ApplicationStatusEnum) -> Dict[str, Any]:
    return {"$sum": {"$cond": [{"$eq": ["$status", status.value]}, 1, 0]}}


STATS_PIPELINE = [
    {
        "$group": {
            "_id": None,
            "total_applications": {"$sum": 1},
            "approved_applications": _count_status(ApplicationStatusEnum.approved),
            "pending_applications": _count_status(ApplicationStatusEnum.pending),
            "rejected_applications": _count_status(ApplicationStatusEnum.rejected),
            "total_requested_amount": {"$sum": "$profile.requested_amount"},
            "total_approved_amount": {
                "$sum": {
                    "$cond": [
                        {"$gt": ["$verdict.approved_amount", 0]},
                        "$verdict.approved_amount",
                        0,
                    ]
                }
            },
        }
    }
]


class LoanApplicationService:

    def __init__(self, eligibility_service: EligibilityService):
        self.eligibility_service = eligibility_service
        logger.info("LoanApplicationService initialized")

    # Evaluates the applicant and stores the application with the server-side verdict
    async def evaluate_and_save(self, request_data: ApplicationRequest) -> Tuple[LoanApplication, EligibilityVerdict]:
        verdict = self.eligibility_service.evaluate(request_data.to_profile())
        application = await self.save_application(request_data, verdict)
        return application, verdict

    # Stores an application with status PENDING, keyed to the user owning the email
    async def save_application(self, request_data: ApplicationRequest, verdict: EligibilityVerdict) -> LoanApplication:
        logger.info("Saving loan application for %s", request_data.email)

        user = await self._find_or_create_user(request_data.email, request_data.name, request_data.phone)

        now = datetime.now()
        application = LoanApplication(
            user_id=str(user.id) if user.id else None,
            name=request_data.name,
            email=request_data.email,
            phone=request_data.phone,
            loan_purpose=request_data.loan_purpose,
            profile=convert_profile(request_data.to_profile()),
            verdict=convert_verdict(verdict),
            status=ApplicationStatusEnum.pending.value,
            created_at=now,
            updated_at=now,
        )
        await application.insert()

        logger.info("Loan application saved with ID: %s", application.application_id)
        return application

    async def get_applications_by_email(self, email: str) -> List[LoanApplication]:
        return await LoanApplication.find(LoanApplication.email == email).sort("-created_at").to_list()

    async def get_applications_by_user_id(self, user_id: str) -> List[LoanApplication]:
        return await LoanApplication.find(LoanApplication.user_id == user_id).sort("-created_at").to_list()

    async def get_all_applications(self, status: Optional[ApplicationStatusEnum] = None) -> List[LoanApplication]:
        query = {"status": status.value} if status else {}
        return await LoanApplication.find(query).sort("-created_at").to_list()

    async def get_application(self, application_id: UUID) -> Optional[LoanApplication]:
        return await LoanApplication.find_one(LoanApplication.application_id == application_id)

    # Returns the updated application, or None when no application has that id
    async def update_application_status(self, application_id: UUID, status: ApplicationStatusEnum) -> Optional[LoanApplication]:
        application = await self.get_application(application_id)
        if not application:
            logger.warning("Status update for unknown application %s", application_id)
            return None

        application.status = status.value
        application.updated_at = datetime.now()
        await application.save()
        logger.info("Application %s moved to %s", application_id, status.value)
        return application

    async def delete_application(self, application_id: UUID) -> bool:
        application = await self.get_application(application_id)
        if not application:
            return False
        await application.delete()
        logger.info("Application %s deleted", application_id)
        return True

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await User.find_one(User.email == email)

    async def get_all_users(self) -> List[User]:
        return await User.find_all().sort("-created_at").to_list()

    async def get_application_stats(self) -> ApplicationStats:
        results = await LoanApplication.aggregate(STATS_PIPELINE).to_list()
        if not results:
            return ApplicationStats()

        row = {k: v for k, v in results[0].items() if k != "_id"}
        return ApplicationStats(**row)

    # Updates name and phone of an existing user or creates a passwordless one
    async def _find_or_create_user(self, email: str, name: str, phone: str) -> User:
        now = datetime.now()
        user = await User.find_one(User.email == email)
        if user:
            user.name = name
            user.phone = phone
            user.updated_at = now
            await user.save()
            return user

        user = User(email=email, name=name, phone=phone, created_at=now, updated_at=now)
        await user.insert()
        logger.info("Created user %s for new applicant", user.id)
        return user


loan_application_service = LoanApplicationService(eligibility_service)
