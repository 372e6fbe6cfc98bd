import logging
from typing import Optional, Dict, Any, List
from datetime import datetime

from loan_eligibility.database.models.audit_log_model import AuditLog

logger = logging.getLogger(__name__)

AUDIT_FILTER_FIELDS = ("action", "actor", "acted", "status")


class AuditService:
    """Writes and reads the audit trail stored in MongoDB through Beanie."""

    async def create_audit(self, *, action: str, actor: Optional[str] = None, acted: Optional[str] = None, status: str = "successful", timestamp: Optional[datetime] = None) -> AuditLog:
        audit = AuditLog(
            action=action,
            actor=actor,
            acted=acted,
            status=status,
            timestamp=timestamp or datetime.now(),
        )
        await audit.insert()
        return audit

    # Records an audit entry without letting a logging failure break the caller
    async def record(self, action: str, actor: Optional[str] = None, acted: Optional[str] = None, status: str = "successful") -> None:
        try:
            await self.create_audit(action=action, actor=actor, acted=acted, status=status)
        except Exception:
            logger.exception("Failed to write %s audit log", action)

    async def get_audits(self, skip: int = 0, limit: int = 50, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        filters = filters or {}
        for field in AUDIT_FILTER_FIELDS:
            if filters.get(field):
                query[field] = filters[field]

        ts_query = {}
        if filters.get("start_date"):
            ts_query["$gte"] = filters["start_date"]
        if filters.get("end_date"):
            ts_query["$lte"] = filters["end_date"]
        if ts_query:
            query["timestamp"] = ts_query

        total = await AuditLog.find(query).count()
        docs = await AuditLog.find(query).sort("-timestamp").skip(skip).limit(limit).to_list()

        results: List[Dict[str, Any]] = [
            {
                "id": str(d.id),
                "action": d.action,
                "actor": d.actor,
                "acted": d.acted,
                "timestamp": d.timestamp.isoformat() if d.timestamp else None,
                "status": d.status,
            }
            for d in docs
        ]
        return {"data": results, "total": total, "skip": skip, "limit": limit}


audit_service = AuditService()
