from .user_model import User
from .loan_application_model import LoanApplication
from .audit_log_model import AuditLog

__all__ = ["User", "LoanApplication", "AuditLog"]
