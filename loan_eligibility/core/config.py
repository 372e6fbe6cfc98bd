import os
from typing import List
from dotenv import load_dotenv

load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


class Settings:
    PROJECT_NAME: str = "Loan Eligibility API"
    VERSION: str = "1.0.0"
    MONGODB_URI: str = os.getenv("MONGODB_URI")
    MONGODB_DB_NAME: str = os.getenv("MONGODB_DB_NAME", "loan_eligibility")
    MONGODB_TLS: bool = os.getenv("MONGODB_TLS", "false").lower() in ("1", "true", "yes")
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
    CLIENT_URL: str = os.getenv("CLIENT_URL", "http://localhost:3000")
    ADMIN_EMAILS: List[str] = [e.lower() for e in _split_csv(os.getenv("ADMIN_EMAILS", ""))]
    PASSWORD_MIN_LENGTH: int = int(os.getenv("PASSWORD_MIN_LENGTH", "6"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def allowed_origins(self) -> List[str]:
        origins = _split_csv(self.CLIENT_URL)
        # Local development front-ends
        if not origins or any("localhost" in origin for origin in origins):
            origins = sorted(set(origins + ["http://localhost:3000", "http://localhost:5173"]))
        return origins

    def is_admin(self, email: str) -> bool:
        return bool(email) and email.lower() in self.ADMIN_EMAILS


settings = Settings()
