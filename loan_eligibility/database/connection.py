import re
import logging

import motor.motor_asyncio
from beanie import init_beanie

from loan_eligibility.core.config import settings
from loan_eligibility.database.models import User, LoanApplication, AuditLog

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Global client and database instances
client = None
database = None


# Never log full connection URIs, they may contain credentials
def mask_mongo_uri(uri: str) -> str:
    m = re.match(r'(?P<prefix>mongodb(?:\+srv)?://)(?:(?P<creds>[^@]+)@)?(?P<rest>.+)', uri or "")
    if not m:
        return "mongodb://<redacted>"
    host_part = m.group('rest').split('/')[0]
    if m.group('creds'):
        return f"{m.group('prefix')}***@{host_part}"
    return f"{m.group('prefix')}{host_part}"


async def init_db():
    global client, database

    mongodb_uri = settings.MONGODB_URI
    mongodb_db_name = settings.MONGODB_DB_NAME

    if not mongodb_uri:
        logger.error("MONGODB_URI is not set in environment variables")
        raise RuntimeError("Configuration error: MONGODB_URI is not set in environment variables")
    if not mongodb_db_name:
        logger.error("MONGODB_DB_NAME is not set in environment variables")
        raise RuntimeError("Configuration error: MONGODB_DB_NAME is not set in environment variables")

    logger.info("Attempting to connect to MongoDB at: %s", mask_mongo_uri(mongodb_uri))
    logger.info("Database name: %s", mongodb_db_name)

    try:
        client = motor.motor_asyncio.AsyncIOMotorClient(
            mongodb_uri,
            tls=settings.MONGODB_TLS,
            serverSelectionTimeoutMS=30000,
            connectTimeoutMS=30000,
            socketTimeoutMS=30000,
            retryWrites=True,
        )

        await client.admin.command('ping')
        logger.info("Successfully connected to MongoDB!")

        database = client[mongodb_db_name]

        await init_beanie(database=database, document_models=[User, LoanApplication, AuditLog])
        logger.info("Beanie initialized successfully!")

        return database
    except Exception as e:
        logger.error("Database initialization failed: %s (%s)", e, type(e).__name__)
        raise


def close_db():
    global client, database
    if client is not None:
        client.close()
        logger.info("MongoDB connection closed")
    client = None
    database = None


def get_database():
    """Get the initialized database instance"""
    if database is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return database
