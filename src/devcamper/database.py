"""MongoDB connection and Beanie ODM initialization."""
from typing import Optional

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from .config import get_settings
from .models.documents import get_document_models

settings = get_settings()

# Global MongoDB client instance
_client: Optional[AsyncIOMotorClient] = None


async def init_db() -> None:
    """Connect to MongoDB and register document models with Beanie."""
    global _client

    _client = AsyncIOMotorClient(settings.mongodb_url)
    await init_beanie(
        database=_client[settings.mongodb_database],
        document_models=get_document_models(),
    )


async def close_db() -> None:
    """Close the MongoDB connection."""
    global _client
    if _client is not None:
        _client.close()
        _client = None


def get_client() -> AsyncIOMotorClient:
    """Get the MongoDB client instance."""
    if _client is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _client


async def check_db_connection() -> bool:
    """Check if the MongoDB connection is healthy."""
    if _client is None:
        return False

    try:
        await _client.admin.command("ping")
        return True
    except PyMongoError:
        return False


def get_db_info() -> dict:
    """Connection information safe for logging."""
    return {
        "status": "connected" if _client is not None else "disconnected",
        "url": sanitize_mongodb_url(settings.mongodb_url),
        "database": settings.mongodb_database,
    }


def sanitize_mongodb_url(url: str) -> str:
    """Hide the password in a MongoDB URL."""
    if "://" not in url:
        return url

    scheme, rest = url.split("://", 1)
    if "@" not in rest:
        return url

    credentials, host = rest.rsplit("@", 1)
    if ":" not in credentials:
        return url
    username = credentials.split(":", 1)[0]
    return f"{scheme}://{username}:***@{host}"
