"""Beanie document models."""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from beanie import Document
from pydantic import Field
from pymongo import ASCENDING, DESCENDING, IndexModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Career(str, Enum):
    """Career tracks a bootcamp can prepare students for."""
    WEB_DEVELOPMENT = "Web Development"
    MOBILE_DEVELOPMENT = "Mobile Development"
    UI_UX = "UI/UX"
    DATA_SCIENCE = "Data Science"
    BUSINESS = "Business"
    OTHER = "Other"


class Bootcamp(Document):
    """Bootcamp - a training program published by one owning account."""

    name: str = Field(..., max_length=50)
    description: str = Field(..., max_length=500)
    website: Optional[str] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[str] = None
    address: Optional[str] = None
    careers: list[Career] = Field(default_factory=list)
    average_rating: Optional[float] = Field(default=None, ge=1, le=10)
    average_cost: Optional[float] = Field(default=None, ge=0)
    photo: str = "no-photo.jpg"
    housing: bool = False
    job_assistance: bool = False
    job_guarantee: bool = False
    accept_gi: bool = False
    extra: dict[str, Any] = Field(default_factory=dict)

    # Owner account id, always the authenticated creator
    user: str

    # Owner id for bootcamps created by non-admins; absent for admin-created
    # ones. The sparse unique index below allows one per non-admin owner.
    publisher_slot: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "bootcamps"
        keep_nulls = False
        use_state_management = True
        indexes = [
            IndexModel([("user", ASCENDING)], name="user_1"),
            IndexModel(
                [("publisher_slot", ASCENDING)],
                name="publisher_slot_unique",
                unique=True,
                sparse=True,
            ),
            IndexModel([("created_at", DESCENDING)], name="created_at_-1"),
        ]


def get_document_models() -> list[type[Document]]:
    """Document models registered with Beanie on startup."""
    return [Bootcamp]
