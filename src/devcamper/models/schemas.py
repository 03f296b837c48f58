"""Pydantic schemas for API request/response models."""
from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, model_validator
from typing import Optional, Any
from datetime import datetime

from .documents import Career


# =============================================================================
# Health & Service Models
# =============================================================================

class HealthResponse(BaseModel):
    """Standard health check response"""
    status: str
    service: str = "devcamper"
    version: str
    database: str


class ErrorResponse(BaseModel):
    """Error envelope returned for every failed request."""
    success: bool = False
    error: str


# =============================================================================
# Bootcamp Request Schemas
# =============================================================================

# Optional fields an update may remove by sending null
CLEARABLE_FIELDS = {"website", "phone", "email", "address", "average_rating", "average_cost"}


class BootcampCreate(BaseModel):
    """Body for creating a bootcamp.

    ``user`` is accepted for compatibility with older clients but the owner is
    always taken from the authenticated caller.
    """
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1, max_length=500)
    website: Optional[HttpUrl] = None
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    careers: list[Career] = Field(default_factory=list)
    average_rating: Optional[float] = Field(None, ge=1, le=10)
    average_cost: Optional[float] = Field(None, ge=0)
    photo: Optional[str] = None
    housing: bool = False
    job_assistance: bool = False
    job_guarantee: bool = False
    accept_gi: bool = False
    extra: dict[str, Any] = Field(default_factory=dict)
    user: Optional[str] = None


class BootcampUpdate(BaseModel):
    """Partial update; only supplied fields are changed.

    A null value removes one of the CLEARABLE_FIELDS from the bootcamp.
    """
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    website: Optional[HttpUrl] = None
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    careers: Optional[list[Career]] = None
    average_rating: Optional[float] = Field(None, ge=1, le=10)
    average_cost: Optional[float] = Field(None, ge=0)
    photo: Optional[str] = None
    housing: Optional[bool] = None
    job_assistance: Optional[bool] = None
    job_guarantee: Optional[bool] = None
    accept_gi: Optional[bool] = None
    extra: Optional[dict[str, Any]] = None

    @model_validator(mode="after")
    def check_nulls(self) -> "BootcampUpdate":
        """Only optional fields may be cleared with null."""
        for name in sorted(self.model_fields_set):
            if getattr(self, name) is None and name not in CLEARABLE_FIELDS:
                raise ValueError(f"{name} cannot be null")
        return self


# =============================================================================
# Bootcamp Response Schemas
# =============================================================================

class BootcampResponse(BaseModel):
    """Bootcamp as returned to callers."""
    id: str
    name: str
    description: str
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    careers: list[Career] = []
    average_rating: Optional[float] = None
    average_cost: Optional[float] = None
    photo: str
    housing: bool
    job_assistance: bool
    job_guarantee: bool
    accept_gi: bool
    extra: dict[str, Any] = {}
    user: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, bootcamp) -> "BootcampResponse":
        data = bootcamp.model_dump(exclude={"id", "revision_id", "publisher_slot"})
        return cls(id=str(bootcamp.id), **data)


class BootcampEnvelope(BaseModel):
    success: bool = True
    data: BootcampResponse


class DeletedEnvelope(BaseModel):
    success: bool = True
    data: dict[str, Any] = Field(default_factory=dict)


class PageRef(BaseModel):
    page: int
    limit: int


class BootcampListEnvelope(BaseModel):
    """Filtered, sorted and paginated listing."""
    success: bool = True
    count: int
    total: int
    pagination: dict[str, PageRef] = Field(default_factory=dict)
    data: list[dict[str, Any]]


class StatBucket(BaseModel):
    """One group of a flag-by-careers aggregation."""
    model_config = ConfigDict(populate_by_name=True)

    id: dict[str, Any] = Field(..., alias="_id")
    sum: int
    all_careers: list[str] = Field(default_factory=list, alias="allCareers")


class BootcampStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_assistance: list[StatBucket] = Field(default_factory=list, alias="jobAssistance")
    job_guarantee: list[StatBucket] = Field(default_factory=list, alias="jobGuarantee")
    housing: list[StatBucket] = Field(default_factory=list)


class BootcampStatsEnvelope(BaseModel):
    success: bool = True
    data: BootcampStats
