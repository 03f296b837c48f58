"""Bootcamp service - ownership rules and store access for the bootcamps resource."""
from datetime import datetime, timezone
from typing import Any, Optional

from beanie import PydanticObjectId, UpdateResponse
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from ..auth.auth import Caller
from ..logging import get_logger
from ..models.documents import Bootcamp
from ..models.schemas import BootcampCreate, BootcampUpdate, BootcampStats

logger = get_logger("devcamper.bootcamps")

# Flag fields reported by get_bootcamp_stats: (report key, stored field)
STAT_GROUPS = (
    ("jobAssistance", "job_assistance"),
    ("jobGuarantee", "job_guarantee"),
    ("housing", "housing"),
)


class BootcampError(Exception):
    """Base error for bootcamp operations."""

    def __init__(self, message: str, status_code: int = 500, code: str = "BOOTCAMP_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class BootcampNotFoundError(BootcampError):
    def __init__(self, bootcamp_id: Any):
        super().__init__(
            f"Bootcamp not found with id of {bootcamp_id}",
            status_code=404,
            code="BOOTCAMP_NOT_FOUND",
        )


class DuplicateBootcampError(BootcampError):
    """Raised when a non-admin already owns a bootcamp."""

    def __init__(self, user_id: str):
        super().__init__(
            f"The user with ID {user_id} has already published a bootcamp",
            status_code=400,
            code="BOOTCAMP_ALREADY_PUBLISHED",
        )


class BootcampOwnershipError(BootcampError):
    """Raised when the caller neither owns the bootcamp nor is an admin.

    Reported as 401 to keep the established client contract.
    """

    def __init__(self, user_id: str, action: str):
        super().__init__(
            f"User {user_id} is not authorized to {action} this bootcamp",
            status_code=401,
            code="NOT_BOOTCAMP_OWNER",
        )


def parse_bootcamp_id(bootcamp_id: str) -> Optional[PydanticObjectId]:
    """Parse a path id; malformed ids are treated like absent ones."""
    if not ObjectId.is_valid(bootcamp_id):
        return None
    return PydanticObjectId(bootcamp_id)


async def find_bootcamp(bootcamp_id: str) -> Optional[Bootcamp]:
    object_id = parse_bootcamp_id(bootcamp_id)
    if object_id is None:
        return None
    return await Bootcamp.get(object_id)


async def find_owned_bootcamp(user_id: str) -> Optional[Bootcamp]:
    """Any bootcamp owned by ``user_id``."""
    return await Bootcamp.find_one({"user": user_id})


def check_ownership(bootcamp: Bootcamp, caller: Caller, action: str) -> None:
    if bootcamp.user != caller.id and not caller.is_admin:
        logger.warning(
            "bootcamp_ownership_rejected",
            bootcamp_id=str(bootcamp.id),
            owner=bootcamp.user,
            caller_id=caller.id,
            action=action,
        )
        raise BootcampOwnershipError(caller.id, action)


async def get_bootcamp(bootcamp_id: str) -> Bootcamp:
    """Get one bootcamp by id."""
    bootcamp = await find_bootcamp(bootcamp_id)
    if not bootcamp:
        raise BootcampNotFoundError(bootcamp_id)
    return bootcamp


async def create_bootcamp(data: BootcampCreate, caller: Caller) -> Bootcamp:
    """
    Create a bootcamp owned by the caller.

    Non-admins may own at most one bootcamp. The lookup gives the usual error
    for the common case; the sparse unique index on ``publisher_slot`` rejects
    a concurrent second insert with the same error.
    """
    fields = data.model_dump(exclude={"user"}, exclude_none=True, mode="json")

    existing = await find_owned_bootcamp(caller.id)
    if existing and not caller.is_admin:
        logger.warning(
            "bootcamp_already_published",
            caller_id=caller.id,
            existing_id=str(existing.id),
        )
        raise DuplicateBootcampError(caller.id)

    bootcamp = Bootcamp(
        **fields,
        user=caller.id,
        publisher_slot=None if caller.is_admin else caller.id,
    )
    try:
        await bootcamp.insert()
    except DuplicateKeyError:
        logger.warning("bootcamp_already_published", caller_id=caller.id, race=True)
        raise DuplicateBootcampError(caller.id)

    logger.info(
        "bootcamp_created",
        bootcamp_id=str(bootcamp.id),
        owner=caller.id,
        role=caller.role,
    )
    return bootcamp


async def update_bootcamp(bootcamp_id: str, data: BootcampUpdate, caller: Caller) -> Bootcamp:
    """Apply a partial update after checking ownership of the stored record."""
    bootcamp = await get_bootcamp(bootcamp_id)
    check_ownership(bootcamp, caller, "update")

    supplied = data.model_dump(exclude_unset=True, mode="json")
    changes = {k: v for k, v in supplied.items() if v is not None}
    cleared = sorted(k for k, v in supplied.items() if v is None)
    changes["updated_at"] = datetime.now(timezone.utc)

    update: dict[str, Any] = {"$set": changes}
    if cleared:
        update["$unset"] = {name: "" for name in cleared}

    # The update targets the id whose ownership was just checked
    updated = await Bootcamp.find_one({"_id": bootcamp.id}).update(
        update,
        response_type=UpdateResponse.NEW_DOCUMENT,
    )
    if updated is None:
        raise BootcampNotFoundError(bootcamp_id)

    logger.info(
        "bootcamp_updated",
        bootcamp_id=str(bootcamp.id),
        caller_id=caller.id,
        fields=sorted(k for k in changes if k != "updated_at"),
        cleared=cleared,
    )
    return updated


async def delete_bootcamp(bootcamp_id: str, caller: Caller) -> None:
    """Delete a bootcamp after checking ownership."""
    bootcamp = await get_bootcamp(bootcamp_id)
    check_ownership(bootcamp, caller, "delete")

    await bootcamp.delete()

    logger.info("bootcamp_deleted", bootcamp_id=str(bootcamp.id), caller_id=caller.id)


def career_group_pipeline(label: str, field: str) -> list[dict[str, Any]]:
    """One row per (bootcamp, career), grouped by a single flag."""
    return [
        {"$unwind": "$careers"},
        {
            "$group": {
                "_id": {label: f"${field}"},
                "sum": {"$sum": 1},
                "allCareers": {"$addToSet": "$careers"},
            }
        },
    ]


async def get_bootcamp_stats() -> BootcampStats:
    """Career counts grouped by job assistance, job guarantee and housing."""
    report: dict[str, list[dict[str, Any]]] = {}
    for label, field in STAT_GROUPS:
        report[label] = await Bootcamp.aggregate(career_group_pipeline(label, field)).to_list()
    return BootcampStats.model_validate(report)
