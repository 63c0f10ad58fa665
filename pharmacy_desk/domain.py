"""
Domain models defined as Pydantic models.
These are pure data structures with validation.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


class RequestStatus(str, Enum):
    """Lifecycle status of a pharmacy request.

    The three values form an unordered set: any status may be replaced by
    any other, including itself.
    """

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class RequestType(str, Enum):
    REFILL = "refill"
    CONSULTATION = "consultation"


# Fields owned by the request lifecycle. Everything else on a record is
# business data carried through untouched.
RESERVED_REQUEST_FIELDS = frozenset(
    {
        "id",
        "type",
        "status",
        "createdAt",
        "created_at",
        "updatedAt",
        "updated_at",
        "_id",
    }
)


class PharmacyRequest(BaseModel):
    """A refill or consultation request as stored in the ``requests``
    collection.

    Business fields (phone, prescriptions, service, ...) are not modelled
    here; they are kept as extra fields and round-trip unmodified.
    """

    model_config = ConfigDict(
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    type: RequestType
    status: RequestStatus = RequestStatus.PENDING
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    updated_at: Optional[datetime] = None

    @field_validator("id")
    @classmethod
    def id_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Request id must not be blank")
        return v

    @field_validator("created_at", "updated_at")
    @classmethod
    def naive_timestamps_are_utc(
        cls, v: Optional[datetime]
    ) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def to_document(self) -> Dict[str, Any]:
        """Serialise to the JSON document shape kept in the store."""
        return self.model_dump(mode="json", by_alias=True)


class NewRequestSubmission(BaseModel):
    """Payload of a request submitted from the public site."""

    model_config = ConfigDict(extra="allow")

    type: RequestType

    def business_fields(self) -> Dict[str, Any]:
        extra = self.model_extra or {}
        return {
            key: value
            for key, value in extra.items()
            if key not in RESERVED_REQUEST_FIELDS
        }


class CollectionExport(BaseModel):
    """Full contents of one store collection, captured for a backup."""

    collection: str
    documents: List[Dict[str, Any]] = Field(default_factory=list)
    backup_date: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


class BackupOutcome(BaseModel):
    """Result of a backup attempt."""

    success: bool
    spreadsheet_id: Optional[str] = Field(default=None, validate_default=True)
    error: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("spreadsheet_id")
    @classmethod
    def spreadsheet_id_must_be_present_if_successful(
        cls, v: Optional[str], info
    ) -> Optional[str]:
        if info.data.get("success") and not v:
            raise ValueError(
                "Spreadsheet ID must be present if the backup succeeded"
            )
        return v

    @field_validator("error")
    @classmethod
    def error_must_be_present_if_failed(
        cls, v: Optional[str], info
    ) -> Optional[str]:
        if info.data.get("success") is False and not v:
            raise ValueError("Error must be present if the backup failed")
        return v


class EmailMessage(BaseModel):
    to: str
    subject: str
    html: str

    @field_validator("to", "subject", "html")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Email fields must not be blank")
        return v


class StoredUpload(BaseModel):
    """A file accepted by the upload receiver."""

    filename: str
    stored_name: str
    file_path: str
    upload_date: str
    size_bytes: int = 0
