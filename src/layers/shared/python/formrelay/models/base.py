"""Base Pydantic models with DynamoDB serialization."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, ClassVar, Self

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field, field_validator
from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ULID())


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


class BaseModel(PydanticBaseModel):
    """Base model with ID generation and DynamoDB serialization.

    All persisted entities inherit from this class. Identity (``id`` and the
    table keys) is assigned here and by the repositories, never by callers.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        validate_assignment=True,
    )

    _id_prefix: ClassVar[str] = ""

    id: str = Field(default="")
    version: int = Field(default=1, description="Optimistic locking version")

    def model_post_init(self, __context: Any) -> None:
        if not self.id:
            prefix = f"{self._id_prefix}-" if self._id_prefix else ""
            self.id = f"{prefix}{generate_ulid()}"

    def to_dynamodb(self) -> dict[str, Any]:
        """Serialize model to DynamoDB item format."""
        data = self.model_dump(mode="json", by_alias=True)
        return self._serialize_value(data)

    @classmethod
    def _serialize_value(cls, value: Any) -> Any:
        """Recursively serialize values for DynamoDB.

        Drops None values and converts floats to Decimal (DynamoDB requirement).
        """
        if isinstance(value, dict):
            return {k: cls._serialize_value(v) for k, v in value.items() if v is not None}
        if isinstance(value, list):
            return [cls._serialize_value(item) for item in value]
        if isinstance(value, float):
            return Decimal(str(value))
        return value

    @classmethod
    def from_dynamodb(cls, item: dict[str, Any]) -> Self:
        """Deserialize DynamoDB item to model instance.

        Key attributes (PK, SK, GSI*) are ignored; datetimes are parsed by
        the field types.
        """
        data = {k: cls._deserialize_value(v) for k, v in item.items() if not cls._is_key(k)}
        return cls.model_validate(data)

    @staticmethod
    def _is_key(name: str) -> bool:
        return name in ("PK", "SK") or name.startswith("GSI")

    @classmethod
    def _deserialize_value(cls, value: Any) -> Any:
        """Convert Decimals back to int or float."""
        if isinstance(value, dict):
            return {k: cls._deserialize_value(v) for k, v in value.items()}
        if isinstance(value, list):
            return [cls._deserialize_value(item) for item in value]
        if isinstance(value, Decimal):
            if value % 1 == 0:
                return int(value)
            return float(value)
        return value

    def get_pk(self) -> str:
        """Get the partition key for this entity."""
        raise NotImplementedError("Subclasses must implement get_pk()")

    def get_sk(self) -> str:
        """Get the sort key for this entity."""
        raise NotImplementedError("Subclasses must implement get_sk()")

    def get_keys(self) -> dict[str, str]:
        """Get both PK and SK as a dictionary."""
        return {"PK": self.get_pk(), "SK": self.get_sk()}

    def get_gsi1_keys(self) -> dict[str, str] | None:
        """Get GSI1 keys used for listing, if any."""
        return None

    def increment_version(self) -> None:
        """Increment the version for optimistic locking."""
        self.version += 1


class Submission(BaseModel):
    """Common fields of a persisted form submission."""

    email: str = Field(..., description="Submitter email, partition key")
    submitted_at: datetime = Field(default_factory=utc_now)
    status: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase for consistent lookups."""
        return v.strip().lower()

    @field_validator("submitted_at")
    @classmethod
    def normalize_submitted_at(cls, v: datetime) -> datetime:
        """Store timestamps in UTC; naive values are taken as UTC.

        Listing keys embed the ISO string, so a single offset keeps string
        order equal to time order.
        """
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)
