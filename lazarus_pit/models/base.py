"""Base pydantic model with common functionality."""

from datetime import UTC, datetime
from typing import Annotated, Any, Self

from pydantic import AfterValidator, BaseModel, ConfigDict, ValidationError

from ..exceptions import EntryValidationError


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to be UTC already.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# Serialized as ISO 8601 with an explicit offset and microsecond resolution.
Timestamp = Annotated[datetime, AfterValidator(_as_utc)]


class PitModel(BaseModel):
    """Base class for all pit records."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        use_enum_values=False,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model instance to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Any) -> Self:
        """Create model instance from a dictionary.

        Raises:
            EntryValidationError: If the data does not match the schema
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise EntryValidationError(
                f"Invalid {cls.__name__}: {e.error_count()} validation error(s)",
                validation_errors=e.errors(include_url=False),
            ) from e
