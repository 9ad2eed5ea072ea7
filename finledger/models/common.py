"""
Shared Model Building Blocks

Field types used by every request payload, the validation issue record,
and the uniform response envelope returned at the boundary.
"""

from datetime import date
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from finledger.primitives import parse_calendar_date, to_minor


def _parse_amount(value: Any) -> int:
    """Caller amounts arrive as decimals; storage wants minor units."""
    return to_minor(value)


# Amount parsed from a decimal value into integer minor units
MinorAmount = Annotated[int, BeforeValidator(_parse_amount)]

# Strict YYYY-MM-DD calendar date
CalendarDate = Annotated[date, BeforeValidator(parse_calendar_date)]


class RequestModel(BaseModel):
    """
    Base for inbound payloads.

    Accepts both snake_case and the camelCase keys the mobile client
    sends, strips whitespace, and ignores unknown keys.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class ResponseModel(BaseModel):
    """Base for outbound DTOs; dump with ``by_alias=True`` for camelCase."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_public_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class ValidationIssue(BaseModel):
    """A single validation issue found in a request."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'inconsistent')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


class ApiResponse(BaseModel):
    """
    Uniform response envelope.

    Failures carry ``success=False`` and a message, never data.
    """

    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "ApiResponse":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, message: str) -> "ApiResponse":
        return cls(success=False, message=message)

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            result["data"] = self.data
        if self.message is not None:
            result["message"] = self.message
        return result
