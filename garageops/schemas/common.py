"""
Shared schema building blocks.
"""
from decimal import Decimal
from typing import Annotated, Any, ClassVar, Optional, Union

from pydantic import BaseModel, ConfigDict, PlainSerializer, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema that reads snake_case attributes and speaks camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PatchModel(CamelModel):
    """
    Base schema for partial updates.

    Only fields present in the request end up in ``changes()``; a field that
    was not sent keeps its stored value. Fields listed in ``not_nullable``
    may be omitted but not sent as an explicit null.
    """

    not_nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        for name in self.model_fields_set & self.not_nullable:
            if getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class FieldError(BaseModel):
    """A single field-level validation failure."""
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str
    details: Optional[Union[str, list[FieldError]]] = None


class SuccessResponse(CamelModel):
    """Envelope for operations that return no resource."""
    success: bool = True
    message: Optional[str] = None


# Currency amounts are Decimal in Python and plain JSON numbers on the wire.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
