"""Base schemas shared by the API modules"""

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel
from typing import Annotated
from decimal import Decimal

from earnings_api.utils.helpers import format_amount

# Amounts are always rendered with two fraction digits, e.g. "300.00"
Money = Annotated[Decimal, PlainSerializer(format_amount, return_type=str, when_used="always")]

class BaseSchema(BaseModel):
    """Row objects: snake_case, built from ORM instances"""

    model_config = ConfigDict(from_attributes=True)

class CamelSchema(BaseModel):
    """Request bodies and response envelopes: camelCase on the wire"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

class SuccessResponse(CamelSchema):
    success: bool = True

class MessageResponse(SuccessResponse):
    message: str
