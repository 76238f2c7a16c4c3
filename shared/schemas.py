from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, PlainSerializer
from pydantic.alias_generators import to_camel

# Amounts are exact Decimals internally and plain JSON numbers on the wire.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """Base schema: snake_case attributes, camelCase JSON."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
