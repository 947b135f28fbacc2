"""
Shared schema building blocks.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

CENT = Decimal("0.01")

# Largest value a 64-bit signed INTEGER primary key can hold
MAX_ID = 2 ** 63 - 1


def _money_to_json(value: Decimal) -> float:
    return float(Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


# Fixed-point amount; rendered as a JSON number with two decimals
Money = Annotated[Decimal, PlainSerializer(_money_to_json, return_type=float, when_used="json")]

EntityId = Annotated[int, Field(gt=0, le=MAX_ID)]


class RequestModel(BaseModel):
    """Request bodies accept camelCase keys (and snake_case field names)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResponseModel(BaseModel):
    """Responses are read from ORM objects and serialized with camelCase keys."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )
