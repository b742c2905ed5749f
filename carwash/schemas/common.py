from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

# Fixed-point money rendered as a two-decimal string on the wire ("80.00").
Money = Annotated[Decimal, PlainSerializer(lambda v: f"{Decimal(v):.2f}", return_type=str, when_used="json")]


class CamelModel(BaseModel):
    """snake_case in Python, camelCase in JSON (``unitPrice``, ``taxId``...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MessageResponse(CamelModel):
    message: str
