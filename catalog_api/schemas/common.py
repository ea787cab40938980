from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """camelCase on the wire; snake_case accepted on input too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Decimal in Python, JSON number on the wire. A double keeps 15 significant
# digits, so prices must stay within MAX_PRICE to serialize exactly.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

MAX_PRICE = Decimal("9999999999999.99")


class MessageResponse(BaseModel):
    message: str
