from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from tasknest.utils.dates import isoformat

# ids are uuid4 hex strings
ID_PATTERN = r"^[0-9a-f]{32}$"

IsoDatetime = Annotated[datetime, PlainSerializer(isoformat, return_type=str)]


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys while keeping snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def dump(self, **kwargs) -> dict:
        return self.model_dump(by_alias=True, mode="json", **kwargs)
