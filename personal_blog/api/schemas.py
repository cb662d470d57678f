from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON uses camelCase ("visibleName"); Python code uses snake_case.

    Inputs accept either spelling.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
