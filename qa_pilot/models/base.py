"""Base model for immutable values exchanged with upstream services."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Frozen value object; surrounding whitespace is stripped from strings."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)
