from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Timestamp(BaseModel):
    """
    Wire timestamp: whole seconds since the Unix epoch plus a nanosecond remainder (UTC)
    """
    model_config = ConfigDict(frozen=True)

    seconds: int
    nanos: int = 0
