"""Record shape written to and read back from the function's log group (Pydantic v2)."""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError


class LogEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: str
    data: Optional[Any] = None
    # Stored records come from several writers; timestamps may be ISO text or epoch millis
    timestamp: Optional[Union[str, int, float]] = None
    level: Optional[Any] = None


def parse_event_message(raw: str) -> Dict[str, Any]:
    """Parse a stored event body, falling back to ``{"message": raw}``."""
    try:
        entry = LogEntry.model_validate_json(raw)
    except ValidationError:
        return {"message": raw}
    return entry.model_dump(exclude_none=True)
