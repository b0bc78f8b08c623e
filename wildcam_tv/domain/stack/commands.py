from datetime import datetime
from typing import Optional, Union, Any, Dict

from pydantic import BaseModel, AliasChoices, Field

from .model import Phase


class UpdateSelectionCommand(BaseModel):
    """Partial selection update as sent by the selection UI."""

    deployment: Optional[int] = None
    period_start: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("periodStart", "period_start")
    )
    period_end: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("periodEnd", "period_end")
    )
    interval: Optional[Union[int, float]] = None
    phase: Optional[Phase] = None
    frame_rate: Optional[Union[int, float]] = Field(
        default=None, validation_alias=AliasChoices("frameRate", "framerate", "frame_rate")
    )

    def to_partial(self) -> Dict[str, Any]:
        # Only the keys present in the payload; an explicit null clears a field.
        return self.model_dump(exclude_unset=True)
