from __future__ import annotations
from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional, Union, List

from pydantic import BaseModel, ConfigDict, Field

from wildcam_tv.common.datetime_utils import Timestamp


class Phase(str, Enum):
    DAY = "day"
    NIGHT = "night"


@dataclass
class SelectionCriteria:
    deployment: Optional[int] = None
    period_start: Optional[Timestamp] = None
    period_end: Optional[Timestamp] = None
    interval: Union[int, float] = 1       # seconds between frames
    phase: Optional[Union[Phase, str]] = None
    frame_rate: Union[int, float] = 1     # frames per second

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}


class Period(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Optional[str] = None
    end: Optional[str] = None


class StackQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    deployment_id: Optional[int] = None
    period: Period = Field(default_factory=Period)
    interval: Union[int, float] = 1
    phase: Optional[Phase] = None


class StackImage(BaseModel):
    """One entry of a stack. Fields are whatever the backend sends."""
    model_config = ConfigDict(extra="allow", frozen=True)


Stack = List[StackImage]
