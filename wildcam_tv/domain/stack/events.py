from __future__ import annotations

from dataclasses import dataclass
from abc import ABC

from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from wildcam_tv.domain.stack.model import SelectionCriteria

class Event(ABC):
    pass

@dataclass
class SelectionChanged(Event):
    criteria: SelectionCriteria
