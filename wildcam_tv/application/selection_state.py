from dataclasses import replace
from typing import Any, Callable, Mapping, Optional

from wildcam_tv.domain.stack import SelectionCriteria, SelectionChanged
from wildcam_tv.application.messagebus import MessageBus
from wildcam_tv.common.logger import setup_logger

logger = setup_logger("SelectionState")


class SelectionState:
    """Current selection criteria, broadcast in full on every update.

    Values are stored as given; deciding whether they are usable is left to
    the stack pipeline.
    """

    def __init__(self, bus: MessageBus, initial: Optional[SelectionCriteria] = None):
        self.bus = bus
        self._criteria = replace(initial) if initial is not None else SelectionCriteria()

    def update(self, partial: Optional[Mapping[str, Any]] = None, **fields) -> SelectionCriteria:
        changes = {**(partial or {}), **fields}
        known = SelectionCriteria.field_names()

        for name, value in changes.items():
            if name not in known:
                logger.warning(f"Ignoring unknown selection field '{name}'")
                continue
            setattr(self._criteria, name, value)

        snapshot = self.current_value()
        logger.debug(f"Selection updated: {snapshot}")
        self.bus.handle(SelectionChanged(criteria=snapshot))
        return snapshot

    def current_value(self) -> SelectionCriteria:
        return replace(self._criteria)

    def subscribe(self, handler: Callable[[SelectionChanged], None]) -> None:
        self.bus.subscribe(SelectionChanged, handler)
