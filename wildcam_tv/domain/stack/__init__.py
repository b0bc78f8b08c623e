from .model import Phase, SelectionCriteria, Period, StackQuery, StackImage, Stack
from .events import Event, SelectionChanged
from .commands import UpdateSelectionCommand
from .ports import StackDataPort, FallbackStackPort
from .errors import WildcamTvError, StackRetrievalError
from .rules import comparison_key, is_valid_for_retrieval, build_query

__all__ = [
    'Phase',
    'SelectionCriteria',
    'Period',
    'StackQuery',
    'StackImage',
    'Stack',

    'Event',
    'SelectionChanged',

    'UpdateSelectionCommand',

    'StackDataPort',
    'FallbackStackPort',

    'WildcamTvError',
    'StackRetrievalError',

    'comparison_key',
    'is_valid_for_retrieval',
    'build_query',
]
