"""Pure rules deciding when and how a selection turns into a stack query.

Nothing here holds state: the comparison key is a plain tuple over the fixed
criteria schema, so two selections are duplicates exactly when their
non-frame-rate fields compare equal, independent of assignment order.
"""
from numbers import Real
from typing import Any, Tuple

from wildcam_tv.common.datetime_utils import parse_timestamp, to_iso_string
from .model import SelectionCriteria, StackQuery, Period, Phase


def comparison_key(criteria: SelectionCriteria) -> Tuple[Any, ...]:
    """Every field except frame rate, in schema order."""
    return (
        criteria.deployment,
        criteria.period_start,
        criteria.period_end,
        criteria.interval,
        criteria.phase,
    )


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def is_valid_for_retrieval(criteria: SelectionCriteria) -> bool:
    if not isinstance(criteria.deployment, int) or isinstance(criteria.deployment, bool):
        return False

    if not _is_number(criteria.interval) or criteria.interval <= 0:
        return False

    if criteria.phase is not None and criteria.phase not in tuple(p.value for p in Phase):
        return False

    start = end = None
    if criteria.period_start is not None:
        start = parse_timestamp(criteria.period_start)
        if start is None:
            return False
    if criteria.period_end is not None:
        end = parse_timestamp(criteria.period_end)
        if end is None:
            return False
    if start is not None and end is not None and start > end:
        return False

    return True


def build_query(criteria: SelectionCriteria) -> StackQuery:
    return StackQuery(
        deployment_id=criteria.deployment,
        period=Period(
            start=to_iso_string(criteria.period_start),
            end=to_iso_string(criteria.period_end),
        ),
        interval=criteria.interval,
        phase=criteria.phase,
    )
