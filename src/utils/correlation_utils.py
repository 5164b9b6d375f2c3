from typing import Any, Optional, Sequence

from models.models import Correlation, CorrelationFilters


def update_filters(
    filters: CorrelationFilters, name: str, value: Any
) -> CorrelationFilters:
    """Return a copy of `filters` with `name` set, or removed when empty."""
    updated = dict(filters or {})
    if value is None or value == "" or (isinstance(value, (list, tuple)) and not value):
        updated.pop(name, None)
    else:
        updated[name] = value
    return updated


def top_correlation(correlations: Sequence[Correlation]) -> Optional[Correlation]:
    if not correlations:
        return None
    return max(correlations, key=lambda c: c.correlation_score)


def average_correlation(correlations: Sequence[Correlation]) -> float:
    if not correlations:
        return 0.0
    return sum(c.correlation_score for c in correlations) / len(correlations)
