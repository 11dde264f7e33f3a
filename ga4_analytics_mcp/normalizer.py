"""
Convert GA4 report responses into header-keyed rows.

GA4 returns dimension and metric headers once, then each row as two positional
value lists. Rows are rebuilt here by zipping each header with the value at the
same index within its own field class.
"""

from typing import Any, Dict, List, Sequence

MISSING_DIMENSION_VALUE = ''
MISSING_METRIC_VALUE = '0'


def _value_at(values: Sequence[Any], index: int, default: str) -> str:
    """Return values[index].value, or default when the slot or value is missing"""
    if values is None or index >= len(values):
        return default
    value = getattr(values[index], 'value', None)
    return value if value else default


def normalize_row(row: Any, dimension_names: List[str], metric_names: List[str]) -> Dict[str, str]:
    """Build one header-keyed row; every header yields a key"""
    row_data = {}
    if dimension_names:
        dimension_values = getattr(row, 'dimension_values', None)
        for index, name in enumerate(dimension_names):
            row_data[name] = _value_at(dimension_values, index, MISSING_DIMENSION_VALUE)
    if metric_names:
        metric_values = getattr(row, 'metric_values', None)
        for index, name in enumerate(metric_names):
            row_data[name] = _value_at(metric_values, index, MISSING_METRIC_VALUE)
    return row_data


def format_report_response(response: Any) -> Dict[str, Any]:
    """
    Normalize a RunReportResponse or RunRealtimeReportResponse.

    Returns:
        dict: {"rows": [{header: value}], "rowCount": int, "totals": [{header: value}]}

    Never raises for a well-formed response; a response with no rows gives an
    empty row list.
    """
    dimension_names = [header.name for header in (getattr(response, 'dimension_headers', None) or [])]
    metric_names = [header.name for header in (getattr(response, 'metric_headers', None) or [])]

    rows = [
        normalize_row(row, dimension_names, metric_names)
        for row in (getattr(response, 'rows', None) or [])
    ]
    totals = [
        normalize_row(row, dimension_names, metric_names)
        for row in (getattr(response, 'totals', None) or [])
    ]

    return {
        "rows": rows,
        "rowCount": getattr(response, 'row_count', None) or 0,
        "totals": totals,
    }
