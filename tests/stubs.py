"""
Helpers for building GA4 responses and stub clients in tests
"""
import json
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

from google.analytics.data_v1beta.types import (
    DimensionHeader,
    DimensionValue,
    MetricHeader,
    MetricValue,
    Row,
    RunRealtimeReportResponse,
    RunReportResponse,
)

from ga4_analytics_mcp.client import AnalyticsContext
from ga4_analytics_mcp.config import Settings


def make_row(dimension_values: List[Optional[str]], metric_values: List[Optional[str]]) -> Row:
    """None entries become values with no value set"""
    return Row(
        dimension_values=[DimensionValue(value=v) if v is not None else DimensionValue() for v in dimension_values],
        metric_values=[MetricValue(value=v) if v is not None else MetricValue() for v in metric_values],
    )


def make_response(dimensions: List[str], metrics: List[str], rows: List[Row],
                  row_count: Optional[int] = None, totals: Optional[List[Row]] = None,
                  realtime: bool = False):
    response_type = RunRealtimeReportResponse if realtime else RunReportResponse
    return response_type(
        dimension_headers=[DimensionHeader(name=name) for name in dimensions],
        metric_headers=[MetricHeader(name=name) for name in metrics],
        rows=rows,
        row_count=len(rows) if row_count is None else row_count,
        totals=totals or [],
    )


def make_context(client=None, settings: Optional[Settings] = None):
    """AnalyticsContext whose factory hands out `client` (a Mock by default)"""
    client = client if client is not None else Mock()
    factory = Mock(return_value=client)
    context = AnalyticsContext(settings or Settings(credentials_path="unused.json"), client_factory=factory)
    return context, client, factory


def payload(result) -> Dict[str, Any]:
    """Decode the JSON text of a ToolResult"""
    return json.loads(result.text)
