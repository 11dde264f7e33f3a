"""
Operation registry: every GA4 tool the server exposes, with its input schema
and the function that turns call arguments into a GA4 Data API query.

The same registry feeds tools/list (catalog) and tools/call (dispatch), so a
tool cannot be advertised without a builder or dispatched without a schema.

Queries are plain dicts in the Data API's REST (camelCase) form, e.g.

    {
        "property": "properties/123",
        "dateRanges": [{"startDate": "2024-01-01", "endDate": "2024-01-07"}],
        "dimensions": [{"name": "country"}],
        "metrics": [{"name": "sessions"}],
    }

Optional keys (limit, offset, orderBys, filters) appear only when set.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from .errors import UnknownOperationError

RUN_REPORT = "run_report"
RUN_REALTIME_REPORT = "run_realtime_report"

DEFAULT_PAGE_LIMIT = 50

QueryShape = Dict[str, Any]
Builder = Callable[[str, Dict[str, Any]], QueryShape]


@dataclass(frozen=True)
class Operation:
    """A named tool: schema for discovery plus the query builder for dispatch"""
    name: str
    description: str
    input_schema: Dict[str, Any]
    build: Builder
    method: str = RUN_REPORT


def property_path(property_id: Union[str, int, None]) -> str:
    """Accept '123' or 'properties/123' and return 'properties/123'"""
    value = str(property_id).strip() if property_id is not None else ""
    if value.startswith("properties/"):
        return value
    return f"properties/{value}"


def parse_field_list(value: Union[str, List[str], None]) -> List[str]:
    """
    Normalize a dimension or metric list.

    Accepts a JSON array of names or a comma-separated string, and keeps the
    caller's order.
    """
    if not value:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(',') if item.strip()]
    return [str(item).strip() for item in value if str(item).strip()]


def _named(names: List[str]) -> List[Dict[str, str]]:
    return [{"name": name} for name in names]


def _date_ranges(arguments: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [{"startDate": arguments.get("startDate"), "endDate": arguments.get("endDate")}]


# Schema fragments

_PROPERTY_ID = {"type": "string", "description": "GA4 property ID"}
_START_DATE = {"type": "string", "description": "Start date in YYYY-MM-DD format"}
_END_DATE = {"type": "string", "description": "End date in YYYY-MM-DD format"}


def _schema(properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {"type": "object", "properties": properties, "required": required}


def _date_schema(also_required: Optional[List[str]] = None, **extra) -> Dict[str, Any]:
    properties = {"propertyId": _PROPERTY_ID, "startDate": _START_DATE, "endDate": _END_DATE}
    properties.update(extra)
    return _schema(properties, ["propertyId", "startDate", "endDate"] + (also_required or []))


def _string_array(description: str) -> Dict[str, Any]:
    return {"type": "array", "items": {"type": "string"}, "description": description}


# Builders

def build_free_form_query(property_scope: str, arguments: Dict[str, Any]) -> QueryShape:
    """Dimensions and metrics entirely from the caller"""
    return {
        "property": property_scope,
        "dateRanges": _date_ranges(arguments),
        "dimensions": _named(parse_field_list(arguments.get("dimensions"))),
        "metrics": _named(parse_field_list(arguments.get("metrics"))),
    }


def build_realtime_query(property_scope: str, arguments: Dict[str, Any]) -> QueryShape:
    """Realtime reports cover the last 30 minutes and take no date range"""
    return {
        "property": property_scope,
        "dimensions": _named(parse_field_list(arguments.get("dimensions"))),
        "metrics": _named(parse_field_list(arguments.get("metrics"))),
    }


def preset_builder(dimensions: List[str], metrics: List[str]) -> Builder:
    """Builder for a canned report: caller picks the property and dates only"""
    def build(property_scope: str, arguments: Dict[str, Any]) -> QueryShape:
        return {
            "property": property_scope,
            "dateRanges": _date_ranges(arguments),
            "dimensions": _named(dimensions),
            "metrics": _named(metrics),
        }
    return build


PAGE_DIMENSIONS = ["pagePath", "pageTitle"]
PAGE_METRICS = ["screenPageViews", "averageSessionDuration", "bounceRate", "engagementRate"]


def build_page_performance_query(property_scope: str, arguments: Dict[str, Any]) -> QueryShape:
    """Top pages by views, capped at 50 rows unless the caller sets limit"""
    shape = preset_builder(PAGE_DIMENSIONS, PAGE_METRICS)(property_scope, arguments)
    shape["limit"] = int(arguments.get("limit") or DEFAULT_PAGE_LIMIT)
    shape["orderBys"] = [{"metric": {"metricName": "screenPageViews"}, "desc": True}]
    return shape


CUSTOM_REPORT_OPTIONAL_FIELDS = ("dimensionFilter", "metricFilter", "limit", "offset")


def build_custom_report_query(property_scope: str, arguments: Dict[str, Any]) -> QueryShape:
    """Free-form query plus filters and paging, each only when supplied"""
    shape = build_free_form_query(property_scope, arguments)
    for key in CUSTOM_REPORT_OPTIONAL_FIELDS:
        value = arguments.get(key)
        if value is None:
            continue
        shape[key] = int(value) if key in ("limit", "offset") else value
    return shape


# Registry

def _register(*operations: Operation) -> Dict[str, Operation]:
    return {operation.name: operation for operation in operations}


OPERATIONS: Dict[str, Operation] = _register(
    Operation(
        name="query_analytics",
        description="Query Google Analytics 4 data with custom dimensions, metrics, and date ranges",
        input_schema=_date_schema(
            dimensions=_string_array('Array of dimension names (e.g., ["country", "city"])'),
            metrics=_string_array('Array of metric names (e.g., ["sessions", "totalUsers"])'),
            also_required=["metrics"],
        ),
        build=build_free_form_query,
    ),
    Operation(
        name="get_realtime_data",
        description="Get real-time analytics data from GA4",
        input_schema=_schema(
            {
                "propertyId": _PROPERTY_ID,
                "dimensions": _string_array("Optional array of dimension names"),
                "metrics": _string_array("Array of metric names for real-time data"),
            },
            ["propertyId", "metrics"],
        ),
        build=build_realtime_query,
        method=RUN_REALTIME_REPORT,
    ),
    Operation(
        name="get_traffic_sources",
        description="Get traffic source data including channels, sources, and mediums",
        input_schema=_date_schema(),
        build=preset_builder(
            ["sessionDefaultChannelGroup", "sessionSource", "sessionMedium"],
            ["sessions", "totalUsers", "newUsers", "engagementRate"],
        ),
    ),
    Operation(
        name="get_user_demographics",
        description="Get user demographic data including age, gender, and country",
        input_schema=_date_schema(),
        build=preset_builder(
            ["userAgeBracket", "userGender", "country"],
            ["activeUsers", "newUsers", "sessions"],
        ),
    ),
    Operation(
        name="get_page_performance",
        description="Get page performance metrics including page views, bounce rate, and time on page",
        input_schema=_date_schema(
            limit={
                "type": "number",
                "description": "Maximum number of pages to return",
                "default": DEFAULT_PAGE_LIMIT,
            },
        ),
        build=build_page_performance_query,
    ),
    Operation(
        name="get_conversion_data",
        description="Get conversion and event data including conversion events and e-commerce metrics",
        input_schema=_date_schema(),
        build=preset_builder(
            ["eventName"],
            ["conversions", "eventCount", "totalRevenue", "purchaseRevenue"],
        ),
    ),
    Operation(
        name="get_custom_report",
        description="Get a custom report with specified dimensions, metrics, date ranges, and filters",
        input_schema=_date_schema(
            dimensions=_string_array("Array of dimension names"),
            metrics=_string_array("Array of metric names"),
            dimensionFilter={"type": "object", "description": "Optional GA4 FilterExpression for dimensions"},
            metricFilter={"type": "object", "description": "Optional GA4 FilterExpression for metrics"},
            limit={"type": "number", "description": "Maximum number of rows to return"},
            offset={"type": "number", "description": "Row offset for pagination"},
            also_required=["metrics"],
        ),
        build=build_custom_report_query,
    ),
)


def get_operation(name: str) -> Operation:
    """Look up an operation, raising UnknownOperationError for unregistered names"""
    operation = OPERATIONS.get(name)
    if operation is None:
        raise UnknownOperationError(name)
    return operation


def list_operations() -> List[Operation]:
    """All operations in registration order"""
    return list(OPERATIONS.values())


def build_query(name: str, arguments: Optional[Dict[str, Any]], property_scope: Optional[str] = None) -> QueryShape:
    """
    Build the query for a named operation.

    property_scope defaults to the propertyId argument.
    """
    operation = get_operation(name)
    arguments = arguments or {}
    if property_scope is None:
        property_scope = property_path(arguments.get("propertyId"))
    return operation.build(property_scope, arguments)
