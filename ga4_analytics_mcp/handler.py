"""
Invocation handler: the single entry point for tool calls.

Every call produces exactly one ToolResult. Failures of any kind (unknown
tool, credentials, GA4 API errors, malformed arguments) are logged and turned
into an error payload; nothing is raised to the transport and nothing is
retried.
"""

import json
import logging
import traceback
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .client import AnalyticsContext
from .normalizer import format_report_response
from .operations import Operation, build_query, get_operation, list_operations, property_path

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """Text payload returned to the agent, tagged success or error"""
    text: str
    is_error: bool = False


def success_result(result: Dict[str, Any]) -> ToolResult:
    return ToolResult(text=json.dumps(result, indent=2), is_error=False)


def error_result(error: BaseException) -> ToolResult:
    stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    return ToolResult(
        text=json.dumps({"error": str(error), "stack": stack}),
        is_error=True,
    )


class InvocationHandler:
    """Routes (name, arguments) through build, execute and normalize"""

    def __init__(self, context: AnalyticsContext):
        self.context = context

    def catalog(self) -> List[Operation]:
        return list_operations()

    def run(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run one operation and return the normalized report; raises on failure"""
        operation = get_operation(name)
        arguments = arguments or {}
        property_scope = property_path(self.context.resolve_property(arguments))
        shape = build_query(name, arguments, property_scope)
        response = self.context.execute(operation, shape)
        result = format_report_response(response)
        logger.info(f"{name}: {len(result['rows'])} rows (rowCount={result['rowCount']}) for {property_scope}")
        return result

    def handle(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        """Run one operation; never raises"""
        try:
            return success_result(self.run(name, arguments))
        except Exception as e:
            logger.error(f"Tool {name} failed: {e}")
            logger.debug("Tool failure traceback", exc_info=True)
            return error_result(e)
