"""
GA4 analytics MCP server package initialization
"""
from .client import AnalyticsContext
from .config import Settings, load_settings
from .errors import AnalyticsMCPError, CredentialsError, UnknownOperationError
from .handler import InvocationHandler, ToolResult
from .normalizer import format_report_response
from .operations import OPERATIONS, Operation, build_query, get_operation

__version__ = "1.0.0"

__all__ = [
    'AnalyticsContext', 'Settings', 'load_settings',
    'AnalyticsMCPError', 'CredentialsError', 'UnknownOperationError',
    'InvocationHandler', 'ToolResult', 'format_report_response',
    'OPERATIONS', 'Operation', 'build_query', 'get_operation',
]
