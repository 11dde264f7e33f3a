"""
Exception types raised inside the adapter. None of them cross the MCP boundary:
the invocation handler turns every failure into an error payload.
"""


class AnalyticsMCPError(Exception):
    """Base class for adapter errors"""


class UnknownOperationError(AnalyticsMCPError):
    """Raised when a tool name is not in the operation registry"""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class CredentialsError(AnalyticsMCPError):
    """Raised when service account credentials cannot be loaded"""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path
