"""
Process-scoped access to the GA4 Data API.

AnalyticsContext owns the single BetaAnalyticsDataClient for the process. The
client is created on first use from a service account file; a failed attempt
leaves nothing cached so the next call tries again.
"""

import json
import logging
import os
import threading
from typing import Any, Callable, Dict, Optional

from google.analytics.data_v1beta import BetaAnalyticsDataClient
from google.analytics.data_v1beta.types import RunRealtimeReportRequest, RunReportRequest
from google.oauth2 import service_account

from .config import ANALYTICS_SCOPES, Settings
from .errors import CredentialsError
from .operations import RUN_REALTIME_REPORT, RUN_REPORT, Operation, QueryShape

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Settings], Any]


def load_credentials(credentials_path: str):
    """Load service account credentials with the Analytics read-only scope"""
    if not os.path.exists(credentials_path):
        raise CredentialsError(f"Credentials file not found: {credentials_path}", credentials_path)
    try:
        return service_account.Credentials.from_service_account_file(
            credentials_path, scopes=ANALYTICS_SCOPES
        )
    except (OSError, ValueError) as e:
        raise CredentialsError(
            f"Invalid service account credentials in {credentials_path}: {e}", credentials_path
        ) from e


def create_data_client(settings: Settings) -> BetaAnalyticsDataClient:
    """Default client factory"""
    credentials = load_credentials(settings.credentials_path)
    logger.info(f"GA4 Data API client initialized from {settings.credentials_path}")
    return BetaAnalyticsDataClient(credentials=credentials)


def to_report_request(shape: QueryShape) -> RunReportRequest:
    """Convert a REST-form query dict into a RunReportRequest"""
    return RunReportRequest.from_json(json.dumps(shape))


def to_realtime_request(shape: QueryShape) -> RunRealtimeReportRequest:
    """Convert a REST-form query dict into a RunRealtimeReportRequest"""
    return RunRealtimeReportRequest.from_json(json.dumps(shape))


class AnalyticsContext:
    """Holds settings and the lazily created Data API client"""

    def __init__(self, settings: Settings, client_factory: Optional[ClientFactory] = None):
        self.settings = settings
        self._client_factory = client_factory or create_data_client
        self._client = None
        self._lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    def get_client(self):
        """Return the shared client, creating it on first use"""
        if self._client is not None:
            return self._client
        with self._lock:
            if self._client is None:
                self._client = self._client_factory(self.settings)
        return self._client

    def resolve_property(self, arguments: Dict[str, Any]) -> Optional[str]:
        """propertyId from the call, else the configured default property"""
        property_id = arguments.get("propertyId")
        if property_id in (None, ""):
            property_id = self.settings.default_property_id
            if property_id:
                logger.debug(f"No propertyId supplied, using default property {property_id}")
        return property_id

    def execute(self, operation: Operation, shape: QueryShape):
        """Run one report call with the operation's method and return the raw response"""
        client = self.get_client()
        logger.debug(f"{operation.name}: {operation.method} {json.dumps(shape)}")
        if operation.method == RUN_REALTIME_REPORT:
            return client.run_realtime_report(request=to_realtime_request(shape))
        if operation.method == RUN_REPORT:
            return client.run_report(request=to_report_request(shape))
        raise ValueError(f"Unsupported report method: {operation.method}")
