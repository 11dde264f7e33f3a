"""
Environment-driven settings and logging setup for the server and the
connectivity check.

Values come from the process environment, optionally seeded from a .env file
in the working directory. Command line flags override them.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_CREDENTIALS_PATH = "service-account.json"
ANALYTICS_SCOPES = ['https://www.googleapis.com/auth/analytics.readonly']

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


@dataclass
class Settings:
    """Runtime configuration"""
    credentials_path: str = DEFAULT_CREDENTIALS_PATH
    property_ids: List[str] = field(default_factory=list)
    debug: bool = False

    @property
    def default_property_id(self) -> Optional[str]:
        """First configured property, used when a call omits propertyId"""
        return self.property_ids[0] if self.property_ids else None


def parse_property_ids(raw: Optional[str]) -> List[str]:
    """Split a comma-separated GA_PROPERTY_ID value, dropping blanks"""
    if not raw:
        return []
    return [p.strip() for p in raw.split(',') if p.strip()]


def load_settings(credentials_path: Optional[str] = None,
                  property_id: Optional[str] = None,
                  debug: Optional[bool] = None,
                  env_file: Optional[str] = None) -> Settings:
    """
    Build Settings from the environment.

    Explicit arguments (usually parsed CLI flags) win over environment values.
    A .env file is loaded first without overriding variables already set.
    """
    load_dotenv(dotenv_path=env_file)

    if debug is None:
        debug = os.environ.get("DEBUG_MODE", "false").lower() == "true"

    return Settings(
        credentials_path=credentials_path
        or os.environ.get("GOOGLE_APPLICATION_CREDENTIALS", DEFAULT_CREDENTIALS_PATH),
        property_ids=parse_property_ids(property_id or os.environ.get("GA_PROPERTY_ID")),
        debug=debug,
    )


def configure_logging(debug: bool = False) -> None:
    """Send logs to stderr; stdout carries the MCP stdio stream"""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
