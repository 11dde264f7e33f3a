#!/usr/bin/env python3
"""
Manual connectivity check: runs a small 7-day report against each configured
GA4 property and prints the headline metrics.

    ga4-analytics-check --credentials service-account.json --property-id 123,456
"""

import argparse
import sys
from datetime import date, timedelta
from typing import Dict, List, Optional

import pandas as pd

from .client import AnalyticsContext
from .config import configure_logging, load_settings
from .errors import CredentialsError
from .handler import InvocationHandler

CHECK_METRICS = ["activeUsers", "sessions", "screenPageViews", "newUsers"]


def get_date_range(days: int = 7, today: Optional[date] = None) -> Dict[str, str]:
    """Last `days` days ending today, as YYYY-MM-DD strings"""
    end = today or date.today()
    start = end - timedelta(days=days)
    return {"start_date": start.strftime('%Y-%m-%d'), "end_date": end.strftime('%Y-%m-%d')}


def error_hint(message: str) -> Optional[str]:
    """Suggest a fix for the common GA4 access errors"""
    if "PERMISSION_DENIED" in message:
        return "Check that the service account has access to this property."
    if "NOT_FOUND" in message:
        return "Property ID may be incorrect."
    return None


def check_property(handler: InvocationHandler, property_id: str, date_range: Dict[str, str]) -> bool:
    """Query one property and print its metrics. Returns False on API errors."""
    print(f"\nProperty ID: {property_id}")
    print('-' * 50)
    try:
        result = handler.run("query_analytics", {
            "propertyId": property_id,
            "startDate": date_range["start_date"],
            "endDate": date_range["end_date"],
            "metrics": CHECK_METRICS,
        })
    except CredentialsError:
        raise
    except Exception as e:
        print(f"❌ Error querying property {property_id}:")
        print(f"   {e}")
        hint = error_hint(str(e))
        if hint:
            print(f"   → {hint}")
        return False

    if not result["rows"]:
        print("⚠️  Connection successful but no data returned for this period.")
        return True

    df = pd.DataFrame(result["rows"][:1], columns=CHECK_METRICS)
    df = df.apply(pd.to_numeric, errors='coerce').fillna(0).astype(int)
    print("✅ Connection successful!")
    print("\nMetrics (Last 7 Days):")
    print(df.T.rename(columns={0: "value"}).to_string())
    return True


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Test the GA4 Data API connection for one or more properties")
    parser.add_argument("-c", "--credentials", help="Path to service account JSON (default: $GOOGLE_APPLICATION_CREDENTIALS)")
    parser.add_argument("-p", "--property-id", help="Comma-separated GA4 property IDs (default: $GA_PROPERTY_ID)")
    parser.add_argument("--env-file", help="Path to a .env file to load")
    parser.add_argument("--debug", action="store_true", default=None, help="Enable debug logging")
    args = parser.parse_args(argv)

    settings = load_settings(
        credentials_path=args.credentials,
        property_id=args.property_id,
        debug=args.debug,
        env_file=args.env_file,
    )
    configure_logging(settings.debug)

    if not settings.property_ids:
        print("Error: no property IDs given. Use --property-id or set GA_PROPERTY_ID.")
        return 1

    handler = InvocationHandler(AnalyticsContext(settings))
    date_range = get_date_range()

    print("Testing Google Analytics Connection...\n")
    print(f"Date Range: {date_range['start_date']} to {date_range['end_date']}")

    try:
        # Fail fast on credentials before looping over properties
        handler.context.get_client()
        results = [check_property(handler, pid, date_range) for pid in settings.property_ids]
    except CredentialsError as e:
        print("\n❌ Connection test failed:")
        print(f"   {e}")
        print("   → Check GOOGLE_APPLICATION_CREDENTIALS in your .env file")
        return 1

    print('\n' + '=' * 50)
    print(f"Test completed: {sum(results)}/{len(results)} properties reachable")
    return 0


if __name__ == "__main__":
    sys.exit(main())
