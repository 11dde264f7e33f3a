#!/usr/bin/env python3
"""
Tests for credential loading, request conversion and the shared client handle
"""

import json
import os
import tempfile
import threading
import unittest
from unittest.mock import Mock, patch

from ga4_analytics_mcp.client import (
    AnalyticsContext,
    create_data_client,
    load_credentials,
    to_realtime_request,
    to_report_request,
)
from ga4_analytics_mcp.config import Settings
from ga4_analytics_mcp.errors import CredentialsError
from ga4_analytics_mcp.operations import build_query


class TestLoadCredentials(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def _write(self, name, content):
        path = os.path.join(self.tmpdir.name, name)
        with open(path, 'w') as f:
            f.write(content)
        return path

    def test_missing_file(self):
        path = os.path.join(self.tmpdir.name, "missing.json")
        with self.assertRaises(CredentialsError) as ctx:
            load_credentials(path)
        self.assertEqual(ctx.exception.path, path)
        self.assertIn("not found", str(ctx.exception))

    def test_invalid_json(self):
        path = self._write("broken.json", "{not json")
        with self.assertRaises(CredentialsError):
            load_credentials(path)

    def test_directory_path(self):
        with self.assertRaises(CredentialsError) as ctx:
            load_credentials(self.tmpdir.name)
        self.assertEqual(ctx.exception.path, self.tmpdir.name)
        self.assertIn("Invalid service account credentials", str(ctx.exception))

    def test_not_a_service_account(self):
        path = self._write("user.json", json.dumps({"type": "authorized_user"}))
        with self.assertRaises(CredentialsError):
            load_credentials(path)

    @patch('ga4_analytics_mcp.client.BetaAnalyticsDataClient')
    @patch('ga4_analytics_mcp.client.service_account.Credentials.from_service_account_file')
    def test_create_data_client(self, mock_from_file, mock_client_cls):
        path = self._write("sa.json", "{}")
        credentials = Mock()
        mock_from_file.return_value = credentials

        client = create_data_client(Settings(credentials_path=path))

        mock_from_file.assert_called_once_with(
            path, scopes=['https://www.googleapis.com/auth/analytics.readonly']
        )
        mock_client_cls.assert_called_once_with(credentials=credentials)
        self.assertIs(client, mock_client_cls.return_value)


class TestRequestConversion(unittest.TestCase):

    def test_report_request_fields(self):
        shape = build_query("get_custom_report", {
            "propertyId": "123",
            "startDate": "2024-01-01",
            "endDate": "2024-01-31",
            "dimensions": ["country"],
            "metrics": ["sessions"],
            "dimensionFilter": {"filter": {"fieldName": "country", "stringFilter": {"value": "US"}}},
            "limit": 25,
            "offset": 50,
        })

        request = to_report_request(shape)

        self.assertEqual(request.property, "properties/123")
        self.assertEqual(request.date_ranges[0].end_date, "2024-01-31")
        self.assertEqual([m.name for m in request.metrics], ["sessions"])
        self.assertEqual(request.dimension_filter.filter.field_name, "country")
        self.assertEqual(request.dimension_filter.filter.string_filter.value, "US")
        self.assertEqual(request.limit, 25)
        self.assertEqual(request.offset, 50)

    def test_realtime_request_fields(self):
        shape = build_query("get_realtime_data", {"propertyId": "123", "dimensions": ["country"],
                                                  "metrics": ["activeUsers"]})

        request = to_realtime_request(shape)

        self.assertEqual(request.property, "properties/123")
        self.assertEqual([d.name for d in request.dimensions], ["country"])


class TestAnalyticsContext(unittest.TestCase):

    def test_lazy_initialization(self):
        factory = Mock(return_value=Mock())
        context = AnalyticsContext(Settings(), client_factory=factory)

        self.assertFalse(context.is_initialized)
        factory.assert_not_called()

        client = context.get_client()

        self.assertTrue(context.is_initialized)
        self.assertIs(context.get_client(), client)
        factory.assert_called_once()

    def test_concurrent_first_use_builds_one_client(self):
        factory = Mock(side_effect=lambda settings: object())
        context = AnalyticsContext(Settings(), client_factory=factory)
        seen = []

        def worker():
            seen.append(context.get_client())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(factory.call_count, 1)
        self.assertEqual(len({id(client) for client in seen}), 1)

    def test_resolve_property(self):
        context = AnalyticsContext(Settings(property_ids=["555", "666"]), client_factory=Mock())

        self.assertEqual(context.resolve_property({"propertyId": "123"}), "123")
        self.assertEqual(context.resolve_property({}), "555")
        self.assertEqual(context.resolve_property({"propertyId": ""}), "555")

    def test_resolve_property_without_default(self):
        context = AnalyticsContext(Settings(), client_factory=Mock())
        self.assertIsNone(context.resolve_property({}))


if __name__ == "__main__":
    unittest.main()
