"""
Tests for the weather location lookup.
"""

import gzip
import io
import json
import socket
import unittest
import urllib.error
from unittest.mock import MagicMock, patch

from helium.widgets.weather import LOCATION_LOOKUP_URL, Location, fetch_locations

BEIJING = {
    "name": "Beijing",
    "id": "101010100",
    "lat": "39.90499",
    "lon": "116.40529",
    "adm2": "Beijing",
    "adm1": "Beijing",
    "country": "China",
}


def mock_response(payload):
    """Context-manager response returning a JSON payload."""
    response = MagicMock()
    response.read.return_value = json.dumps(payload).encode()
    response.headers = {}
    response.__enter__.return_value = response
    return response


class TestFetchLocations(unittest.TestCase):
    """Test searching locations by name."""

    @patch("helium.widgets.weather.urllib.request.urlopen")
    def test_successful_lookup(self, mock_urlopen):
        """Test mapping a successful response to locations."""
        mock_urlopen.return_value = mock_response({"code": "200", "location": [BEIJING]})

        result = fetch_locations("Beijing", "key123")

        self.assertEqual(
            result,
            [
                Location(
                    id="101010100",
                    name="Beijing",
                    country="China",
                    region1="Beijing",
                    region2="Beijing",
                    lat="39.90499",
                    lon="116.40529",
                )
            ],
        )

    @patch("helium.widgets.weather.urllib.request.urlopen")
    def test_request_parameters(self, mock_urlopen):
        """Test the query sent to the lookup service."""
        mock_urlopen.return_value = mock_response({"code": "200", "location": []})

        fetch_locations("New York", "key123", date_locale="zh_CN", timeout=3)

        url = mock_urlopen.call_args[0][0]
        self.assertTrue(url.startswith(LOCATION_LOOKUP_URL + "?"))
        self.assertIn("location=New+York", url)
        self.assertIn("key=key123", url)
        self.assertIn("lang=zh", url)
        self.assertEqual(mock_urlopen.call_args[1]["timeout"], 3)

    @patch("helium.widgets.weather.urllib.request.urlopen")
    def test_empty_name(self, mock_urlopen):
        """Test that an empty name does not hit the network."""
        self.assertEqual(fetch_locations("", "key123"), [])
        mock_urlopen.assert_not_called()

    @patch("helium.widgets.weather.urllib.request.urlopen")
    def test_error_code(self, mock_urlopen):
        """Test that a non-200 service code yields no locations."""
        mock_urlopen.return_value = mock_response({"code": "404"})
        self.assertEqual(fetch_locations("Nowhere", "key123"), [])

    @patch("helium.widgets.weather.urllib.request.urlopen")
    def test_http_error(self, mock_urlopen):
        """Test that HTTP errors yield no locations."""
        mock_urlopen.side_effect = urllib.error.HTTPError(
            LOCATION_LOOKUP_URL, 401, "Unauthorized", {}, io.BytesIO()
        )
        self.assertEqual(fetch_locations("Beijing", "bad"), [])

    @patch("helium.widgets.weather.urllib.request.urlopen")
    def test_connection_error(self, mock_urlopen):
        """Test that connection failures yield no locations."""
        mock_urlopen.side_effect = urllib.error.URLError("offline")
        self.assertEqual(fetch_locations("Beijing", "key123"), [])

    @patch("helium.widgets.weather.urllib.request.urlopen")
    def test_invalid_json(self, mock_urlopen):
        """Test that malformed responses yield no locations."""
        response = MagicMock()
        response.read.return_value = b"not json"
        response.__enter__.return_value = response
        mock_urlopen.return_value = response
        self.assertEqual(fetch_locations("Beijing", "key123"), [])

    @patch("helium.widgets.weather.urllib.request.urlopen")
    def test_gzip_body(self, mock_urlopen):
        """Test that gzip-compressed responses are decompressed."""
        response = mock_response({})
        response.read.return_value = gzip.compress(
            json.dumps({"code": "200", "location": [BEIJING]}).encode()
        )
        response.headers = {"Content-Encoding": "gzip"}
        mock_urlopen.return_value = response

        result = fetch_locations("Beijing", "key123")

        self.assertEqual([location.id for location in result], ["101010100"])

    @patch("helium.widgets.weather.urllib.request.urlopen")
    def test_undecodable_body(self, mock_urlopen):
        """Test that compressed bodies without a gzip header yield no locations."""
        response = mock_response({})
        response.read.return_value = gzip.compress(b'{"code": "200"}')
        mock_urlopen.return_value = response
        self.assertEqual(fetch_locations("Beijing", "key123"), [])

    @patch("helium.widgets.weather.urllib.request.urlopen")
    def test_corrupt_gzip_body(self, mock_urlopen):
        """Test that a broken gzip body yields no locations."""
        response = mock_response({})
        response.read.return_value = b"not gzip"
        response.headers = {"Content-Encoding": "gzip"}
        mock_urlopen.return_value = response
        self.assertEqual(fetch_locations("Beijing", "key123"), [])

    @patch("helium.widgets.weather.urllib.request.urlopen")
    def test_read_timeout(self, mock_urlopen):
        """Test that a timeout while reading yields no locations."""
        response = mock_response({})
        response.read.side_effect = socket.timeout("timed out")
        mock_urlopen.return_value = response
        self.assertEqual(fetch_locations("Beijing", "key123"), [])

    @patch("helium.widgets.weather.urllib.request.urlopen")
    def test_missing_fields(self, mock_urlopen):
        """Test that incomplete location entries yield no locations."""
        mock_urlopen.return_value = mock_response({"code": "200", "location": [{"name": "x"}]})
        self.assertEqual(fetch_locations("Beijing", "key123"), [])


if __name__ == "__main__":
    unittest.main()
