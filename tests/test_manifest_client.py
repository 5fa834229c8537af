"""
Tests for the published manifest client.

Tests cover:
- Proxy URL construction
- Decoding of package-list.json (sentinels, missing versions, 'v' prefix)
- Recovery from HTTP errors, transport errors, bad JSON and malformed URLs
"""

import threading
from unittest.mock import patch, Mock

import pytest
import requests

from pubstatus.domain import PublishedVersionEntry
from pubstatus.infra.manifest_client import ManifestClient


SAMPLE_MANIFEST = {
    "package-id": "smart.who.int.anc",
    "list": [
        {"version": "current", "path": "https://build.fhir.org/ig/WHO/smart-anc", "status": "ci-build"},
        {"version": "v2.0.0", "path": "https://smart.who.int/anc/2.0.0", "status": "release"},
        {"path": "https://smart.who.int/anc/broken"},
        {"version": "1.0.0", "path": "https://smart.who.int/anc/1.0.0", "status": "release"},
    ],
}


def mock_response(body=None, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.json.return_value = body
    return response


@pytest.fixture
def client():
    return ManifestClient(proxy_base_url="https://dash.example.org/")


class TestManifestUrl:
    """Tests for manifest URL construction."""

    def test_proxy_path_joined_onto_base(self, client):
        assert client.manifest_url("https://smart.who.int/anc") == \
            "https://dash.example.org/proxy/smart/anc/package-list.json"

    def test_unknown_host_used_as_is(self, client):
        with pytest.warns(UserWarning):
            assert client.manifest_url("https://example.org/x") == "https://example.org/x"

    def test_default_base(self):
        assert ManifestClient().manifest_url("https://smart.who.int/anc").startswith("http://localhost:8080/proxy/smart/")


class TestGetPublishedVersions:
    """Tests for ManifestClient.get_published_versions with mocked HTTP."""

    def test_decodes_manifest(self, client):
        with patch.object(client.session, "get", return_value=mock_response(SAMPLE_MANIFEST)) as mock_get:
            entries = client.get_published_versions("https://smart.who.int/anc")

        assert entries == [
            PublishedVersionEntry("2.0.0", "https://smart.who.int/anc/2.0.0"),
            PublishedVersionEntry("1.0.0", "https://smart.who.int/anc/1.0.0"),
        ]
        assert mock_get.call_args.args[0] == "https://dash.example.org/proxy/smart/anc/package-list.json"

    def test_http_error_returns_empty(self, client):
        with patch.object(client.session, "get", return_value=mock_response({}, status_code=404)):
            assert client.get_published_versions("https://smart.who.int/anc") == []

    def test_transport_error_returns_empty(self, client):
        with patch.object(client.session, "get", side_effect=requests.Timeout("slow")):
            assert client.get_published_versions("https://smart.who.int/anc") == []

    def test_invalid_json_returns_empty(self, client):
        response = mock_response()
        response.json.side_effect = ValueError("not json")
        with patch.object(client.session, "get", return_value=response):
            assert client.get_published_versions("https://smart.who.int/anc") == []

    def test_non_object_manifest_returns_empty(self, client):
        with patch.object(client.session, "get", return_value=mock_response(["1.0"])):
            assert client.get_published_versions("https://smart.who.int/anc") == []

    def test_missing_list_returns_empty(self, client):
        with patch.object(client.session, "get", return_value=mock_response({"package-id": "x"})):
            assert client.get_published_versions("https://smart.who.int/anc") == []

    def test_non_dict_entries_skipped(self, client):
        body = {"list": ["1.0", None, {"version": "1.1", "path": "/1.1"}]}
        with patch.object(client.session, "get", return_value=mock_response(body)):
            entries = client.get_published_versions("https://smart.who.int/anc")
        assert [e.version for e in entries] == ["1.1"]

    def test_failure_is_logged(self, client, caplog):
        with patch.object(client.session, "get", return_value=mock_response({}, status_code=500)):
            with caplog.at_level("WARNING", logger="pubstatus.infra.manifest_client"):
                client.get_published_versions("https://smart.who.int/anc")
        assert "HTTP 500" in caplog.text

    def test_malformed_published_url_returns_empty(self, client):
        with patch.object(client.session, "get") as mock_get:
            assert client.get_published_versions("https://[smart.who.int/anc") == []
        mock_get.assert_not_called()

    def test_scalar_list_returns_empty(self, client, caplog):
        with patch.object(client.session, "get", return_value=mock_response({"list": 5})):
            with caplog.at_level("WARNING", logger="pubstatus.infra.manifest_client"):
                assert client.get_published_versions("https://smart.who.int/anc") == []
        assert "not an array" in caplog.text

    def test_object_list_returns_empty(self, client):
        with patch.object(client.session, "get", return_value=mock_response({"list": {"version": "1.0"}})):
            assert client.get_published_versions("https://smart.who.int/anc") == []

    def test_entry_without_path_has_no_url(self, client):
        body = {"list": [{"version": "1.0"}, {"version": "2.0", "path": "/2.0"}]}
        with patch.object(client.session, "get", return_value=mock_response(body)):
            entries = client.get_published_versions("https://smart.who.int/anc")
        assert entries == [PublishedVersionEntry("1.0", None), PublishedVersionEntry("2.0", "/2.0")]


class TestSessionPerThread:
    """Each worker thread gets its own requests session."""

    def test_sessions_differ_across_threads(self, client):
        sessions = []
        worker = threading.Thread(target=lambda: sessions.append(client.session))
        worker.start()
        worker.join()

        assert client.session is client.session
        assert sessions[0] is not client.session
        assert sessions[0].headers["Accept"] == "application/json"
