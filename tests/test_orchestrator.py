"""
Integration tests for ConnectorPipeline

The HTTP layer is mocked; generation and file output are real.
"""

import json

import pytest
import requests
from unittest.mock import Mock, patch

from connector_generator.config import GeneratorSettings
from connector_generator.introspection.schema_inferencer import analyze_json_response
from connector_generator.orchestrator import ConnectorPipeline
from connector_generator.schema.models import ApiConfiguration, GenerationResult

BASE_URL = "https://api.example.com"

ROUTES = {
    BASE_URL: (200, "{}"),
    f"{BASE_URL}/swagger.json": (200, json.dumps({"paths": {"/users": {"get": {"summary": "List users"}}}})),
    f"{BASE_URL}/users": (200, json.dumps([{"id": 1, "name": "Ann", "address": {"city": "Lisbon"}}])),
}


def fake_get(url, **kwargs):
    status, body = ROUTES.get(url, (404, ""))
    response = Mock()
    response.status_code = status
    response.ok = 200 <= status < 400
    response.text = body
    response.headers = {}
    return response


@pytest.fixture
def settings(tmp_path):
    return GeneratorSettings(output_dir=str(tmp_path))


class TestConnectorPipeline:
    """Tests for the full run"""

    @patch("requests.Session.get", side_effect=fake_get)
    def test_run(self, mock_get, settings, tmp_path):
        config = ApiConfiguration(base_url=BASE_URL)

        report = ConnectorPipeline(settings).run(config)

        assert config.api_name == "Example"
        assert config.package_name == "example_client"
        assert report.output_path == str(tmp_path / "example_client")
        assert report.connectivity.is_success is True
        # GET /users from the document, plus its five CRUD siblings
        assert report.endpoints_found == 6
        assert report.schemas_inferred == 1
        assert list(config.schemas) == ["Users"]
        assert report.files_written == 7

        out = tmp_path / "example_client"
        assert (out / "models" / "user.py").exists()
        assert (out / "models" / "address.py").exists()
        assert "async def get_all_users(self) -> List[User]:" in (out / "example_api.py").read_text()
        assert not (out / "discovery.json").exists()

    @patch("requests.Session.get", side_effect=fake_get)
    def test_run_with_report(self, mock_get, tmp_path):
        config = ApiConfiguration(base_url=BASE_URL, api_name="Demo", output_path=str(tmp_path))

        ConnectorPipeline().run(config, write_report=True)

        assert (tmp_path / "demo_api.py").exists()
        report = json.loads((tmp_path / "discovery.json").read_text())
        assert report["metadata"]["api_name"] == "Demo"

    @patch("requests.Session.get", side_effect=fake_get)
    def test_existing_schema_is_kept(self, mock_get, settings):
        """Test a schema supplied up front is not replaced by sampling"""
        supplied = analyze_json_response('[{"login": "x"}]', "/users")
        config = ApiConfiguration(base_url=BASE_URL, schemas={"Users": supplied})

        ConnectorPipeline(settings).run(config)

        assert config.schemas["Users"] is supplied

    @patch("requests.Session.get")
    def test_unreachable_api_still_generates(self, mock_get, settings):
        """Test connectivity failure is not fatal"""
        mock_get.side_effect = requests.exceptions.ConnectionError("refused")
        config = ApiConfiguration(base_url=BASE_URL)

        report = ConnectorPipeline(settings).run(config)

        assert report.connectivity.is_success is False
        assert report.endpoints_found == 0
        assert report.files_written == 0

    @pytest.mark.parametrize("base_url", ["", "   "])
    def test_missing_base_url(self, base_url):
        with patch("requests.Session.get") as mock_get:
            with pytest.raises(ValueError, match="Base URL is required"):
                ConnectorPipeline().run(ApiConfiguration(base_url=base_url))

            mock_get.assert_not_called()

    @patch("requests.Session.get", side_effect=fake_get)
    def test_generation_failure(self, mock_get, settings):
        generator = Mock()
        generator.generate.return_value = GenerationResult(is_success=False, error_message="boom")
        writer = Mock()

        with pytest.raises(RuntimeError, match="boom"):
            ConnectorPipeline(settings, generator=generator, writer=writer).run(
                ApiConfiguration(base_url=BASE_URL)
            )

        writer.write.assert_not_called()

    @patch("requests.Session.close")
    @patch("requests.Session.get", side_effect=fake_get)
    def test_session_closed(self, mock_get, mock_close, settings):
        ConnectorPipeline(settings).run(ApiConfiguration(base_url=BASE_URL))

        mock_close.assert_called_once()
