"""Integration tests for application endpoints."""

from http import HTTPStatus

import pytest
from flask.testing import FlaskClient

from contacalc.backend.app import create_app
from contacalc.backend.config.tables import ConfigurationError, load_tax_tables
from contacalc.backend.version import get_project_version


@pytest.mark.parametrize("path", ["/health", "/api/v1/calculator/health"])
def test_health_endpoint(client: FlaskClient, path: str) -> None:
    """Ensure the health endpoint returns a successful status payload."""
    response = client.get(path)
    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["status"] == "ok"
    assert payload["version"] == get_project_version()
    assert payload["tables_year"] == load_tax_tables().year
    assert payload["inss_policy"] == "bracket"
    assert response.mimetype == "application/json"


def test_inss_policy_is_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTACALC_INSS_POLICY", "flat_capped")

    app = create_app()
    client = app.test_client()

    assert client.get("/health").get_json()["inss_policy"] == "flat_capped"
    response = client.post(
        "/api/v1/calculator/calculate",
        json={"type": "FOLHA_PAGAMENTO", "parameters": {"salario": 3000}},
    )
    inss = response.get_json()["data"]["result"]["breakdown"][0]
    assert inss["key"] == "inss"
    assert inss["value"] == pytest.approx(330)


def test_unknown_inss_policy_fails_at_startup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTACALC_INSS_POLICY", "progressive")

    with pytest.raises(ConfigurationError):
        create_app()
