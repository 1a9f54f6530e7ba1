"""Tests for cleansing API endpoints."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from cleansing_engine.api.application import create_api_application
from cleansing_engine.api.routers.cleansing import api_create_cleansing_router
from cleansing_engine.bootstrap import bootstrap_create_pipeline
from cleansing_engine.config import EngineSettings


def _build_client(api_max_batch_size: int = 100) -> TestClient:
    """Create a test client over the bundled rule set.

    Args:
        api_max_batch_size: Request size limit.

    Returns:
        TestClient: Client bound to a fully wired application.

    Raises:
        ConfigurationError: Raised when the bundled rule set is invalid.
    """

    settings = EngineSettings(
        environment_name="test",
        reference_date=date(2024, 6, 30),
        api_max_batch_size=api_max_batch_size,
    )
    return TestClient(create_api_application(settings, bootstrap_create_pipeline(settings=settings)))


def test_api_cleansing_lists_configured_entity_types() -> None:
    """Return configured entity types in configuration order.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    response = _build_client().get("/cleansing/entities")

    assert response.status_code == 200
    assert response.json()["entity_types"][0] == "crm_cust_info"
    assert len(response.json()["entity_types"]) == 6


def test_api_cleansing_run_returns_normalized_records_and_report() -> None:
    """Return JSON-encoded normalized records, value profile, and grouped report.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    records = [
        {
            "sls_ord_num": "SO1",
            "sls_prd_key": "BK-1",
            "sls_cust_id": 10,
            "sls_order_dt": 20101229,
            "sls_ship_dt": 20110105,
            "sls_due_dt": 20110110,
            "sls_sales": 49,
            "sls_quantity": 10,
            "sls_price": "5.00",
        }
    ]

    response = _build_client().post("/cleansing/crm_sales_details", json={"records": records})

    assert response.status_code == 200
    payload = response.json()
    assert payload["passed"] is False
    assert payload["total_violations"] == 1
    assert payload["normalized_records"][0]["sls_order_dt"] == "2010-12-29"
    assert payload["normalized_records"][0]["sls_price"] == "5.00"
    assert payload["report"]["counts_by_rule"] == {"arithmetic_consistency": 1}
    violation_payload = payload["report"]["groups"][0]["violations"][0]
    assert violation_payload["reason"] == "derived_mismatch"
    assert violation_payload["details"]["expected"] == "50.00"
    assert [event["stage"] for event in payload["diagnostics"]] == ["normalize", "validate", "report"]


def test_api_cleansing_run_returns_not_found_for_unknown_entity() -> None:
    """Return HTTP 404 when the entity type is not configured.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    response = _build_client().post("/cleansing/unknown_entity", json={"records": []})

    assert response.status_code == 404
    assert response.json()["status"] == "error"
    assert "unknown_entity" in response.json()["message"]


def test_api_cleansing_run_rejects_oversized_batches() -> None:
    """Return HTTP 413 when a request exceeds the configured batch size.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    client = _build_client(api_max_batch_size=1)
    records = [{"cid": "A", "cntry": "DE"}, {"cid": "B", "cntry": "DE"}]

    single_response = client.post("/cleansing/erp_loc_a101", json={"records": records})
    batches_response = client.post("/cleansing/batches", json={"batches": {"erp_loc_a101": records}})

    assert single_response.status_code == 413
    assert batches_response.status_code == 413


def test_api_cleansing_run_batches_merges_reports() -> None:
    """Run several entity batches and return per-entity results with a merged report.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    client = _build_client()
    request_body = {
        "batches": {
            "erp_loc_a101": [{"cid": "A", "cntry": " usa"}],
            "erp_cust_az12": [{"cid": "A", "bdate": "1916-02-10", "gen": "F"}],
        }
    }

    response = client.post("/cleansing/batches", json=request_body)
    unknown_response = client.post("/cleansing/batches", json={"batches": {"unknown": []}})

    assert response.status_code == 200
    payload = response.json()
    assert payload["results"]["erp_loc_a101"]["normalized_records"][0]["cntry"] == "United States"
    assert payload["results"]["erp_cust_az12"]["normalized_records"][0]["gen"] == "Female"
    assert payload["report"]["counts_by_rule"] == {"whitespace_integrity": 1, "date_range": 1}
    assert payload["total_violations"] == 2
    assert unknown_response.status_code == 404


def test_api_cleansing_run_batches_strips_entity_keys_and_rejects_duplicates() -> None:
    """Resolve padded batch keys like the single-entity route and reject keys naming one entity twice.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    client = _build_client()
    records = [{"cid": "A", "cntry": "DE"}]

    single_response = client.post("/cleansing/%20erp_loc_a101", json={"records": records})
    padded_response = client.post("/cleansing/batches", json={"batches": {" erp_loc_a101": records}})
    duplicate_response = client.post(
        "/cleansing/batches",
        json={"batches": {"erp_loc_a101": records, "erp_loc_a101 ": records}},
    )

    assert single_response.status_code == 200
    assert padded_response.status_code == 200
    assert list(padded_response.json()["results"]) == ["erp_loc_a101"]
    assert padded_response.json()["results"]["erp_loc_a101"]["normalized_records"][0]["cntry"] == "Germany"
    assert duplicate_response.status_code == 400
    assert "erp_loc_a101" in duplicate_response.json()["message"]


class _BatchesNamedPipeline:
    """Pipeline stand-in configured with an entity type named like the batches route."""

    def job_supported_entity_types(self) -> tuple[str, ...]:
        """Return the colliding entity type list.

        Returns:
            tuple[str, ...]: Entity types including `batches`.
        """

        return ("erp_loc_a101", "batches")


def test_api_create_cleansing_router_rejects_entity_named_batches() -> None:
    """Fail router construction when an entity type would be shadowed by the batches route.

    Returns:
        None: Assertions validate router construction.

    Raises:
        AssertionError: Raised when the colliding entity type is accepted.
    """

    settings = EngineSettings(environment_name="test", reference_date=date(2024, 6, 30))

    with pytest.raises(ValueError, match="collides with the batches route"):
        api_create_cleansing_router(settings, _BatchesNamedPipeline())
