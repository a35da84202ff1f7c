from fastapi.testclient import TestClient

from fieldgate.core.types import ValidatorId, failure
from fieldgate.server.main import create_app
from tests.helpers._builders import FailingStore, FakeMonotonic, RaisingCheck, StaticCheck, make_engine


def _client(**engine_kwargs) -> TestClient:
    return TestClient(create_app(engine=make_engine(**engine_kwargs)))


def test_health() -> None:
    response = _client().get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_list_validators_returns_catalog() -> None:
    response = _client().get("/api/v1/validators")

    assert response.status_code == 200
    validators = response.json()["validators"]
    assert [item["id"] for item in validators] == [item.value for item in ValidatorId]
    assert validators[0]["docsUrl"].startswith("https://")


def test_run_validator_requires_ids() -> None:
    response = _client().post("/api/v1/validators/run", json={"fieldId": "curp"})

    assert response.status_code == 400
    assert response.json()["detail"] == "validatorId and fieldId are required"


def test_run_validator_unknown_id_is_404() -> None:
    response = _client().post(
        "/api/v1/validators/run",
        json={"validatorId": "acme.lookup", "fieldId": "curp", "value": "x"},
    )

    assert response.status_code == 404
    assert "acme.lookup" in response.json()["detail"]


def test_run_validator_without_ticket_is_not_recorded() -> None:
    client = _client()

    response = client.post(
        "/api/v1/validators/run",
        json={"validatorId": "curp.lookup", "fieldId": "curp", "value": "GODE561231HDFRRN09"},
    )
    jobs = client.get("/api/v1/validation-jobs", params={"ticketId": "T-1"})

    assert response.status_code == 200
    assert response.json()["result"]["status"] == "success"
    assert jobs.json()["items"] == []


def test_run_validator_with_ticket_records_job_and_caller() -> None:
    client = _client()

    response = client.post(
        "/api/v1/validators/run",
        json={"validatorId": "rfc_sat.lookup", "fieldId": "rfc", "value": "bad", "ticketId": "T-1", "level": "soft"},
        headers={"X-User-Id": "agent-7", "X-User-Role": "reviewer"},
    )
    items = client.get("/api/v1/validation-jobs", params={"ticketId": "T-1"}).json()["items"]

    assert response.status_code == 200
    assert response.json()["result"]["summary"] == "Invalid RFC format"
    assert len(items) == 1
    assert items[0]["validatorId"] == "rfc_sat.lookup"
    assert items[0]["level"] == "soft"
    assert items[0]["status"] == "fail"
    assert items[0]["ranBy"] == {"uid": "agent-7", "role": "reviewer"}


def test_run_validator_vendor_fault_is_error_result_not_http_error() -> None:
    client = _client(overrides={ValidatorId.ZAPSIGN_DOC_SIGNATURE: RaisingCheck(RuntimeError("vendor down"))})

    response = client.post(
        "/api/v1/validators/run",
        json={"validatorId": "zapsign.doc_signature", "fieldId": "contract", "value": "doc-1", "ticketId": "T-1"},
    )

    assert response.status_code == 200
    assert response.json()["result"] == {
        "status": "error",
        "summary": 'Validator "zapsign.doc_signature" failed: vendor down',
        "errors": ["vendor down"],
    }


def test_run_validator_store_failure_is_503() -> None:
    client = _client(store=FailingStore())

    response = client.post(
        "/api/v1/validators/run",
        json={"validatorId": "curp.lookup", "fieldId": "curp", "value": "x", "ticketId": "T-1"},
    )

    assert response.status_code == 503
    assert "disk full" in response.json()["detail"]


def test_validate_field_runs_rules_and_returns_decision() -> None:
    client = _client(overrides={ValidatorId.NAMESCAN_PEP_SCREENING: StaticCheck(failure("Watchlist hit"))})

    response = client.post(
        "/api/v1/fields/validate",
        json={
            "ticketId": "T-9",
            "field": {
                "id": "full_name",
                "label": "Full name",
                "validations": [
                    {"validatorId": "namescan.pep_screening", "level": "soft"},
                    {"validatorId": "curp.lookup"},
                ],
            },
            "value": "Ana Lopez",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["fieldId"] == "full_name"
    assert [item["result"]["status"] for item in body["results"]] == ["fail", "fail"]
    assert body["decision"] == {"allowed": False, "reason": "Invalid CURP format"}


def test_validate_field_requires_ticket() -> None:
    response = _client().post("/api/v1/fields/validate", json={"field": {"id": "curp"}})

    assert response.status_code == 400


def test_record_and_list_validation_jobs() -> None:
    client = _client()

    first = client.post(
        "/api/v1/validation-jobs",
        json={"ticketId": "T-1", "fieldId": "curp", "validatorId": "curp.lookup", "status": "success", "summary": "ok"},
    )
    second = client.post(
        "/api/v1/validation-jobs",
        json={"ticketId": "T-1", "fieldId": "rfc", "validatorId": "rfc_sat.lookup", "status": "fail", "summary": "bad"},
    )
    response = client.get("/api/v1/validation-jobs", params={"ticketId": "T-1", "limit": 1})

    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["id"] != second.json()["id"]
    items = response.json()["items"]
    assert len(items) == 1
    assert items[0]["id"] == second.json()["id"]


def test_record_validation_job_requires_ticket() -> None:
    response = _client().post("/api/v1/validation-jobs", json={"fieldId": "curp", "validatorId": "curp.lookup"})

    assert response.status_code == 400
    assert response.json()["detail"] == "ticketId required"


def test_list_validation_jobs_requires_ticket() -> None:
    response = _client().get("/api/v1/validation-jobs")

    assert response.status_code == 400


def test_policy_can_submit() -> None:
    client = _client()

    blocked = client.post(
        "/api/v1/policy/can-submit",
        json={
            "results": [
                {"rule": {"validatorId": "zapsign.doc_signature", "level": "soft"}, "result": {"status": "fail", "summary": "unsigned"}},
                {"rule": {"validatorId": "curp.lookup", "level": "hard"}, "result": {"status": "error", "summary": ""}},
            ]
        },
    )
    allowed = client.post("/api/v1/policy/can-submit", json={"results": []})

    assert blocked.json() == {"allowed": False, "reason": "Hard validation failed"}
    assert allowed.json() == {"allowed": True}


def test_ticket_can_submit_uses_latest_jobs() -> None:
    client = _client()
    client.post(
        "/api/v1/validation-jobs",
        json={"ticketId": "T-2", "fieldId": "curp", "validatorId": "curp.lookup", "status": "fail", "summary": "bad curp"},
    )
    fields = {"fields": [{"id": "curp", "validations": [{"validatorId": "curp.lookup"}]}]}

    response = client.post("/api/v1/tickets/T-2/can-submit", json=fields)
    untouched = client.post("/api/v1/tickets/T-3/can-submit", json=fields)

    assert response.json() == {"allowed": False, "reason": "bad curp"}
    assert untouched.json() == {"allowed": True}


def test_rate_limit_returns_429_with_retry_after() -> None:
    client = _client(max_requests=2, monotonic=FakeMonotonic())

    statuses = [client.get("/api/v1/validators").status_code for _ in range(3)]
    response = client.get("/api/v1/validators")

    assert statuses == [200, 200, 429]
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "60"
    assert response.json()["detail"] == "Too many requests, slow down."
    assert client.get("/health").status_code == 200


def test_rate_limit_window_resets() -> None:
    monotonic = FakeMonotonic()
    client = _client(max_requests=1, monotonic=monotonic)

    assert client.get("/api/v1/validators").status_code == 200
    assert client.get("/api/v1/validators").status_code == 429
    monotonic.advance(61)
    assert client.get("/api/v1/validators").status_code == 200


def test_rate_limit_keys_by_forwarded_address() -> None:
    client = _client(max_requests=1, monotonic=FakeMonotonic())

    first = client.get("/api/v1/validators", headers={"X-Forwarded-For": "203.0.113.5, 10.0.0.1"})
    other = client.get("/api/v1/validators", headers={"X-Forwarded-For": "198.51.100.7"})
    repeat = client.get("/api/v1/validators", headers={"X-Forwarded-For": "203.0.113.5"})

    assert [first.status_code, other.status_code, repeat.status_code] == [200, 200, 429]
