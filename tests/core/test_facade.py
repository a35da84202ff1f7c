from datetime import timedelta

import pytest

from fieldgate.core import api as core_api
from fieldgate.core.config import CoreConfig
from fieldgate.core.errors import InputError, UnknownValidator
from fieldgate.core.jobs import InMemoryJobStore
from fieldgate.core.sqlite_jobs import SqliteJobStore
from fieldgate.core.types import (
    FieldDefinition,
    FieldValidationRule,
    RanBy,
    ValidationLevel,
    ValidationStatus,
    ValidatorId,
    ValidatorInput,
    failure,
)
from tests.helpers._builders import BASE_TIME, RaisingCheck, StaticCheck, make_engine, make_job, run


def _identity_field(*rules: FieldValidationRule) -> FieldDefinition:
    return FieldDefinition(id="full_name", label="Full name", validations=list(rules))


def test_run_validation_without_ticket_records_nothing() -> None:
    engine = make_engine()

    result = run(
        core_api.run_validation(
            "curp.lookup",
            ValidatorInput(field_id="curp", value="bad"),
            engine=engine,
        )
    )

    assert result.status is ValidationStatus.FAIL
    assert run(engine.store.list("T-1")) == []


def test_run_validation_with_ticket_records_job(clock) -> None:
    engine = make_engine()

    run(
        core_api.run_validation(
            "curp.lookup",
            ValidatorInput(field_id="curp", value="bad"),
            ticket_id="T-1",
            level="soft",
            engine=engine,
        )
    )

    (job,) = run(core_api.list_jobs("T-1", engine=engine))
    assert job.level is ValidationLevel.SOFT
    assert job.status is ValidationStatus.FAIL


def test_run_validation_requires_field_id() -> None:
    with pytest.raises(InputError):
        run(core_api.run_validation("curp.lookup", ValidatorInput(field_id=" "), engine=make_engine()))


def test_evaluate_field_runs_every_rule_and_decides(clock) -> None:
    engine = make_engine(
        overrides={
            ValidatorId.NAMESCAN_PEP_SCREENING: StaticCheck(failure("Name match found")),
            ValidatorId.ZAPSIGN_DOC_SIGNATURE: RaisingCheck(TimeoutError("slow vendor")),
        }
    )
    field_def = _identity_field(
        FieldValidationRule(ValidatorId.ZAPSIGN_DOC_SIGNATURE, ValidationLevel.SOFT),
        FieldValidationRule(ValidatorId.NAMESCAN_PEP_SCREENING, ValidationLevel.HARD),
    )

    evaluation = run(
        core_api.evaluate_field("T-1", field_def, "Ana Lopez", ran_by=RanBy(uid="u-1"), engine=engine)
    )

    assert [item.result.status for item in evaluation.results] == [
        ValidationStatus.ERROR,
        ValidationStatus.FAIL,
    ]
    assert evaluation.decision.allowed is False
    assert evaluation.decision.reason == "Name match found"
    jobs = run(engine.store.list("T-1"))
    assert sorted(job.validator_id for job in jobs) == ["namescan.pep_screening", "zapsign.doc_signature"]
    assert all(job.ran_by == RanBy(uid="u-1") for job in jobs)
    assert evaluation.to_dict()["decision"] == {"allowed": False, "reason": "Name match found"}


def test_evaluate_field_without_rules_is_allowed() -> None:
    evaluation = run(core_api.evaluate_field("T-1", _identity_field(), "x", engine=make_engine()))

    assert evaluation.results == []
    assert evaluation.decision.allowed is True


def test_record_job_appends_with_equal_timestamps(clock) -> None:
    engine = make_engine()

    job_id = run(
        core_api.record_job(
            {
                "ticketId": "T-1",
                "fieldId": "rfc",
                "validatorId": "rfc_sat.lookup",
                "level": "hard",
                "status": "fail",
                "summary": "Invalid RFC format",
                "links": [{"label": "SAT", "url": "https://www.sat.gob.mx/"}],
                "ranBy": {"uid": "u-2"},
            },
            engine=engine,
        )
    )

    (job,) = run(engine.store.list("T-1"))
    assert job.id == job_id
    assert job.started_at == job.finished_at == BASE_TIME
    assert job.ran_by == RanBy(uid="u-2")
    assert job.links[0].url == "https://www.sat.gob.mx/"


@pytest.mark.parametrize(
    ("payload", "error"),
    [
        ({"fieldId": "rfc", "validatorId": "rfc_sat.lookup"}, InputError),
        ({"ticketId": "T-1", "validatorId": "rfc_sat.lookup"}, InputError),
        ({"ticketId": "T-1", "fieldId": "rfc"}, InputError),
        ({"ticketId": "T-1", "fieldId": "rfc", "validatorId": "rfc_sat.lookup", "status": "maybe"}, InputError),
        ({"ticketId": "T-1", "fieldId": "rfc", "validatorId": "acme"}, UnknownValidator),
    ],
)
def test_record_job_rejects_invalid_payloads(payload, error) -> None:
    engine = make_engine()

    with pytest.raises(error):
        run(core_api.record_job(payload, engine=engine))


def test_latest_results_feed_the_policy_from_history() -> None:
    store = InMemoryJobStore()
    engine = make_engine(store=store)
    run(store.add(make_job(field_id="curp", status=ValidationStatus.FAIL, summary="old failure")))
    run(
        store.add(
            make_job(
                field_id="curp",
                status=ValidationStatus.SUCCESS,
                summary="fixed",
                finished_at=BASE_TIME + timedelta(minutes=1),
            )
        )
    )
    run(
        store.add(
            make_job(
                field_id="rfc",
                validator_id="rfc_sat.lookup",
                status=ValidationStatus.ERROR,
                summary="SAT outage",
            )
        )
    )
    fields = [
        FieldDefinition(id="curp", label="CURP", validations=[FieldValidationRule(ValidatorId.CURP_LOOKUP)]),
        FieldDefinition(
            id="rfc",
            label="RFC",
            validations=[FieldValidationRule(ValidatorId.RFC_SAT_LOOKUP, ValidationLevel.HARD)],
        ),
        FieldDefinition(
            id="name",
            label="Name",
            validations=[FieldValidationRule(ValidatorId.NAMESCAN_PEP_SCREENING, ValidationLevel.HARD)],
        ),
    ]

    evaluated = run(core_api.latest_results("T-1", fields, engine=engine))
    decision = run(core_api.ticket_decision("T-1", fields, engine=engine))

    assert [item.result.summary for item in evaluated] == ["fixed", "SAT outage", core_api.NOT_YET_VALIDATED]
    assert evaluated[2].result.status is ValidationStatus.PENDING
    assert decision.allowed is False
    assert decision.reason == "SAT outage"


def test_evaluated_from_payload_validates_shape() -> None:
    evaluated = core_api.evaluated_from_payload(
        [{"rule": {"validatorId": "curp.lookup"}, "result": {"status": "error", "summary": "down"}}]
    )

    assert evaluated[0].rule.level is ValidationLevel.HARD
    assert core_api.can_submit(evaluated).reason == "down"
    with pytest.raises(InputError):
        core_api.evaluated_from_payload([{"rule": {"validatorId": "curp.lookup"}}])


def test_build_engine_uses_sqlite_when_path_configured(tmp_path) -> None:
    engine = core_api.build_engine(CoreConfig(job_store_path=str(tmp_path / "jobs.db"), rate_limit_max=5))

    assert isinstance(engine.store, SqliteJobStore)
    assert engine.registry.sealed is True
    assert engine.limiter.max_requests == 5
    assert engine.runner.store is engine.store


def test_build_engine_defaults_to_memory_store() -> None:
    engine = core_api.build_engine(CoreConfig())

    assert isinstance(engine.store, InMemoryJobStore)
    assert [info.id for info in core_api.list_validators(engine=engine)] == list(ValidatorId)


def test_ticket_decision_sees_hard_failure_behind_long_history(clock) -> None:
    engine = make_engine()
    curp_field = FieldDefinition(
        id="curp",
        label="CURP",
        validations=[FieldValidationRule(ValidatorId.CURP_LOOKUP, ValidationLevel.HARD)],
    )
    run(
        core_api.run_validation(
            ValidatorId.CURP_LOOKUP,
            ValidatorInput(field_id="curp", value="bad"),
            ticket_id="T-1",
            engine=engine,
        )
    )
    for _ in range(210):
        run(
            core_api.run_validation(
                ValidatorId.NAMESCAN_PEP_SCREENING,
                ValidatorInput(field_id="full_name", value="Ana Lopez"),
                ticket_id="T-1",
                level="soft",
                engine=engine,
            )
        )

    decision = run(core_api.ticket_decision("T-1", [curp_field], engine=engine))

    assert all(job.field_id == "full_name" for job in run(core_api.list_jobs("T-1", 200, engine=engine)))
    assert decision.allowed is False
    assert decision.reason == "Invalid CURP format"


@pytest.mark.parametrize("validator_id", ["", "   ", None])
def test_run_validation_requires_validator_id(validator_id) -> None:
    with pytest.raises(InputError, match="validatorId and fieldId are required"):
        run(core_api.run_validation(validator_id, ValidatorInput(field_id="curp", value="x"), engine=make_engine()))
