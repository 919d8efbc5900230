from __future__ import annotations

import pytest

from api_scenario.context import UNDEFINED
from api_scenario.scenario.schema import Assertion, Check, Extraction
from api_scenario.transport.http_client import Response
from api_scenario.validators.assertion_engine import AssertionEngine
from api_scenario.validators.extraction import apply_cast, extract, lookup


@pytest.fixture
def response() -> Response:
    return Response(
        status=201,
        headers={"Content-Type": "application/json; charset=utf-8"},
        body={"id": "42", "name": "xYz123", "data": [{"id": 1}, {"id": 2}], "note": None},
    )


@pytest.fixture
def engine() -> AssertionEngine:
    return AssertionEngine()


@pytest.mark.parametrize(
    "check, expected",
    [
        (Check(subject="status", op="eq", expected=201), True),
        (Check(subject="status", op="in", expected=[200, 204]), False),
        (Check(subject="json", path="id", op="gt", expected=0, cast="int"), True),
        (Check(subject="json", path="id", op="gt", expected=0), False),  # str vs int
        (Check(subject="json", path="name", op="matches", expected=r"^x[A-Z]"), True),
        (Check(subject="json", path="data.1.id", op="eq", expected=2), True),
        (Check(subject="json", path="token", op="exists", expected=True), False),
        (Check(subject="json", path="token", op="exists", expected=False), True),
        (Check(subject="json", path="token", op="ne", expected="abc"), True),
        (Check(subject="json", path="note", op="exists", expected=True), True),
        (Check(subject="header", path="content-type", op="contains", expected="json"), True),
        (Check(subject="header", path="X-Missing", op="eq", expected="x"), False),
    ],
)
def test_evaluate_check(engine, response, check, expected) -> None:
    passed, _ = engine.evaluate_check(check, response)
    assert passed is expected


def test_all_assertions_evaluated_in_order(engine, response) -> None:
    assertions = [
        Assertion(name="a", checks=[Check(subject="status", expected=500)], severity="critical"),
        Assertion(name="b", checks=[Check(subject="status", expected=201)]),
        Assertion(name="c", checks=[Check(subject="json", path="missing", op="exists", expected=True)]),
    ]

    report = engine.evaluate(assertions, response)

    assert [r.name for r in report.results] == ["a", "b", "c"]
    assert [r.passed for r in report.results] == [False, True, False]
    assert [r.name for r in report.critical_failures] == ["a"]
    assert report.passed_count == 1
    assert "got 201" in report.results[0].details


def test_assertion_requires_every_check(engine, response) -> None:
    assertion = Assertion(
        name="created with id",
        checks=[
            Check(subject="status", expected=201),
            Check(subject="json", path="id", op="gt", expected=100, cast="int"),
        ],
    )

    result = engine.evaluate([assertion], response).results[0]

    assert result.passed is False
    assert "json:id gt 100" in result.details


def test_lookup_and_cast() -> None:
    body = {"data": [{"id": "7"}], "flag": True}

    assert lookup(body, "data.0.id") == "7"
    assert lookup(body, "data.3.id") is UNDEFINED
    assert lookup(body, "data.x") is UNDEFINED
    assert lookup(None, "id") is UNDEFINED
    assert apply_cast("7", "int") == 7
    assert apply_cast("seven", "int") is UNDEFINED
    assert apply_cast(True, "int") is UNDEFINED
    assert apply_cast(UNDEFINED, "int") is UNDEFINED
    assert apply_cast(3, "str") == "3"
    assert apply_cast(float("inf"), "int") is UNDEFINED
    assert apply_cast(float("nan"), "int") is UNDEFINED
    assert apply_cast(10 ** 400, "float") is UNDEFINED


def test_extract_missing_field_is_undefined(response) -> None:
    assert extract(response, Extraction(path="token", key="authToken")) is UNDEFINED
    assert extract(response, Extraction(path="id", key="createdId", cast="int")) == 42
