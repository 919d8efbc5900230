"""Shared pytest fixtures for scenario runner tests.

Provides an in-memory transport that replays queued responses and
records every request it receives, so tests can assert both on outcomes
and on which requests were (or were not) sent.
"""

from __future__ import annotations

import random
from collections import deque

import pytest

from api_scenario.config import RunnerConfig
from api_scenario.errors import NetworkError
from api_scenario.runner.executor import ScenarioExecutor
from api_scenario.scenario.parser import parse_scenario_data
from api_scenario.transport.http_client import RequestSpec, Response


class FakeTransport:
    """Replays queued responses (or raises queued errors) in order."""

    def __init__(self, *replies):
        self.replies = deque(replies)
        self.requests: list[RequestSpec] = []

    def queue(self, *replies) -> "FakeTransport":
        self.replies.extend(replies)
        return self

    def send(self, request: RequestSpec) -> Response:
        self.requests.append(request)
        if not self.replies:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        reply = self.replies.popleft()
        if isinstance(reply, Exception):
            raise reply
        return reply

    def close(self) -> None:
        pass


def reply(status: int, body=None, headers=None) -> Response:
    return Response(status=status, headers=headers or {}, body=body, text="")


REGISTRATION_FLOW = {
    "meta": {"name": "registration-flow", "base_url": "https://api.test"},
    "variables": {
        "email": "eve.holt@reqres.in",
        "password": "pistol",
        "user_name": "xYz123",
    },
    "steps": [
        {
            "name": "register",
            "method": "POST",
            "url": "/register",
            "body": {"email": "${email}", "password": "${password}"},
            "assert": [
                {"name": "registration succeeded", "critical": True, "status": 200},
            ],
            "extract": {"authToken": "token"},
        },
        {
            "name": "login",
            "method": "POST",
            "url": "/login",
            "body": {"email": "${email}", "password": "${password}"},
            "assert": [
                {"name": "token received", "json": "token"},
            ],
        },
        {
            "name": "create",
            "method": "POST",
            "url": "/users",
            "headers": {"Authorization": "Bearer ${authToken}"},
            "body": {"name": "${user_name}", "job": "crocodile keeper"},
            "assert": [
                {
                    "name": "has id > 0",
                    "critical": True,
                    "checks": [{"status": 201}, {"json": "id", "cast": "int", "gt": 0}],
                },
                {"name": "name matches", "critical": True, "json": "name", "eq": "${user_name}"},
            ],
            "extract": [{"key": "createdId", "path": "id", "cast": "int"}],
        },
        {
            "name": "update",
            "method": "PUT",
            "url": "/users/${createdId}",
            "headers": {"Authorization": "Bearer ${authToken}"},
            "body": {"name": "${user_name}", "job": "updated crocodile keeper"},
            "assert": [
                {"name": "updated", "status": 200},
            ],
        },
    ],
}


def registration_replies():
    return [
        reply(200, {"token": "abc123"}),
        reply(200, {"token": "abc123"}),
        reply(201, {"id": 42, "name": "xYz123"}),
        reply(200, {"name": "xYz123", "updatedAt": "2026-10-18"}),
    ]


@pytest.fixture
def registration_scenario():
    return parse_scenario_data(REGISTRATION_FLOW)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def make_executor():
    def _make(transport, **config) -> ScenarioExecutor:
        return ScenarioExecutor(
            RunnerConfig(**config),
            client=transport,
            rng=random.Random(1234),
        )
    return _make


@pytest.fixture
def network_error():
    return NetworkError("Connection failed: connection refused")
