"""Shared fixtures: project contexts and a stub StoryCrafter backend."""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest


class StubService:
    """
    Records requests and answers them from per-path handlers.

    A handler is either a ``(status, body)`` tuple or a callable taking the
    ``httpx.Request`` and returning an ``httpx.Response`` (or raising).
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.routes: Dict[str, Any] = {}

    def respond(self, path: str, status: int = 200, body: Any = None):
        self.routes[path] = (status, body)

    def on(self, path: str, handler: Callable[[httpx.Request], httpx.Response]):
        self.routes[path] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        if callable(route):
            return route(request)
        status, body = route
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def sent_json(self, index: int = 0) -> Optional[Dict[str, Any]]:
        return json.loads(self.requests[index].content)


@pytest.fixture
def stub():
    """A stub HTTP service shared by backend and registry clients."""
    return StubService()


@pytest.fixture
def taskmaster_context():
    """Minimal context: a name, a platform and one technical decision."""
    return {
        "project_summary": {"project_name": "TaskMaster", "platform": "Web"},
        "final_decisions": {"technical": {"frontend": "React"}},
    }


@pytest.fixture
def full_context():
    """Context with every section populated."""
    return {
        "project_summary": {
            "project_name": "TaskMaster",
            "project_description": "Task tracking for small teams",
            "target_users": "Freelancers",
            "platform": "Web",
            "timeline": "3 months",
            "team_size": 5,
        },
        "final_decisions": {
            "product": {
                "mvp_features": ["Task creation", "Reminders"],
                "target_users": "Freelancers",
                "development_approach": "Agile",
            },
            "technical": {
                "frontend": "React",
                "backend_framework": "FastAPI",
                "databases": ["Postgres", "Redis"],
            },
            "project": {
                "timeline": "3 months",
                "team": "2 devs",
                "milestones": {"phase_1": "MVP", "phase_2": "Beta"},
                "testing": "Unit tests",
            },
        },
        "questions_and_answers": [{"q": "Who?", "a": "Freelancers"}],
    }
