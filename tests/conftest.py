# tests/conftest.py

import json

import pytest
from sqlalchemy.pool import StaticPool

import index
from services import db


@pytest.fixture
def gateway():
    engine = db.make_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    gw = db.Gateway(engine)
    db.init_schema(gw)
    db.set_gateway(gw)
    yield gw
    db.set_gateway(None)
    engine.dispose()


@pytest.fixture
def call(gateway):
    def _call(method, path, body=None, **event):
        event.setdefault("httpMethod", method)
        event.setdefault("path", path)
        if body is not None:
            event.setdefault("body", json.dumps(body, ensure_ascii=False))
        resp = index.main_handler(event, None)
        payload = json.loads(resp["body"]) if resp["body"] else None
        return resp["statusCode"], payload, resp["headers"]
    return _call


@pytest.fixture
def alice(call):
    status, _, _ = call("POST", "/api/students", {
        "account": "s1",
        "name": "Alice",
        "school": "North High",
        "class": "3A",
        "email": "alice@example.com",
        "tasks": [
            {"id": 1, "name": "HW1", "status": "open"},
            {"id": 2, "name": "HW2", "status": "done", "teacherComment": "nice"},
        ],
    })
    assert status == 200
    return "s1"
