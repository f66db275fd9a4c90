# tests/test_comment.py

import pytest


def _add(call, **overrides):
    body = {"action": "ADD", "task_id": 1, "sender": "t1", "content": "good", "timestamp": "2024-01-01"}
    body.update(overrides)
    return call("POST", "/api/comment", body)


def _comments_of_task_1(call):
    _, payload, _ = call("GET", "/api/students")
    return payload["s1"]["tasks"][0]["comments"]


def test_add_comment(call, alice):
    status, payload, _ = _add(call)

    assert status == 200
    assert isinstance(payload["commentId"], int)
    assert _comments_of_task_1(call) == [{
        "id": payload["commentId"],
        "sender": "t1",
        "content": "good",
        "timestamp": "2024-01-01",
        "isRecalled": False,
        "isBlocked": False,
    }]


@pytest.mark.parametrize("field", ["task_id", "sender", "content", "timestamp"])
def test_add_requires_every_field(call, alice, field):
    status, payload, _ = _add(call, **{field: ""})

    assert status == 400
    assert set(payload) == {"error"}
    assert _comments_of_task_1(call) == []


def test_recall_comment(call, alice):
    _, added, _ = _add(call)
    before = _comments_of_task_1(call)[0]

    status, payload, _ = call("POST", "/api/comment", {"action": "RECALL", "comment_id": added["commentId"]})

    assert status == 200
    assert payload["commentId"] == added["commentId"]
    after = _comments_of_task_1(call)[0]
    assert after == {**before, "isRecalled": True}


def test_recall_twice_is_noop(call, alice):
    _, added, _ = _add(call)
    call("POST", "/api/comment", {"action": "RECALL", "comment_id": added["commentId"]})
    once = _comments_of_task_1(call)

    status, _, _ = call("POST", "/api/comment", {"action": "RECALL", "comment_id": added["commentId"]})

    assert status == 200
    assert _comments_of_task_1(call) == once


def test_block_comment(call, alice):
    _, added, _ = _add(call)

    status, _, _ = call("POST", "/api/comment", {"action": "BLOCK", "comment_id": added["commentId"]})

    assert status == 200
    comment = _comments_of_task_1(call)[0]
    assert comment["isBlocked"] is True
    assert comment["isRecalled"] is False


def test_flags_on_unknown_comment_succeed_silently(call, alice):
    status, payload, _ = call("POST", "/api/comment", {"action": "BLOCK", "comment_id": 999})

    assert status == 200
    assert payload["commentId"] == 999


def test_flag_requires_comment_id(call, alice):
    status, payload, _ = call("POST", "/api/comment", {"action": "RECALL"})

    assert status == 400
    assert set(payload) == {"error"}


def test_invalid_action(call):
    status, payload, _ = call("POST", "/api/comment", {"action": "EDIT", "comment_id": 1})

    assert status == 400
    assert payload == {"error": "無效的 action"}


def test_missing_action(call):
    status, payload, _ = call("POST", "/api/comment", {"task_id": 1})

    assert status == 400
    assert set(payload) == {"error"}


def test_add_to_unknown_task_is_500(call, alice):
    status, payload, _ = _add(call, task_id=404)

    assert status == 500
    assert set(payload) == {"error"}
