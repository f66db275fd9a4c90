# handlers/comment.py —— POST /comment：留言 新增 / 收回 / 封锁
# 入参 { action: "ADD" | "RECALL" | "BLOCK", ... }
# - ADD:    task_id, sender, content, timestamp 均必填 → 返回新留言 id
# - RECALL: comment_id → is_recalled = 1
# - BLOCK:  comment_id → is_blocked = 1
# RECALL / BLOCK 不检查留言是否存在；重复执行结果相同。
from enum import Enum

from handlers.common import ok, require, ValidationError
from services.db import get_gateway

INSERT_COMMENT = """
    INSERT INTO comments (task_id, sender, content, timestamp, is_recalled, is_blocked)
    VALUES (:task_id, :sender, :content, :timestamp, 0, 0)
"""

def insert_comment_sql(dialect):
    # SQLite 直接用 lastrowid；其它库靠 RETURNING 拿新 id
    return INSERT_COMMENT if dialect == "sqlite" else INSERT_COMMENT.rstrip() + " RETURNING id"

RECALL_COMMENT = "UPDATE comments SET is_recalled = 1 WHERE id = :id"
BLOCK_COMMENT = "UPDATE comments SET is_blocked = 1 WHERE id = :id"


class CommentAction(str, Enum):
    ADD = "ADD"
    RECALL = "RECALL"
    BLOCK = "BLOCK"


def _add(body):
    task_id, sender, content, timestamp = require(
        body, "task_id", "sender", "content", "timestamp",
        message="缺少留言必要欄位：task_id, sender, content, timestamp")
    db = get_gateway()
    res = db.prepare(insert_comment_sql(db.engine.dialect.name)).bind(
        task_id=task_id, sender=sender, content=content, timestamp=timestamp).run()
    return {"message": "留言已新增。", "commentId": res["meta"]["last_row_id"]}

def _flag_update(sql, message):
    def apply(body):
        comment_id, = require(body, "comment_id", message="缺少 comment_id")
        get_gateway().prepare(sql).bind(id=comment_id).run()
        return {"message": message, "commentId": comment_id}
    return apply

ACTIONS = {
    CommentAction.ADD: _add,
    CommentAction.RECALL: _flag_update(RECALL_COMMENT, "留言已收回。"),
    CommentAction.BLOCK: _flag_update(BLOCK_COMMENT, "留言已封鎖。"),
}

def parse_action(raw) -> CommentAction:
    if not raw:
        raise ValidationError("缺少 action")
    try:
        return CommentAction(raw)
    except ValueError:
        raise ValidationError("無效的 action")

def comment_action(event, tail, query, body):
    action = parse_action((body or {}).get("action"))
    return ok(ACTIONS[action](body))
