# services/aggregate.py
# 扁平行 → 嵌套文档：students → tasks → comments
# 全量列表与单人登录共用同一套拼装逻辑；只读输入，不修改传入的行。

from typing import Any, Dict, Iterable, List, Optional

Row = Dict[str, Any]


def _flag(value) -> bool:
    # 库里存 0/1；个别驱动会给出 "1" 或 True
    try:
        return int(value) == 1
    except (TypeError, ValueError):
        return False

def comment_document(row: Row) -> Row:
    return {
        "id": row.get("id"),
        "sender": row.get("sender"),
        "content": row.get("content"),
        "timestamp": row.get("timestamp"),
        "isRecalled": _flag(row.get("is_recalled")),
        "isBlocked": _flag(row.get("is_blocked")),
    }

def group_comments(rows: Optional[Iterable[Row]]) -> Dict[Any, List[Row]]:
    """task_id -> [comment 文档]，顺序与输入行一致。"""
    grouped: Dict[Any, List[Row]] = {}
    for row in rows or []:
        grouped.setdefault(row.get("task_id"), []).append(comment_document(row))
    return grouped

def task_document(row: Row, comments_by_task: Dict[Any, List[Row]]) -> Row:
    return {
        "id": row.get("id"),
        "name": row.get("name"),
        "status": row.get("status"),
        "teacherComment": row.get("teacher_comment"),
        "comments": list(comments_by_task.get(row.get("id"), [])),
    }

def student_document(row: Row) -> Row:
    doc = dict(row)
    doc["tasks"] = []
    return doc

def assemble(students: Optional[Iterable[Row]],
             tasks: Optional[Iterable[Row]],
             comments: Optional[Iterable[Row]]) -> Dict[Any, Row]:
    """
    account -> 学生文档（含 tasks，每个 task 含 comments）。
    - 找不到所属学生的 task 直接丢弃，不报错
    - 没有留言的 task，comments 为 []
    """
    comments_by_task = group_comments(comments)
    by_account: Dict[Any, Row] = {}
    for row in students or []:
        by_account[row.get("account")] = student_document(row)

    for row in tasks or []:
        owner = by_account.get(row.get("student_account"))
        if owner is None:
            continue
        owner["tasks"].append(task_document(row, comments_by_task))
    return by_account

def assemble_one(student: Row,
                 tasks: Optional[Iterable[Row]],
                 comments: Optional[Iterable[Row]]) -> Row:
    return assemble([student], tasks, comments)[student.get("account")]
