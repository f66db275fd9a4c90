# handlers/students.py —— /students：列表 / 新增或整体更新 / 删除
# 说明：
# - GET    /students  全量三表查询后在内存拼成 account -> 学生文档
# - POST   /students  （PUT 同）学生 upsert + 任务整体替换，单个 batch 原子执行
# - DELETE /students  按学号删除，tasks / comments 由外键级联

import re
from handlers.common import ok, require, NotFoundError
from services import aggregate
from services.db import get_gateway, StorageError

SELECT_STUDENTS = "SELECT account, name, school, class, email FROM students"
SELECT_TASKS = "SELECT id, student_account, name, status, teacher_comment FROM tasks"
SELECT_COMMENTS = "SELECT id, task_id, sender, content, timestamp, is_recalled, is_blocked FROM comments"

UPSERT_STUDENT = """
    INSERT INTO students (account, name, school, class, email)
    VALUES (:account, :name, :school, :class_name, :email)
    ON CONFLICT(account) DO UPDATE SET
        name = excluded.name,
        school = excluded.school,
        class = excluded.class,
        email = excluded.email
"""
DELETE_TASKS = "DELETE FROM tasks WHERE student_account = :account"
INSERT_TASK = """
    INSERT INTO tasks (id, student_account, name, status, teacher_comment)
    VALUES (:id, :account, :name, :status, :teacher_comment)
"""
DELETE_STUDENT = "DELETE FROM students WHERE account = :account"

_LEADING_INT = re.compile(r"^\s*([-+]?\d+)")

def _task_id(raw):
    """取开头的整数部分（"12" / 12 / 12.7 / "12abc" → 12）；解析不出或为 0 返回 None。"""
    if raw is None or isinstance(raw, bool):
        return None
    m = _LEADING_INT.match(str(raw))
    if not m:
        return None
    return int(m.group(1)) or None

def list_students(event, tail, query, body):
    """GET /students —— 三条查询任一失败即整体 500，不返回半截数据。"""
    db = get_gateway()
    try:
        students = db.prepare(SELECT_STUDENTS).all()["results"]
        tasks = db.prepare(SELECT_TASKS).all()["results"]
        comments = db.prepare(SELECT_COMMENTS).all()["results"]
    except StorageError as e:
        raise StorageError(f"資料庫讀取失敗: {e}") from e
    return ok(aggregate.assemble(students, tasks, comments))

def upsert_student(event, tail, query, body):
    """
    POST|PUT /students
    入参：{ account, name, school?, class?, email?, tasks?: [{id, name, status, teacherComment}] }
    语义：任务列表整体替换（不是合并）；id 缺失 / 为 0 / 非数字的任务静默跳过。
    """
    account, name = require(body, "account", "name", message="缺少必要欄位：account 與 name。")
    db = get_gateway()

    stmts = [
        db.prepare(UPSERT_STUDENT).bind(
            account=account,
            name=name,
            school=body.get("school") or "",
            class_name=body.get("class") or "",
            email=body.get("email") or "",
        ),
        db.prepare(DELETE_TASKS).bind(account=account),
    ]
    for t in body.get("tasks") or []:
        if not isinstance(t, dict):
            continue
        task_id = _task_id(t.get("id"))
        if task_id is None:
            continue
        stmts.append(db.prepare(INSERT_TASK).bind(
            id=task_id,
            account=account,
            name=t.get("name"),
            status=t.get("status"),
            teacher_comment=t.get("teacherComment"),
        ))

    db.batch(stmts)
    return ok({"message": "學生資料已儲存。", "account": account})

def delete_student(event, tail, query, body):
    """DELETE /students —— 入参 { account }；影响 0 行视为不存在（404）。"""
    account, = require(body, "account", message="缺少必要欄位：account。")
    res = get_gateway().prepare(DELETE_STUDENT).bind(account=account).run()
    if not res["changes"]:
        raise NotFoundError("查無此學號或資料已刪除。")
    return ok({"message": "學生資料已刪除。", "account": account})
