# handlers/student_login.py —— POST /student-login
# 学校 + 班级 + 学号 三者完全一致即视为登录成功，返回该生的完整文档（不包一层 account 映射）
from handlers.common import ok, require, NotFoundError, ValidationError
from services import aggregate
from services.db import get_gateway

SELECT_STUDENT = """
    SELECT account, name, school, class, email FROM students
    WHERE school = :school AND class = :class_name AND account = :account
"""
SELECT_TASKS = """
    SELECT id, student_account, name, status, teacher_comment FROM tasks
    WHERE student_account = :account
"""
SELECT_COMMENTS_IN = (
    "SELECT id, task_id, sender, content, timestamp, is_recalled, is_blocked "
    "FROM comments WHERE task_id IN ({ids})"
)

def student_login(event, tail, query, body):
    # school / class 允许空串（upsert 未填时存的就是 ""），只要求字段存在；account 必须非空
    body = body or {}
    if body.get("school") is None or body.get("class") is None:
        raise ValidationError("請提供學校、班級與學號。")
    account, = require(body, "account", message="請提供學校、班級與學號。")
    school, class_name = body["school"], body["class"]
    db = get_gateway()

    found = db.prepare(SELECT_STUDENT).bind(
        school=school, class_name=class_name, account=account).all()["results"]
    if not found:
        raise NotFoundError("登入失敗：查無此學生。")
    student = found[0]

    tasks = db.prepare(SELECT_TASKS).bind(account=account).all()["results"]
    comments = []
    if tasks:
        # id 来自库里的整数主键，直接拼进 IN 列表
        ids = ",".join(str(int(t["id"])) for t in tasks)
        comments = db.prepare(SELECT_COMMENTS_IN.format(ids=ids)).all()["results"]

    return ok(aggregate.assemble_one(student, tasks, comments))
