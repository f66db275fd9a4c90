# index.py —— 云函数入口：只负责路由表，具体逻辑都在 handlers/
import logging
import os

from router import route
from handlers import students
from handlers import student_login
from handlers import comment

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# 路由表：(method, API 前缀后的第一段路径, handler)
ROUTES = [
    ("GET",    "students",      students.list_students),
    ("POST",   "students",      students.upsert_student),
    ("PUT",    "students",      students.upsert_student),
    ("DELETE", "students",      students.delete_student),

    ("POST",   "student-login", student_login.student_login),

    ("POST",   "comment",       comment.comment_action),
]

def main_handler(event, context):
    return route(event, context, ROUTES)
