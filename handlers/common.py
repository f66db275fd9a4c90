# handlers/common.py —— CORS/JSON 基础响应 + 错误类型（所有 handler 复用）
import json
from functools import wraps

CORS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Max-Age": "86400",
}
JSON_CONTENT_TYPE = "application/json; charset=utf-8"


class ApiError(Exception):
    """可直接转换为 {"error": message} 响应的异常；status 即 HTTP 状态码。"""
    status = 500

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class ValidationError(ApiError):
    status = 400


class NotFoundError(ApiError):
    status = 404


class RoutingError(ApiError):
    status = 404


def ok(payload, code=200):
    return {"isBase64Encoded": False, "statusCode": code, "body": json.dumps(payload, ensure_ascii=False)}

def err(code, message):
    return ok({"error": message}, code)

def empty(code=200):
    return {"isBase64Encoded": False, "statusCode": code, "body": ""}

def with_cors(fn):
    """在路由出口统一补齐 CORS 与 Content-Type，handler 不需要各自处理。"""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        resp = fn(*args, **kwargs)
        headers = dict(resp.get("headers") or {})
        headers.update(CORS)
        headers["Content-Type"] = JSON_CONTENT_TYPE
        return {**resp, "headers": headers}
    return wrapper

def require(body, *fields, message=None):
    """必填检查：缺失或为空值（None / "" / 0）即 400。"""
    body = body or {}
    missing = [f for f in fields if not body.get(f)]
    if missing:
        raise ValidationError(message or f"缺少必要欄位：{', '.join(missing)}")
    return [body.get(f) for f in fields]
