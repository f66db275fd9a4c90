# router.py —— 轻量路由：按 API 前缀后的第一段路径 + method 分发
# - OPTIONS 预检直接 200（不做路径匹配）
# - 匹配不到 → 404 {"error": "API Path Not Found"}
# - handler 抛 ApiError → 对应状态码；其它任何异常 → 500 {"error": str(e)}
# - CORS / Content-Type 由 with_cors 统一补齐
import base64
import json
import logging
import os

from handlers.common import ApiError, RoutingError, err, empty, with_cors

logger = logging.getLogger(__name__)

API_PREFIX = "/" + os.environ.get("API_PREFIX", "/api").strip("/")

def _parse_query(event):
    qs = event.get("queryString") or event.get("queryStringParameters") or {}
    if isinstance(qs, dict):
        return {k: (v if v is not None else "") for k, v in qs.items()}
    return {}

def _parse_body(event):
    body = event.get("body")
    if not body:
        return {}
    if isinstance(body, dict):
        return body
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    try:
        parsed = json.loads(body)
    except ValueError:
        return {"_raw": body}
    return parsed if isinstance(parsed, dict) else {"_raw": parsed}

def _method(event):
    return (event.get("httpMethod") or ((event.get("requestContext") or {}).get("http") or {}).get("method") or "GET").upper()

def _split_path(event):
    """返回 (第一段, 其余部分)；前缀可有可无：/api/students 与 /students 等价。"""
    path = event.get("path") or (event.get("requestContext") or {}).get("path") or "/"
    if API_PREFIX != "/" and (path == API_PREFIX or path.startswith(API_PREFIX + "/")):
        path = path[len(API_PREFIX):]
    head, _, tail = path.lstrip("/").partition("/")
    return head, tail

def _match(routes, method, segment):
    for m, seg, handler in routes:
        if m == method and seg == segment:
            return handler
    raise RoutingError("API Path Not Found")

@with_cors
def route(event, context, routes):
    method, segment = "?", ""
    try:
        method = _method(event)
        if method == "OPTIONS":
            return empty()
        segment, tail = _split_path(event)
        handler = _match(routes, method, segment)
        return handler(event, tail, _parse_query(event), _parse_body(event))
    except ApiError as e:
        logger.info("%s /%s -> %d %s", method, segment, e.status, e.message)
        return err(e.status, e.message)
    except Exception as e:
        logger.exception("%s /%s failed", method, segment)
        return err(500, str(e) or e.__class__.__name__)
