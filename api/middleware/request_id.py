"""
Request ID 中间件：透传或生成追踪 ID，并写入 structlog 上下文
"""
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from shared.headers import GATEWAY_HEADER, REQUEST_ID_HEADER


def client_ip(request: Request) -> str:
    """X-Forwarded-For 第一跳 → X-Real-IP → 连接地址"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or (request.client.host if request.client else "unknown")


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        context = {
            "request_id": request_id,
            "client_ip": client_ip(request),
            "method": request.method,
            "path": request.url.path,
        }
        # webhook 请求按网关检索
        gateway = request.headers.get(GATEWAY_HEADER)
        if gateway:
            context["gateway"] = gateway.strip().lower()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(**context)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
