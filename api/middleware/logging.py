"""
请求日志中间件：开始/结束各一条，带耗时与脱敏后的请求体
"""
import json
import time
from typing import Any, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from core.config import settings
from core.logging_config import get_logger, is_sensitive


logger = get_logger(__name__)

_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


def sanitize(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: "***" if is_sensitive(k) else sanitize(v) for k, v in data.items()}
    if isinstance(data, list):
        return [sanitize(v) for v in data]
    return data


class LoggingMiddleware(BaseHTTPMiddleware):
    SKIP_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})

    def __init__(self, app: ASGIApp, *, log_body: Optional[bool] = None, max_body_bytes: Optional[int] = None):
        super().__init__(app)
        if log_body is None:
            log_body = settings.LOG_REQUEST_BODY_ENABLE_BY_DEFAULT and settings.DEBUG
        self.log_body = log_body
        self.max_body_bytes = max_body_bytes or settings.LOG_REQUEST_BODY_MAX_BYTES
        # webhook 原始报文用于验签，不读取也不记录
        self.skip_body_prefixes = (f"{settings.API_PREFIX}/webhooks/",)

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        fields = {"method": request.method, "path": request.url.path}
        if request.query_params:
            fields["query_params"] = dict(request.query_params)
        body = await self._body_for_log(request)
        if body is not None:
            fields["body"] = body
        logger.info("request_started", **fields)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                duration=round(time.perf_counter() - started, 4),
                error_type=type(exc).__name__,
                error=str(exc),
                exc_info=True,
                **fields,
            )
            raise

        duration = time.perf_counter() - started
        response.headers["X-Process-Time"] = f"{duration:.3f}"
        self._log_completed(response, duration, fields)
        return response

    def _wants_body(self, request: Request) -> bool:
        if request.method not in ("POST", "PUT", "PATCH"):
            return False
        if request.url.path.startswith(self.skip_body_prefixes):
            return False
        override = (request.headers.get("X-Log-Body") or "").lower()
        if override in _TRUE:
            return True
        if override in _FALSE:
            return False
        return self.log_body

    async def _body_for_log(self, request: Request) -> Any:
        if not self._wants_body(request):
            return None
        raw = await request.body()
        if not raw:
            return None
        text = raw[: self.max_body_bytes].decode("utf-8", errors="ignore")
        if "application/json" not in request.headers.get("content-type", "").lower():
            return text
        try:
            return sanitize(json.loads(text))
        except ValueError:
            # 截断后的 JSON 无法解析，原样记录前缀
            return text

    @staticmethod
    def _log_completed(response: Response, duration: float, fields: dict) -> None:
        status_code = response.status_code
        if status_code >= 500:
            log = logger.error
        elif status_code >= 400:
            log = logger.warning
        else:
            log = logger.info
        log("request_completed", status_code=status_code, duration=round(duration, 4), **fields)
