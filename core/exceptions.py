"""
全局异常处理：业务异常 → HTTP 状态码 + 统一响应信封
"""
import traceback
import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette import status as http_status
from starlette.exceptions import HTTPException

from .response import error_response
from core.logging_config import get_logger
from domain.common.exceptions import BusinessException
from shared.codes import BusinessCode
from shared.codes.payment_codes import PaymentCode


logger = get_logger(__name__)


# 未列出的业务码按 400 处理
_CODE_TO_HTTP_STATUS: dict[int, int] = {
    BusinessCode.PARAM_ERROR: http_status.HTTP_400_BAD_REQUEST,
    BusinessCode.PARAM_MISSING: http_status.HTTP_400_BAD_REQUEST,
    BusinessCode.PARAM_VALIDATION_ERROR: 422,  # starlette 已弃用 HTTP_422_UNPROCESSABLE_ENTITY
    BusinessCode.METHOD_NOT_ALLOWED: http_status.HTTP_405_METHOD_NOT_ALLOWED,
    BusinessCode.NOT_FOUND: http_status.HTTP_404_NOT_FOUND,
    BusinessCode.CART_EMPTY: http_status.HTTP_400_BAD_REQUEST,
    BusinessCode.CHECKOUT_STATE_ERROR: http_status.HTTP_409_CONFLICT,
    BusinessCode.UNAUTHORIZED: http_status.HTTP_401_UNAUTHORIZED,
    BusinessCode.FORBIDDEN: http_status.HTTP_403_FORBIDDEN,
    BusinessCode.TOO_MANY_REQUESTS: http_status.HTTP_429_TOO_MANY_REQUESTS,
    BusinessCode.SYSTEM_ERROR: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
    BusinessCode.SERVICE_UNAVAILABLE: http_status.HTTP_503_SERVICE_UNAVAILABLE,

    PaymentCode.SESSION_CREATION_FAILED: http_status.HTTP_502_BAD_GATEWAY,
    PaymentCode.CAPTURE_FAILED: http_status.HTTP_502_BAD_GATEWAY,
    PaymentCode.REFUND_FAILED: http_status.HTTP_502_BAD_GATEWAY,
    PaymentCode.UNKNOWN_GATEWAY: http_status.HTTP_400_BAD_REQUEST,
    PaymentCode.SIGNATURE_ERROR: http_status.HTTP_401_UNAUTHORIZED,
    PaymentCode.WEBHOOK_PROCESSING_ERROR: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
    PaymentCode.CHECKOUT_FAILED: http_status.HTTP_402_PAYMENT_REQUIRED,
}

# HTTPException（含路由 404/405）→ 业务码
_HTTP_STATUS_TO_CODE: dict[int, int] = {
    400: BusinessCode.PARAM_ERROR,
    401: BusinessCode.UNAUTHORIZED,
    403: BusinessCode.FORBIDDEN,
    404: BusinessCode.NOT_FOUND,
    405: BusinessCode.METHOD_NOT_ALLOWED,
    429: BusinessCode.TOO_MANY_REQUESTS,
    503: BusinessCode.SERVICE_UNAVAILABLE,
}


def business_code_to_http_status(code: int) -> int:
    return _CODE_TO_HTTP_STATUS.get(int(code), http_status.HTTP_400_BAD_REQUEST)


def _request_id(request: Request) -> str:
    """优先取中间件写入的 request_id，其次日志上下文，最后临时生成"""
    state_id = getattr(request.state, "request_id", None)
    return state_id or structlog.contextvars.get_contextvars().get("request_id") or str(uuid.uuid4())


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(BusinessException)
    async def business_exception_handler(request: Request, exc: BusinessException):
        status_code = business_code_to_http_status(exc.code)
        log_kwargs = dict(code=int(exc.code), error_type=exc.error_type, error=exc.message, status_code=status_code)
        if status_code >= 500:
            logger.error("business_exception", **log_kwargs)
        elif int(exc.code) >= PaymentCode.SESSION_CREATION_FAILED:
            # 网关、签名类拒绝需要可检索
            logger.warning("payment_request_rejected", **log_kwargs)
        return error_response(
            exc.code,
            exc.message,
            error_type=exc.error_type,
            details=exc.details,
            field=exc.field,
            request_id=_request_id(request),
        ).to_json_response(status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        first = errors[0] if errors else {}
        # loc 第一段是 body/query/path
        field = ".".join(str(part) for part in first.get("loc", [])[1:]) or None
        return error_response(
            BusinessCode.PARAM_VALIDATION_ERROR,
            f"Validation failed: {first.get('msg', 'unknown')}",
            error_type="ValidationError",
            details={"errors": errors},
            field=field,
            request_id=_request_id(request),
        ).to_json_response(422)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return error_response(
            _HTTP_STATUS_TO_CODE.get(exc.status_code, BusinessCode.SYSTEM_ERROR),
            str(exc.detail),
            error_type="HTTPError",
            details={"status_code": exc.status_code},
            request_id=_request_id(request),
        ).to_json_response(exc.status_code, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        request_id = _request_id(request)
        logger.error("unhandled_exception", request_id=request_id, error=str(exc), exc_info=True)
        details = None
        if app.debug:
            details = {"exception": str(exc), "traceback": traceback.format_exc()}
        return error_response(
            BusinessCode.SYSTEM_ERROR,
            "Internal server error",
            error_type="SystemError",
            details=details,
            request_id=request_id,
        ).to_json_response(http_status.HTTP_500_INTERNAL_SERVER_ERROR)
