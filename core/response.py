"""
响应信封（服务自身的接口与全部错误响应；支付接口成功时直接返回 DTO）

成功：{"code": 0, "message": "...", "data": {...}, "error": null}
失败：{"code": <业务码>, "message": "...", "data": null, "error": {...}}
"""
from datetime import datetime
from typing import Any, Generic, Mapping, Optional, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_serializer

from shared.codes import BusinessCode
from shared.timeutil import utc_isoformat, utcnow


T = TypeVar("T")


class ErrorDetail(BaseModel):
    type: str
    details: Optional[dict] = None
    field: Optional[str] = None
    request_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return utc_isoformat(value)


class Response(BaseModel, Generic[T]):
    code: int
    message: str
    data: Optional[T] = None
    error: Optional[ErrorDetail] = None

    def to_json_response(self, status_code: int, headers: Optional[Mapping[str, str]] = None) -> JSONResponse:
        return JSONResponse(status_code=status_code, content=self.model_dump(mode="json"), headers=headers)


def success_response(data: Any = None, message: str = "Success") -> Response:
    return Response(code=BusinessCode.SUCCESS, message=message, data=data)


def error_response(
    code: int,
    message: str,
    *,
    error_type: str = "BusinessError",
    details: Optional[dict] = None,
    field: Optional[str] = None,
    request_id: Optional[str] = None,
) -> Response:
    return Response(
        code=int(code),
        message=message,
        error=ErrorDetail(type=error_type, details=details, field=field, request_id=request_id),
    )
