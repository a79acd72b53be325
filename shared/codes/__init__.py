"""
业务码（API 信封中的 `code` 字段）

0 表示成功；1xxxx 请求参数，2xxxx 购物车与结账，3xxxx 访问控制，
4xxxx 系统错误。支付网关相关的 6xxxx 见 `shared.codes.payment_codes`。
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    SUCCESS = 0

    PARAM_ERROR = 10000
    PARAM_MISSING = 10001
    PARAM_VALIDATION_ERROR = 10003
    METHOD_NOT_ALLOWED = 10005

    NOT_FOUND = 20006
    CART_EMPTY = 20010
    CHECKOUT_STATE_ERROR = 20011

    UNAUTHORIZED = 30001
    FORBIDDEN = 30002
    TOO_MANY_REQUESTS = 30029

    SYSTEM_ERROR = 40000
    SERVICE_UNAVAILABLE = 40003


__all__ = ["BusinessCode"]
