"""
structlog 配置

structlog 与标准库 logging 共用同一条处理链：开发环境彩色控制台输出，
其余环境输出 JSON 行。只在入口处调用 configure_logging()。
"""
import json
import logging
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

from core.config import settings


# 卡信息与密钥不得进入日志
SENSITIVE_KEYS = frozenset({
    "card_number", "cardnumber", "cvv", "expiry_date", "expirydate",
    "secret", "webhook_secret", "api_key", "signature", "token",
})


def is_sensitive(key: str) -> bool:
    return key.lower() in SENSITIVE_KEYS


def mask_sensitive(_logger: Any, _method: str, event_dict: dict) -> dict:
    for key in event_dict:
        if is_sensitive(key):
            event_dict[key] = "***"
    return event_dict


def _json_dumps(obj: Any, **kwargs: Any) -> str:
    kwargs.setdefault("default", str)
    return json.dumps(obj, ensure_ascii=False, **kwargs)


def _renderer() -> Any:
    if settings.DEBUG:
        return structlog.dev.ConsoleRenderer(colors=True)
    return structlog.processors.JSONRenderer(serializer=_json_dumps)


def _pre_chain() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        mask_sensitive,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging() -> None:
    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[ProcessorFormatter.remove_processors_meta, _renderer()],
        )
    )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(settings.log_level)

    # uvicorn 的访问日志与 LoggingMiddleware 重复
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
