"""
FastAPI 应用入口（uvicorn main:app）
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import LoggingMiddleware, RequestIDMiddleware
from api.routes import payments as payments_routes
from api.routes import webhooks as webhooks_routes
from core.config import settings
from core.exceptions import register_exception_handlers
from core.logging_config import configure_logging, get_logger
from core.response import success_response
from core.settings import payment_settings
from infrastructure.external.payments.simulator import normalize_gateway_name


configure_logging()
logger = get_logger(__name__)


def _gateways_on_dev_secrets() -> list[str]:
    return [
        name for name in ("paymentcloud", "easypay")
        if not payment_settings.gateway_settings(name).webhook_secret
    ]


@asynccontextmanager
async def lifespan(app: FastAPI):
    dev_secrets = _gateways_on_dev_secrets()
    if dev_secrets:
        logger.warning(
            "webhook_secret_defaults_in_use",
            gateways=dev_secrets,
            hint="set PAYMENT__<GATEWAY>__WEBHOOK_SECRET",
        )
    logger.info(
        "application_started",
        gateway=normalize_gateway_name(payment_settings.gateway),
        environment=settings.ENVIRONMENT,
        latency_scale=payment_settings.latency_scale,
    )
    yield
    logger.info("application_shutdown")


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Storefront checkout and simulated payment gateways",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    # 后添加的先执行：CORS → RequestID → Logging
    application.add_middleware(LoggingMiddleware)
    application.add_middleware(RequestIDMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(application)

    application.include_router(payments_routes.router, prefix=settings.API_PREFIX)
    application.include_router(webhooks_routes.router, prefix=settings.API_PREFIX)

    @application.get("/", tags=["Root"])
    async def root():
        return success_response(
            data={
                "name": settings.PROJECT_NAME,
                "version": settings.VERSION,
                "gateway": normalize_gateway_name(payment_settings.gateway),
                "docs": "/docs",
            },
            message="Welcome",
        )

    @application.get("/health", tags=["Health"])
    async def health_check():
        return success_response(data={"status": "healthy"}, message="OK")

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.log_level.lower(),
    )
