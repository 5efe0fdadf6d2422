"""
Event logging service.

Accepts analytics events from web clients on POST /, stamps them with the
submission time, keeps them in a key-value store, and returns every stored
event on GET /.

Features:
- Structured logging with correlation IDs
- Prometheus metrics
- Health checks (liveness and readiness)
- Memory or Redis storage
"""
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response
from .config import Settings, get_settings
from .logging import setup_logging, get_logger
from .api.router import router
from .middleware import CorrelationIdMiddleware, MetricsMiddleware
from .metrics import Metrics
from .health import HealthChecker
from .services.event_log import EventLog, create_store
from .store.base import KVStore

SERVICE_NAME = "eventlog"
VERSION = "0.1.0"

logger = get_logger()


async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return Response(status_code=405)
    return await http_exception_handler(request, exc)


def create_app(store: KVStore | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Build the application around a single shared store.

    Args:
        store: Store to use (defaults to the configured backend)
        settings: Settings to use (defaults to environment settings)
    """
    settings = settings or get_settings()
    setup_logging(json_output=settings.LOG_JSON, service_name=SERVICE_NAME)

    metrics = Metrics(service_name=SERVICE_NAME, version=VERSION)
    event_log = EventLog(store or create_store(settings), metrics=metrics)
    health_checker = HealthChecker(event_log, service_name=SERVICE_NAME, version=VERSION)

    app = FastAPI(
        title="Event Logger",
        version=VERSION,
        description="Analytics event intake and listing backed by a key-value store",
    )
    app.state.settings = settings
    app.state.metrics = metrics
    app.state.event_log = event_log

    # Order matters: the last added runs first, so correlation IDs are bound before metrics log
    app.add_middleware(MetricsMiddleware, metrics=metrics)
    app.add_middleware(CorrelationIdMiddleware)

    app.add_exception_handler(StarletteHTTPException, method_not_allowed_handler)

    app.include_router(router)
    app.mount("/metrics", make_asgi_app(registry=metrics.registry))

    @app.get("/health")
    async def health():
        """
        Liveness probe - basic health check.

        Returns 200 if service is running.
        """
        logger.debug("health_check_liveness")
        return health_checker.liveness()

    @app.get("/health/ready")
    async def health_ready():
        """
        Readiness probe.

        Returns:
            200: Service is ready to handle traffic
            503: Service is not ready
        """
        logger.debug("health_check_readiness")
        result = await health_checker.readiness()
        status_code = 200 if result["status"] == "ready" else 503
        return JSONResponse(result, status_code=status_code)

    @app.on_event("startup")
    async def startup_event():
        logger.info(
            "service_starting",
            version=VERSION,
            env=settings.ENV,
            store=type(event_log.store).__name__,
        )

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("service_stopping")
        metrics.app_up.labels(service=SERVICE_NAME, version=VERSION).set(0)
        await event_log.close()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "eventlog.main:app",
        host="0.0.0.0",
        port=get_settings().SERVICE_PORT,
    )
