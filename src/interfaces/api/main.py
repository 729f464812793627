"""FastAPI 应用入口"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config import Settings, settings
from src.domain.exceptions import DomainError, DomainValidationError, NotFoundError
from src.infrastructure.logging_config import configure_logging
from src.interfaces.api.container import ApiContainer, build_container
from src.interfaces.api.routes import health, workflow_validation

logger = logging.getLogger(__name__)


def _get_display_host(app_settings: Settings) -> str:
    """Return a host suitable for displaying in links."""
    if app_settings.host in {"0.0.0.0", "::"}:
        return "127.0.0.1"
    return app_settings.host


def create_app(app_settings: Settings | None = None, *, container: ApiContainer | None = None) -> FastAPI:
    """创建 FastAPI 应用

    参数：
        app_settings: 配置（缺省使用全局 settings）
        container: 预先组装好的容器（测试注入）；缺省时在 lifespan 中按配置组装
    """
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        display_host = _get_display_host(app_settings)
        if getattr(app.state, "container", None) is None:
            app.state.container = build_container(app_settings)
        logger.info(
            "%s v%s 启动 (env=%s, rules=%s, node_types=%d)",
            app_settings.app_name,
            app_settings.app_version,
            app_settings.env,
            app.state.container.rule_table.version,
            len(app.state.container.registry.list_types()),
        )
        logger.info("API 文档: http://%s:%s/docs", display_host, app_settings.port)
        try:
            yield
        finally:
            logger.info("%s 关闭中...", app_settings.app_name)

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        description="工作流图校验与连接建议服务",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    if container is not None:
        app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DomainValidationError)
    async def domain_validation_error_handler(request: Request, exc: DomainValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": {"code": exc.code, "message": exc.message, "errors": exc.errors}},
        )

    @app.exception_handler(NotFoundError)
    async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={
                "detail": {
                    "code": "not_found",
                    "message": str(exc),
                    "entity_type": exc.entity_type,
                    "entity_id": exc.entity_id,
                }
            },
        )

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": {"code": "domain_error", "message": str(exc)}},
        )

    @app.get("/health", tags=["Health"])
    async def health_check() -> JSONResponse:
        return JSONResponse(
            content={
                "status": "healthy",
                "app_name": app_settings.app_name,
                "version": app_settings.app_version,
                "env": app_settings.env,
            }
        )

    app.include_router(workflow_validation.router, prefix="/api", tags=["Workflow Validation"])
    app.include_router(health.router, prefix="/api", tags=["Health"])

    return app


configure_logging(settings.log_level, settings.log_format)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.interfaces.api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
