# remedial_attendance/__init__.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.database import close_db, init_db
from .core.errors import register_exception_handlers
from .core.logging import logger
from .middleware import RequestIDMiddleware
from .routes import master_teacher_attendance, teacher_attendance


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("Application startup completed")
    yield
    await close_db()
    logger.info("Application shutdown completed")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="API for recording remedial-session attendance",
        version=settings.VERSION,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Include routers
    app.include_router(teacher_attendance.router, prefix="/api/v1")
    app.include_router(master_teacher_attendance.router, prefix="/api/v1")

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "ok", "version": settings.VERSION}

    return app
