from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from learnx.config import settings
from learnx.exceptions import LearnXError
from learnx.extensions import db
from learnx.logging_config import setup_logging
from learnx.routers.admin.routes import router as admin_router
from learnx.routers.auth.routes import router as auth_router
from learnx.routers.courses.routes import router as courses_router
from learnx.routers.instructors.routes import router as instructors_router
from learnx.routers.students.routes import router as students_router

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db.create_all()
    if settings.SEED_ON_STARTUP:
        from seeds.seed import seed_if_empty

        seed_if_empty()
    yield
    db.engine.dispose()


async def learnx_error_handler(request: Request, exc: LearnXError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = f"Invalid {field}." if field else "Invalid request."
    return JSONResponse(status_code=400, content={"message": message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error."})


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Online course marketplace: catalog, enrollment and course statistics.",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LearnXError, learnx_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth_router)
    app.include_router(courses_router)
    app.include_router(students_router)
    app.include_router(instructors_router)
    app.include_router(admin_router)

    @app.get("/api/health", tags=["health"], name="health")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
