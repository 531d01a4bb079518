from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import exams, faculty, health, leaves, timetable
from app.core.config import get_settings
from app.core.exceptions import AppError
from app.core.middleware import AccessLogMiddleware, RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from app.db.bootstrap import ensure_schema

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.auto_create_schema:
        ensure_schema()
    logger.info("SERVICE READY | project=%s | api_prefix=%s", settings.project_name, settings.api_prefix)
    yield


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("REQUEST FAILED | path=%s | message=%s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message, "details": exc.details})


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(AccessLogMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ROUTERS = (
    (health.router, "", "health"),
    (faculty.router, "/faculty", "faculty"),
    (timetable.router, "", "timetable"),
    (exams.router, "", "exams"),
    (leaves.router, "", "leaves"),
)
for router, prefix, tag in ROUTERS:
    app.include_router(router, prefix=f"{settings.api_prefix}{prefix}", tags=[tag])
