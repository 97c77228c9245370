import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import check_integrity, init_db
from app.errors import JobBoardError, ValidationError
from app.routers import applications, jobs

logger = logging.getLogger("app")

ERROR_STATUS = {
    "validation_error": 400,
    "forbidden": 403,
    "not_found": 404,
    "conflict": 409,
    "expired": 410,
    "store_failure": 503,
}


def configure_logging() -> None:
    if logging.getLogger().handlers:
        return
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: ensure schema and integrity-check the job board database
    configure_logging()
    try:
        init_db()
        check_integrity()
    except Exception as exc:
        logger.error("Could not run startup schema/integrity check: %s", exc)
    yield


app = FastAPI(
    title="Alumni Job Board",
    description="Job postings by alumni and applications by students",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(JobBoardError)
async def job_board_error_handler(request: Request, exc: JobBoardError):
    return JSONResponse(status_code=ERROR_STATUS.get(exc.kind, 500), content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Body and query type mismatches share the domain validation shape.
    fields = []
    for error in exc.errors():
        loc = error.get("loc", ())
        # ("body", "vacancy", "int"): the field is the first name after the source
        name = loc[1] if len(loc) > 1 else None
        if isinstance(name, str) and name not in fields:
            fields.append(name)
    return await job_board_error_handler(request, ValidationError("Invalid request", fields=fields))


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    started_at = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started_at) * 1000.0
    logger.info(
        "http request method=%s path=%s status=%s duration_ms=%.2f",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


app.include_router(jobs.router, prefix=settings.api_prefix)
app.include_router(applications.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
