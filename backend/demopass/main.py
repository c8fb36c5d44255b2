"""
Demo Pass - FastAPI Application Entry Point.

This is the main application module that:
1. Initializes the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Implements request ID middleware (X-Request-ID header)
4. Maps service errors onto the {success, data, message, error} envelope
5. Registers all API route handlers and the health check

The application follows a modular architecture:
- routes/: API endpoint handlers
- models/: SQLAlchemy ORM models
- services/: Business logic (batches, enrollment, attendance, reporting)
- logging_config.py: Structured logging configuration
- database.py: Database connection management
"""

import time
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from demopass import __version__
from demopass.config import CORS_ORIGINS, DATABASE_URL
from demopass.database import create_tables
from demopass.errors import DemoPassError
from demopass.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from demopass.routes import attendance, batches, enrollments, reports

# Import all models so they are registered with Base.metadata
from demopass.models import Attendance, Batch, DemoEnrollment, Student  # noqa: F401

# ──────────────────────────────────────────────────────────────
# Initialize structured logging BEFORE anything else
# ──────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger("http")

if DATABASE_URL.startswith("sqlite"):
    logger.info("Using SQLite — creating tables directly")
    create_tables()

app = FastAPI(
    title="Demo Pass",
    description=(
        "Batch enrollment and QR attendance tracking for demo classes: "
        "enroll students, issue demo passes, scan them at the door and "
        "report attendance per date, student and batch."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """
    Give every HTTP request a UUID, log its start and completion with
    latency, and echo the id back in the X-Request-ID response header.
    """
    req_id = generate_request_id()
    request_id_var.set(req_id)

    start_time = time.time()

    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        context={"request_id": req_id},
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
            "query_params": dict(request.query_params)
        })

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    response.headers["X-Request-ID"] = req_id

    log_with_context(logger, "INFO",
        f"Request completed: {request.method} {request.url.path} → {response.status_code}",
        context={"request_id": req_id},
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "status_code": response.status_code
        })

    return response


# ──────────────────────────────────────────────────────────────
# Error envelope
# ──────────────────────────────────────────────────────────────
@app.exception_handler(DemoPassError)
async def demopass_error_handler(request: Request, exc: DemoPassError):
    log_with_context(logger, "INFO",
        f"{type(exc).__name__}: {exc.message}",
        extra_data={"path": request.url.path, "status_code": exc.status_code})
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message}
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        "{}: {}".format(".".join(str(part) for part in err.get("loc", ())), err.get("msg"))
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Invalid request", "error": problems}
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)}
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    log_with_context(logger, "ERROR",
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        extra_data={"error_type": type(exc).__name__},
        exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Server error"}
    )


# ──────────────────────────────────────────────────────────────
# Register API routes
# ──────────────────────────────────────────────────────────────
app.include_router(batches.router, tags=["Batches"])
app.include_router(enrollments.router, tags=["Enrollments"])
app.include_router(attendance.router, tags=["Attendance"])
app.include_router(reports.router, tags=["Reports"])


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for container orchestration and monitoring."""
    return {"status": "healthy", "service": "demopass-backend", "version": __version__}


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "service": "Demo Pass",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "batches": "GET|POST /api/batches",
            "batch": "GET|PUT|DELETE /api/batches/{id}",
            "batch_by_code": "GET /api/batches/code/{batchId}",
            "enroll": "POST /api/enrollments",
            "enrollment": "GET /api/enrollments/{id}",
            "enrollment_by_qr": "GET /api/enrollments/qr/{token}",
            "demo_pass": "GET /api/enrollments/{id}/pass.png",
            "mark_attendance": "POST /api/attendance/mark",
            "attendance_stats": "GET /api/attendance/stats/{batchId}",
            "attendance_report": "GET /api/attendance/report/{batchId}",
            "attendance_by_batch": "GET /api/attendance/batch/{id}",
            "batch_report": "GET /api/reports/batch/{id}",
            "student_report": "GET /api/reports/student/{enrollmentId}",
            "all_batches_report": "GET /api/reports/batches"
        }
    }
