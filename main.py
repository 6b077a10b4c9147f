import os
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS, LOG_DIR
from migrate import migrate as run_migrations
from routers import (
    reminders_router,
    medication_schedules_router,
    jobs_router,
)

logging.basicConfig(level=logging.INFO)

os.makedirs(LOG_DIR, exist_ok=True)
error_log_file = os.path.join(LOG_DIR, "errors.log")
error_logger = logging.getLogger("rxremind.errors")
if not error_logger.handlers:
    error_logger.setLevel(logging.ERROR)
    fh = logging.FileHandler(error_log_file, encoding="utf-8")
    fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    error_logger.addHandler(fh)
    error_logger.propagate = False

# Create tables, columns and deduplication indexes
try:
    run_migrations()
except Exception as e:
    error_logger.exception("Migration warning at startup: %s", e)

app = FastAPI(
    title="RxRemind API",
    description="Medication intake reminders for the medicine-delivery app",
    version="1.0.0",
)

cors_origins = [o.strip() for o in CORS_ORIGINS.split(",") if o.strip()]
allow_any_origin = "*" in cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_any_origin else cors_origins,
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    # Browsers reject wildcard+credentials; keep credentials off for bearer-token API calls.
    allow_credentials=False if allow_any_origin else True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reminders_router)
app.include_router(medication_schedules_router)
app.include_router(jobs_router)


@app.middleware("http")
async def _capture_unhandled_errors(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as exc:  # pragma: no cover
        error_logger.exception("Unhandled server error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/", tags=["Health"])
def health_check():
    return {"status": "ok", "service": "RxRemind API", "version": "1.0.0"}
