import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.routes import admin, applications, auth, employer, health, jobs, jobseeker, notifications
from app.core import config
from app.core.errors import register_exception_handlers
from app.core.logging_config import sanitize_log_data, setup_logging
from app.db.init_db import init_db
from app.db.migrate import run_migrations

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL, config.LOG_DIR)
    logger.info("Starting HireHaven API with settings: %s", sanitize_log_data({
        "database_url": config.DATABASE_URL,
        "run_migrations": config.RUN_MIGRATIONS,
        "rate_limit_backend": config.RATE_LIMIT_BACKEND,
        "upload_dir": config.UPLOAD_DIR,
        "email_enabled": bool(config.SMTP_HOST),
    }))
    if config.RUN_MIGRATIONS:
        run_migrations()
    else:
        init_db()
    logger.info("HireHaven API started")
    yield
    logger.info("HireHaven API stopped")


# ============================================
# FASTAPI APP INIT
# ============================================

app = FastAPI(title="HireHaven API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

register_exception_handlers(app)


# ============================================
# REGISTER ALL ROUTERS
# ============================================

app.include_router(auth.router)
app.include_router(jobs.router)
app.include_router(applications.router)
app.include_router(employer.router)
app.include_router(jobseeker.router)
app.include_router(notifications.router)
app.include_router(admin.router)
app.include_router(health.router)

os.makedirs(config.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=config.UPLOAD_DIR), name="uploads")


@app.get("/")
def root():
    return {"status": "HireHaven API running"}
