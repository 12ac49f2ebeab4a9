import logging

from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import settings
from .context import auth_events
from .db import Base, engine
from .errors import register_error_handlers
from .limiter import limiter
from .routers import auth_api, stays_api, food_api, host_api
from .routers import favorites_api, reviews_api, messages_api
from .services.session import log_auth_event

# --- Logging configuration ---
_level = logging.DEBUG if getattr(settings, "DEBUG", False) else logging.INFO
logging.basicConfig(
    level=_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
# Align uvicorn loggers with our level
for _name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(_name).setLevel(_level)
logger = logging.getLogger("staybite.startup")
logger.info("Starting %s (DEBUG=%s)", settings.APP_NAME, getattr(settings, "DEBUG", False))

app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description=(
        f"{settings.APP_NAME}: a marketplace for overnight stays and hosted food experiences.\n\n"
        "JSON API under /api. Auth is a signed session token, sent as a Bearer header or cookie."
    ),
)


@app.on_event("startup")
def startup_event():
    logger.info("Running startup tasks...")
    if settings.ENVIRONMENT != "production":
        # Production schemas are managed by alembic
        Base.metadata.create_all(bind=engine)
    app.state.unsubscribe_auth_log = auth_events.subscribe(log_auth_event)
    logger.info("Startup tasks complete.")


@app.on_event("shutdown")
def shutdown_event():
    unsubscribe = getattr(app.state, "unsubscribe_auth_log", None)
    if unsubscribe:
        unsubscribe()


# Add the limiter to the app state
app.state.limiter = limiter
# Add the exception handler for rate limit exceeded errors
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_error_handlers(app)

app.include_router(auth_api.router)
app.include_router(stays_api.router)
app.include_router(food_api.router)
app.include_router(host_api.router)
app.include_router(favorites_api.router)
app.include_router(reviews_api.router)
app.include_router(messages_api.router)

# Local object storage (unused when Cloudinary is configured)
app.mount("/media", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="media")


@app.get("/healthz")
@limiter.exempt
def healthz():
    return {"status": "ok"}


@app.get("/api/docs", include_in_schema=False)
@limiter.exempt
def api_docs_redirect():
    return RedirectResponse(url="/docs")
