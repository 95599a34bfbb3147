"""Application wiring for the Clockwork time-tracking API.

This module is the glue that brings together configuration, database setup,
middleware, API routers, and error handling. Reading it top to bottom gives a
bird's-eye view of *what* pieces exist and *when* they are initialised.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.errors import (
    AppError,
    app_error_handler,
    http_exception_handler,
    rate_limit_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from .core.rate_limit import limiter
from .db.session import init_db
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware

# ---------- App init ----------
app = FastAPI(title=settings.APP_NAME)

# Uploaded logos are plain files served from the uploads folder.
app.mount("/uploads", StaticFiles(directory=str(settings.UPLOADS_DIR)), name="uploads")

# ---------- DB init/migrations ----------
# ``init_db`` creates missing tables for brand-new databases and upgrades
# existing installations (including the index that allows only one running
# timer per user).
init_db()

# ---------- Middleware ----------
# Starlette runs the last-added middleware first, so the request id is assigned
# before anything else sees the request.
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestIdMiddleware)

# slowapi looks the limiter up on app.state.
app.state.limiter = limiter

# ---------- Routers ----------
from .routers import auth as auth_router  # noqa: E402

app.include_router(auth_router.router)

from .routers import time as time_router  # noqa: E402

app.include_router(time_router.router)

from .routers import admin as admin_router  # noqa: E402

app.include_router(admin_router.router)

# ---------- Exception handling ----------
# Every failure leaves the API as {"code", "message", "details"?}.
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["app"]
