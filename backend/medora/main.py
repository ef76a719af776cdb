"""
Medora Backend: online pharmacy storefront and back-office API.

ARCHITECTURE:
- FastAPI routers under /api (storefront) and /api/admin (back office)
- SQLAlchemy ORM over a single relational database
- Bearer JWT auth; each privileged handler gates itself with require_role

SAFETY MODEL:
- Prescription-only medicines are flagged; pharmacists review uploaded prescriptions
- Every back-office mutation is written to the audit log
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from medora.api.routes import (
    admin_catalog,
    admin_orders,
    admin_stats,
    admin_users,
    auth,
    brands,
    categories,
    medicines,
    orders,
    prescriptions,
)
from medora.core.config import settings
from medora.core.exceptions import register_exception_handlers
from medora.core.rate_limiter import RateLimitMiddleware
from medora.db.init_db import init_db

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
    1. Initialize database tables
    2. Create the default admin when the database has no users
    """
    logger.info("[*] Initializing database...")
    init_db()
    logger.info("[OK] Database initialized")
    yield
    logger.info("[*] Shutting down")


app = FastAPI(
    title="Medora API",
    description="Online pharmacy: catalog, checkout, prescriptions and back office.",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# SECURITY: Trust only specific hosts
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

# SECURITY: Restrict CORS to specific methods and headers (not wildcards)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],
    max_age=600,
    expose_headers=["Content-Type", "Retry-After"],
)

# SECURITY: Rate limiting to prevent brute force and DoS attacks
app.add_middleware(RateLimitMiddleware)


# SECURITY: Add security headers middleware
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if not settings.DEBUG:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(medicines.router, prefix="/api/medicines", tags=["medicines"])
app.include_router(categories.router, prefix="/api/categories", tags=["catalog"])
app.include_router(brands.router, prefix="/api/brands", tags=["catalog"])
app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
app.include_router(prescriptions.router, prefix="/api/prescriptions", tags=["prescriptions"])
app.include_router(admin_catalog.router, prefix="/api/admin", tags=["admin"])
app.include_router(admin_orders.router, prefix="/api/admin", tags=["admin"])
app.include_router(admin_users.router, prefix="/api/admin", tags=["admin"])
app.include_router(admin_stats.router, prefix="/api/admin", tags=["admin"])


@app.get("/health")
def health():
    return {"status": "ok"}
