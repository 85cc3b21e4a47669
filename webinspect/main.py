"""
WebInspect FastAPI Application — main entry point
Security, performance, SEO and accessibility audits for public web pages.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .exceptions import add_exception_handlers
from .middleware.rate_limit import RateLimitMiddleware
from .routers.security_router import router as security_router
from .routers.performance_router import router as performance_router
from .routers.seo_router import router as seo_router
from .routers.accessibility_router import router as accessibility_router
from .routers.scan_router import router as scan_router

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "WebInspect starting (environment=%s, signal_source=%s)",
        settings.environment, settings.signal_source,
    )
    yield
    logger.info("WebInspect shutting down")


app = FastAPI(
    title="WebInspect API",
    description=(
        "**WebInspect** — Website audit service\n\n"
        "Features:\n"
        "- Security: HTTPS, security headers, vulnerable patterns\n"
        "- Performance: Core Web Vitals, resources, network, mobile\n"
        "- SEO: meta tags, content, technical SEO, social, structured data\n"
        "- Accessibility: WCAG-oriented checks and compliance summary\n"
        "- Full scan with an overall score\n"
    ),
    version="1.0.0",
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
    lifespan=lifespan,
)

app.add_middleware(RateLimitMiddleware)

# Add EXTRA_ALLOWED_ORIGINS (comma-separated) for preview/staging frontends.
_dev_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra_origins = [o.strip() for o in settings.extra_allowed_origins.split(",") if o.strip()]

ALLOWED_ORIGINS = _extra_origins + (
    _dev_origins if settings.environment != "production" else []
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

# Routers
app.include_router(security_router)
app.include_router(performance_router)
app.include_router(seo_router)
app.include_router(accessibility_router)
app.include_router(scan_router)


@app.get("/", tags=["Health"])
async def root():
    return {"service": "WebInspect API", "version": "1.0.0", "status": "running", "docs": "/docs"}


@app.api_route("/health", methods=["GET", "HEAD"], tags=["Health"])
async def health():
    return {
        "status": "ok",
        "environment": settings.environment,
        "signal_source": settings.signal_source,
    }
