"""
webinspect/exceptions.py — error taxonomy for the audit pipeline.

Input errors never reach an extractor, fetch errors are absorbed by the
extractor that hit them (except the SEO top-level page fetch), everything
else surfaces at the route boundary as a 500.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class InvalidURLError(ValueError):
    """Audit target missing or not parseable as an http/https URL."""

    def __init__(self, message: str = "Invalid URL format"):
        super().__init__(message)
        self.message = message


class FetchError(Exception):
    """Network failure, timeout or refused target while fetching a URL."""


class PageFetchError(Exception):
    """The page a whole domain depends on could not be fetched."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class AnalysisTimeout(Exception):
    """A whole domain run exceeded ``audit_timeout_seconds``."""


class AuditHTTPError(Exception):
    """Rendered as ``{"error": message}`` with ``status_code``."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def add_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuditHTTPError)
    async def audit_error_handler(request: Request, exc: AuditHTTPError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
