"""
Security router — transport, headers and vulnerable-pattern audit.
"""
from typing import Optional

from fastapi import APIRouter, Depends

from webinspect.models import AnalyzeRequest
from webinspect.services.audits import audit_security
from webinspect.services.fetcher import PageFetcher, get_fetcher
from webinspect.utils.responses import run_audit

router = APIRouter(prefix="/api/security", tags=["Security"])


@router.post("/analyze")
async def analyze_security(
    req: Optional[AnalyzeRequest] = None,
    fetcher: PageFetcher = Depends(get_fetcher),
):
    raw = req.url if req else None
    return await run_audit("security", raw, lambda url: audit_security(url, fetcher))
