"""
Accessibility router.
Served on both /api/accessibility and /api/accessibility/analyze; the web
client has used each at some point.
"""
from typing import Optional

from fastapi import APIRouter, Depends

from webinspect.models import AnalyzeRequest
from webinspect.services.audits import audit_accessibility
from webinspect.services.fetcher import PageFetcher, get_fetcher
from webinspect.services.signals import SignalSource, get_signal_source
from webinspect.utils.responses import run_audit

router = APIRouter(prefix="/api/accessibility", tags=["Accessibility"])


@router.post("")
@router.post("/analyze")
async def analyze_accessibility(
    req: Optional[AnalyzeRequest] = None,
    fetcher: PageFetcher = Depends(get_fetcher),
    signals: SignalSource = Depends(get_signal_source),
):
    raw = req.url if req else None
    return await run_audit("accessibility", raw, lambda url: audit_accessibility(url, fetcher, signals))
