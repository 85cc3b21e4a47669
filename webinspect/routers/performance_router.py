"""
Performance router — Core Web Vitals, resource, network and mobile audit.
"""
from typing import Optional

from fastapi import APIRouter, Depends

from webinspect.models import AnalyzeRequest
from webinspect.services.audits import audit_performance
from webinspect.services.fetcher import PageFetcher, get_fetcher
from webinspect.services.signals import SignalSource, get_signal_source
from webinspect.utils.responses import run_audit

router = APIRouter(prefix="/api/performance", tags=["Performance"])


@router.post("/analyze")
async def analyze_performance(
    req: Optional[AnalyzeRequest] = None,
    fetcher: PageFetcher = Depends(get_fetcher),
    signals: SignalSource = Depends(get_signal_source),
):
    raw = req.url if req else None
    return await run_audit("performance", raw, lambda url: audit_performance(url, fetcher, signals))
