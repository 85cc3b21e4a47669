"""
Scan router — all four audits for one target in a single request.
A failed domain comes back as null with its message under ``errors``.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends

from webinspect.models import AnalyzeRequest
from webinspect.services.audits import run_full_scan
from webinspect.services.fetcher import PageFetcher, get_fetcher
from webinspect.services.signals import SignalSource, get_signal_source
from webinspect.utils.responses import envelope, validated_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Scan"])


@router.post("/scan")
async def scan(
    req: Optional[AnalyzeRequest] = None,
    fetcher: PageFetcher = Depends(get_fetcher),
    signals: SignalSource = Depends(get_signal_source),
):
    url = validated_url(req.url if req else None)
    logger.info("Full scan requested for %s", url)
    report = await run_full_scan(url, fetcher, signals)
    return envelope(report)
