"""
SEO router — meta tags, content, technical, social and structured data.
Answers 400 when the page itself cannot be fetched.
"""
from typing import Optional

from fastapi import APIRouter, Depends

from webinspect.models import AnalyzeRequest
from webinspect.services.audits import audit_seo
from webinspect.services.fetcher import PageFetcher, get_fetcher
from webinspect.utils.responses import run_audit

router = APIRouter(prefix="/api/seo", tags=["SEO"])


@router.post("/analyze")
async def analyze_seo(
    req: Optional[AnalyzeRequest] = None,
    fetcher: PageFetcher = Depends(get_fetcher),
):
    raw = req.url if req else None
    return await run_audit("seo", raw, lambda url: audit_seo(url, fetcher))
