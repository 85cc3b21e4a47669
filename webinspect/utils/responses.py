"""
Route-boundary helper shared by the analyze endpoints.

Validates the target, runs the domain pipeline under the per-domain timeout
and maps every failure onto the ``{"error": ...}`` contract.
"""
import logging
from typing import Any, Awaitable, Callable

from pydantic import BaseModel

from ..exceptions import AnalysisTimeout, AuditHTTPError, InvalidURLError, PageFetchError
from ..services.audits import DOMAIN_LABELS, with_timeout
from .url import normalize_url

logger = logging.getLogger(__name__)

# domains whose page fetch failure is the caller's problem rather than ours
_PAGE_FETCH_IS_CLIENT_ERROR = {"seo"}


def envelope(result: BaseModel) -> dict:
    return {"success": True, "data": result.model_dump(by_alias=True, mode="json")}


def validated_url(raw: Any) -> str:
    try:
        return normalize_url(raw)
    except InvalidURLError as e:
        raise AuditHTTPError(400, e.message)


async def run_audit(domain: str, raw_url: Any, audit: Callable[[str], Awaitable[BaseModel]]) -> dict:
    url = validated_url(raw_url)
    label = DOMAIN_LABELS[domain]
    logger.info("%s analysis requested for %s", label, url)

    try:
        result = await with_timeout(audit(url))
    except AnalysisTimeout:
        logger.warning("%s analysis timed out for %s", label, url)
        raise AuditHTTPError(504, f"{label} analysis timed out")
    except PageFetchError as e:
        logger.warning("%s page fetch failed: %s", label, e)
        if domain in _PAGE_FETCH_IS_CLIENT_ERROR:
            raise AuditHTTPError(400, "Failed to fetch page content")
        raise AuditHTTPError(500, f"{label} analysis failed")
    except Exception:
        logger.exception("%s analysis failed for %s", label, url)
        raise AuditHTTPError(500, f"{label} analysis failed")

    return envelope(result)
