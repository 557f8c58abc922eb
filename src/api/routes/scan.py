"""API routes for triggering and tracking analyze/crawl jobs."""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, HttpUrl

from api.dependencies import get_config, get_store
from core.config import Config
from core.errors import A11yError, ConfigurationError
from core.storage import ResultStore
from crawler import scheduler

logger = logging.getLogger(__name__)

# In-memory job registry; results themselves live in the ResultStore
_scans: Dict[str, dict] = {}

router = APIRouter()


class ScanRequest(BaseModel):
    """Request body for starting a new scan."""

    url: HttpUrl
    crawl: bool = True
    max_depth: int = 2
    exclude_rules: Optional[List[str]] = None


class ScanResponse(BaseModel):
    """Response for scan creation."""

    scan_id: str
    status: str
    message: str


class ScanStatus(BaseModel):
    """Status of a scan."""

    scan_id: str
    status: str  # pending, running, completed, failed
    url: str
    crawl: bool = True
    pages_analyzed: int = 0
    new_results: int = 0
    result_ids: List[int] = []
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    error: Optional[str] = None


async def _run_scan(scan_id: str, request: ScanRequest, store: ResultStore, config: Config) -> None:
    """Background task: analyze or crawl, then persist the unseen results."""
    job = _scans[scan_id]
    job["status"] = "running"
    job["started_at"] = datetime.now().isoformat()

    if request.exclude_rules:
        config.audit.exclude = list(request.exclude_rules)

    try:
        url = str(request.url)
        if request.crawl:
            results = await scheduler.crawl(url, request.max_depth, config=config)
        else:
            results = [await scheduler.analyze(url, config=config)]

        # sqlite3 blocks; keep it off the event loop
        inserted = await asyncio.to_thread(store.persist_new, results)
        job["pages_analyzed"] = len(results)
        job["new_results"] = len(inserted)
        job["result_ids"] = [r.id for r in inserted]
        job["status"] = "completed"
    except A11yError as e:
        logger.warning("Scan %s failed: %s", scan_id, e)
        job["status"] = "failed"
        job["error"] = str(e)
    finally:
        job["completed_at"] = datetime.now().isoformat()


@router.post("/scan", response_model=ScanResponse)
async def create_scan(
    request: ScanRequest,
    background_tasks: BackgroundTasks,
    store: ResultStore = Depends(get_store),
    config: Config = Depends(get_config),
):
    """Start a new accessibility scan.

    The scan runs in the background. Use the returned scan_id to check status.
    """
    if request.crawl:
        try:
            scheduler.resolve_scope(str(request.url), config)
        except ConfigurationError as e:
            raise HTTPException(status_code=400, detail=str(e))

    scan_id = str(uuid.uuid4())

    _scans[scan_id] = {
        "scan_id": scan_id,
        "status": "pending",
        "url": str(request.url),
        "crawl": request.crawl,
        "pages_analyzed": 0,
        "new_results": 0,
        "result_ids": [],
        "started_at": None,
        "completed_at": None,
        "error": None,
    }

    background_tasks.add_task(_run_scan, scan_id, request, store, config)

    return ScanResponse(
        scan_id=scan_id,
        status="pending",
        message="Scan started. Use GET /api/scan/{scan_id} to check status.",
    )


@router.get("/scan/{scan_id}", response_model=ScanStatus)
async def get_scan_status(scan_id: str):
    """Get the status of a scan."""
    if scan_id not in _scans:
        raise HTTPException(status_code=404, detail="Scan not found")

    return ScanStatus(**_scans[scan_id])


@router.get("/scans", response_model=List[ScanStatus])
async def list_scans(limit: int = 10):
    """List recent scans."""
    scans = list(_scans.values())
    scans.sort(key=lambda x: x.get("started_at") or "", reverse=True)
    return [ScanStatus(**s) for s in scans[:limit]]


@router.delete("/scan/{scan_id}")
async def delete_scan(scan_id: str):
    """Forget a scan job; stored results are kept."""
    if scan_id not in _scans:
        raise HTTPException(status_code=404, detail="Scan not found")

    del _scans[scan_id]
    return {"message": "Scan deleted"}
