"""API routes for browsing and maintaining stored results."""

import asyncio
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.dependencies import get_config, get_store
from core.config import Config
from core.errors import A11yError
from core.models import AnalysisResult, Violation
from core.severity import score_label, summarize_by_impact
from core.storage import ResultStore
from crawler import scheduler
from crawler.normalizer import normalize_url

router = APIRouter()


class ViolationModel(BaseModel):
    id: str
    description: str
    help: str = ""
    impact: str = "minor"
    wcag: Optional[str] = None
    nodes: List[str] = []


class ResultModel(BaseModel):
    id: int
    url: str
    violations: List[ViolationModel]
    timestamp: datetime
    label: str
    impact_summary: dict


class ResultUpdate(BaseModel):
    """Fields that may be edited on a stored result."""

    url: Optional[str] = None
    violations: Optional[List[ViolationModel]] = None


def _to_model(result: AnalysisResult) -> ResultModel:
    return ResultModel(
        id=result.id,
        url=result.url,
        violations=[ViolationModel(**v.to_dict()) for v in result.violations],
        timestamp=result.timestamp,
        label=score_label(result.violations),
        impact_summary=summarize_by_impact(result.violations),
    )


def _get_or_404(store: ResultStore, result_id: int) -> AnalysisResult:
    result = store.get(result_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Result not found")
    return result


@router.get("/results", response_model=List[ResultModel])
def list_results(store: ResultStore = Depends(get_store)):
    return [_to_model(r) for r in store.list_all()]


@router.get("/results/{result_id}", response_model=ResultModel)
def get_result(result_id: int, store: ResultStore = Depends(get_store)):
    return _to_model(_get_or_404(store, result_id))


@router.put("/results/{result_id}", response_model=ResultModel)
def update_result(result_id: int, update: ResultUpdate, store: ResultStore = Depends(get_store)):
    result = _get_or_404(store, result_id)
    if update.url is not None:
        result.url = normalize_url(update.url)
    if update.violations is not None:
        result.violations = [Violation(**v.model_dump()) for v in update.violations]
    store.update(result)
    return _to_model(result)


@router.post("/results/{result_id}/reanalyze", response_model=ResultModel)
async def reanalyze_result(
    result_id: int,
    store: ResultStore = Depends(get_store),
    config: Config = Depends(get_config),
):
    """Audit the stored URL again and overwrite the result in place."""
    result = await asyncio.to_thread(_get_or_404, store, result_id)
    try:
        fresh = await scheduler.analyze(result.url, config=config)
    except A11yError as e:
        raise HTTPException(status_code=502, detail=str(e))
    fresh.id = result.id
    await asyncio.to_thread(store.update, fresh)
    return _to_model(fresh)


@router.delete("/results/{result_id}")
def delete_result(result_id: int, store: ResultStore = Depends(get_store)):
    try:
        store.delete(result_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Result not found")
    return {"message": "Result deleted"}
