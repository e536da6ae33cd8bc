from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ValidationError

from common.rule_analysis.errors import InvalidStateError, NotFoundError
from common.rule_analysis.models import (
    AnalysisResult,
    AnalysisResultData,
    FilteredRuleBook,
    RuleBookProgress,
    SegmentDetails,
    SegmentRef,
)
from common.rule_analysis.service import RuleAnalysisService
from pipelines.data_source import build_service
from pipelines.settings import get_settings


router = APIRouter(prefix="/analyses", tags=["rule-analysis"])


@lru_cache(maxsize=1)
def get_service() -> RuleAnalysisService:
    return build_service(get_settings())


class SaveAnalysisResultRequest(BaseModel):
    rule_book_id: str
    entry_id: str
    segment_key: str
    checklist_status: Optional[str] = None
    revised_fulfillability: Optional[str] = None


class NextSegmentResponse(BaseModel):
    next: Optional[SegmentRef] = None
    finished: bool


class CompletionResponse(BaseModel):
    analysis_id: str
    complete: bool


def _not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(exc))


@router.get("/{analysis_id}/rule-books", response_model=List[FilteredRuleBook])
def filtered_rule_books(
    analysis_id: str,
    new_use: Optional[List[str]] = Query(None),
    fulfillability: Optional[List[str]] = Query(None),
    service: RuleAnalysisService = Depends(get_service),
):
    try:
        return service.get_filtered_rule_books(analysis_id, new_use=new_use, fulfillability=fulfillability)
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@router.get("/{analysis_id}/segments", response_model=List[RuleBookProgress])
def segmented_rule_book_data(analysis_id: str, service: RuleAnalysisService = Depends(get_service)):
    try:
        return service.get_segmented_rule_book_data(analysis_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@router.get("/{analysis_id}/segments/ordered", response_model=List[SegmentRef])
def ordered_segments(analysis_id: str, service: RuleAnalysisService = Depends(get_service)):
    try:
        return service.get_ordered_segments(analysis_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@router.get("/{analysis_id}/segments/next", response_model=NextSegmentResponse)
def next_segment(
    analysis_id: str,
    rule_book_id: str = Query(...),
    segment_key: str = Query(...),
    service: RuleAnalysisService = Depends(get_service),
):
    try:
        ref = service.get_next_segment(analysis_id, rule_book_id, segment_key)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return NextSegmentResponse(next=ref, finished=ref is None)


@router.get("/{analysis_id}/completion", response_model=CompletionResponse)
def completion(analysis_id: str, service: RuleAnalysisService = Depends(get_service)):
    try:
        complete = service.is_analysis_complete(analysis_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return CompletionResponse(analysis_id=analysis_id, complete=complete)


@router.get("/{analysis_id}/rule-books/{rule_book_id}/segments/{segment_key}", response_model=SegmentDetails)
def segment_details(
    analysis_id: str,
    rule_book_id: str,
    segment_key: str,
    service: RuleAnalysisService = Depends(get_service),
):
    try:
        return service.get_segment_details(analysis_id, rule_book_id, segment_key)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except InvalidStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@router.put("/{analysis_id}/results", response_model=AnalysisResult)
def save_analysis_result(
    analysis_id: str,
    payload: SaveAnalysisResultRequest,
    service: RuleAnalysisService = Depends(get_service),
):
    try:
        return service.save_analysis_result(
            analysis_id=analysis_id,
            rule_book_id=payload.rule_book_id,
            entry_id=payload.entry_id,
            segment_key=payload.segment_key,
            checklist_status=payload.checklist_status,
            revised_fulfillability=payload.revised_fulfillability,
        )
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except (ValidationError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/{analysis_id}/results/summary", response_model=AnalysisResultData)
def analysis_result_data(analysis_id: str, service: RuleAnalysisService = Depends(get_service)):
    try:
        return service.get_analysis_result_data(analysis_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@router.delete("/{analysis_id}/results", status_code=204)
def discard_analysis(analysis_id: str, service: RuleAnalysisService = Depends(get_service)):
    service.discard_analysis(analysis_id)
