from __future__ import annotations
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from ..analysis import AnalysisGateway
from ..catalog import find_by_id, pick_random
from ..db import get_db
from ..deps import get_analysis_gateway, get_evaluation_gateway, get_passages
from ..evaluation import EvaluationGateway
from ..schemas import CamelModel, Difficulty, Passage
from ..session_machine import ReadingSession, SessionRuntime
from ..session_store import SqlSessionStore

router = APIRouter(prefix="/api/session", tags=["session"])


class SelectRequest(CamelModel):
	difficulty: Optional[Difficulty] = None
	passage_id: Optional[str] = None


class SubmitRequest(CamelModel):
	paragraph_index: int
	summary: str
	role: str
	pivots: List[str] = []


class RevealRequest(CamelModel):
	paragraph_index: int


# Flags of requests still in flight, keyed by session; idle entries are dropped
_runtimes: Dict[str, SessionRuntime] = {}


def _hold(session_key: str, session: ReadingSession) -> None:
	_runtimes.setdefault(session_key, session.runtime)


def _release(session_key: str) -> None:
	runtime = _runtimes.get(session_key)
	if runtime is not None and not runtime.is_analyzing and not runtime.pending:
		del _runtimes[session_key]


def get_reading_session(
	session_key: str = Path(..., min_length=1, max_length=128),
	db: Session = Depends(get_db),
	analysis: AnalysisGateway = Depends(get_analysis_gateway),
	evaluation: EvaluationGateway = Depends(get_evaluation_gateway),
) -> ReadingSession:
	runtime = _runtimes.get(session_key) or SessionRuntime()
	return ReadingSession(SqlSessionStore(db, session_key), analysis, evaluation, runtime)


def _require_active(session: ReadingSession, index: int) -> None:
	snap = session.snapshot
	if snap.current_passage is None or snap.current_passage.paragraphs is None:
		raise HTTPException(status_code=409, detail="No passage selected")
	if snap.is_complete:
		raise HTTPException(status_code=409, detail="Passage already completed")
	if index != snap.active_paragraph_index:
		raise HTTPException(
			status_code=409,
			detail=f"Paragraph {index} is {snap.paragraph_state(index)}; active paragraph is {snap.active_paragraph_index}",
		)


@router.get("/{session_key}")
async def get_state(session: ReadingSession = Depends(get_reading_session)):
	return session.view()


@router.post("/{session_key}/select")
async def select_passage(
	session_key: str,
	req: SelectRequest,
	session: ReadingSession = Depends(get_reading_session),
	passages: List[Passage] = Depends(get_passages),
):
	if req.passage_id:
		passage = find_by_id(passages, req.passage_id)
	elif req.difficulty is not None:
		passage = pick_random(passages, req.difficulty)
	else:
		raise HTTPException(status_code=400, detail="difficulty or passageId is required")
	if passage is None:
		raise HTTPException(status_code=404, detail="No passage found for that selection")
	_hold(session_key, session)
	try:
		selected = await session.select_passage(passage)
		return {"selected": selected, "session": session.view()}
	finally:
		_release(session_key)


@router.post("/{session_key}/submit")
async def submit_answer(session_key: str, req: SubmitRequest, session: ReadingSession = Depends(get_reading_session)):
	if not req.summary.strip() or not req.role.strip():
		raise HTTPException(status_code=400, detail="summary and role are required")
	_require_active(session, req.paragraph_index)
	_hold(session_key, session)
	try:
		outcome = await session.submit_answer(req.paragraph_index, req.summary, req.role, req.pivots)
		return {
			"isValid": outcome.is_valid,
			"hint": outcome.hint,
			"ignored": outcome.ignored,
			"session": session.view(),
		}
	finally:
		_release(session_key)


@router.post("/{session_key}/reveal")
async def reveal_answer(req: RevealRequest, session: ReadingSession = Depends(get_reading_session)):
	_require_active(session, req.paragraph_index)
	session.reveal_answer(req.paragraph_index)
	return session.view()


@router.delete("/{session_key}")
async def reset(session_key: str, session: ReadingSession = Depends(get_reading_session)):
	session.reset()
	_release(session_key)
	return session.view()
