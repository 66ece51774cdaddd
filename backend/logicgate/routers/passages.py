from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends

from ..deps import get_passages
from ..schemas import DIFFICULTY_ORDER, SELECTABLE_ROLES, Difficulty, Passage

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/passages")
def list_passages(difficulty: Optional[Difficulty] = None, passages: List[Passage] = Depends(get_passages)):
	return [
		{"id": p.id, "title": p.title, "difficulty": p.difficulty.value}
		for p in passages
		if difficulty is None or p.difficulty == difficulty
	]


@router.get("/difficulties")
def list_difficulties():
	return [d.value for d in DIFFICULTY_ORDER]


@router.get("/roles")
def list_roles():
	return [r.value for r in SELECTABLE_ROLES]
