"""Passage catalog backed by a header-bearing CSV file.

Expected columns: ``id``, ``title``, ``difficulty`` and ``full_text``.
"""

from __future__ import annotations
import csv
import logging
import random
from pathlib import Path
from typing import List, Optional

from .schemas import Difficulty, Passage

logger = logging.getLogger(__name__)


def load_all(path: Path | str) -> List[Passage]:
	passages: List[Passage] = []
	with open(path, newline="", encoding="utf-8") as f:
		reader = csv.DictReader(f)
		for line_no, row in enumerate(reader, start=2):
			if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
				continue
			try:
				difficulty = Difficulty((row.get("difficulty") or "").strip())
			except ValueError:
				logger.warning("Skipping passage on line %d: unknown difficulty %r", line_no, row.get("difficulty"))
				continue
			passages.append(
				Passage(
					id=(row.get("id") or "").strip(),
					title=(row.get("title") or "").strip(),
					difficulty=difficulty,
					full_text=row.get("full_text") or "",
				)
			)
	logger.info("Loaded %d passages from %s", len(passages), path)
	return passages


def pick_random(passages: List[Passage], difficulty: Difficulty | str, rng: random.Random | None = None) -> Optional[Passage]:
	try:
		tier = Difficulty(difficulty)
	except ValueError:
		return None
	filtered = [p for p in passages if p.difficulty == tier]
	if not filtered:
		return None
	return (rng or random).choice(filtered)


def find_by_id(passages: List[Passage], passage_id: str) -> Optional[Passage]:
	for passage in passages:
		if passage.id == passage_id:
			return passage
	return None
