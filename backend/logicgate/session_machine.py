"""Unlock progression for one learner's reading session.

A paragraph is ``locked`` until every paragraph before it has been validated
or revealed. The machine mutates a ``SessionSnapshot`` and hands the whole
snapshot to its store after every change. That the submitted index equals the
active one is checked by the HTTP layer, not here.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from .analysis import AnalysisGateway
from .evaluation import EvaluationGateway, EvaluationRequest
from .schemas import Passage, SessionSnapshot, UserInput
from .session_store import SessionStore
from .webhook_client import GatewayError

logger = logging.getLogger(__name__)

DEFAULT_RETRY_HINT = "Try again. Capture the key idea and ensure the role is correct."


@dataclass
class SessionRuntime:
	"""Transient flags that are shown to the learner but never persisted."""

	is_analyzing: bool = False
	is_evaluating: bool = False
	hint: str = ""
	pending: Set[int] = field(default_factory=set)


@dataclass(frozen=True)
class SubmitOutcome:
	is_valid: bool
	hint: str = ""
	# True when the submit was dropped without calling the evaluator
	ignored: bool = False


class ReadingSession:
	def __init__(
		self,
		store: SessionStore,
		analysis: AnalysisGateway,
		evaluation: EvaluationGateway,
		runtime: Optional[SessionRuntime] = None,
	) -> None:
		self.store = store
		self.analysis = analysis
		self.evaluation = evaluation
		self.runtime = runtime or SessionRuntime()
		self.snapshot = store.load() or SessionSnapshot()

	async def select_passage(self, passage: Passage) -> bool:
		self.runtime.is_analyzing = True
		self.runtime.hint = ""
		self.snapshot = SessionSnapshot()
		try:
			paragraphs = await self.analysis.analyze(passage.full_text)
		except GatewayError as e:
			logger.error("Analysis failed for passage %s: %s", passage.id, e)
			self.store.clear()
			return False
		finally:
			self.runtime.is_analyzing = False
		self.snapshot = SessionSnapshot(current_passage=passage.model_copy(update={"paragraphs": paragraphs}))
		self.store.save(self.snapshot)
		return True

	async def submit_answer(self, index: int, summary: str, role: str, pivots: List[str]) -> SubmitOutcome:
		paragraphs = self.snapshot.paragraphs
		if not 0 <= index < len(paragraphs):
			return SubmitOutcome(is_valid=False, ignored=True)
		if index in self.runtime.pending:
			logger.info("Ignoring duplicate submit for paragraph %d while one is in flight", index)
			return SubmitOutcome(is_valid=False, ignored=True)
		expert = paragraphs[index]
		self.runtime.pending.add(index)
		self.runtime.is_evaluating = True
		self.runtime.hint = ""
		try:
			result = await self.evaluation.evaluate(
				EvaluationRequest(
					user_summary=summary,
					expert_summary=expert.summary,
					role_selected=role,
					expert_role=expert.role,
				)
			)
		finally:
			self.runtime.pending.discard(index)
			self.runtime.is_evaluating = bool(self.runtime.pending)

		if result.get("isValid"):
			self._record(
				index,
				user_summary=summary,
				role_selected=role,
				pivots=list(pivots),
				is_validated=True,
			)
			self._unlock_next()
			self.snapshot.mastery_streak += 1
			self.store.save(self.snapshot)
			return SubmitOutcome(is_valid=True)

		hint = str(result.get("hint") or DEFAULT_RETRY_HINT)
		self.runtime.hint = hint
		return SubmitOutcome(is_valid=False, hint=hint)

	def reveal_answer(self, index: int) -> bool:
		paragraphs = self.snapshot.paragraphs
		if not 0 <= index < len(paragraphs):
			return False
		expert = paragraphs[index]
		self._record(
			index,
			user_summary=expert.summary,
			role_selected=expert.role,
			pivots=list(expert.pivots),
			is_validated=True,
			is_revealed=True,
		)
		self._unlock_next()
		self.runtime.hint = ""
		self.store.save(self.snapshot)
		return True

	def reset(self) -> None:
		self.snapshot = SessionSnapshot()
		self.runtime.hint = ""
		self.store.clear()

	def view(self) -> Dict[str, Any]:
		# The previous passage is hidden while a new one is being analyzed
		snap = SessionSnapshot() if self.runtime.is_analyzing else self.snapshot
		data = snap.model_dump(by_alias=True, mode="json")
		data.update(
			{
				"isAnalyzing": self.runtime.is_analyzing,
				"isEvaluating": self.runtime.is_evaluating,
				"hint": self.runtime.hint,
				"isComplete": snap.is_complete,
				"progressPercent": snap.progress_percent(),
				"paragraphStates": [snap.paragraph_state(i) for i in range(len(snap.paragraphs))],
			}
		)
		return data

	def _record(self, index: int, **fields: Any) -> None:
		status = self.snapshot.completion_status
		for pos, entry in enumerate(status):
			if entry.paragraph_index == index:
				status[pos] = entry.model_copy(update=fields)
				return
		status.append(UserInput(paragraph_index=index, **fields))

	def _unlock_next(self) -> None:
		if self.snapshot.active_paragraph_index < len(self.snapshot.paragraphs):
			self.snapshot.active_paragraph_index += 1
