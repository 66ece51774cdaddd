from __future__ import annotations
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Difficulty(str, Enum):
	VERY_EASY = "Very Easy"
	EASY = "Easy"
	MEDIUM = "Medium"
	MEDIUM_HARD = "Medium-Hard"
	HARD = "Hard"


DIFFICULTY_ORDER: List[Difficulty] = list(Difficulty)


class Role(str, Enum):
	CONTEXT = "Context"
	BACKGROUND = "Background"
	HISTORICAL_VIEWPOINT = "Historical Viewpoint"
	CURRENT_STRATEGY = "Current Strategy"
	COUNTER_POINT = "Counter-point"
	ALTERNATIVE_HYPOTHESIS = "Alternative Hypothesis"
	REBUTTAL = "Rebuttal"
	EVIDENCE = "Evidence"
	SUPPORTING_EVIDENCE = "Supporting Evidence"
	SUPPORTING_DETAIL = "Supporting Detail"
	HYPOTHESIS = "Hypothesis"
	LIMITATION = "Limitation"
	CONCLUSION = "Conclusion"
	UNKNOWN = "Unknown"

	@classmethod
	def parse(cls, label: object) -> "Role":
		"""Map a free-form label onto the closed role list, exact match only."""
		if isinstance(label, Role):
			return label
		try:
			return cls(str(label).strip())
		except ValueError:
			return cls.UNKNOWN


# Roles a learner can pick from
SELECTABLE_ROLES: List[Role] = [r for r in Role if r is not Role.UNKNOWN]


class CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Paragraph(CamelModel):
	# role keeps the label exactly as authored; role_kind classifies it
	text: str
	role: str = ""
	summary: str = ""
	pivots: List[str] = Field(default_factory=list)

	@field_validator("role", "summary", mode="before")
	@classmethod
	def _none_as_empty(cls, value: object) -> object:
		return "" if value is None else value

	@field_validator("pivots", mode="before")
	@classmethod
	def _none_as_no_pivots(cls, value: object) -> object:
		return [] if value is None else value

	@property
	def role_kind(self) -> Role:
		return Role.parse(self.role)


class Passage(CamelModel):
	id: str
	title: str
	difficulty: Difficulty
	full_text: str = ""
	paragraphs: Optional[List[Paragraph]] = None


class UserInput(CamelModel):
	paragraph_index: int
	user_summary: str = ""
	role_selected: str = ""
	pivots: List[str] = Field(default_factory=list)
	is_validated: bool = False
	is_revealed: Optional[bool] = None

	@property
	def role_kind(self) -> Role:
		return Role.parse(self.role_selected)


class SessionSnapshot(CamelModel):
	"""Everything persisted for one learner, saved and loaded as a unit."""

	current_passage: Optional[Passage] = None
	active_paragraph_index: int = 0
	completion_status: List[UserInput] = Field(default_factory=list)
	mastery_streak: int = 0

	@property
	def paragraphs(self) -> List[Paragraph]:
		if self.current_passage is None or self.current_passage.paragraphs is None:
			return []
		return self.current_passage.paragraphs

	@property
	def is_complete(self) -> bool:
		if self.current_passage is None or self.current_passage.paragraphs is None:
			return False
		return self.active_paragraph_index >= len(self.paragraphs)

	def paragraph_state(self, index: int) -> str:
		if index < self.active_paragraph_index:
			return "completed"
		if index == self.active_paragraph_index:
			return "active"
		return "locked"

	def progress_percent(self) -> float:
		total = len(self.paragraphs)
		if total == 0:
			return 0.0
		return min(self.active_paragraph_index + 1, total) / total * 100

	def input_for(self, index: int) -> Optional[UserInput]:
		for entry in self.completion_status:
			if entry.paragraph_index == index:
				return entry
		return None
