from __future__ import annotations
import json
import logging
from typing import Optional, Protocol

from pydantic import ValidationError
from sqlalchemy.orm import Session

from .models import ReaderSessionRow
from .schemas import SessionSnapshot

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
	def load(self) -> Optional[SessionSnapshot]: ...

	def save(self, snapshot: SessionSnapshot) -> None: ...

	def clear(self) -> None: ...


class InMemorySessionStore:
	def __init__(self, snapshot: Optional[SessionSnapshot] = None) -> None:
		self._raw: Optional[str] = snapshot.model_dump_json(by_alias=True) if snapshot else None

	def load(self) -> Optional[SessionSnapshot]:
		if self._raw is None:
			return None
		return SessionSnapshot.model_validate_json(self._raw)

	def save(self, snapshot: SessionSnapshot) -> None:
		self._raw = snapshot.model_dump_json(by_alias=True)

	def clear(self) -> None:
		self._raw = None

	@property
	def raw(self) -> Optional[str]:
		return self._raw


class SqlSessionStore:
	"""One row per session key; the snapshot is written in a single commit."""

	def __init__(self, db: Session, session_key: str) -> None:
		self.db = db
		self.session_key = session_key

	def load(self) -> Optional[SessionSnapshot]:
		row = self.db.get(ReaderSessionRow, self.session_key)
		if row is None:
			return None
		try:
			return SessionSnapshot.model_validate(json.loads(row.snapshot_json))
		except (ValueError, ValidationError):
			logger.warning("Discarding unreadable session snapshot for %s", self.session_key)
			return None

	def save(self, snapshot: SessionSnapshot) -> None:
		row = self.db.get(ReaderSessionRow, self.session_key)
		if row is None:
			row = ReaderSessionRow(session_key=self.session_key)
			self.db.add(row)
		row.snapshot_json = snapshot.model_dump_json(by_alias=True)
		self.db.commit()

	def clear(self) -> None:
		row = self.db.get(ReaderSessionRow, self.session_key)
		if row is not None:
			self.db.delete(row)
			self.db.commit()
