from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text
from .db import Base


class ReaderSessionRow(Base):
	__tablename__ = "reader_sessions"
	# One row per browser/learner key; the whole session snapshot lives in one column
	session_key = Column(String(128), primary_key=True, index=True)
	snapshot_json = Column(Text, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
