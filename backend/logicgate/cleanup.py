from __future__ import annotations
from datetime import datetime, timedelta
from sqlalchemy import delete
from sqlalchemy.orm import Session

from .models import ReaderSessionRow


def purge_stale_sessions(db: Session, days: int = 7) -> int:
	threshold = datetime.utcnow() - timedelta(days=days)
	res = db.execute(delete(ReaderSessionRow).where(ReaderSessionRow.updated_at < threshold))
	db.commit()
	return res.rowcount or 0
