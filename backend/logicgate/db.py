from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from .settings import settings


def make_engine(url: str) -> Engine:
	if url.startswith("sqlite"):
		# Requests are served from FastAPI's thread pool
		return create_engine(url, connect_args={"check_same_thread": False}, future=True)
	return create_engine(url, pool_pre_ping=True, future=True)


engine = make_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def get_db():
	db = SessionLocal()
	try:
		yield db
	finally:
		db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
	"""Session for work outside a request: commit on success, roll back on error."""
	db = SessionLocal()
	try:
		yield db
		db.commit()
	except Exception:
		db.rollback()
		raise
	finally:
		db.close()


def init_db(*, reset: bool = False) -> None:
	from . import models  # noqa: F401

	if reset:
		Base.metadata.drop_all(bind=engine)
	Base.metadata.create_all(bind=engine)
