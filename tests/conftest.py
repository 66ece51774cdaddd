from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

_DB_DIR = Path(tempfile.mkdtemp(prefix="logicgate-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"
os.environ["N8N_ANALYZE_URL"] = ""
os.environ["N8N_WEBHOOK_URL"] = ""

from logicgate.db import SessionLocal, init_db  # noqa: E402
from logicgate.schemas import Difficulty, Passage  # noqa: E402

THREE_PARAGRAPHS = (
    "While cities grow, their climate changes.\n\n"
    "Planners once ignored the extra heat.\n\n"
    "However, new sensors tell a different story."
)


@pytest.fixture(autouse=True)
def fresh_schema():
    init_db(reset=True)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def passage() -> Passage:
    return Passage(id="m-9", title="Heat", difficulty=Difficulty.MEDIUM, full_text=THREE_PARAGRAPHS)


@pytest.fixture
def catalog(passage: Passage) -> list[Passage]:
    return [
        passage,
        Passage(id="e-1", title="Bees", difficulty=Difficulty.EASY, full_text="One.\n\nTwo."),
        Passage(id="e-2", title="Birds", difficulty=Difficulty.EASY, full_text="Alpha.\n\nBeta."),
    ]
