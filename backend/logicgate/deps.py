from __future__ import annotations
from functools import lru_cache
from typing import List

from .analysis import AnalysisGateway
from .catalog import load_all
from .evaluation import EvaluationGateway
from .schemas import Passage
from .settings import settings


def get_analysis_gateway() -> AnalysisGateway:
	return AnalysisGateway.from_settings()


def get_evaluation_gateway() -> EvaluationGateway:
	return EvaluationGateway.from_settings()


@lru_cache(maxsize=1)
def _cached_passages(path: str) -> List[Passage]:
	return load_all(path)


def get_passages() -> List[Passage]:
	return _cached_passages(str(settings.passages_csv))
