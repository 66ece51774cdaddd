from __future__ import annotations
import logging
import re
from typing import List, Optional

import httpx
from pydantic import ValidationError

from .envelope import unwrap_envelope
from .schemas import Paragraph, Role
from .settings import settings
from .webhook_client import GatewayError, WebhookClient

logger = logging.getLogger(__name__)

FALLBACK_ROLES: List[Role] = [
	Role.CONTEXT,
	Role.HISTORICAL_VIEWPOINT,
	Role.COUNTER_POINT,
	Role.SUPPORTING_EVIDENCE,
	Role.CONCLUSION,
]
PIVOT_PATTERN = re.compile(r"\b(While|However|Furthermore|Ultimately|But|Yet|Despite)\b", re.IGNORECASE)


class AnalysisError(GatewayError):
	pass


def extract_pivots(text: str) -> List[str]:
	return PIVOT_PATTERN.findall(text)


def fallback_analyze(full_text: str) -> List[Paragraph]:
	segments = [s for s in full_text.split("\n\n") if s]
	return [
		Paragraph(
			text=text,
			role=(FALLBACK_ROLES[i] if i < len(FALLBACK_ROLES) else Role.EVIDENCE).value,
			summary=f"Summary of paragraph {i + 1}: {text[:50]}...",
			pivots=extract_pivots(text),
		)
		for i, text in enumerate(segments)
	]


class AnalysisGateway:
	"""Splits a passage into role-tagged paragraphs, remotely or locally."""

	def __init__(
		self,
		url: Optional[str] = None,
		*,
		timeout: Optional[float] = 30,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.url = url or None
		self.timeout = timeout
		self._transport = transport

	@classmethod
	def from_settings(cls) -> "AnalysisGateway":
		return cls(settings.analyze_url, timeout=settings.gateway_timeout)

	@property
	def configured(self) -> bool:
		return self.url is not None

	async def analyze(self, full_text: str) -> List[Paragraph]:
		if not self.configured:
			logger.warning("N8N_ANALYZE_URL not defined. Using local fallback analysis.")
			return fallback_analyze(full_text)
		client = WebhookClient(self.url, timeout=self.timeout, transport=self._transport)
		try:
			raw = await client.post_json({"fullText": full_text})
		except GatewayError as e:
			raise AnalysisError(str(e)) from e
		finally:
			await client.aclose()
		result = unwrap_envelope(raw, required=("paragraphs",))
		if not result.ok:
			raise AnalysisError(f"Analysis service returned an unusable payload: {result.error}")
		paragraphs = result.value["paragraphs"]
		if not isinstance(paragraphs, list):
			raise AnalysisError("Analysis service returned non-list paragraphs")
		try:
			return [Paragraph.model_validate(p) for p in paragraphs]
		except ValidationError as e:
			raise AnalysisError(f"Analysis service returned malformed paragraphs: {e}") from e
