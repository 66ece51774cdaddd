from __future__ import annotations
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from .envelope import unwrap_envelope
from .settings import settings
from .webhook_client import GatewayError, WebhookClient

logger = logging.getLogger(__name__)

MIN_SUMMARY_LENGTH = 20
FALLBACK_HINT = "Try to capture more detail and ensure you identify the correct functional role."
FAILED_RESULT: Dict[str, Any] = {"isValid": False, "hint": "Analysis failed to return result"}


class EvaluationRequest(BaseModel):
	user_summary: str
	expert_summary: str
	role_selected: str
	expert_role: str


def fallback_evaluate(req: EvaluationRequest) -> Dict[str, Any]:
	is_valid = len(req.user_summary) > MIN_SUMMARY_LENGTH and req.role_selected == req.expert_role
	return {"isValid": is_valid, "hint": "" if is_valid else FALLBACK_HINT}


class EvaluationGateway:
	"""Judges a learner's summary and role against the expert reference.

	Unlike analysis, failures of the remote service never propagate: they turn
	into ``FAILED_RESULT``. A successful remote answer is passed through as-is.
	"""

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
	def from_settings(cls) -> "EvaluationGateway":
		return cls(settings.evaluate_url, timeout=settings.gateway_timeout)

	@property
	def configured(self) -> bool:
		return self.url is not None

	async def evaluate(self, req: EvaluationRequest) -> Dict[str, Any]:
		if not self.configured:
			logger.warning("N8N_WEBHOOK_URL not defined. Using local fallback evaluation.")
			return fallback_evaluate(req)
		client = WebhookClient(self.url, timeout=self.timeout, transport=self._transport)
		try:
			raw = await client.post_json(req.model_dump())
		except GatewayError as e:
			logger.error("Evaluation request failed: %s", e)
			return dict(FAILED_RESULT)
		finally:
			await client.aclose()
		result = unwrap_envelope(raw)
		if not result.ok:
			logger.error("Evaluation service returned an unusable payload: %s", result.error)
			return dict(FAILED_RESULT)
		return result.value
