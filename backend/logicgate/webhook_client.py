from __future__ import annotations
import httpx
from typing import Any, Dict, Optional


class GatewayError(RuntimeError):
	"""The external automation service could not be reached or answered garbage."""


class WebhookClient:
	def __init__(
		self,
		url: str,
		*,
		timeout: Optional[float] = 30,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		if not url:
			raise ValueError("webhook url is not configured")
		self.url = url
		# timeout=None waits indefinitely
		self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

	async def post_json(self, payload: Dict[str, Any]) -> Any:
		try:
			r = await self._client.post(self.url, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			raise GatewayError(f"{self.url} answered {http_err.response.status_code}") from http_err
		except httpx.RequestError as net_err:
			raise GatewayError(f"{self.url} unreachable: {net_err}") from net_err
		try:
			return r.json()
		except ValueError as parse_err:
			raise GatewayError(f"Unexpected non-JSON response: {r.text[:200]}") from parse_err

	async def aclose(self) -> None:
		await self._client.aclose()
