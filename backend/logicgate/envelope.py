"""Normalization of the automation service's response envelopes.

Agent workflows wrap their payload in a variable number of containers, for
example ``[{"output": {"output": {...}}}]``. ``unwrap_envelope`` peels at most
one list level off the outer payload and off every ``output`` value, and
follows at most ``MAX_OUTPUT_DEPTH`` nested ``output`` keys.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

OUTPUT_KEY = "output"
MAX_OUTPUT_DEPTH = 2


@dataclass(frozen=True)
class EnvelopeResult:
	value: Optional[Dict[str, Any]] = None
	error: Optional[str] = None

	@property
	def ok(self) -> bool:
		return self.error is None and self.value is not None


def _first(value: Any) -> Any:
	if isinstance(value, list):
		return value[0] if value else None
	return value


def unwrap_envelope(payload: Any, required: Iterable[str] = ()) -> EnvelopeResult:
	data = _first(payload)
	for _ in range(MAX_OUTPUT_DEPTH):
		if not isinstance(data, dict) or not data.get(OUTPUT_KEY):
			break
		data = _first(data[OUTPUT_KEY])
	if not isinstance(data, dict):
		return EnvelopeResult(error=f"expected a JSON object after unwrapping, got {type(data).__name__}")
	missing = [name for name in required if name not in data]
	if missing:
		return EnvelopeResult(error=f"response is missing field(s): {', '.join(missing)}")
	return EnvelopeResult(value=data)
