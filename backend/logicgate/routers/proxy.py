from __future__ import annotations
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..analysis import AnalysisGateway
from ..deps import get_analysis_gateway, get_evaluation_gateway
from ..evaluation import EvaluationGateway, EvaluationRequest
from ..schemas import CamelModel
from ..webhook_client import GatewayError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["proxy"])


class AnalyzeRequest(CamelModel):
	full_text: str


@router.post("/analyze")
async def analyze(req: AnalyzeRequest, gateway: AnalysisGateway = Depends(get_analysis_gateway)):
	try:
		paragraphs = await gateway.analyze(req.full_text)
	except GatewayError as e:
		logger.error("Error in /api/analyze: %s", e)
		return JSONResponse(status_code=500, content={"error": str(e)})
	return {"paragraphs": [p.model_dump(by_alias=True, mode="json") for p in paragraphs]}


@router.post("/evaluate")
async def evaluate(req: EvaluationRequest, gateway: EvaluationGateway = Depends(get_evaluation_gateway)):
	try:
		return await gateway.evaluate(req)
	except Exception as e:
		logger.exception("Error in /api/evaluate")
		return JSONResponse(status_code=500, content={"error": str(e)})
