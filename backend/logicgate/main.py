import asyncio
import logging

from fastapi import FastAPI

from .db import init_db, session_scope
from .cleanup import purge_stale_sessions
from .settings import settings
from .routers import health
from .routers import proxy
from .routers import passages
from .routers import session

logging.basicConfig(
	level=settings.log_level.upper(),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="LogicGate RC API")
app.include_router(health.router)
app.include_router(proxy.router)
app.include_router(passages.router)
app.include_router(session.router)


@app.get("/info")
def root():
	return {
		"status": "ok",
		"analysis_configured": bool(settings.analyze_url),
		"evaluation_configured": bool(settings.evaluate_url),
	}


def _purge_once() -> None:
	try:
		with session_scope() as db:
			removed = purge_stale_sessions(db, settings.session_retention_days)
	except Exception:
		logger.exception("Stale session cleanup failed")
		return
	if removed:
		logger.info("Purged %d stale reading sessions", removed)


async def _cleanup_watcher():
	while True:
		await asyncio.sleep(24 * 60 * 60)
		_purge_once()


@app.on_event("startup")
async def startup_event():
	init_db()
	_purge_once()
	asyncio.create_task(_cleanup_watcher())
