import logging
import os

from fastapi import FastAPI

from piracy_patrol.api.routes import router
from piracy_patrol.session_store import store

app = FastAPI(title="piracy-patrol", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=os.environ.get("PIRACY_PATROL_LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)


@app.on_event("shutdown")
async def _shutdown() -> None:
    await store.shutdown()


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "piracy-patrol", "version": "0.1.0"}
