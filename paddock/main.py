from fastapi import FastAPI
import logging

from paddock.api.routes import router

app = FastAPI(title="paddock", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "paddock", "version": "0.1.0"}
