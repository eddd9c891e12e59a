# backend/factory_tracker/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from factory_tracker.core.config import settings
from factory_tracker.core.init_db import init_db
from factory_tracker.api import netsim
import factory_tracker.models  # noqa: F401  registers models

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Factory Tracker API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup():
    await init_db()
    logger.info(f"NetSim bridge at {settings.NETSIM_API_URL}")


app.include_router(netsim.router)


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
