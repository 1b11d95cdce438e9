"""
AgroAdvisor API application.

Run with: uvicorn agroadvisor.main:app
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agroadvisor import __version__, config
from agroadvisor.routers import advisory

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="AgroAdvisor API",
    description="Agronomic recommendation engine: yield, fertilizer, irrigation, crop health and market prices",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(advisory.router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "version": __version__}
