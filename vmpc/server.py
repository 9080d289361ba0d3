# vmpc/server.py
"""
HTTP front door to the simulator: one request = one complete in-process
session. Parties never talk over HTTP; this only replaces the CLI.

  uvicorn vmpc.server:app --port 8000

  GET  /health
  POST /session/run?mode=sync|async   body: SessionSpec (see coordinator.py)
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import Dict

from fastapi import Depends, FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .coordinator import build_config
from .mpc_core import MPCConfig, MPCError, Orchestrator, SessionSpec, configure_logging

log = logging.getLogger(__name__)

# CORS
CORS_ORIGINS = [o.strip() for o in os.getenv("MPC_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",") if o.strip()]


def get_base_config() -> MPCConfig:
    return MPCConfig.from_env()


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_base_config()
    configure_logging(config.log_level)
    log.info("[server] starting; default parties=%d p=2^%d-1", config.parties, config.field.power)
    yield


app = FastAPI(title="vmpc session server", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SessionResult(BaseModel):
    ok: bool
    parties: int
    outputs: Dict[int, Dict[str, int]]


@app.get("/health")
def health(base: MPCConfig = Depends(get_base_config)):
    return {"ok": True, "modulus": base.modulus, "parties": base.parties}


@app.post("/session/run", response_model=SessionResult)
async def run_session(spec: SessionSpec, mode: str = "sync", base: MPCConfig = Depends(get_base_config)):
    if mode not in ("sync", "async"):
        raise HTTPException(status_code=400, detail="mode must be 'sync' or 'async'")
    try:
        config = build_config(spec, environ={
            "MPC_PARTIES": str(base.parties),
            "MPC_SEED": base.seed.hex(),
            "MPC_FIELD_POWER": str(base.field.power),
            "MPC_LOG_LEVEL": base.log_level,
        })
        orch = Orchestrator(config, spec.inputs)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        if mode == "async":
            results = await orch.run_async(spec.circuit)
        else:
            # the sequential driver blocks, keep it off the event loop
            results = await run_in_threadpool(orch.run, spec.circuit)
    except MPCError as e:
        raise HTTPException(status_code=422, detail={"error": type(e).__name__, "detail": str(e)})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    outputs = {party: {str(k): v for k, v in values.items()} for party, values in results.items()}
    return SessionResult(ok=True, parties=config.parties, outputs=outputs)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
