from datetime import datetime
from typing import List
import time

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from capital_passes import config
from capital_passes.errors import PredictionUnavailable
from capital_passes.pass_client import PassTimeClient

app = FastAPI(title="ISS Capital Passes API", version="1.0.0")


class PassOut(BaseModel):
    rank: int = Field(..., ge=1)
    risetime: datetime


class PassesOut(BaseModel):
    lat: float
    lon: float
    passes: List[PassOut]
    latency_ms: float


def get_client() -> PassTimeClient:
    return PassTimeClient()


@app.get("/health")
def health():
    return {
        "status": "ok",
        "pass_api_url": config.PASS_API_URL,
        "keep_passes": config.KEEP_PASSES,
    }


@app.get("/passes", response_model=PassesOut)
def passes(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    client: PassTimeClient = Depends(get_client),
):
    t0 = time.time()
    try:
        ranked = client.predict(lat, lon)
    except PredictionUnavailable as e:
        raise HTTPException(status_code=502, detail=f"prediction_unavailable: {e}")

    return {
        "lat": lat,
        "lon": lon,
        "passes": [
            {"rank": rank, "risetime": risetime}
            for rank, risetime in ranked[: config.KEEP_PASSES]
        ],
        "latency_ms": round((time.time() - t0) * 1000, 2),
    }
