from __future__ import annotations

import logging
from dataclasses import asdict
from typing import List, Literal, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .asteroids import (
    AVERAGE_IMPACT_SPEED_KMS,
    TYPICAL_IMPACT_ANGLES_DEG,
    fetch_asteroid,
    fetch_close_approaches,
    fetch_near_earth_asteroids,
    fetch_near_earth_comets,
    impact_speed_range_kmh,
)
from .config import get_settings
from .earthquakes import compare_earthquake_magnitude, fetch_earthquakes_near, fetch_recent_earthquakes
from .errors import ComputationDegenerate, InvalidInput
from .geometry import impact_rings_geojson
from .horizons import DEFAULT_BODIES, fetch_planetary_positions
from .impact_model import ImpactResult, calculate_impact
from .population import estimate_density
from .units import kms_to_kmh

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
LOGGER = logging.getLogger(__name__)

app = FastAPI(title="Asteroid impact estimator", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().cors_origins),
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


# -------------------------------
# Health
# -------------------------------
@app.get("/health")
def health():
    return {"status": "ok"}


# -------------------------------
# Impact simulation endpoints
# -------------------------------

class ImpactRequest(BaseModel):
    diameter_m: float = Field(..., gt=0, description="Asteroid diameter in meters")
    speed_kmh: float = Field(..., gt=0, description="Impact speed in km/h")
    angle_deg: float = Field(45.0, gt=0, le=90, description="Entry angle to horizontal in degrees")
    density_kgpm3: float = Field(3000.0, gt=0, description="Bulk density in kg/m^3")
    lat: float = Field(..., ge=-90, le=90, description="Target latitude in decimal degrees")
    lng: float = Field(..., ge=-180, le=180, description="Target longitude in decimal degrees")


def _run(req: ImpactRequest) -> ImpactResult:
    try:
        return calculate_impact(req.diameter_m, req.speed_kmh, req.angle_deg,
                                req.density_kgpm3, req.lat, req.lng)
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ComputationDegenerate as e:
        LOGGER.warning("[impact] degenerate result for %s: %s", req, e)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/impact")
def impact(req: ImpactRequest):
    return _run(req).as_dict()


@app.post("/impact/rings")
def impact_rings(req: ImpactRequest,
                 steps: int = Query(64, ge=8, le=512, description="Points per ring")):
    return impact_rings_geojson(_run(req), req.lat, req.lng, steps=steps)


@app.get("/population/density")
def population_density(
    lat: float = Query(..., ge=-90, le=90, description="Latitude in decimal degrees"),
    lng: float = Query(..., ge=-180, le=180, description="Longitude in decimal degrees"),
):
    return {"lat": lat, "lng": lng, "density_per_km2": estimate_density(lat, lng)}


# -------------------------------
# Earthquake reference data
# -------------------------------
@app.get("/earthquakes/compare")
def earthquake_comparison(magnitude: float = Query(..., description="Richter-like magnitude")):
    return {"magnitude": magnitude, "comparison": compare_earthquake_magnitude(magnitude)}


@app.get("/earthquakes/recent")
def recent_earthquakes(
    min_magnitude: float = Query(6.0, ge=0, le=10),
    limit: int = Query(10, ge=1, le=100),
):
    return [asdict(q) for q in fetch_recent_earthquakes(min_magnitude=min_magnitude, limit=limit)]


@app.get("/earthquakes/near")
def earthquakes_near(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_km: float = Query(500.0, gt=0, le=20001.6),
    min_magnitude: float = Query(4.0, ge=0, le=10),
):
    quakes = fetch_earthquakes_near(lat, lng, radius_km=radius_km, min_magnitude=min_magnitude)
    return [asdict(q) for q in quakes]


# -------------------------------
# Asteroid reference data
# -------------------------------
@app.get("/asteroids")
def asteroids(limit: int = Query(50, ge=1, le=500)):
    return [asdict(a) for a in fetch_near_earth_asteroids(limit=limit)]


@app.get("/asteroids/close-approaches")
def close_approaches(
    dist_max_au: float = Query(0.05, gt=0),
    limit: int = Query(20, ge=1, le=500),
):
    return [asdict(c) for c in fetch_close_approaches(dist_max_au=dist_max_au, limit=limit)]


@app.get("/asteroids/entry-parameters")
def entry_parameters(object_type: Literal["asteroid", "comet"] = Query("asteroid")):
    return {
        "typical_angles_deg": list(TYPICAL_IMPACT_ANGLES_DEG),
        "average_speed_kmh": kms_to_kmh(AVERAGE_IMPACT_SPEED_KMS),
        "speed_range_kmh": impact_speed_range_kmh(object_type),
    }


@app.get("/asteroids/{designation}")
def asteroid(designation: str):
    rec = fetch_asteroid(designation)
    if rec is None:
        raise HTTPException(status_code=404, detail=f"No asteroid data for '{designation}'.")
    return asdict(rec)


# -------------------------------
# Comets and planets
# -------------------------------
@app.get("/comets")
def comets(limit: int = Query(50, ge=1, le=500)):
    return [asdict(c) for c in fetch_near_earth_comets(limit=limit)]


@app.get("/planets/positions")
def planetary_positions(bodies: Optional[List[str]] = Query(None, description="Horizons body codes, e.g. 399")):
    codes = tuple(bodies) if bodies else DEFAULT_BODIES
    return [asdict(p) for p in fetch_planetary_positions(codes)]
