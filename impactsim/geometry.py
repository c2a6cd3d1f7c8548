"""GeoJSON polygons for drawing damage rings on a map."""

from __future__ import annotations

import math
from typing import Any, Dict, List

from .impact_model import ImpactResult

EARTH_RADIUS_KM = 6371.0088


def _destination_point(lon_deg: float, lat_deg: float, bearing_rad: float, distance_km: float):
    """Point reached from (lon,lat) going 'distance_km' along 'bearing_rad' on a sphere."""
    δ = distance_km / EARTH_RADIUS_KM
    φ1 = math.radians(lat_deg)
    λ1 = math.radians(lon_deg)
    θ = bearing_rad

    sinφ2 = math.sin(φ1)*math.cos(δ) + math.cos(φ1)*math.sin(δ)*math.cos(θ)
    φ2 = math.asin(max(-1.0, min(1.0, sinφ2)))
    y = math.sin(θ)*math.sin(δ)*math.cos(φ1)
    x = math.cos(δ) - math.sin(φ1)*math.sin(φ2)
    λ2 = λ1 + math.atan2(y, x)
    # normalize lon to [-180, 180)
    lon2 = math.degrees((λ2 + math.pi) % (2*math.pi) - math.pi)
    lat2 = math.degrees(φ2)
    return lon2, lat2


def circle_ring(lon: float, lat: float, radius_km: float, steps: int = 64) -> List[List[float]]:
    """Closed ring of steps+1 [lon, lat] points approximating a circle."""
    coords = []
    for i in range(steps + 1):
        b = 2 * math.pi * (i / steps)
        x, y = _destination_point(lon, lat, b, radius_km)
        coords.append([x, y])
    coords[-1] = coords[0]
    return coords


def circle_as_geojson(lon: float, lat: float, radius_km: float, steps: int = 64) -> dict:
    """Full-circle polygon approximation."""
    return {
        "type": "FeatureCollection",
        "features": [{
            "type": "Feature",
            "properties": {"radius_km": radius_km},
            "geometry": {"type": "Polygon", "coordinates": [circle_ring(lon, lat, radius_km, steps)]},
        }],
    }


def band_radii_km(result: ImpactResult) -> Dict[str, float]:
    """Radius of each damage band, in km."""
    return {
        "crater": result.crater_diameter_m / 2000.0,
        "fireball": result.fireball_radius_m / 1000.0,
        "shockwave": result.shockwave_radius_m / 1000.0,
        "wind": result.trees_down_distance_km,
        "earthquake": result.earthquake_radius_m / 1000.0,
    }


def impact_rings_geojson(result: ImpactResult, lat: float, lng: float, steps: int = 64) -> dict:
    """One polygon per band, largest first so smaller rings draw on top."""
    features: List[Dict[str, Any]] = []
    radii = sorted(band_radii_km(result).items(), key=lambda kv: kv[1], reverse=True)
    for band, radius_km in radii:
        if radius_km <= 0.0:
            continue
        features.append({
            "type": "Feature",
            "properties": {"band": band, "radius_km": radius_km},
            "geometry": {"type": "Polygon", "coordinates": [circle_ring(lng, lat, radius_km, steps)]},
        })
    return {"type": "FeatureCollection", "features": features}
