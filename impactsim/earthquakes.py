"""Earthquake comparisons and the USGS FDSN event service.

The comparison table is local and pure. The USGS queries are optional
reference data: they never raise, and fall back to static records (or an
empty list) when the service is unreachable or returns nothing useful.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import httpx

from .config import get_settings
from .fetching import get_json, open_client

LOGGER = logging.getLogger(__name__)

# transport failures plus anything a malformed payload can raise while parsing
_RECOVERABLE = (httpx.HTTPError, ValueError, KeyError, TypeError, IndexError, AttributeError)

# (lower bound inclusive, description), checked top-down
MAGNITUDE_COMPARISONS: Tuple[Tuple[float, str], ...] = (
    (9.5, "Comparable to the 1960 Valdivia earthquake (9.5) - the strongest ever recorded"),
    (9.0, "Similar to the 2011 Tōhoku earthquake (9.1) that caused the Fukushima disaster"),
    (8.5, "Comparable to the 2004 Indian Ocean earthquake (9.1) that caused devastating tsunamis"),
    (8.0, "Similar to the 1906 San Francisco earthquake (7.9) that destroyed the city"),
    (7.5, "Comparable to major destructive earthquakes that occur roughly once per year globally"),
    (7.0, "Similar to the 2010 Haiti earthquake (7.0) that killed over 200,000 people"),
    (6.5, "Strong earthquake capable of causing significant damage in populated areas"),
    (6.0, "Moderate earthquake that can cause damage to poorly constructed buildings"),
)
MINOR_EARTHQUAKE = "Minor to light earthquake with limited damage potential"


def compare_earthquake_magnitude(magnitude: float) -> str:
    for lower, text in MAGNITUDE_COMPARISONS:
        if magnitude >= lower:
            return text
    return MINOR_EARTHQUAKE


@dataclass(frozen=True)
class EarthquakeRecord:
    id: str
    magnitude: float
    place: str
    time: int       # ms since epoch, as reported by USGS
    depth_km: float
    latitude: float
    longitude: float
    type: str = "earthquake"


def default_earthquakes(now_ms: Optional[int] = None) -> List[EarthquakeRecord]:
    """Static stand-ins used when the USGS feed is unavailable."""
    if now_ms is None:
        now_ms = int(datetime.now(timezone.utc).timestamp() * 1000)
    return [
        EarthquakeRecord("default1", 9.1, "2011 Tōhoku, Japan", now_ms, 29.0, 38.297, 142.373),
        EarthquakeRecord("default2", 9.0, "2004 Indian Ocean", now_ms, 30.0, 3.295, 95.982),
    ]


def _parse_feature(feature: Dict[str, Any]) -> EarthquakeRecord:
    props = feature["properties"]
    lon, lat, depth = feature["geometry"]["coordinates"][:3]
    return EarthquakeRecord(
        id=str(feature["id"]),
        magnitude=float(props["mag"]),
        place=str(props.get("place") or ""),
        time=int(props.get("time") or 0),
        depth_km=float(depth),
        latitude=float(lat),
        longitude=float(lon),
        type=str(props.get("type") or "earthquake"),
    )


def _query(client: Optional[httpx.Client], params: Dict[str, Any]) -> List[EarthquakeRecord]:
    """Run an FDSN query. Raises on transport or payload problems."""
    url = get_settings().usgs_url
    with open_client(client) as c:
        data = get_json(c, url, params, timeout_note="usgs")
    feats = data.get("features") or []
    return [_parse_feature(f) for f in feats]


def _date_window(days: int, today: Optional[datetime] = None) -> Tuple[str, str]:
    end = today or datetime.now(timezone.utc)
    start = end - timedelta(days=days)
    return start.strftime("%Y-%m-%d"), end.strftime("%Y-%m-%d")


def fetch_recent_earthquakes(min_magnitude: float = 6.0, limit: int = 10,
                             client: Optional[httpx.Client] = None) -> List[EarthquakeRecord]:
    """Strongest earthquakes of the last year, or the static defaults."""
    start, end = _date_window(365)
    params = {
        "format": "geojson",
        "starttime": start,
        "endtime": end,
        "minmagnitude": min_magnitude,
        "orderby": "magnitude",
        "limit": limit,
    }
    try:
        records = _query(client, params)
    except _RECOVERABLE as e:
        LOGGER.warning("[usgs] recent query failed, using defaults: %s", e)
        return default_earthquakes()
    if not records:
        LOGGER.warning("[usgs] recent query returned no events, using defaults")
        return default_earthquakes()
    return records


def fetch_earthquakes_near(lat: float, lng: float, radius_km: float = 500.0,
                           min_magnitude: float = 4.0,
                           client: Optional[httpx.Client] = None) -> List[EarthquakeRecord]:
    """Earthquakes of the last ten years within radius_km of a point; [] on failure."""
    start, end = _date_window(10 * 365)
    params = {
        "format": "geojson",
        "starttime": start,
        "endtime": end,
        "latitude": lat,
        "longitude": lng,
        "maxradiuskm": radius_km,
        "minmagnitude": min_magnitude,
        "orderby": "magnitude",
        "limit": 20,
    }
    try:
        return _query(client, params)
    except _RECOVERABLE as e:
        LOGGER.warning("[usgs] nearby query failed: %s", e)
        return []
