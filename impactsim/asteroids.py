"""NASA/JPL Small-Body Database (SBDB) and near-Earth comet clients with static fallbacks.

Supplies real-world diameters and densities for the calculator. Every public
fetch either returns parsed records or degrades to static data / ``None`` /
``[]``; nothing here raises into the caller.

Densities are kept in kg/m^3. SBDB reports g/cm^3 and is converted on parse.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from math import isfinite, pi, sqrt
from typing import Any, Dict, List, Literal, Optional, Sequence

import httpx

from .config import get_settings
from .fetching import get_json, open_client

LOGGER = logging.getLogger(__name__)

_RECOVERABLE = (httpx.HTTPError, ValueError, KeyError, TypeError, IndexError, AttributeError)

DEFAULT_ALBEDO = 0.14
DEFAULT_DENSITY_KG_M3 = 2600.0
DEFAULT_ABSOLUTE_MAGNITUDE = 20.0
G_PER_CM3_TO_KG_PER_M3 = 1000.0

# Entry parameters for seeding the calculator
TYPICAL_IMPACT_ANGLES_DEG = (5, 15, 30, 45, 60, 75, 90)
AVERAGE_IMPACT_SPEED_KMS = 20.0
IMPACT_SPEED_RANGES_KMS = {
    "asteroid": {"min": 11.0, "max": 33.0, "avg": 20.0},
    "comet":    {"min": 51.0, "max": 72.0, "avg": 60.0},
}


@dataclass(frozen=True)
class OrbitalElements:
    eccentricity: float
    semi_major_axis_au: float
    inclination_deg: float


@dataclass(frozen=True)
class AsteroidRecord:
    name: str
    diameter_m: float
    albedo: float
    density_kg_m3: float
    mass_kg: float
    absolute_magnitude: float
    orbital_elements: Optional[OrbitalElements] = None


@dataclass(frozen=True)
class CloseApproach:
    designation: str
    date: str
    distance_au: float
    velocity_kms: float
    absolute_magnitude: float
    diameter_m: float


def estimate_diameter_from_h(h: float, albedo: float = DEFAULT_ALBEDO) -> float:
    """Diameter (m) from absolute magnitude: D_km = 1329/sqrt(p) * 10^(-H/5)."""
    return (1329.0 / sqrt(albedo)) * 10.0 ** (-h / 5.0) * 1000.0


def asteroid_mass(diameter_m: float, density_kg_m3: float) -> float:
    """Mass (kg) of a homogeneous sphere."""
    r = 0.5 * diameter_m
    return (4.0 / 3.0) * pi * r**3 * density_kg_m3


def _asteroid(name: str, diameter_m: float, albedo: float, density_kg_m3: float, h: float,
              orbit: Optional[OrbitalElements] = None) -> AsteroidRecord:
    return AsteroidRecord(
        name=name,
        diameter_m=diameter_m,
        albedo=albedo,
        density_kg_m3=density_kg_m3,
        mass_kg=asteroid_mass(diameter_m, density_kg_m3),
        absolute_magnitude=h,
        orbital_elements=orbit,
    )


def default_asteroids() -> List[AsteroidRecord]:
    return [
        _asteroid("Apophis", 370.0, 0.23, 3200.0, 19.7),
        _asteroid("Bennu", 490.0, 0.046, 1260.0, 20.9),
        _asteroid("Eros", 16840.0, 0.25, 2670.0, 10.4),
    ]


def impact_speed_range_kmh(object_type: Literal["asteroid", "comet"] = "asteroid") -> Dict[str, float]:
    """Typical impact speeds in km/h, the unit the calculator takes."""
    return {k: v * 3600.0 for k, v in IMPACT_SPEED_RANGES_KMS[object_type].items()}


def _num(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _rows(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Zip SBDB's {'fields': [...], 'data': [[...], ...]} into dicts."""
    fields: Sequence[str] = payload["fields"]
    return [dict(zip(fields, row)) for row in payload.get("data") or []]


def _record_from_values(name: str, diameter_km: Optional[float], h: Optional[float],
                        albedo: Optional[float], density_g_cm3: Optional[float],
                        orbit: Optional[OrbitalElements] = None) -> AsteroidRecord:
    h_val = h if h is not None else DEFAULT_ABSOLUTE_MAGNITUDE
    diameter_m = diameter_km * 1000.0 if diameter_km else estimate_diameter_from_h(h_val)
    density = density_g_cm3 * G_PER_CM3_TO_KG_PER_M3 if density_g_cm3 else DEFAULT_DENSITY_KG_M3
    return _asteroid(
        name=name or "Unknown",
        diameter_m=diameter_m,
        albedo=albedo if albedo else DEFAULT_ALBEDO,
        density_kg_m3=density,
        h=h_val,
        orbit=orbit,
    )


def fetch_near_earth_asteroids(limit: int = 50, client: Optional[httpx.Client] = None) -> List[AsteroidRecord]:
    """Near-Earth asteroids from the SBDB query API, or the static defaults."""
    url = f"{get_settings().sbdb_url}/sbdb_query.api"
    params = {
        "fields": "full_name,diameter,H,albedo,density",
        "sb-class": "NEA",
        "limit": limit,
    }
    try:
        with open_client(client) as c:
            payload = get_json(c, url, params, timeout_note="sbdb_query")
        rows = _rows(payload)
        records = [
            _record_from_values(
                name=str(row.get("full_name") or "").strip(),
                diameter_km=_num(row.get("diameter")),
                h=_num(row.get("H")),
                albedo=_num(row.get("albedo")),
                density_g_cm3=_num(row.get("density")),
            )
            for row in rows
        ]
    except _RECOVERABLE as e:
        LOGGER.warning("[sbdb] query failed, using defaults: %s", e)
        return default_asteroids()
    if not records:
        LOGGER.warning("[sbdb] query returned no rows, using defaults")
        return default_asteroids()
    return records


def _phys_par(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {p["name"]: p.get("value") for p in payload.get("phys_par") or []}


def _orbit(payload: Dict[str, Any]) -> Optional[OrbitalElements]:
    orbit = payload.get("orbit")
    if not orbit:
        return None
    elements = {e["name"]: e.get("value") for e in orbit.get("elements") or []}
    e, a, i = _num(elements.get("e")), _num(elements.get("a")), _num(elements.get("i"))
    if e is None or a is None or i is None:
        return None
    return OrbitalElements(eccentricity=e, semi_major_axis_au=a, inclination_deg=i)


def fetch_asteroid(designation: str, client: Optional[httpx.Client] = None) -> Optional[AsteroidRecord]:
    """Look up one object by name or designation; None when unknown or unreachable."""
    url = f"{get_settings().sbdb_url}/sbdb.api"
    try:
        with open_client(client) as c:
            payload = get_json(c, url, {"sstr": designation, "phys-par": "1"}, timeout_note="sbdb")
        obj = payload.get("object")
        if not obj:
            LOGGER.info("[sbdb] no object for %r", designation)
            return None
        phys = _phys_par(payload)
        return _record_from_values(
            name=obj.get("fullname") or obj.get("des") or designation,
            diameter_km=_num(phys.get("diameter")),
            h=_num(phys.get("H")),
            albedo=_num(phys.get("albedo")),
            density_g_cm3=_num(phys.get("density")),
            orbit=_orbit(payload),
        )
    except _RECOVERABLE as e:
        LOGGER.warning("[sbdb] lookup of %r failed: %s", designation, e)
        return None


def fetch_close_approaches(dist_max_au: float = 0.05, date_min: str = "2020-01-01",
                           date_max: str = "2030-01-01", limit: int = 20,
                           client: Optional[httpx.Client] = None) -> List[CloseApproach]:
    """Close approaches from the SBDB CAD API, sorted by distance; [] on failure."""
    url = f"{get_settings().sbdb_url}/cad.api"
    params = {
        "dist-max": dist_max_au,
        "date-min": date_min,
        "date-max": date_max,
        "sort": "dist",
        "limit": limit,
    }
    try:
        with open_client(client) as c:
            payload = get_json(c, url, params, timeout_note="cad")
        out = []
        for row in _rows(payload):
            h = float(row["h"])
            out.append(CloseApproach(
                designation=str(row["des"]),
                date=str(row["cd"]),
                distance_au=float(row["dist"]),
                velocity_kms=float(row["v_rel"]),
                absolute_magnitude=h,
                diameter_m=estimate_diameter_from_h(h),
            ))
        return out
    except _RECOVERABLE as e:
        LOGGER.warning("[cad] query failed: %s", e)
        return []


# ---------- Comets ----------
@dataclass(frozen=True)
class CometRecord:
    name: str
    perihelion_distance_au: float
    eccentricity: float
    inclination_deg: float
    perihelion_date: str
    period_years: float
    absolute_magnitude: float


def default_comets() -> List[CometRecord]:
    return [CometRecord("Halley", 0.586, 0.967, 162.3, "2061-07-28", 75.3, 4.0)]


def _first(row: Dict[str, Any], *keys: str) -> Any:
    """Value of the first key present; the catalogue has used both spellings."""
    for key in keys:
        if row.get(key) not in (None, ""):
            return row[key]
    return None


def _num_or(value: Any, default: float) -> float:
    try:
        parsed = _num(value)
    except ValueError:
        return default
    # zero and NaN both count as missing
    return parsed if parsed and isfinite(parsed) else default


def _comet_from_row(row: Dict[str, Any]) -> CometRecord:
    return CometRecord(
        name=str(_first(row, "object_name", "object") or "Unknown"),
        perihelion_distance_au=_num_or(_first(row, "q", "q_au_1"), 1.0),
        eccentricity=_num_or(_first(row, "e"), 0.5),
        inclination_deg=_num_or(_first(row, "i", "i_deg"), 0.0),
        perihelion_date=str(_first(row, "tp", "tp_tdb") or ""),
        period_years=_num_or(_first(row, "period", "p_yr"), 0.0),
        absolute_magnitude=_num_or(_first(row, "h"), 15.0),
    )


def fetch_near_earth_comets(limit: int = 50, client: Optional[httpx.Client] = None) -> List[CometRecord]:
    """Near-Earth comet orbital elements from the NASA open-data catalogue, or Halley."""
    try:
        with open_client(client) as c:
            payload = get_json(c, get_settings().neo_url, {"$limit": limit}, timeout_note="neo_comets")
        comets = [_comet_from_row(row) for row in payload]
    except _RECOVERABLE as e:
        LOGGER.warning("[neo] comet query failed, using defaults: %s", e)
        return default_comets()
    if not comets:
        LOGGER.warning("[neo] comet query returned no rows, using defaults")
        return default_comets()
    return comets
