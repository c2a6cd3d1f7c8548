"""JPL Horizons state vectors for the planets, with a static Earth fallback.

Horizons answers ``format=json`` requests with a JSON envelope whose
``result`` field is the usual text ephemeris. With ``CSV_FORMAT=YES`` and
``VEC_TABLE=2`` the rows between ``$$SOE`` and ``$$EOE`` read::

    JDTDB, Calendar Date (TDB), X, Y, Z, VX, VY, VZ,

in AU and AU/day (``OUT_UNITS=AU-D``), relative to the solar-system
barycentre (``CENTER=500@0``).
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from math import sqrt
from typing import Dict, List, Optional, Sequence

import httpx

from .config import get_settings
from .fetching import get_json, open_client

LOGGER = logging.getLogger(__name__)

_RECOVERABLE = (httpx.HTTPError, ValueError, KeyError, TypeError, IndexError, AttributeError)

KM_PER_AU = 149_597_870.7
SECONDS_PER_DAY = 86_400.0
EARTH_ORBITAL_SPEED_KMS = 29.78

BODY_NAMES: Dict[str, str] = {
    "10": "Sun",
    "199": "Mercury",
    "299": "Venus",
    "399": "Earth",
    "499": "Mars",
    "599": "Jupiter",
    "699": "Saturn",
    "799": "Uranus",
    "899": "Neptune",
}
DEFAULT_BODIES: Sequence[str] = tuple(BODY_NAMES)
# Horizons rate-limits aggressively
MAX_BODIES_PER_CALL = 3


@dataclass(frozen=True)
class PlanetaryPosition:
    body: str
    date: str
    x_au: float
    y_au: float
    z_au: float
    velocity_kms: float


def body_name(code: str) -> str:
    return BODY_NAMES.get(code, "Unknown")


def default_positions(today: Optional[datetime] = None) -> List[PlanetaryPosition]:
    date = (today or datetime.now(timezone.utc)).strftime("%Y-%m-%d")
    return [PlanetaryPosition("Earth", date, 1.0, 0.0, 0.0, EARTH_ORBITAL_SPEED_KMS)]


def _vector_rows(text: str) -> List[List[str]]:
    try:
        start = text.index("$$SOE") + len("$$SOE")
        end = text.index("$$EOE", start)
    except ValueError:
        raise ValueError("no $$SOE/$$EOE block in Horizons result") from None
    lines = [ln for ln in text[start:end].splitlines() if ln.strip()]
    return [[cell.strip() for cell in row] for row in csv.reader(lines)]


def parse_vectors(body: str, text: str) -> PlanetaryPosition:
    """First state vector in a Horizons CSV VECTORS result."""
    rows = _vector_rows(text)
    if not rows:
        raise ValueError("empty Horizons ephemeris")
    row = rows[0]
    x, y, z, vx, vy, vz = (float(v) for v in row[2:8])
    # "A.D. 2025-Oct-04 00:00:00.0000" -> "2025-10-04"
    stamp = row[1].replace("A.D.", "").strip().split(" ")[0]
    date = datetime.strptime(stamp, "%Y-%b-%d").strftime("%Y-%m-%d")
    speed_au_per_day = sqrt(vx * vx + vy * vy + vz * vz)
    return PlanetaryPosition(
        body=body_name(body),
        date=date,
        x_au=x,
        y_au=y,
        z_au=z,
        velocity_kms=speed_au_per_day * KM_PER_AU / SECONDS_PER_DAY,
    )


def _params(body: str, start: str, stop: str) -> Dict[str, str]:
    return {
        "format": "json",
        "COMMAND": f"'{body}'",
        "EPHEM_TYPE": "'VECTORS'",
        "CENTER": "'500@0'",
        "START_TIME": f"'{start}'",
        "STOP_TIME": f"'{stop}'",
        "STEP_SIZE": "'1d'",
        "VEC_TABLE": "'2'",
        "CSV_FORMAT": "'YES'",
        "OUT_UNITS": "'AU-D'",
    }


def fetch_planetary_positions(bodies: Sequence[str] = DEFAULT_BODIES,
                              client: Optional[httpx.Client] = None,
                              today: Optional[datetime] = None) -> List[PlanetaryPosition]:
    """
    Barycentric position and speed of up to three bodies for today.

    Bodies that fail are skipped; when none succeed the static Earth record
    is returned instead.
    """
    now = today or datetime.now(timezone.utc)
    start = now.strftime("%Y-%m-%d")
    stop = (now + timedelta(days=1)).strftime("%Y-%m-%d")
    url = get_settings().horizons_url
    out: List[PlanetaryPosition] = []
    with open_client(client) as c:
        for body in list(bodies)[:MAX_BODIES_PER_CALL]:
            try:
                payload = get_json(c, url, _params(body, start, stop), timeout_note=f"horizons body={body}")
                out.append(parse_vectors(body, payload["result"]))
            except _RECOVERABLE as e:
                LOGGER.warning("[horizons] body %s failed: %s", body, e)
    if not out:
        LOGGER.warning("[horizons] no positions, using static Earth")
        return default_positions(now)
    return out
