"""Toy population-density model.

Density is approximated from a handful of major-city centroids with a linear
fall-off over a fixed radius measured in plain degree space (not great-circle
distance). Anything farther than the cutoff from every city gets the rural
baseline. Swap in a real raster by passing a different ``cities`` table or by
replacing :func:`estimate_density` with anything of the same signature.
"""

from __future__ import annotations

from math import sqrt
from typing import NamedTuple, Sequence


class City(NamedTuple):
    name: str
    lat: float
    lng: float
    peak_density: float  # people / km^2


RURAL_DENSITY = 50.0        # people / km^2
CUTOFF_DEG = 5.0            # influence radius around each centroid

MAJOR_CITIES: tuple[City, ...] = (
    City("New York",  40.7128,  -74.0060, 10000.0),
    City("London",    51.5074,   -0.1278,  5600.0),
    City("Tokyo",     35.6762,  139.6503,  6000.0),
    City("Delhi",     28.6139,   77.2090, 11000.0),
    City("São Paulo", -23.5505, -46.6333,  7300.0),
    City("Shanghai",  31.2304,  121.4737,  3800.0),
)


def estimate_density(lat: float, lng: float,
                     cities: Sequence[City] = MAJOR_CITIES,
                     baseline: float = RURAL_DENSITY,
                     cutoff_deg: float = CUTOFF_DEG) -> float:
    """Population density (people/km^2) at (lat, lng).

    Maximum of the baseline and each nearby city's linearly decayed peak;
    overlapping cities are never summed.
    """
    best = baseline
    for city in cities:
        d = sqrt((lat - city.lat) ** 2 + (lng - city.lng) ** 2)
        if d < cutoff_deg:
            best = max(best, city.peak_density * (1.0 - d / cutoff_deg))
    return best
