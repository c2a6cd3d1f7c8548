"""Boundary conversions for imperial inputs and displays.

The calculator only speaks metric (m, km/h, kg/m^3). Older front-ends used
feet and mph with a fixed stony density; convert here, never in the physics.
"""

from __future__ import annotations

from typing import NamedTuple

M_PER_FT = 0.3048
KM_PER_MILE = 1.609344
LEGACY_DENSITY_KG_M3 = 3000.0


class MetricInputs(NamedTuple):
    diameter_m: float
    speed_kmh: float
    density_kgpm3: float


def feet_to_meters(ft: float) -> float:
    return ft * M_PER_FT


def meters_to_feet(m: float) -> float:
    return m / M_PER_FT


def mph_to_kmh(mph: float) -> float:
    return mph * KM_PER_MILE


def kmh_to_mph(kmh: float) -> float:
    return kmh / KM_PER_MILE


def km_to_miles(km: float) -> float:
    return km / KM_PER_MILE


def kms_to_kmh(kms: float) -> float:
    return kms * 3600.0


def imperial_inputs(diameter_ft: float, speed_mph: float,
                    density_kgpm3: float = LEGACY_DENSITY_KG_M3) -> MetricInputs:
    """Metric calculator inputs for the feet/mph variant (density defaults to 3000 kg/m^3)."""
    return MetricInputs(feet_to_meters(diameter_ft), mph_to_kmh(speed_mph), density_kgpm3)
