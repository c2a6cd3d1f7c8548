from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from decimal import Decimal
from math import floor, isfinite, log10, pi, radians, sin
from numbers import Real
from typing import Callable, Dict

from .earthquakes import compare_earthquake_magnitude
from .errors import ComputationDegenerate, InvalidInput
from .population import estimate_density

LOGGER = logging.getLogger(__name__)

# -----------------------------
# Physical constants & defaults
# -----------------------------
J_PER_MT_TNT = 4.184e15          # J in 1 megaton TNT
KMH_PER_MPS = 3.6
MIN_EFFECTIVE_ENERGY_MT = 1e-9   # floor under the log10 terms only

DATA_SOURCE = "NASA SBDB, USGS Earthquake API, NASA Horizons"

# Empirical yield scalings: radius = coeff * E_eff**exp (E_eff in Mt).
# Calibration constants, not derived from a physical model.
FIREBALL_M = (440.0, 0.4)
CLOTHES_IGNITE_KM = (1.45, 0.41)       # third-degree burns
TREES_IGNITE_KM = (2.4, 0.43)          # second-degree burns
SHOCKWAVE_M = (2200.0, 0.33)
LUNG_DAMAGE_KM = (0.8, 0.32)
EARDRUM_RUPTURE_KM = (1.1, 0.35)
BUILDINGS_COLLAPSE_KM = (1.9, 0.36)
HOMES_COLLAPSE_KM = (2.6, 0.37)
WIND_SPEED_KMH = (1368.0, 0.25)
JUPITER_WIND_KM = (0.56, 0.30)
HOMES_LEVELED_KM = (0.97, 0.33)
EF5_TORNADO_KM = (1.6, 0.35)
TREES_DOWN_KM = (2.7, 0.37)
EARTHQUAKE_M = (5500.0, 0.25)
EARTHQUAKE_FELT_KM = (3.2, 0.28)

CRATER_COEFF_M = 380.0
CRATER_DEPTH_RATIO = 0.2

# Fraction of the exposed population killed (or injured, for burns) per band
LETHALITY = {
    "crater": 0.99,
    "fireball": 0.95,
    "third_degree": 0.15,
    "second_degree": 0.20,
    "shockwave": 0.50,
    "wind": 0.40,
    "earthquake": 0.01,
}

# (gigaton threshold, comparison, frequency); first strict '>' match wins
ENERGY_NARRATIVES = (
    (100.0, "More energy than the last eruption of Yellowstone",
     "An impact this size happens on average every 1.5 million years"),
    (10.0, "Equivalent to a supervolcano eruption",
     "An impact this size happens on average every 500,000 years"),
    (1.0, "Similar to the largest nuclear weapons",
     "An impact this size happens on average every 100,000 years"),
)
SMALL_IMPACT = ("Small local impact",
                "An impact this size happens on average every 10,000 years")


def _scaled(energy: float, law: tuple[float, float]) -> float:
    coeff, exponent = law
    return coeff * energy**exponent


def _disc_km2(radius_km: float) -> float:
    return pi * radius_km**2


def _round_half_up(x: float) -> int:
    return int(floor(x + 0.5))


@dataclass(frozen=True)
class Projectile:
    diameter_m: float
    speed_kmh: float
    density_kgpm3: float
    angle_deg: float  # to HORIZONTAL

    @property
    def radius_m(self) -> float:
        return 0.5 * self.diameter_m

    @property
    def speed_mps(self) -> float:
        return self.speed_kmh / KMH_PER_MPS

    @property
    def mass_kg(self) -> float:
        return (4.0 / 3.0) * pi * self.radius_m**3 * self.density_kgpm3

    @property
    def angle_rad(self) -> float:
        return radians(self.angle_deg)


@dataclass(frozen=True)
class Target:
    lat: float
    lng: float

    def population_density(self, estimator: Callable[[float, float], float] = estimate_density) -> float:
        return estimator(self.lat, self.lng)


@dataclass(frozen=True)
class ImpactResult:
    """Everything the calculator reports for one impact, grouped by band."""

    # energy
    energy_megatons: float          # angle-adjusted (effective) yield
    energy_gigatons: float          # full kinetic yield
    impact_speed_kmh: int
    population_density: float

    # crater
    crater_diameter_m: int
    crater_diameter_km: float
    crater_depth_m: int
    crater_casualties: int

    # fireball
    fireball_radius_m: int
    fireball_diameter_km: float
    fireball_deaths: int
    third_degree_burns: int
    second_degree_burns: int
    clothes_fire_distance_km: float
    trees_fire_distance_km: float

    # shockwave
    shockwave_radius_m: int
    shockwave_decibels: int
    shockwave_deaths: int
    lung_damage_distance_km: float
    eardrum_distance_km: float
    buildings_collapse_distance_km: float
    homes_collapse_distance_km: float

    # wind
    wind_speed_kmh: int
    wind_deaths: int
    jupiter_wind_distance_km: float
    homes_leveled_distance_km: float
    ef5_tornado_distance_km: float
    trees_down_distance_km: float

    # earthquake
    earthquake_radius_m: int
    earthquake_magnitude: float
    earthquake_deaths: int
    earthquake_felt_distance_km: float
    earthquake_comparison: str

    comparison: str
    frequency: str
    data_source: str = DATA_SOURCE

    def as_dict(self) -> Dict[str, object]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class ImpactModel:
    """
    Mass/energy -> angle-adjusted yield -> independent band radii -> casualties.
    No atmospheric entry: the approach speed is the ground impact speed.
    """

    def __init__(self, projectile: Projectile, target: Target):
        self.p = projectile
        self.t = target

    # ---------- Energetics ----------
    def kinetic_energy_J(self) -> float:
        return 0.5 * self.p.mass_kg * self.p.speed_mps**2

    def energy_mt_tnt(self) -> float:
        return self.kinetic_energy_J() / J_PER_MT_TNT

    def energy_gt_tnt(self) -> float:
        return self.energy_mt_tnt() / 1000.0

    def effective_energy_mt(self) -> float:
        """Yield deposited at the surface: grazing entries deliver sin(angle) of it."""
        return self.energy_mt_tnt() * sin(self.p.angle_rad)

    def _log_energy(self) -> float:
        """log10 of the effective yield, floored so grazing entries stay finite."""
        return log10(max(self.effective_energy_mt(), MIN_EFFECTIVE_ENERGY_MT))

    # ---------- Crater ----------
    def crater_diameter_m(self) -> float:
        return (1000.0 * self.effective_energy_mt()) ** 0.25 * CRATER_COEFF_M

    def crater_depth_m(self) -> float:
        return CRATER_DEPTH_RATIO * self.crater_diameter_m()

    # ---------- Thermal ----------
    def fireball_radius_m(self) -> float:
        return _scaled(self.effective_energy_mt(), FIREBALL_M)

    def thermal_rings_km(self) -> Dict[str, float]:
        E = self.effective_energy_mt()
        return {
            "clothes_ignite": _scaled(E, CLOTHES_IGNITE_KM),
            "trees_ignite": _scaled(E, TREES_IGNITE_KM),
        }

    # ---------- Air blast ----------
    def shockwave_radius_m(self) -> float:
        return _scaled(self.effective_energy_mt(), SHOCKWAVE_M)

    def shockwave_decibels(self) -> float:
        return 170.0 + 20.0 * self._log_energy()

    def blast_rings_km(self) -> Dict[str, float]:
        E = self.effective_energy_mt()
        return {
            "lung_damage": _scaled(E, LUNG_DAMAGE_KM),
            "eardrum_rupture": _scaled(E, EARDRUM_RUPTURE_KM),
            "buildings_collapse": _scaled(E, BUILDINGS_COLLAPSE_KM),
            "homes_collapse": _scaled(E, HOMES_COLLAPSE_KM),
        }

    def wind_speed_kmh(self) -> float:
        return _scaled(self.effective_energy_mt(), WIND_SPEED_KMH)

    def wind_rings_km(self) -> Dict[str, float]:
        E = self.effective_energy_mt()
        return {
            "jupiter_wind": _scaled(E, JUPITER_WIND_KM),
            "homes_leveled": _scaled(E, HOMES_LEVELED_KM),
            "ef5_tornado": _scaled(E, EF5_TORNADO_KM),
            "trees_down": _scaled(E, TREES_DOWN_KM),
        }

    # ---------- Seismic ----------
    def earthquake_radius_m(self) -> float:
        return _scaled(self.effective_energy_mt(), EARTHQUAKE_M)

    def seismic_magnitude(self) -> float:
        return 4.0 + 0.67 * self._log_energy()

    def felt_distance_km(self) -> float:
        return _scaled(self.effective_energy_mt(), EARTHQUAKE_FELT_KM)

    # ---------- Casualties ----------
    def casualties(self, density: float) -> Dict[str, int]:
        """
        Marginal exposed population per band: each ring excludes the more severe
        ring inside it (except fireball, which takes the full disc). Negative
        ring areas are clamped to zero casualties.
        """
        thermal = self.thermal_rings_km()
        crater = _disc_km2(self.crater_diameter_m() / 1000.0)  # diameter used as radius
        fireball = _disc_km2(self.fireball_radius_m() / 1000.0)
        burn3 = _disc_km2(thermal["clothes_ignite"])
        burn2 = _disc_km2(thermal["trees_ignite"])
        shock = _disc_km2(self.shockwave_radius_m() / 1000.0)
        wind = _disc_km2(self.wind_rings_km()["trees_down"])
        quake = _disc_km2(self.earthquake_radius_m() / 1000.0)

        areas = {
            "crater": crater,
            "fireball": fireball,
            "third_degree": burn3 - fireball,
            "second_degree": burn2 - burn3,
            "shockwave": shock - fireball,
            "wind": wind - shock,
            "earthquake": quake - wind,
        }
        return {band: max(0, _round_half_up(area * density * LETHALITY[band]))
                for band, area in areas.items()}

    # ---------- Narratives ----------
    def narratives(self) -> tuple[str, str]:
        gt = self.energy_gt_tnt()
        for threshold, comparison, frequency in ENERGY_NARRATIVES:
            if gt > threshold:
                return comparison, frequency
        return SMALL_IMPACT

    # ---------- Convenience summary ----------
    def summary(self) -> Dict[str, float]:
        """Unrounded metrics, keyed like ImpactResult."""
        thermal = self.thermal_rings_km()
        blast = self.blast_rings_km()
        wind = self.wind_rings_km()
        return {
            "energy_megatons": self.effective_energy_mt(),
            "energy_gigatons": self.energy_gt_tnt(),
            "impact_speed_kmh": self.p.speed_kmh,
            "crater_diameter_m": self.crater_diameter_m(),
            "crater_depth_m": self.crater_depth_m(),
            "fireball_radius_m": self.fireball_radius_m(),
            "clothes_fire_distance_km": thermal["clothes_ignite"],
            "trees_fire_distance_km": thermal["trees_ignite"],
            "shockwave_radius_m": self.shockwave_radius_m(),
            "shockwave_decibels": self.shockwave_decibels(),
            "lung_damage_distance_km": blast["lung_damage"],
            "eardrum_distance_km": blast["eardrum_rupture"],
            "buildings_collapse_distance_km": blast["buildings_collapse"],
            "homes_collapse_distance_km": blast["homes_collapse"],
            "wind_speed_kmh": self.wind_speed_kmh(),
            "jupiter_wind_distance_km": wind["jupiter_wind"],
            "homes_leveled_distance_km": wind["homes_leveled"],
            "ef5_tornado_distance_km": wind["ef5_tornado"],
            "trees_down_distance_km": wind["trees_down"],
            "earthquake_radius_m": self.earthquake_radius_m(),
            "earthquake_magnitude": self.seismic_magnitude(),
            "earthquake_felt_distance_km": self.felt_distance_km(),
        }

    def result(self, density: float) -> ImpactResult:
        try:
            raw = self.summary()
        except OverflowError:
            raise ComputationDegenerate(["energy_megatons"]) from None
        bad = [k for k, v in raw.items() if not isfinite(v)]
        if bad:
            raise ComputationDegenerate(bad)

        try:
            deaths = self.casualties(density)
        except (OverflowError, ValueError):
            raise ComputationDegenerate(["casualties"]) from None
        comparison, frequency = self.narratives()
        return ImpactResult(
            energy_megatons=raw["energy_megatons"],
            energy_gigatons=raw["energy_gigatons"],
            impact_speed_kmh=_round_half_up(raw["impact_speed_kmh"]),
            population_density=density,

            crater_diameter_m=_round_half_up(raw["crater_diameter_m"]),
            crater_diameter_km=round(raw["crater_diameter_m"] / 1000.0, 2),
            crater_depth_m=_round_half_up(raw["crater_depth_m"]),
            crater_casualties=deaths["crater"],

            fireball_radius_m=_round_half_up(raw["fireball_radius_m"]),
            fireball_diameter_km=round(2.0 * raw["fireball_radius_m"] / 1000.0, 2),
            fireball_deaths=deaths["fireball"],
            third_degree_burns=deaths["third_degree"],
            second_degree_burns=deaths["second_degree"],
            clothes_fire_distance_km=round(raw["clothes_fire_distance_km"], 1),
            trees_fire_distance_km=round(raw["trees_fire_distance_km"], 1),

            shockwave_radius_m=_round_half_up(raw["shockwave_radius_m"]),
            shockwave_decibels=_round_half_up(raw["shockwave_decibels"]),
            shockwave_deaths=deaths["shockwave"],
            lung_damage_distance_km=round(raw["lung_damage_distance_km"], 1),
            eardrum_distance_km=round(raw["eardrum_distance_km"], 1),
            buildings_collapse_distance_km=round(raw["buildings_collapse_distance_km"], 1),
            homes_collapse_distance_km=round(raw["homes_collapse_distance_km"], 1),

            wind_speed_kmh=_round_half_up(raw["wind_speed_kmh"]),
            wind_deaths=deaths["wind"],
            jupiter_wind_distance_km=round(raw["jupiter_wind_distance_km"], 1),
            homes_leveled_distance_km=round(raw["homes_leveled_distance_km"], 1),
            ef5_tornado_distance_km=round(raw["ef5_tornado_distance_km"], 1),
            trees_down_distance_km=round(raw["trees_down_distance_km"], 1),

            earthquake_radius_m=_round_half_up(raw["earthquake_radius_m"]),
            earthquake_magnitude=round(raw["earthquake_magnitude"], 1),
            earthquake_deaths=deaths["earthquake"],
            earthquake_felt_distance_km=round(raw["earthquake_felt_distance_km"], 1),
            earthquake_comparison=compare_earthquake_magnitude(raw["earthquake_magnitude"]),

            comparison=comparison,
            frequency=frequency,
        )


def _check_inputs(diameter: float, speed: float, angle: float, density: float,
                  lat: float, lng: float) -> None:
    values = {"diameter": diameter, "speed": speed, "angle": angle,
              "density": density, "lat": lat, "lng": lng}
    for name, value in values.items():
        if not isinstance(value, (Real, Decimal)) or isinstance(value, bool):
            raise InvalidInput(name, value, "must be a real number")
        if not isfinite(value):
            raise InvalidInput(name, value, "must be finite")
    for name in ("diameter", "speed", "density"):
        if values[name] <= 0:
            raise InvalidInput(name, values[name], "must be positive")
    if not 0.0 < angle <= 90.0:
        raise InvalidInput("angle", angle, "must be in (0, 90] degrees")


def calculate_impact(diameter: float, speed: float, angle: float, density: float,
                     lat: float, lng: float,
                     density_estimator: Callable[[float, float], float] = estimate_density) -> ImpactResult:
    """Estimate the consequences of an impact at (lat, lng).

    diameter in m, speed in km/h, angle in degrees from horizontal,
    density in kg/m^3. Raises InvalidInput for non-physical parameters and
    ComputationDegenerate if a result would be NaN or infinite.
    """
    _check_inputs(diameter, speed, angle, density, lat, lng)
    model = ImpactModel(
        Projectile(diameter_m=float(diameter), speed_kmh=float(speed),
                   density_kgpm3=float(density), angle_deg=float(angle)),
        Target(lat=float(lat), lng=float(lng)),
    )
    pop_density = model.t.population_density(density_estimator)
    result = model.result(pop_density)
    LOGGER.debug("[impact] d=%sm v=%skm/h angle=%s rho=%s -> %.3g Mt effective",
                 diameter, speed, angle, density, result.energy_megatons)
    return result
