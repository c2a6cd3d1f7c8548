"""Asteroid impact consequence estimator."""

from .earthquakes import compare_earthquake_magnitude
from .errors import ComputationDegenerate, ImpactError, InvalidInput
from .impact_model import ImpactResult, calculate_impact
from .population import estimate_density

__all__ = [
    "ComputationDegenerate",
    "ImpactError",
    "ImpactResult",
    "InvalidInput",
    "calculate_impact",
    "compare_earthquake_magnitude",
    "estimate_density",
]

__version__ = "1.0.0"
