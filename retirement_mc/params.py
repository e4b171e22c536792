"""Simulation parameters and their validation."""

import math
from dataclasses import dataclass, fields

from retirement_mc.household import HouseholdProfile, validate_household


class ParameterValidationError(ValueError):
    """Raised before any run starts when the parameters cannot produce valid statistics."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


@dataclass(frozen=True)
class SimulationParameters:

    number_of_simulations: int = 1000
    expected_return: float = 0.06
    return_volatility: float = 0.15
    inflation_mean: float = 0.02
    inflation_volatility: float = 0.01
    sequence_risk: bool = True
    crash_probability: float = 0.02   # annual
    crash_magnitude: float = -0.35    # replaces the sampled return in a crash year
    # Master seed for per-run streams (None = fresh master seed per batch)
    seed: int | None = 42
    # Draw one inflation rate per run from N(inflation_mean, inflation_volatility)
    stochastic_inflation: bool = False


def validate_parameters(params: SimulationParameters) -> list[str]:
    """Return a list of problems with ``params`` (empty if valid)."""
    errors = []
    for f in fields(params):
        value = getattr(params, f.name)
        if isinstance(value, float) and not math.isfinite(value):
            errors.append(f"{f.name} must be finite (got {value})")

    n = params.number_of_simulations
    if isinstance(n, bool) or not isinstance(n, int):
        errors.append(f"number_of_simulations must be an integer (got {n!r})")
    elif n < 1:
        errors.append(f"number_of_simulations must be at least 1 (got {n})")
    if params.return_volatility < 0:
        errors.append(f"return_volatility must be >= 0 (got {params.return_volatility})")
    if params.inflation_volatility < 0:
        errors.append(f"inflation_volatility must be >= 0 (got {params.inflation_volatility})")
    if not 0 <= params.crash_probability <= 1:
        errors.append(f"crash_probability must be within [0, 1] (got {params.crash_probability})")
    if not -1 <= params.crash_magnitude < 0:
        errors.append(f"crash_magnitude must be a negative return within [-1, 0) (got {params.crash_magnitude})")
    return errors


def ensure_valid(params: SimulationParameters, profile: HouseholdProfile | None = None) -> None:
    """Raise ParameterValidationError listing every problem with the inputs."""
    errors = validate_parameters(params)
    if profile is not None:
        errors += validate_household(profile)
    if errors:
        raise ParameterValidationError(errors)
