"""Annual market return sampling."""

import math
from random import Random

from retirement_mc.params import SimulationParameters

RETURN_FLOOR = -0.5
RETURN_CAP = 0.5
MOMENTUM_DECAY = 0.3      # weight of the previous momentum
MOMENTUM_SHOCK = 0.7      # weight of last year's deviation from the mean
MOMENTUM_IMPACT = 0.5     # share of momentum added to this year's return


def normal_return(rng: Random, mean: float, stdev: float) -> float:
    """Box-Muller draw from N(mean, stdev) using two uniforms from ``rng``."""
    u1 = 1.0 - rng.random()  # (0, 1], keeps log() finite
    u2 = rng.random()
    z0 = math.sqrt(-2 * math.log(u1)) * math.cos(2 * math.pi * u2)
    return mean + stdev * z0


def clamp_return(r: float) -> float:
    return max(RETURN_FLOOR, min(RETURN_CAP, r))


class ReturnGenerator:
    """Stateful return sampler for one trajectory.

    With sequence risk enabled, each year after the first is pushed in the
    direction of last year's deviation from the mean, so bad years tend to
    follow bad years. A crash replaces the sampled return outright.
    """

    def __init__(self, rng: Random, params: SimulationParameters):
        self.rng = rng
        self.mean = params.expected_return
        self.volatility = params.return_volatility
        self.sequence_risk = params.sequence_risk
        self.crash_probability = params.crash_probability
        self.crash_magnitude = params.crash_magnitude
        self.momentum = 0.0
        self.previous: float | None = None

    def next_return(self) -> float:
        annual_return = normal_return(self.rng, self.mean, self.volatility)

        if self.sequence_risk and self.previous is not None:
            self.momentum = (
                MOMENTUM_DECAY * self.momentum
                + MOMENTUM_SHOCK * (self.previous - self.mean)
            )
            annual_return += self.momentum * MOMENTUM_IMPACT

        if self.rng.random() < self.crash_probability:
            annual_return = self.crash_magnitude

        annual_return = clamp_return(annual_return)
        self.previous = annual_return
        return annual_return


def sample_return_sequence(
    rng: Random, n_years: int, params: SimulationParameters,
) -> list[float]:
    """Sample ``n_years`` consecutive clamped annual returns."""
    generator = ReturnGenerator(rng, params)
    return [generator.next_return() for _ in range(n_years)]
