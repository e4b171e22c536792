"""Single lifetime trajectory simulation."""

from dataclasses import dataclass
from random import Random

from retirement_mc.cashflow import year_cash_flow
from retirement_mc.household import HouseholdProfile
from retirement_mc.params import SimulationParameters
from retirement_mc.returns import ReturnGenerator

INFLATION_FLOOR = -0.01


@dataclass(frozen=True)
class YearlyState:
    year: int
    age: int
    capital: float            # end of year, never negative
    investment_return: float  # amount earned (or lost) on start-of-year capital
    income: float
    expenses: float
    net_cash_flow: float


@dataclass(frozen=True)
class TrajectoryResult:
    run_id: int
    final_capital: float
    depletion_age: int | None
    success: bool
    years: tuple[YearlyState, ...]
    returns: tuple[float, ...]

    @property
    def max_drawdown(self) -> float:
        """Largest fall of capital from its running peak, as a fraction of that peak."""
        peak = 0.0
        worst = 0.0
        for state in self.years:
            peak = max(peak, state.capital)
            if peak > 0:
                worst = max(worst, (peak - state.capital) / peak)
        return worst

    @property
    def average_return(self) -> float:
        if not self.returns:
            return 0.0
        return sum(self.returns) / len(self.returns)


def sample_inflation(rng: Random, params: SimulationParameters) -> float:
    """Inflation rate used for a whole run."""
    if not params.stochastic_inflation:
        return params.inflation_mean
    return max(INFLATION_FLOOR, rng.gauss(params.inflation_mean, params.inflation_volatility))


def simulate_trajectory(
    profile: HouseholdProfile,
    params: SimulationParameters,
    rng: Random,
    run_id: int = 0,
) -> TrajectoryResult:
    """Simulate one path from the current age up to and including life expectancy.

    A household already past its life expectancy yields an empty trajectory
    that keeps its starting capital.
    """
    current_age = profile.current_age
    n_years = max(0, profile.life_expectancy - current_age + 1)
    inflation_rate = sample_inflation(rng, params)
    generator = ReturnGenerator(rng, params)

    capital = max(0.0, profile.initial_capital)
    depletion_age: int | None = None
    years: list[YearlyState] = []
    returns: list[float] = []

    for year_index in range(n_years):
        age = current_age + year_index
        sampled_return = generator.next_return()
        returns.append(sampled_return)

        flow = year_cash_flow(profile, age, year_index, inflation_rate)
        investment_return = capital * sampled_return
        net_cash_flow = flow.income - flow.expenses
        capital = max(0.0, capital + investment_return + net_cash_flow)

        # Clamped above, so exact zero is the depletion signal; first hit only.
        if capital == 0 and depletion_age is None:
            depletion_age = age

        years.append(YearlyState(
            year=profile.start_year + year_index,
            age=age,
            capital=capital,
            investment_return=investment_return,
            income=flow.income,
            expenses=flow.expenses,
            net_cash_flow=net_cash_flow,
        ))

    return TrajectoryResult(
        run_id=run_id,
        final_capital=capital,
        depletion_age=depletion_age,
        success=capital > 0,
        years=tuple(years),
        returns=tuple(returns),
    )
