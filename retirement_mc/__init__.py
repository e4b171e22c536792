"""Household Retirement Monte Carlo Simulation Package."""

from retirement_mc.household import HouseholdProfile, Person, validate_household
from retirement_mc.params import (
    SimulationParameters,
    ParameterValidationError,
    validate_parameters,
)
from retirement_mc.returns import ReturnGenerator, normal_return, sample_return_sequence
from retirement_mc.cashflow import (
    CashFlow,
    MANDATORY_WITHDRAWAL_RATES,
    withdrawal_rate,
    year_cash_flow,
)
from retirement_mc.simulation import YearlyState, TrajectoryResult, simulate_trajectory
from retirement_mc.aggregate import (
    AggregateResult,
    ConfidenceInterval,
    PercentileTable,
    RiskAnalysis,
    SummaryStatistics,
    TypicalScenarios,
    aggregate,
    percentile,
)
from retirement_mc.monte_carlo import (
    MonteCarloResult,
    TrajectoryError,
    run_simulation,
    run_trajectories,
)

__all__ = [
    "HouseholdProfile",
    "Person",
    "validate_household",
    "SimulationParameters",
    "ParameterValidationError",
    "validate_parameters",
    "ReturnGenerator",
    "normal_return",
    "sample_return_sequence",
    "CashFlow",
    "MANDATORY_WITHDRAWAL_RATES",
    "withdrawal_rate",
    "year_cash_flow",
    "YearlyState",
    "TrajectoryResult",
    "simulate_trajectory",
    "AggregateResult",
    "ConfidenceInterval",
    "PercentileTable",
    "RiskAnalysis",
    "SummaryStatistics",
    "TypicalScenarios",
    "aggregate",
    "percentile",
    "MonteCarloResult",
    "TrajectoryError",
    "run_simulation",
    "run_trajectories",
]
