"""Yearly income and expense composition."""

from typing import NamedTuple

from retirement_mc.household import HouseholdProfile, Person

BASE_PENSION_AGE = 65
BASE_PENSION_ANNUAL = 8000.0          # flat supplement per person, fully indexed
PRIVATE_PENSION_INDEXATION = 0.5      # employer pensions are only half indexed
RETIREMENT_EXPENSE_RATIO = 0.75       # spending drops by a quarter once retired

DEFAULT_WITHDRAWAL_RATE = 0.04
MANDATORY_WITHDRAWAL_AGE = 71
MANDATORY_WITHDRAWAL_CAP_AGE = 95
MANDATORY_WITHDRAWAL_CAP_RATE = 0.20

# Statutory minimum withdrawal from registered accounts (age → fraction).
# Ages between entries take the nearest entry (95 and up is the 20% cap).
MANDATORY_WITHDRAWAL_RATES: dict[int, float] = {
    71: 0.0528,
    72: 0.0540,
    73: 0.0553,
    74: 0.0567,
    75: 0.0582,
    76: 0.0598,
    77: 0.0617,
    78: 0.0636,
    79: 0.0658,
    80: 0.0682,
    85: 0.0853,
    90: 0.1196,
}


class CashFlow(NamedTuple):
    income: float
    expenses: float

    @property
    def net(self) -> float:
        return self.income - self.expenses


def withdrawal_rate(age: int) -> float:
    """Registered-account withdrawal rate at ``age``."""
    if age < MANDATORY_WITHDRAWAL_AGE:
        return DEFAULT_WITHDRAWAL_RATE
    if age >= MANDATORY_WITHDRAWAL_CAP_AGE:
        return MANDATORY_WITHDRAWAL_CAP_RATE
    rates = {**MANDATORY_WITHDRAWAL_RATES, MANDATORY_WITHDRAWAL_CAP_AGE: MANDATORY_WITHDRAWAL_CAP_RATE}
    table_age = min(rates, key=lambda a: abs(a - age))
    return rates[table_age]


def inflation_factor(inflation: float, year_index: int) -> float:
    return (1 + inflation) ** year_index


def _person_retirement_income(person: Person, person_age: int, inflation: float) -> float:
    income = 0.0
    if person_age >= person.government_pension_start_age:
        income += person.government_pension_annual() * inflation
    if person_age >= BASE_PENSION_AGE:
        income += BASE_PENSION_ANNUAL * inflation
    private_indexation = 1 + (inflation - 1) * PRIVATE_PENSION_INDEXATION
    income += person.private_pension_monthly * 12 * private_indexation
    income += person.registered_balance * withdrawal_rate(person_age)
    return income


def retirement_income(profile: HouseholdProfile, age: int, inflation: float) -> float:
    """Composite retirement income in the year the household is ``age``.

    inflation: cumulative inflation factor since the start of the plan.
    """
    income = 0.0
    for person in profile.persons:
        income += _person_retirement_income(person, profile.age_of(person, age), inflation)
    return income


def employment_income(profile: HouseholdProfile, inflation: float) -> float:
    return profile.employment_income_total * inflation


def annual_expenses(profile: HouseholdProfile, retired: bool, inflation: float) -> float:
    expenses = profile.monthly_expenses * 12 * inflation
    if retired:
        expenses *= RETIREMENT_EXPENSE_RATIO
    return expenses


def year_cash_flow(
    profile: HouseholdProfile, age: int, year_index: int, inflation_rate: float,
) -> CashFlow:
    """Income and expenses for one simulated year."""
    inflation = inflation_factor(inflation_rate, year_index)
    retired = age >= profile.retirement_age
    if retired:
        income = retirement_income(profile, age, inflation)
    else:
        income = employment_income(profile, inflation)
    return CashFlow(income, annual_expenses(profile, retired, inflation))
