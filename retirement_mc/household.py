"""Household profile: who is in the plan and what they bring to it."""

import math
from dataclasses import dataclass, field, fields
from datetime import date

DEFAULT_RETIREMENT_AGE = 65
DEFAULT_LIFE_EXPECTANCY = 85
DEFAULT_PENSION_START_AGE = 65
DEFERRED_PENSION_AGE = 70


@dataclass(frozen=True)
class Person:
    """One adult of the household. Money amounts are in today's dollars."""

    birth_date: date
    employment_income: float = 0.0  # annual, gross
    retirement_age: int = DEFAULT_RETIREMENT_AGE
    life_expectancy: int = DEFAULT_LIFE_EXPECTANCY
    government_pension_monthly: float = 0.0
    government_pension_monthly_at_70: float = 0.0
    government_pension_start_age: int = DEFAULT_PENSION_START_AGE
    private_pension_monthly: float = 0.0
    registered_balance: float = 0.0
    non_registered_balance: float = 0.0

    def age_on(self, as_of: date) -> int:
        """Completed years of age on the given date."""
        age = as_of.year - self.birth_date.year
        if (as_of.month, as_of.day) < (self.birth_date.month, self.birth_date.day):
            age -= 1
        return age

    def government_pension_annual(self) -> float:
        """Annual government pension at the configured start age."""
        deferred = (
            self.government_pension_start_age >= DEFERRED_PENSION_AGE
            and self.government_pension_monthly_at_70 > 0
        )
        monthly = self.government_pension_monthly_at_70 if deferred else self.government_pension_monthly
        return monthly * 12

    @property
    def account_total(self) -> float:
        return self.registered_balance + self.non_registered_balance


@dataclass(frozen=True)
class HouseholdProfile:
    """Immutable snapshot of a one- or two-person household.

    The household clock runs on the primary person's age: retirement,
    life expectancy and trajectory ages are all taken from ``primary``.
    A single-person household has ``spouse=None``.
    """

    primary: Person
    spouse: Person | None = None
    monthly_expenses: float = 0.0
    net_worth: float | None = None
    as_of: date = field(default_factory=date.today)

    @property
    def persons(self) -> tuple[Person, ...]:
        if self.spouse is None:
            return (self.primary,)
        return (self.primary, self.spouse)

    @property
    def current_age(self) -> int:
        return self.primary.age_on(self.as_of)

    @property
    def retirement_age(self) -> int:
        return self.primary.retirement_age

    @property
    def life_expectancy(self) -> int:
        return self.primary.life_expectancy

    @property
    def start_year(self) -> int:
        return self.as_of.year

    @property
    def initial_capital(self) -> float:
        if self.net_worth is not None:
            return self.net_worth
        return sum(p.account_total for p in self.persons)

    @property
    def employment_income_total(self) -> float:
        return sum(p.employment_income for p in self.persons)

    def age_of(self, person: Person, household_age: int) -> int:
        """Age of ``person`` in the year the primary person is ``household_age``."""
        return household_age + person.age_on(self.as_of) - self.current_age


def _non_finite(obj, prefix: str) -> list[str]:
    errors = []
    for f in fields(obj):
        value = getattr(obj, f.name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if not math.isfinite(value):
            errors.append(f"{prefix}{f.name} must be finite (got {value})")
    return errors


def validate_household(profile: HouseholdProfile) -> list[str]:
    """Return a list of non-finite household inputs (empty if valid)."""
    errors = _non_finite(profile, "")
    errors += _non_finite(profile.primary, "primary.")
    if profile.spouse is not None:
        errors += _non_finite(profile.spouse, "spouse.")
    return errors
