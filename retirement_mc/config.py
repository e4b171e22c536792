"""TOML config loader with CLI > config > default resolution."""

import argparse
import sys
import tomllib
from datetime import date
from pathlib import Path

from retirement_mc.household import HouseholdProfile, Person
from retirement_mc.params import SimulationParameters

DEFAULT_CONFIG_PATH = Path("retirement.toml")

# Per-person keys; the spouse's are the same with a "spouse_" prefix.
PERSON_DEFAULTS = {
    "birth_date": "",
    "income": 0.0,
    "retirement_age": 65,
    "life_expectancy": 85,
    "pension": 0.0,
    "pension_at_70": 0.0,
    "pension_start_age": 65,
    "private_pension": 0.0,
    "registered": 0.0,
    "non_registered": 0.0,
}

PERSON_HELP = {
    "birth_date": "birth date, YYYY-MM-DD",
    "income": "annual employment income",
    "retirement_age": "desired retirement age",
    "life_expectancy": "life expectancy (age)",
    "pension": "government pension per month at the start age",
    "pension_at_70": "government pension per month if deferred to 70",
    "pension_start_age": "government pension start age",
    "private_pension": "private (employer) pension per month",
    "registered": "registered retirement account balance",
    "non_registered": "non-registered investment balance",
}

DEFAULTS = {
    **PERSON_DEFAULTS,
    "birth_date": "1966-01-01",
    **{f"spouse_{k}": v for k, v in PERSON_DEFAULTS.items()},
    "monthly_expenses": 3000.0,
    "net_worth": None,
    "simulations": 1000,
    "expected_return": 0.06,
    "volatility": 0.15,
    "inflation": 0.02,
    "inflation_volatility": 0.01,
    "sequence_risk": True,
    "crash_probability": 0.02,
    "crash_magnitude": -0.35,
    "seed": 42,
    "stochastic_inflation": False,
}


def load_config(path: Path | None = None) -> dict:
    """Load TOML config file into a flat dict. Returns empty dict if file doesn't exist.

    [primary] keys are taken as-is, [spouse] keys get a "spouse_" prefix and
    [simulation] keys are merged at the top level.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"Could not read config file {path}: {e}", file=sys.stderr)
        raise SystemExit(1)

    flat = {k: v for k, v in raw.items() if not isinstance(v, dict)}
    flat.update(raw.get("primary", {}))
    flat.update({f"spouse_{k}": v for k, v in raw.get("spouse", {}).items()})
    flat.update(raw.get("simulation", {}))
    # TOML has native dates; keep everything as ISO strings like the CLI
    for key in ("birth_date", "spouse_birth_date"):
        if isinstance(flat.get(key), date):
            flat[key] = flat[key].isoformat()
    if flat.get("seed") is False:
        flat["seed"] = "none"
    return flat


def parse_seed(v) -> int | None:
    """Seed from CLI/config: an integer, or none/false for a fresh seed each run."""
    if v is None or v is False or str(v).strip().lower() in ("none", "random", ""):
        return None
    return int(v)


def parse_date(s: str) -> date:
    return date.fromisoformat(str(s).strip())


def _add_person_arguments(parser: argparse.ArgumentParser, prefix: str, who: str) -> None:
    for key, default in PERSON_DEFAULTS.items():
        flag = "--" + (prefix + key).replace("_", "-")
        kind = type(default) if default != "" else str
        parser.add_argument(flag, type=kind, default=None, help=f"{who} {PERSON_HELP[key]}")


def create_parser(description: str) -> argparse.ArgumentParser:
    """Create argparse parser with shared household and simulation flags."""
    d = DEFAULTS
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=None, help=f"config file path (default: {DEFAULT_CONFIG_PATH})")
    _add_person_arguments(parser, "", "primary person's")
    _add_person_arguments(parser, "spouse_", "spouse's")
    parser.add_argument("--monthly-expenses", type=float, default=None, help=f"household expenses per month (default: {d['monthly_expenses']:.0f})")
    parser.add_argument("--net-worth", type=float, default=None, help="starting capital (default: sum of all account balances)")
    parser.add_argument("--simulations", type=int, default=None, help=f"number of simulations (default: {d['simulations']})")
    parser.add_argument("--expected-return", type=float, default=None, help=f"expected annual return (default: {d['expected_return']})")
    parser.add_argument("--volatility", type=float, default=None, help=f"annual return volatility σ (default: {d['volatility']})")
    parser.add_argument("--inflation", type=float, default=None, help=f"mean annual inflation (default: {d['inflation']})")
    parser.add_argument("--inflation-volatility", type=float, default=None, help=f"inflation volatility σ (default: {d['inflation_volatility']})")
    parser.add_argument("--no-sequence-risk", dest="sequence_risk", action="store_false", default=None, help="draw returns independently year to year")
    parser.add_argument("--crash-probability", type=float, default=None, help=f"annual market crash probability (default: {d['crash_probability']})")
    parser.add_argument("--crash-magnitude", type=float, default=None, help=f"return in a crash year (default: {d['crash_magnitude']})")
    parser.add_argument("--seed", type=str, default=None, help=f"master random seed, or 'none' (default: {d['seed']})")
    parser.add_argument("--stochastic-inflation", action="store_true", default=None, help="draw one inflation rate per simulation")
    return parser


def resolve(args: argparse.Namespace, config: dict) -> dict:
    """Resolve values with priority: CLI flag > config file > hardcoded default."""
    resolved = {}
    for key, default in DEFAULTS.items():
        cli_val = getattr(args, key, None)
        resolved[key] = cli_val if cli_val is not None else config.get(key, default)
    return resolved


def _build_person(r: dict, prefix: str = "") -> Person:
    return Person(
        birth_date=parse_date(r[prefix + "birth_date"]),
        employment_income=float(r[prefix + "income"]),
        retirement_age=int(r[prefix + "retirement_age"]),
        life_expectancy=int(r[prefix + "life_expectancy"]),
        government_pension_monthly=float(r[prefix + "pension"]),
        government_pension_monthly_at_70=float(r[prefix + "pension_at_70"]),
        government_pension_start_age=int(r[prefix + "pension_start_age"]),
        private_pension_monthly=float(r[prefix + "private_pension"]),
        registered_balance=float(r[prefix + "registered"]),
        non_registered_balance=float(r[prefix + "non_registered"]),
    )


def build_household(r: dict, as_of: date | None = None) -> HouseholdProfile:
    """Build HouseholdProfile from resolved config dict. No spouse birth date → single household."""
    spouse = _build_person(r, "spouse_") if str(r["spouse_birth_date"]).strip() else None
    net_worth = r["net_worth"]
    return HouseholdProfile(
        primary=_build_person(r),
        spouse=spouse,
        monthly_expenses=float(r["monthly_expenses"]),
        net_worth=float(net_worth) if net_worth is not None else None,
        as_of=as_of or date.today(),
    )


def build_parameters(r: dict) -> SimulationParameters:
    """Build SimulationParameters from resolved config dict."""
    return SimulationParameters(
        number_of_simulations=r["simulations"],
        expected_return=float(r["expected_return"]),
        return_volatility=float(r["volatility"]),
        inflation_mean=float(r["inflation"]),
        inflation_volatility=float(r["inflation_volatility"]),
        sequence_risk=bool(r["sequence_risk"]),
        crash_probability=float(r["crash_probability"]),
        crash_magnitude=float(r["crash_magnitude"]),
        seed=parse_seed(r["seed"]),
        stochastic_inflation=bool(r["stochastic_inflation"]),
    )
