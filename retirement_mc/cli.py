"""CLI entry point for the retirement Monte Carlo simulation."""

import dataclasses
import sys
from pathlib import Path

from retirement_mc.charts import plot_confidence_fan
from retirement_mc.config import build_household, build_parameters, create_parser, load_config, resolve
from retirement_mc.household import HouseholdProfile
from retirement_mc.monte_carlo import MonteCarloResult, TrajectoryError, resolve_seed, run_simulation
from retirement_mc.params import SimulationParameters, ensure_valid


def _build_parser():
    parser = create_parser("Household retirement Monte Carlo simulation")
    parser.add_argument(
        "--workers", type=int, default=1,
        help="worker processes for the simulations (default: 1)",
    )
    parser.add_argument(
        "--chart", type=Path, default=None,
        help="write a fan chart PNG into this directory",
    )
    parser.add_argument(
        "--name", type=str, default="",
        help="chart filename suffix (e.g. couple → mc_fan-couple.png)",
    )
    return parser


def _fmt_money(v: float) -> str:
    if abs(v) >= 1_000_000:
        return f"${v / 1_000_000:,.2f}M"
    return f"${v:,.0f}"


def _print_header(profile: HouseholdProfile, params: SimulationParameters):
    years = max(0, profile.life_expectancy - profile.current_age + 1)
    print("=" * 72)
    print(f"Retirement Monte Carlo (age {profile.current_age}→{profile.life_expectancy}, {years} years)")
    print(
        f"  N={params.number_of_simulations:,} / return {params.expected_return:.1%}"
        f" / σ={params.return_volatility:.0%} / inflation {params.inflation_mean:.1%}"
        f" / crash {params.crash_probability:.0%} at {params.crash_magnitude:.0%} / seed={params.seed}"
    )
    household = "couple" if profile.spouse is not None else "single"
    print(
        f"  {household} / retirement at {profile.retirement_age}"
        f" / capital {_fmt_money(profile.initial_capital)}"
        f" / expenses {_fmt_money(profile.monthly_expenses)}/month"
    )
    print("=" * 72)


def _print_results(mc: MonteCarloResult):
    r = mc.result
    s = r.statistics
    print()
    print("Final capital percentiles")
    print("─" * 72)
    print("".join(f"{'P' + str(p):>10}" for p in r.percentiles.as_dict()))
    print("".join(f"{_fmt_money(v):>10}" for v in r.percentiles.as_dict().values()))
    print("─" * 72)

    print(f"\n{'Success rate':<24}{r.success_rate:>11.1f}%")
    print(f"{'Successful / failed':<24}{s.successful_runs:>6,} / {s.failed_runs:,}")
    print(f"{'Mean':<24}{_fmt_money(s.mean):>12}")
    print(f"{'Median':<24}{_fmt_money(s.median):>12}")
    print(f"{'Std deviation':<24}{_fmt_money(s.standard_deviation):>12}")
    print(f"{'Min / max':<24}{_fmt_money(s.min):>12} / {_fmt_money(s.max)}")
    depletion = f"{s.average_depletion_age:.1f}" if s.average_depletion_age else "none"
    print(f"{'Avg depletion age':<24}{depletion:>12}")

    print(f"\n{'Age':>5}{'Year':>6}{'P2.5':>12}{'P25':>12}{'Median':>12}{'P75':>12}{'P97.5':>12}")
    print("─" * 72)
    for ci in r.confidence_intervals:
        print(
            f"{ci.age:>5}{ci.year:>6}"
            f"{_fmt_money(ci.lower95):>12}{_fmt_money(ci.lower50):>12}"
            f"{_fmt_money(ci.median):>12}{_fmt_money(ci.upper50):>12}"
            f"{_fmt_money(ci.upper95):>12}"
        )
    print("─" * 72)

    risk = r.risk
    print("\nRisk analysis")
    print(f"  early depletion:     {risk.early_failure_rate:.1%}")
    print(f"  crash exposure:      {risk.crash_exposure_rate:.1%}")
    print(f"  mean max drawdown:   {risk.mean_max_drawdown:.1%}")


def main():
    parser = _build_parser()
    args = parser.parse_args()
    config_file = load_config(args.config)
    r = resolve(args, config_file)

    try:
        profile = build_household(r)
        params = build_parameters(r)
        ensure_valid(params, profile)
    except ValueError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        raise SystemExit(2)

    # Header and result report the same master seed
    params = dataclasses.replace(params, seed=resolve_seed(params.seed))
    _print_header(profile, params)

    try:
        mc = run_simulation(profile, params, workers=args.workers, quiet=False)
    except TrajectoryError as e:
        print(f"Simulation error: {e}", file=sys.stderr)
        raise SystemExit(1)

    _print_results(mc)

    if args.chart is not None:
        path = plot_confidence_fan(mc, args.chart, name=args.name)
        print(f"  → {path}", file=sys.stderr)


if __name__ == "__main__":
    main()
