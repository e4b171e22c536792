"""Monte Carlo orchestration: many independent trajectories, one aggregate."""

import multiprocessing as mp
import sys
from dataclasses import dataclass
from functools import partial
from random import Random, SystemRandom

from retirement_mc.aggregate import AggregateResult, aggregate
from retirement_mc.household import HouseholdProfile
from retirement_mc.params import SimulationParameters, ensure_valid
from retirement_mc.simulation import TrajectoryResult, simulate_trajectory

DEFAULT_SAMPLE_SIZE = 100
PROGRESS_EVERY = 100


class TrajectoryError(RuntimeError):
    """A single run failed; the batch cannot be aggregated without it."""

    def __init__(self, run_id: int, message: str):
        super().__init__(run_id, message)
        self.run_id = run_id
        self.message = message

    def __str__(self) -> str:
        return f"simulation {self.run_id} failed: {self.message}"


@dataclass(frozen=True)
class MonteCarloResult:
    result: AggregateResult
    trajectories: tuple[TrajectoryResult, ...]  # first sample_size runs, by id
    seed: int                                   # master seed actually used
    n_simulations: int


def resolve_seed(seed: int | None) -> int:
    if seed is not None:
        return seed
    return SystemRandom().getrandbits(63)


def run_stream(master_seed: int, run_id: int) -> Random:
    """Independent random stream for one run, keyed by master seed and run id."""
    return Random(f"{master_seed}:{run_id}")


def _run_one(
    profile: HouseholdProfile,
    params: SimulationParameters,
    master_seed: int,
    run_id: int,
) -> TrajectoryResult:
    try:
        return simulate_trajectory(profile, params, run_stream(master_seed, run_id), run_id)
    except Exception as e:
        raise TrajectoryError(run_id, f"{type(e).__name__}: {e}") from e


def _report_progress(done: int, total: int, quiet: bool) -> None:
    if not quiet and done % PROGRESS_EVERY == 0:
        print(f"\r  simulations: {done}/{total}", end="", file=sys.stderr)


def run_trajectories(
    profile: HouseholdProfile,
    params: SimulationParameters,
    workers: int = 1,
    quiet: bool = True,
    seed: int | None = None,
) -> list[TrajectoryResult]:
    """Run ``params.number_of_simulations`` trajectories, ordered by run id.

    seed: master seed override (defaults to params.seed, resolved once).
    workers > 1 fans the runs out over a process pool; each run draws from
    its own stream, so results do not depend on the worker count.
    """
    ensure_valid(params, profile)
    master_seed = resolve_seed(params.seed if seed is None else seed)
    n = params.number_of_simulations
    run = partial(_run_one, profile, params, master_seed)

    results: list[TrajectoryResult] = []
    if workers > 1:
        chunksize = max(1, n // (workers * 4))
        with mp.Pool(workers) as pool:
            for result in pool.imap(run, range(n), chunksize=chunksize):
                results.append(result)
                _report_progress(len(results), n, quiet)
    else:
        for run_id in range(n):
            results.append(run(run_id))
            _report_progress(len(results), n, quiet)

    if not quiet and n >= PROGRESS_EVERY:
        print(file=sys.stderr)
    return results


def run_simulation(
    profile: HouseholdProfile,
    params: SimulationParameters | None = None,
    workers: int = 1,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    quiet: bool = True,
) -> MonteCarloResult:
    """Simulate the household and summarize the outcome distribution."""
    if params is None:
        params = SimulationParameters()
    ensure_valid(params, profile)
    master_seed = resolve_seed(params.seed)
    trajectories = run_trajectories(profile, params, workers=workers, quiet=quiet, seed=master_seed)
    result = aggregate(
        trajectories,
        params.number_of_simulations,
        current_age=profile.current_age,
        life_expectancy=profile.life_expectancy,
        start_year=profile.start_year,
    )
    return MonteCarloResult(
        result=result,
        trajectories=tuple(trajectories[:max(0, sample_size)]),
        seed=master_seed,
        n_simulations=params.number_of_simulations,
    )
