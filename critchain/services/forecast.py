"""
Monte Carlo completion forecast.

Each task's duration is drawn from a right-skewed triangular distribution on
[effort, pessimistic] whose mode is the effort estimate: tasks mostly finish
close to plan with a long tail toward the pessimistic estimate. Every draw is
pushed through the same forward pass as the deterministic schedule, over the
resource-leveled network, vectorised across iterations.
"""

import logging
from datetime import timedelta
from typing import Dict, Any

import numpy as np

from critchain.domain.buffer import round_half_up
from critchain.domain.dependency import DependencyType
from critchain.services.scheduler import CCPMScheduler
from critchain.utils.graph import topological_order

logger = logging.getLogger(__name__)

PERCENTILES = (("p50", 0.5), ("p75", 0.75), ("p80", 0.8), ("p90", 0.9), ("p95", 0.95))
HISTOGRAM_BINS = 10


class ProjectForecast:
    def __init__(
        self,
        deterministic_duration_minutes,
        simulations,
        percentiles,
        histogram,
        start_date=None,
    ):
        self.deterministic_duration_minutes = deterministic_duration_minutes
        self.simulations = simulations
        self.percentiles = percentiles  # name -> duration in minutes
        self.histogram = histogram  # list of (min, max, count)
        self.start_date = start_date

    def finish_date(self, duration_minutes):
        """Calendar finish for a duration, None without a start date."""
        if self.start_date is None:
            return None
        return self.start_date + timedelta(minutes=duration_minutes)

    def to_dict(self) -> Dict[str, Any]:
        def iso(value):
            return value.isoformat() if value is not None else None

        return {
            "startDate": iso(self.start_date),
            "deterministicDurationMinutes": self.deterministic_duration_minutes,
            "deterministicFinishDate": iso(
                self.finish_date(self.deterministic_duration_minutes)
            ),
            "simulations": self.simulations,
            "percentiles": {
                name: {
                    "durationMinutes": minutes,
                    "finishDate": iso(self.finish_date(minutes)),
                }
                for name, minutes in self.percentiles.items()
            },
            "histogram": [
                {"minMinutes": low, "maxMinutes": high, "count": count}
                for low, high, count in self.histogram
            ],
        }


def sample_durations(optimistic, pessimistic, simulations, rng):
    """
    Draw ``simulations`` rows of task durations.

    Inverse CDF of the triangular distribution with mode at the lower bound:
    x = max - (max - min) * sqrt(1 - u).
    """
    optimistic = np.asarray(optimistic, dtype=float)
    pessimistic = np.asarray(pessimistic, dtype=float)
    u = rng.random((simulations, optimistic.size))
    return pessimistic - (pessimistic - optimistic) * np.sqrt(1.0 - u)


def simulate_finish_times(network, durations):
    """
    Forward pass for every row of ``durations`` at once.

    Args:
        network: ProjectNetwork
        durations: Array of shape (simulations, tasks)

    Returns:
        numpy.ndarray: Project finish per simulation
    """
    simulations = durations.shape[0]
    early_start = np.zeros_like(durations)
    early_finish = np.zeros_like(durations)

    for node in topological_order(network):
        duration = durations[:, node]
        start = np.zeros(simulations)
        for handle in network.incoming[node]:
            predecessor, _, dep_type, lag, _ = network.edges[handle]
            if dep_type is DependencyType.FS:
                candidate = early_finish[:, predecessor] + lag
            elif dep_type is DependencyType.SS:
                candidate = early_start[:, predecessor] + lag
            elif dep_type is DependencyType.FF:
                candidate = early_finish[:, predecessor] + lag - duration
            else:
                candidate = early_start[:, predecessor] + lag - duration
            start = np.maximum(start, candidate)
        early_start[:, node] = start
        early_finish[:, node] = start + duration

    if durations.shape[1] == 0:
        return np.zeros(simulations)
    return early_finish.max(axis=1)


def forecast_completion(
    tasks,
    dependencies=(),
    simulations=1000,
    seed=None,
    start_date=None,
    scheduler=None,
):
    """
    Forecast project completion with a Monte Carlo simulation.

    Args:
        tasks: Task snapshots; ``pessimistic_duration`` bounds each draw
        dependencies: Dependency edges
        simulations: Number of iterations
        seed: Seed for reproducible forecasts
        start_date: Optional datetime anchoring minutes to calendar dates
        scheduler: CCPMScheduler used for the deterministic analysis

    Returns:
        ProjectForecast
    """
    if simulations < 1:
        raise ValueError("simulations must be at least 1")

    scheduler = scheduler or CCPMScheduler()
    analysis = scheduler.analyze(tasks, dependencies)
    network = analysis.network

    optimistic = [task.duration for task in network.tasks]
    pessimistic = [task.pessimistic_duration for task in network.tasks]

    rng = np.random.default_rng(seed)
    samples = sample_durations(optimistic, pessimistic, simulations, rng)
    finishes = np.sort(simulate_finish_times(network, samples))

    percentiles = {}
    for name, fraction in PERCENTILES:
        position = min(int(np.floor(simulations * fraction)), simulations - 1)
        percentiles[name] = round_half_up(float(finishes[position]))

    counts, edges = np.histogram(finishes, bins=HISTOGRAM_BINS)
    histogram = [
        (round_half_up(float(edges[i])), round_half_up(float(edges[i + 1])), int(count))
        for i, count in enumerate(counts)
    ]

    logger.debug(
        "Forecast over %d simulation(s): p50=%d p90=%d",
        simulations,
        percentiles["p50"],
        percentiles["p90"],
    )
    return ProjectForecast(
        analysis.total_project_duration_minutes,
        simulations,
        percentiles,
        histogram,
        start_date,
    )
