from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

import numpy as np

from .config import SimulationParameters, check_replicate_count, steps_between
from .sir import EpidemicState, run_sir


def replicate_generators(
    n_replicates: int, seed: Optional[int] = None
) -> List[np.random.Generator]:
    """
    Independent random streams, one per replicate, derived from a single seed.

    Replicate k always receives the k-th child of the seed sequence, so its
    trajectory does not depend on how many other replicates are run alongside it.
    """
    children = np.random.SeedSequence(seed).spawn(n_replicates)
    return [np.random.default_rng(child) for child in children]


class Simulation:
    def __init__(self, parameters: SimulationParameters):
        parameters.validate()
        self.parameters = parameters
        self.initial_state = EpidemicState(
            N=parameters.N, S=parameters.S0, I=parameters.I0, R=parameters.R0
        )

    def run(
        self,
        time_grid: Sequence[float],
        n_replicates: int = 1,
        seed: Optional[int] = None,
        n_workers: Optional[int] = None,
    ) -> np.ndarray:
        """
        Runs independent stochastic replicates over a time grid.

        :param time_grid: Ordered time points; the first one holds the initial state
        :param n_replicates: Number of independent trajectories
        :param seed: Seed for the replicate streams
        :param n_workers: Run replicates on this many threads. None or 1 runs serially.
        :return: Integer array of shape (len(time_grid), 3, n_replicates)
        """
        steps = steps_between(time_grid, self.parameters.dt)
        check_replicate_count(n_replicates)

        generators = replicate_generators(n_replicates, seed)

        if n_workers is not None and n_workers > 1:
            with ThreadPoolExecutor(max_workers=n_workers) as executor:
                # map preserves replicate order regardless of completion order
                trajectories = list(
                    executor.map(lambda rng: self.run_replicate(steps, rng), generators)
                )
        else:
            trajectories = [self.run_replicate(steps, rng) for rng in generators]

        return np.stack(trajectories, axis=-1)

    def run_replicate(self, steps: List[int], rng: np.random.Generator) -> np.ndarray:
        """
        Runs one trajectory, recording the state after each block of steps.

        :return: Array of shape (len(steps) + 1, 3)
        """
        current = self.initial_state
        rows = [(current.S, current.I, current.R)]

        for n_steps in steps:
            S, I, R = run_sir(
                current,
                self.parameters.beta,
                self.parameters.gamma,
                n_steps,
                dt=self.parameters.dt,
                rng=rng,
            )
            current = EpidemicState(N=current.N, S=S[-1], I=I[-1], R=R[-1])
            rows.append((current.S, current.I, current.R))

        return np.array(rows, dtype=np.int64)

    def run_deterministic(self, time_grid: Sequence[float]) -> np.ndarray:
        """
        Expected-value trajectory of the same chain, shape (len(time_grid), 3).
        """
        steps = steps_between(time_grid, self.parameters.dt)

        current = self.initial_state
        rows = [(current.S, current.I, current.R)]

        for n_steps in steps:
            S, I, R = run_sir(
                current,
                self.parameters.beta,
                self.parameters.gamma,
                n_steps,
                dt=self.parameters.dt,
            )
            current = EpidemicState(N=current.N, S=S[-1], I=I[-1], R=R[-1])
            rows.append((current.S, current.I, current.R))

        return np.array(rows, dtype=float)


def simulate(
    parameters: SimulationParameters,
    time_grid: Sequence[float],
    n_replicates: int = 1,
    seed: Optional[int] = None,
    n_workers: Optional[int] = None,
) -> np.ndarray:
    """Shortcut for Simulation(parameters).run(...)."""
    return Simulation(parameters).run(
        time_grid, n_replicates=n_replicates, seed=seed, n_workers=n_workers
    )
