from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass
class EpidemicState:
    N: int  # Total population
    S: float  # Susceptible
    I: float  # Infected
    R: float  # Recovered


def transition_probabilities(
    state: EpidemicState, beta: float, gamma: float, dt: float
) -> Tuple[float, float]:
    """
    Per-individual probabilities of leaving S and I during one step of size dt.

    Rates are converted to probabilities assuming exponential waiting times.

    :return: (infection probability, recovery probability)
    """
    if state.N > 0:
        p_SI = 1.0 - np.exp(-beta * state.I / state.N * dt)
    else:
        p_SI = 0.0
    p_IR = 1.0 - np.exp(-gamma * dt)
    return p_SI, p_IR


def step(
    state: EpidemicState,
    beta: float,
    gamma: float,
    dt: float,
    rng: np.random.Generator,
) -> EpidemicState:
    """
    Advances the discrete-time Markov chain by one step using Binomial transitions.
    """
    p_SI, p_IR = transition_probabilities(state, beta, gamma, dt)

    # Trial counts bound the draws, so no compartment can go negative
    new_infections = int(rng.binomial(int(state.S), p_SI))
    new_recoveries = int(rng.binomial(int(state.I), p_IR))

    return EpidemicState(
        N=state.N,
        S=state.S - new_infections,
        I=state.I + new_infections - new_recoveries,
        R=state.R + new_recoveries,
    )


def run_sir(
    state: EpidemicState,
    beta: float,
    gamma: float,
    steps: int,
    dt: float = 1.0,
    rng: np.random.Generator | None = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Simulates the SIR model for a given number of steps.

    Supports two modes:
    - Stochastic (rng provided): Binomial transitions, integer counts.
    - Deterministic (rng=None): expected value of each transition, useful as a
      reference curve for the replicates.

    Args:
        state: Current epidemic state.
        beta: Contact rate.
        gamma: Recovery rate.
        steps: Number of steps to simulate.
        dt: Step size.
        rng: NumPy Generator for stochastic mode. If None, runs deterministically.

    Returns:
        Tuple of (S, I, R) arrays of shape (steps,), excluding initial state.
    """
    S, I, R = [], [], []
    current = state

    for _ in range(steps):
        if rng is None:
            p_SI, p_IR = transition_probabilities(current, beta, gamma, dt)
            new_infections = current.S * p_SI
            new_recoveries = current.I * p_IR

            current = EpidemicState(
                N=current.N,
                S=current.S - new_infections,
                I=current.I + new_infections - new_recoveries,
                R=current.R + new_recoveries,
            )
        else:
            current = step(current, beta, gamma, dt, rng)

        S.append(current.S)
        I.append(current.I)
        R.append(current.R)

    return np.array(S), np.array(I), np.array(R)
