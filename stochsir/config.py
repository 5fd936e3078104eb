import math
import numbers
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional, Sequence


COMPARTMENTS = ("S", "I", "R")


class ConfigurationError(ValueError):
    """Raised when model parameters or run settings are invalid."""


def check_replicate_count(n_replicates) -> None:
    if isinstance(n_replicates, bool) or not isinstance(n_replicates, numbers.Integral):
        raise ConfigurationError(
            f"n_replicates must be an integer, got {n_replicates!r}"
        )
    if n_replicates < 1:
        raise ConfigurationError(
            f"n_replicates must be at least 1, got {n_replicates}"
        )


@dataclass
class SimulationParameters:
    N: int  # Total population
    I0: int  # Initial infected
    beta: float  # Contact rate
    gamma: float  # Recovery rate
    dt: float = 1.0  # Time step size

    @property
    def S0(self) -> int:
        return self.N - self.I0

    @property
    def R0(self) -> int:
        return 0

    def validate(self) -> None:
        """
        Checks the parameters and raises ConfigurationError on the first problem found.
        """
        for name in ("N", "I0"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {value}")

        if self.I0 > self.N:
            raise ConfigurationError(
                f"I0 ({self.I0}) cannot exceed the population size N ({self.N})"
            )

        for name in ("beta", "gamma", "dt"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigurationError(f"{name} must be a real number, got {value!r}")
            if not math.isfinite(value):
                raise ConfigurationError(f"{name} must be finite, got {value}")

        if self.beta < 0:
            raise ConfigurationError(f"beta must be non-negative, got {self.beta}")
        if self.gamma < 0:
            raise ConfigurationError(f"gamma must be non-negative, got {self.gamma}")
        if self.dt <= 0:
            raise ConfigurationError(f"dt must be positive, got {self.dt}")


def steps_between(time_grid: Sequence[float], dt: float) -> list:
    """
    Converts a time grid into the number of model steps between consecutive points.

    :param time_grid: Ordered time points, the first one being the initial state
    :param dt: Step size of the model
    :return: List of len(time_grid) - 1 step counts
    """
    if len(time_grid) == 0:
        raise ConfigurationError("time_grid must contain at least one time point")

    steps = []
    for t_prev, t_next in zip(time_grid[:-1], time_grid[1:]):
        if not t_next > t_prev:
            raise ConfigurationError(
                f"time_grid must be strictly increasing, got {t_prev} followed by {t_next}"
            )
        n_steps = (t_next - t_prev) / dt
        if round(n_steps) < 1 or not math.isclose(
            n_steps, round(n_steps), rel_tol=1e-9, abs_tol=1e-9
        ):
            raise ConfigurationError(
                f"time_grid spacing {t_next - t_prev} is not a multiple of dt={dt}"
            )
        steps.append(int(round(n_steps)))

    return steps


@dataclass
class Config:
    """
    Full run configuration: model parameters plus simulation settings.

    Attributes:
        N: Total population.
        I0: Initially infected individuals.
        beta: Contact rate.
        gamma: Recovery rate.
        dt: Model step size.
        days: Last time point; the grid is 0, 1, ..., days.
        n_replicates: Number of independent stochastic runs.
        seed: Seed for the replicate random streams. None draws fresh entropy.
        compartments: Compartment names in output order. Must match the
            simulator order S, I, R.
    """
    N: int = 1000
    I0: int = 10
    beta: float = 0.2
    gamma: float = 0.1
    dt: float = 1.0
    days: int = 100
    n_replicates: int = 1
    seed: Optional[int] = 1
    compartments: tuple = field(default=COMPARTMENTS)

    @property
    def parameters(self) -> SimulationParameters:
        return SimulationParameters(
            N=self.N, I0=self.I0, beta=self.beta, gamma=self.gamma, dt=self.dt
        )

    @property
    def time_grid(self) -> list:
        return list(range(0, self.days + 1))

    def validate(self) -> None:
        self.parameters.validate()
        if self.days < 0:
            raise ConfigurationError(f"days must be non-negative, got {self.days}")
        check_replicate_count(self.n_replicates)
        if tuple(self.compartments) != COMPARTMENTS:
            raise ConfigurationError(
                f"compartments must be {COMPARTMENTS}, the order the simulator emits, "
                f"got {tuple(self.compartments)}"
            )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["compartments"] = list(self.compartments)
        return data


class DefaultConfig(Config):
    """Single trajectory, N = 1000 with 10 initially infected."""

    def __init__(self):
        super().__init__()


class ReplicatesConfig(Config):
    """Same epidemic as DefaultConfig, run 200 times."""

    def __init__(self):
        super().__init__(n_replicates=200)


def get_config(name: str) -> Config:
    if name == "default":
        return DefaultConfig()
    elif name == "replicates":
        return ReplicatesConfig()
    else:
        raise ValueError(f"Unknown config: {name}")
