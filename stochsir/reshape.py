"""
Reshaping of raw replicate output into tidy tables.

The simulator returns an array indexed [time][compartment][replicate]. This
module turns it into a ReshapedResult, which carries:
- a flat DataFrame with a ``t`` column followed by one column per
  (compartment, replicate) pair named ``{compartment}_{replicate}``, with
  replicates numbered from 1. Columns are compartment-major: all replicates
  of the first compartment come before any replicate of the second one.
- the metadata (compartment names, compartment count, replicate count) that
  plotting uses to map columns to colors.

A ReshapedResult does not change after it is built: the time vector and
every array it hands out are read-only copies, and ``table`` returns a fresh
copy of the underlying frame on each access.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd


class DimensionMismatchError(ValueError):
    """Raised when a raw array does not match the declared compartments, replicates or time grid."""


def column_name(compartment: str, replicate: int) -> str:
    return f"{compartment}_{replicate}"


@dataclass(frozen=True, eq=False)
class ReshapedResult:
    """
    Tidy view of a replicated run.

    Attributes:
        time: Time points, shape (n_times,). Read-only.
        compartment_names: Compartment names in column order.
        n_replicates: Number of replicates per compartment.
    """
    time: np.ndarray
    compartment_names: tuple
    n_replicates: int
    _table: pd.DataFrame = field(repr=False)

    @property
    def table(self) -> pd.DataFrame:
        """Copy of the flat table: column ``t`` and n_compartments * n_replicates data columns."""
        return self._table.copy()

    @property
    def n_compartments(self) -> int:
        return len(self.compartment_names)

    def columns(self, compartment: str) -> List[str]:
        if compartment not in self.compartment_names:
            raise KeyError(f"Unknown compartment: '{compartment}'")
        return [column_name(compartment, k) for k in range(1, self.n_replicates + 1)]

    def compartment(self, compartment: str) -> np.ndarray:
        """Values of one compartment, shape (n_times, n_replicates)."""
        values = np.array(self._table[self.columns(compartment)].to_numpy(), copy=True)
        values.setflags(write=False)
        return values

    def by_compartment(self) -> Dict[str, np.ndarray]:
        return {name: self.compartment(name) for name in self.compartment_names}

    @property
    def peak_infected(self) -> np.ndarray:
        return self.compartment("I").max(axis=0)

    @property
    def peak_time(self) -> np.ndarray:
        return self.time[self.compartment("I").argmax(axis=0)]

    @property
    def final_size(self) -> np.ndarray:
        return self.compartment("R")[-1]

    @property
    def epidemic_duration(self) -> np.ndarray:
        """Last time point with at least one infected individual, per replicate."""
        infected = self.compartment("I")
        durations = []
        for k in range(self.n_replicates):
            above_one = np.where(infected[:, k] >= 1)[0]
            durations.append(self.time[above_one[-1]] if len(above_one) > 0 else self.time[0])
        return np.array(durations)


def reshape(
    raw: np.ndarray,
    compartment_names: Sequence[str],
    time_grid: Sequence[float],
    n_replicates: Optional[int] = None,
) -> ReshapedResult:
    """
    Flattens a [time][compartment][replicate] array into a ReshapedResult.

    :param raw: Simulator output
    :param compartment_names: Names for the compartment axis, in order
    :param time_grid: Time points of the time axis
    :param n_replicates: Expected replicate count. If None, taken from the array.
    :return: ReshapedResult
    """
    raw = np.asarray(raw)
    time = np.array(time_grid, copy=True)
    time.setflags(write=False)
    names = tuple(compartment_names)

    if raw.ndim != 3:
        raise DimensionMismatchError(
            f"Expected a 3-dimensional [time][compartment][replicate] array, got shape {raw.shape}"
        )

    n_times, n_compartments, n_reps = raw.shape

    if n_times != len(time):
        raise DimensionMismatchError(
            f"Array has {n_times} time points but time_grid has {len(time)}"
        )
    if n_compartments != len(names):
        raise DimensionMismatchError(
            f"Array has {n_compartments} compartments but {len(names)} names were given: {names}"
        )
    if len(set(names)) != len(names):
        raise DimensionMismatchError(f"Compartment names must be unique, got {names}")
    if n_replicates is not None and n_reps != n_replicates:
        raise DimensionMismatchError(
            f"Array has {n_reps} replicates but {n_replicates} were declared"
        )

    columns = {"t": time.copy()}
    for c, name in enumerate(names):
        for k in range(n_reps):
            columns[column_name(name, k + 1)] = raw[:, c, k].copy()

    table = pd.DataFrame(columns)

    return ReshapedResult(
        time=time, compartment_names=names, n_replicates=n_reps, _table=table
    )


def summarize(
    result: ReshapedResult, quantiles: Sequence[float] = (0.025, 0.5, 0.975)
) -> pd.DataFrame:
    """
    Mean and quantiles across replicates for every compartment and time point.

    :return: Long DataFrame with columns t, compartment, mean and one q{level} column per quantile
    """
    frames = []
    for name in result.compartment_names:
        values = result.compartment(name).astype(float)
        frame = pd.DataFrame({"t": result.time, "compartment": name})
        frame["mean"] = values.mean(axis=1)
        for q in quantiles:
            frame[f"q{q}"] = np.quantile(values, q, axis=1)
        frames.append(frame)

    return pd.concat(frames, ignore_index=True)
