"""Step-sequence domain models.

This module provides:
- Step: One measurement (weight, value, 1-sigma uncertainty)
- StepSequence: Ordered, immutable container with numpy arrays and an
  eligibility mask, built from caller records after applying ``hide``/``omit``
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray


@dataclass(frozen=True)
class Step:
    """A single heating step (or any other sequential measurement).

    Attributes:
        weight: Non-negative amount released in this step (e.g. 39Ar).
        value: Measured value (e.g. age).
        sigma: 1-sigma analytical uncertainty of ``value``.
    """

    weight: float
    value: float
    sigma: float


def _index_set(indices: Iterable[int], n: int, *, label: str) -> set[int]:
    out: set[int] = set()
    for raw in indices:
        idx = int(raw)
        if idx < 0 or idx >= n:
            raise ValueError(f"{label} index {idx} out of range for {n} records")
        out.add(idx)
    return out


@dataclass(frozen=True)
class StepSequence:
    """Immutable ordered sequence of steps used by the plateau search.

    Positions are never permuted. ``source_indices`` maps every position back
    to the record number the caller supplied before hidden records were
    dropped.

    Attributes:
        weights: Step weights (float64, NaN allowed for missing).
        values: Step values (float64, NaN allowed for missing).
        sigmas: Step 1-sigma uncertainties (float64, NaN allowed for missing).
        eligible: Caller eligibility; False for omitted steps (bool).
        source_indices: Original record numbers (int64).
    """

    weights: NDArray[np.float64]
    values: NDArray[np.float64]
    sigmas: NDArray[np.float64]
    eligible: NDArray[np.bool_]
    source_indices: NDArray[np.int64]

    def __post_init__(self) -> None:
        arrays: dict[str, np.ndarray[Any, Any]] = {
            "weights": self.weights,
            "values": self.values,
            "sigmas": self.sigmas,
            "eligible": self.eligible,
            "source_indices": self.source_indices,
        }
        for name, arr in arrays.items():
            if not isinstance(arr, np.ndarray):
                raise TypeError(f"{name} must be a numpy array, got {type(arr).__name__}")
            if arr.ndim != 1:
                raise ValueError(f"{name} must be one-dimensional, got shape {arr.shape}")

        for name in ("weights", "values", "sigmas"):
            if arrays[name].dtype != np.float64:
                raise ValueError(f"{name} must be float64, got {arrays[name].dtype}")
        if self.eligible.dtype != np.bool_:
            raise ValueError(f"eligible must be bool, got {self.eligible.dtype}")
        if self.source_indices.dtype != np.int64:
            raise ValueError(f"source_indices must be int64, got {self.source_indices.dtype}")

        n = len(self.weights)
        for name, arr in arrays.items():
            if len(arr) != n:
                raise ValueError(f"{name} length {len(arr)} != weights length {n}")

        finite_weights = self.weights[np.isfinite(self.weights)]
        if np.any(finite_weights < 0):
            raise ValueError("weights must be non-negative")
        finite_sigmas = self.sigmas[np.isfinite(self.sigmas)]
        if np.any(finite_sigmas < 0):
            raise ValueError("sigmas must be non-negative")

        for arr in arrays.values():
            arr.flags.writeable = False

    @classmethod
    def from_arrays(
        cls,
        weights: ArrayLike,
        values: ArrayLike,
        sigmas: ArrayLike,
        *,
        hide: Iterable[int] = (),
        omit: Iterable[int] = (),
    ) -> StepSequence:
        """Build a sequence from parallel arrays.

        Args:
            weights: Per-record weights.
            values: Per-record values.
            sigmas: Per-record 1-sigma uncertainties.
            hide: Record indices removed before the sequence is built.
            omit: Record indices kept in place but excluded from the search.

        Returns:
            StepSequence whose ``source_indices`` refer to the input records.
        """
        w = np.array(weights, dtype=np.float64, ndmin=1)
        v = np.array(values, dtype=np.float64, ndmin=1)
        s = np.array(sigmas, dtype=np.float64, ndmin=1)
        if not (len(w) == len(v) == len(s)):
            raise ValueError(
                f"weights, values and sigmas must have the same length: "
                f"{len(w)}, {len(v)}, {len(s)}"
            )
        n = len(w)
        hidden = _index_set(hide, n, label="hide")
        omitted = _index_set(omit, n, label="omit")

        keep = np.array([i not in hidden for i in range(n)], dtype=np.bool_)
        eligible = np.array([i not in omitted for i in range(n)], dtype=np.bool_)
        return cls(
            weights=w[keep],
            values=v[keep],
            sigmas=s[keep],
            eligible=eligible[keep],
            source_indices=np.flatnonzero(keep).astype(np.int64),
        )

    @classmethod
    def from_steps(
        cls,
        steps: Sequence[Step],
        *,
        hide: Iterable[int] = (),
        omit: Iterable[int] = (),
    ) -> StepSequence:
        """Build a sequence from ``Step`` records (see ``from_arrays``)."""
        return cls.from_arrays(
            [step.weight for step in steps],
            [step.value for step in steps],
            [step.sigma for step in steps],
            hide=hide,
            omit=omit,
        )

    def __len__(self) -> int:
        return len(self.weights)

    def __getitem__(self, index: int) -> Step:
        return Step(
            weight=float(self.weights[index]),
            value=float(self.values[index]),
            sigma=float(self.sigmas[index]),
        )

    @property
    def usable(self) -> NDArray[np.bool_]:
        """Eligible steps with a finite value and a finite, positive sigma."""
        mask = (
            self.eligible
            & np.isfinite(self.values)
            & np.isfinite(self.sigmas)
            & (np.nan_to_num(self.sigmas, nan=0.0) > 0)
        )
        return np.asarray(mask, dtype=np.bool_)

    @property
    def total_weight(self) -> float:
        return float(np.nansum(self.weights))

    def normalized_weights(self) -> NDArray[np.float64]:
        """Weights divided by the sequence total; missing weights count as zero."""
        w = np.nan_to_num(np.asarray(self.weights, dtype=np.float64), nan=0.0)
        total = float(np.sum(w))
        if total <= 0:
            return np.zeros_like(w)
        return w / total


__all__ = ["Step", "StepSequence"]
