"""Progress scheduling for replaying a finished simulation.

Playback is a pure function of elapsed time, so it can be restarted or
scrubbed at any point. It only reads a SimulationResult and never feeds
back into the calculation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from stoichsim.constants import (
    FRAME_INTERVAL_MS,
    PROGRESS_MAX,
    PROGRESS_MIN,
    PROGRESS_STEP,
)
from stoichsim.models import ReagentTag, SimulationResult


@dataclass(frozen=True)
class DepletionCurve:
    progress: np.ndarray
    reactant_a: np.ndarray
    reactant_b: np.ndarray
    products: np.ndarray


def clamp_progress(value: float) -> float:
    """Clamp a requested percentage (e.g. from a slider) to [0, 100]."""
    return float(np.clip(value, PROGRESS_MIN, PROGRESS_MAX))


def progress_at(
    elapsed_ms: float,
    step: float = PROGRESS_STEP,
    interval_ms: float = FRAME_INTERVAL_MS,
) -> float:
    """Displayed percentage after ``elapsed_ms`` of playback.

    The display advances ``step`` percent at the end of every whole
    ``interval_ms`` tick.
    """
    if interval_ms <= 0:
        raise ValueError("interval_ms must be positive")
    ticks = np.floor(max(elapsed_ms, 0.0) / interval_ms)
    return clamp_progress(ticks * step)


def playback_duration_ms(
    step: float = PROGRESS_STEP,
    interval_ms: float = FRAME_INTERVAL_MS,
) -> float:
    if step <= 0:
        raise ValueError("step must be positive")
    return float(np.ceil(PROGRESS_MAX / step) * interval_ms)


def progress_frames(step: float = PROGRESS_STEP) -> np.ndarray:
    """All percentages shown during playback, starting at 0 and ending at 100."""
    if step <= 0:
        raise ValueError("step must be positive")
    frames = np.arange(PROGRESS_MIN, PROGRESS_MAX, step)
    return np.append(frames, PROGRESS_MAX)


def is_complete(progress: float) -> bool:
    return progress >= PROGRESS_MAX


def _consumption_factors(result: SimulationResult) -> Tuple[float, float]:
    # Fraction of each reactant's own amount used up when the limiting one is gone.
    tag = result.excess_reagent_tag
    excess = result.reaction.reactant(tag)
    consumed = np.float64(result.limiting_extent) * excess.coefficient
    with np.errstate(divide="ignore", invalid="ignore"):
        factor = float(consumed / np.float64(result.converted_input(tag).moles))
    if result.limiting_reagent is ReagentTag.A:
        return 1.0, factor
    return factor, 1.0


def reactant_remaining(result: SimulationResult, progress: float) -> Tuple[float, float]:
    """Percentage of reactant A and B still present at ``progress`` percent."""
    curve = depletion_curve(result, np.array([progress], dtype=float))
    return float(curve.reactant_a[0]), float(curve.reactant_b[0])


def depletion_curve(result: SimulationResult, frames: np.ndarray | None = None) -> DepletionCurve:
    """Reactant depletion and product formation percentages over ``frames``."""
    if frames is None:
        frames = progress_frames()
    progress = np.clip(np.asarray(frames, dtype=float), PROGRESS_MIN, PROGRESS_MAX)
    factor_a, factor_b = _consumption_factors(result)
    with np.errstate(invalid="ignore"):
        remaining_a = np.maximum(0.0, PROGRESS_MAX - progress * factor_a)
        remaining_b = np.maximum(0.0, PROGRESS_MAX - progress * factor_b)
    return DepletionCurve(
        progress=progress,
        reactant_a=remaining_a,
        reactant_b=remaining_b,
        products=progress.copy(),
    )
