from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np

from joint_space_forces.decomposition import FrameDecomposition


@dataclass
class ConsistencyResult:
    calculated_net: np.ndarray
    residual: np.ndarray
    internal: np.ndarray


def check_consistency(parts: FrameDecomposition, measured) -> ConsistencyResult:
    """Close the equation of motion against the measured net joint torque.

    Ideally ``residual`` is zero and ``internal`` equals ``measured``. Nothing is
    judged here; the residual is written out for later analysis.
    """
    measured = np.asarray(measured, dtype=float)
    residual = (parts.gravity - parts.inertial + measured - parts.coriolis
                + parts.contact_right + parts.contact_left)
    # Same as inertial - gravity + coriolis - contacts, kept exact w.r.t. residual.
    internal = measured - residual
    return ConsistencyResult(calculated_net=internal.copy(), residual=residual, internal=internal)


def residual_summary(residuals: Sequence[np.ndarray]) -> Dict[str, np.ndarray]:
    stacked = np.asarray(residuals, dtype=float)
    if stacked.size == 0:
        raise ValueError("No residuals to summarise.")
    stacked = np.atleast_2d(stacked)
    return {
        "rms": np.sqrt(np.mean(stacked ** 2, axis=0)),
        "max_abs": np.max(np.abs(stacked), axis=0),
    }
