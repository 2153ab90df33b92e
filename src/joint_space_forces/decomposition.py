"""Joint-space contributions to M(q)q.. + C(q,q.) = tau + F for one realized frame.

Spatial vectors are stacked rotational part first, ``[moment; force]``, and
Jacobians accordingly ``[angular; linear]`` (6 x nv).
"""

from dataclasses import dataclass

import mujoco
import numpy as np

from joint_space_forces.config import ATTACHMENT_OFFSET
from joint_space_forces.errors import NumericalError
from joint_space_forces.model import ResolvedBodies
from joint_space_forces.state import DynamicState
from joint_space_forces.streams import ContactLayout, ContactWrench, FrameInputs


@dataclass
class FrameDecomposition:
    inertial: np.ndarray
    coriolis: np.ndarray
    gravity: np.ndarray
    contact_right: np.ndarray
    contact_left: np.ndarray
    attachment_right: np.ndarray
    attachment_left: np.ndarray


def body_to_ground(data: mujoco.MjData, body_id: int, station) -> np.ndarray:
    rot = np.asarray(data.xmat[body_id], dtype=float).reshape(3, 3)
    return np.asarray(data.xpos[body_id], dtype=float) + rot @ np.asarray(station, dtype=float)


def ground_to_body(data: mujoco.MjData, body_id: int, point) -> np.ndarray:
    # Points only; free vectors would skip the translation.
    rot = np.asarray(data.xmat[body_id], dtype=float).reshape(3, 3)
    return rot.T @ (np.asarray(point, dtype=float) - np.asarray(data.xpos[body_id], dtype=float))


def frame_jacobian(model: mujoco.MjModel, data: mujoco.MjData, body_id: int, station) -> np.ndarray:
    """6 x nv Jacobian of a station fixed in ``body_id`` (station in body coordinates)."""
    point = body_to_ground(data, body_id, station)
    jacp = np.zeros((3, model.nv))
    jacr = np.zeros((3, model.nv))
    mujoco.mj_jac(model, data, jacp, jacr, point, body_id)
    return np.vstack([jacr, jacp])


def inertial_torque(model: mujoco.MjModel, data: mujoco.MjData, accelerations) -> np.ndarray:
    accelerations = np.asarray(accelerations, dtype=float)
    if accelerations.size != model.nv:
        raise ValueError(f"Expected {model.nv} accelerations, got {accelerations.size}.")
    torque = np.zeros(model.nv)
    mujoco.mj_mulM(model, data, torque, accelerations)
    return torque


def gravity_torque(model: mujoco.MjModel, data: mujoco.MjData) -> np.ndarray:
    """Sum of J_com^T (m g) over every body except the world."""
    torque = np.zeros(model.nv)
    if model.opt.disableflags & int(mujoco.mjtDisableBit.mjDSBL_GRAVITY):
        return torque

    gravity = np.asarray(model.opt.gravity, dtype=float)
    jacp = np.zeros((3, model.nv))
    for body_id in range(1, model.nbody):
        mass = model.body_mass[body_id]
        if mass == 0:
            continue
        mujoco.mj_jacBodyCom(model, data, jacp, None, body_id)
        torque += jacp.T @ (mass * gravity)
    return torque


def coriolis_torque(state: DynamicState) -> np.ndarray:
    # Gravity never enters this term, so a resting frame gives exact zeros.
    return np.array(state.velocity_bias, dtype=float)


def contact_torque(
    model: mujoco.MjModel, data: mujoco.MjData, body_id: int, wrench: ContactWrench
) -> np.ndarray:
    """Map a ground-frame contact wrench acting at the COP into joint space.

    Only the COP is moved into the body frame. Force and moment stay in the
    ground frame, which is what the frame Jacobian transpose expects.
    """
    station = ground_to_body(data, body_id, wrench.cop)
    jacobian = frame_jacobian(model, data, body_id, station)
    return jacobian.T @ np.concatenate([wrench.moment, wrench.force])


def decompose(
    state: DynamicState,
    bodies: ResolvedBodies,
    frame: FrameInputs,
    layout: ContactLayout = ContactLayout(),
    attachment_offset=ATTACHMENT_OFFSET,
) -> FrameDecomposition:
    """All contributions for ``frame``; ``state`` must already be realized at it."""
    model, data = state.model, state.data
    try:
        return FrameDecomposition(
            inertial=inertial_torque(model, data, frame.accelerations),
            coriolis=coriolis_torque(state),
            gravity=gravity_torque(model, data),
            contact_right=contact_torque(
                model, data, bodies.right_contact, layout.wrench(frame.contact, "right")
            ),
            contact_left=contact_torque(
                model, data, bodies.left_contact, layout.wrench(frame.contact, "left")
            ),
            attachment_right=frame_jacobian(model, data, bodies.right_attachment, attachment_offset),
            attachment_left=frame_jacobian(model, data, bodies.left_attachment, attachment_offset),
        )
    except mujoco.FatalError as exc:
        raise NumericalError(f"Decomposition failed at t={frame.time}: {exc}") from exc
