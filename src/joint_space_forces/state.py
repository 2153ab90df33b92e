import copy

import mujoco
import numpy as np

from joint_space_forces.errors import NumericalError


class DynamicState:
    """The single live ``MjData`` a run reuses frame after frame.

    After ``realize`` the mass matrix, body poses, Jacobians and
    velocity-dependent bias forces all describe the given coordinates.

    ``velocity_bias`` is C(q,q.) alone, evaluated on a gravity-free copy of
    the model so it is exactly zero whenever every velocity is zero.
    """

    def __init__(self, model: mujoco.MjModel):
        self.model = model
        self.data = mujoco.MjData(model)
        self._free_model = copy.deepcopy(model)
        self._free_model.opt.disableflags |= int(mujoco.mjtDisableBit.mjDSBL_GRAVITY)
        self._free_data = mujoco.MjData(self._free_model)
        self.velocity_bias = np.zeros(model.nv)

    @property
    def nq(self) -> int:
        return self.model.nq

    @property
    def nv(self) -> int:
        return self.model.nv

    def clone(self) -> "DynamicState":
        return DynamicState(self.model)

    def realize(self, coordinates: np.ndarray, time: float = 0.0):
        coordinates = np.asarray(coordinates, dtype=float)
        if coordinates.size != self.nq + self.nv:
            raise ValueError(
                f"Expected {self.nq + self.nv} state values (nq={self.nq}, nv={self.nv}), got {coordinates.size}."
            )
        for data in (self.data, self._free_data):
            data.qpos[:] = coordinates[: self.nq]
            data.qvel[:] = coordinates[self.nq :]
            data.qacc[:] = 0.0
            data.time = time
        try:
            mujoco.mj_fwdPosition(self.model, self.data)   # kinematics, com, mass matrix
            mujoco.mj_fwdVelocity(self.model, self.data)   # velocity kinematics, qfrc_bias
            self._realize_velocity_bias()
        except mujoco.FatalError as exc:
            raise NumericalError(f"Realization failed at t={self.data.time}: {exc}") from exc

    def _realize_velocity_bias(self):
        free_model, free_data = self._free_model, self._free_data
        mujoco.mj_kinematics(free_model, free_data)
        mujoco.mj_comPos(free_model, free_data)
        mujoco.mj_comVel(free_model, free_data)
        # flg_acc=0: with gravity disabled only the cvel cross products remain
        mujoco.mj_rne(free_model, free_data, 0, self.velocity_bias)
