from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import scipy.io as sio

from joint_space_forces.config import (
    LEFT_APO_JACOBIAN_FILE, RIGHT_APO_JACOBIAN_FILE,
    RESIDUAL_FORCE_FILE, INTERNAL_FORCE_FILE,
    MAT_FILE, PLOT_FILE, NUMBER_FORMAT, WARMUP_FRAMES,
)


def write_vector(handle, vector, time=None):
    row = np.atleast_1d(np.asarray(vector, dtype=float))
    if time is not None:
        row = np.concatenate([[time], row])
    np.savetxt(handle, row[None, :], fmt=NUMBER_FORMAT, delimiter="\t")


def write_matrix(handle, matrix, time=None):
    rows = np.atleast_2d(np.asarray(matrix, dtype=float))
    if time is not None:
        rows = np.column_stack([np.full(rows.shape[0], time), rows])
    np.savetxt(handle, rows, fmt=NUMBER_FORMAT, delimiter="\t")


class FrameWriter:
    """Appends each frame's APO Jacobians, residual and internal force.

    The first ``warmup_frames`` frames are computed but never written.
    """

    def __init__(self, output_dir, warmup_frames=WARMUP_FRAMES, timed=False):
        if warmup_frames < 0:
            raise ValueError(f"warmup_frames must be non-negative (received {warmup_frames}).")
        self.output_dir = Path(output_dir)
        self.warmup_frames = warmup_frames
        self.timed = timed
        self.frames_written = 0
        self.paths = {
            "right_jacobian": self.output_dir / RIGHT_APO_JACOBIAN_FILE,
            "left_jacobian": self.output_dir / LEFT_APO_JACOBIAN_FILE,
            "residual": self.output_dir / RESIDUAL_FORCE_FILE,
            "internal": self.output_dir / INTERNAL_FORCE_FILE,
        }
        self._files = {}

    def __enter__(self):
        self.output_dir.mkdir(parents=True, exist_ok=True)
        try:
            for key, path in self.paths.items():
                self._files[key] = open(path, "w")
        except OSError:
            self.close()
            raise
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        for handle in self._files.values():
            handle.close()
        self._files = {}

    def write(self, frame_index, time, parts, consistency) -> bool:
        if frame_index < self.warmup_frames:
            return False
        stamp = time if self.timed else None
        write_matrix(self._files["left_jacobian"], parts.attachment_left, stamp)
        write_matrix(self._files["right_jacobian"], parts.attachment_right, stamp)
        write_vector(self._files["residual"], consistency.residual, stamp)
        write_vector(self._files["internal"], consistency.internal, stamp)
        self.frames_written += 1
        return True


def new_history():
    return {
        "time": [],
        "net_joint_moments": [], "inertia": [], "gravity": [], "coriolis": [],
        "right_contact": [], "left_contact": [],
        "calculated_net": [], "residual": [], "internal": [],
        "right_apo_jacobian": [], "left_apo_jacobian": [],
    }


def append_history(history, frame, parts, consistency):
    history["time"].append(frame.time)
    history["net_joint_moments"].append(frame.measured)
    history["inertia"].append(parts.inertial)
    history["gravity"].append(parts.gravity)
    history["coriolis"].append(parts.coriolis)
    history["right_contact"].append(parts.contact_right)
    history["left_contact"].append(parts.contact_left)
    history["calculated_net"].append(consistency.calculated_net)
    history["residual"].append(consistency.residual)
    history["internal"].append(consistency.internal)
    history["right_apo_jacobian"].append(parts.attachment_right)
    history["left_apo_jacobian"].append(parts.attachment_left)


def save_mat(history, fn=MAT_FILE):
    data = {k: np.asarray(v) for k, v in history.items()}
    sio.savemat(str(fn) + ".mat", data)
    print("Saved " + str(fn) + ".mat" + " (MATLAB-compatible)")


def plot_residuals(history, output_fn=PLOT_FILE, dof_names=None):
    time = np.asarray(history["time"], dtype=float)
    residual = np.asarray(history["residual"], dtype=float)
    if residual.size == 0:
        raise ValueError("No residual data available in history.")
    residual = residual.reshape(time.size, -1)

    fig, ax = plt.subplots()
    for dof in range(residual.shape[1]):
        label = dof_names[dof] if dof_names is not None else f"DOF {dof}"
        ax.plot(time, residual[:, dof], label=label)
    ax.set_xlabel("Time (s)")
    ax.set_ylabel("Residual (N or Nm)")
    ax.grid(True)
    if residual.shape[1] <= 12:
        ax.legend(loc="upper right", fontsize="small")
    fig.tight_layout()
    fig.savefig(str(output_fn) + ".png", dpi=300)
    plt.close(fig)
    print("Saved " + str(output_fn) + ".png")
