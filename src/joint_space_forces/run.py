import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence, Tuple

import mujoco
import numpy as np

from joint_space_forces.config import (
    ATTACHMENT_OFFSET, TRANSLATIONAL_DOFS, WARMUP_FRAMES, TIME_TOLERANCE,
    MAT_FILE, PLOT_FILE,
)
from joint_space_forces.consistency import check_consistency, residual_summary
from joint_space_forces.decomposition import decompose
from joint_space_forces.model import BodyRoles, describe, load_model, resolve_bodies
from joint_space_forces import record
from joint_space_forces.progress_display import FrameProgress
from joint_space_forces.state import DynamicState
from joint_space_forces.streams import ContactLayout, TrajectoryStreams, count_frames


@dataclass(frozen=True)
class EngineConfig:
    model_path: str
    contact_path: str
    states_path: str
    accelerations_path: str
    torques_path: str
    output_dir: str
    verbose: bool = False
    roles: BodyRoles = field(default_factory=BodyRoles)
    attachment_offset: Tuple[float, float, float] = ATTACHMENT_OFFSET
    layout: ContactLayout = field(default_factory=ContactLayout)
    translational_dofs: Sequence[int] = TRANSLATIONAL_DOFS
    accelerations_in_degrees: bool = True
    warmup_frames: int = WARMUP_FRAMES
    time_tolerance: float = TIME_TOLERANCE
    timed: bool = False
    save_mat: bool = False
    plot: bool = False
    progress: bool = True


@dataclass
class RunSummary:
    frames_read: int
    frames_written: int
    residual_rms: Optional[np.ndarray] = None
    residual_max_abs: Optional[np.ndarray] = None


def print_force_vector(vec, description):
    print()
    print("Joint-space force due to " + description + ":")
    print("[" + ", ".join(f"{v:g}" for v in np.atleast_1d(vec)) + "]")


def _print_frame(frame, parts):
    print("---------------------------------------")
    print(f"Time: {frame.time:g}")
    print_force_vector(frame.measured, "net joint torques")
    print_force_vector(parts.inertial, "inertia")
    print_force_vector(parts.gravity, "gravity")
    print_force_vector(parts.coriolis, "centrifugal effects")
    print_force_vector(parts.contact_right, "right foot contact")
    print_force_vector(parts.contact_left, "left foot contact")


def decompose_trial(cfg: EngineConfig, model: Optional[mujoco.MjModel] = None) -> RunSummary:
    if model is None:
        model = load_model(cfg.model_path)
    bodies = resolve_bodies(model, cfg.roles)
    state = DynamicState(model)

    if cfg.verbose:
        print(describe(model))
        print("Beginning calculation of system & state properties...")

    progress = None
    if cfg.progress and not cfg.verbose:
        progress = FrameProgress(count_frames(cfg.states_path))
        progress.start()

    history = record.new_history() if (cfg.save_mat or cfg.plot) else None
    residuals = []
    frames_read = 0
    last_time = None
    last_duration = None

    streams = TrajectoryStreams(
        cfg.contact_path, cfg.states_path, cfg.accelerations_path, cfg.torques_path,
        nq=model.nq, nv=model.nv,
        layout=cfg.layout,
        translational_dofs=cfg.translational_dofs,
        accelerations_in_degrees=cfg.accelerations_in_degrees,
        time_tolerance=cfg.time_tolerance,
    )
    with streams, record.FrameWriter(cfg.output_dir, cfg.warmup_frames, cfg.timed) as writer:
        for frame in streams:
            frame_start = time.perf_counter()

            state.realize(frame.coordinates, frame.time)
            parts = decompose(state, bodies, frame, cfg.layout, cfg.attachment_offset)
            consistency = check_consistency(parts, frame.measured)

            if writer.write(frame.index, frame.time, parts, consistency):
                residuals.append(consistency.residual)
                if history is not None:
                    record.append_history(history, frame, parts, consistency)

            if cfg.verbose:
                _print_frame(frame, parts)

            frames_read += 1
            last_time = frame.time
            last_duration = time.perf_counter() - frame_start
            if progress is not None:
                progress.update(frames_read, last_time, last_duration)

        frames_written = writer.frames_written

    if progress is not None:
        progress.finish(frames_read, last_time, last_duration)
    if cfg.verbose:
        print("\nReached end of states file.")

    if history is not None and history["time"]:
        output_dir = Path(cfg.output_dir)
        if cfg.save_mat:
            record.save_mat(history, output_dir / MAT_FILE)
        if cfg.plot:
            record.plot_residuals(history, output_dir / PLOT_FILE)

    summary = RunSummary(frames_read=frames_read, frames_written=frames_written)
    if residuals:
        stats = residual_summary(residuals)
        summary.residual_rms = stats["rms"]
        summary.residual_max_abs = stats["max_abs"]
    return summary
