"""Lock-step reader for the four time-aligned trial streams.

Each stream is a whitespace-delimited text file with one row per frame and the
frame time in the first column. OpenSim storage headers (everything up to
``endheader``) and a column-label row are skipped before the first numeric row.
"""

import math
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np

from joint_space_forces.config import CONTACT_CHANNELS, TRANSLATIONAL_DOFS, TIME_TOLERANCE
from joint_space_forces.errors import StreamAlignmentError

DEG2RAD = math.pi / 180.0


@dataclass(frozen=True)
class ContactWrench:
    force: np.ndarray
    cop: np.ndarray
    moment: np.ndarray


@dataclass(frozen=True)
class ContactLayout:
    """Offsets of each 3-wide block inside one contact-stream row."""

    channels: int = CONTACT_CHANNELS
    right_force: int = 0
    right_cop: int = 3
    left_force: int = 6
    left_cop: int = 9
    right_moment: int = 12
    left_moment: int = 15

    def __post_init__(self):
        for name in ("right_force", "right_cop", "left_force", "left_cop", "right_moment", "left_moment"):
            offset = getattr(self, name)
            if offset < 0 or offset + 3 > self.channels:
                raise ValueError(
                    f"Contact block '{name}' at {offset} does not fit in {self.channels} channels."
                )

    def wrench(self, channels: np.ndarray, side: str) -> ContactWrench:
        if side not in ("right", "left"):
            raise ValueError(f"Unknown contact side '{side}'. Expected 'right' or 'left'.")
        force = getattr(self, f"{side}_force")
        cop = getattr(self, f"{side}_cop")
        moment = getattr(self, f"{side}_moment")
        return ContactWrench(
            force=np.array(channels[force : force + 3], dtype=float),
            cop=np.array(channels[cop : cop + 3], dtype=float),
            moment=np.array(channels[moment : moment + 3], dtype=float),
        )


@dataclass
class FrameInputs:
    index: int
    time: float
    times: Tuple[float, float, float, float]   # contact, states, accelerations, torques
    contact: np.ndarray
    coordinates: np.ndarray
    accelerations: np.ndarray
    measured: np.ndarray


def convert_accelerations(
    values: np.ndarray,
    translational_dofs: Sequence[int] = TRANSLATIONAL_DOFS,
    in_degrees: bool = True,
) -> np.ndarray:
    """Degrees to radians for every rotational DOF; translational DOFs pass through."""
    converted = np.array(values, dtype=float, copy=True)
    if not in_degrees:
        return converted
    rotational = np.ones(converted.size, dtype=bool)
    for idx in translational_dofs:
        if 0 <= idx < converted.size:
            rotational[idx] = False
    converted[rotational] *= DEG2RAD
    return converted


def _parse_row(line: str) -> Optional[np.ndarray]:
    tokens = line.split()
    if not tokens:
        return None
    try:
        return np.array([float(tok) for tok in tokens], dtype=float)
    except ValueError:
        return None


def _numeric_rows(handle, name: str) -> Iterator[Tuple[int, np.ndarray]]:
    started = False
    for line_no, line in enumerate(handle, start=1):
        if not line.strip():
            continue
        row = _parse_row(line)
        if row is None:
            if started:
                raise StreamAlignmentError(f"{name} stream: non-numeric row at line {line_no}.")
            continue
        started = True
        yield line_no, row


def count_frames(path) -> int:
    with open(path, "r") as handle:
        return sum(1 for _ in _numeric_rows(handle, str(path)))


class TrajectoryStreams:
    """Lazy, finite, non-restartable sequence of ``FrameInputs``.

    The sequence ends when the states stream ends. Width and time-tag checks
    turn misaligned input into a ``StreamAlignmentError``.
    """

    def __init__(
        self,
        contact_path,
        states_path,
        accelerations_path,
        torques_path,
        nq: int,
        nv: int,
        layout: ContactLayout = ContactLayout(),
        translational_dofs: Sequence[int] = TRANSLATIONAL_DOFS,
        accelerations_in_degrees: bool = True,
        time_tolerance: float = TIME_TOLERANCE,
    ):
        self.paths = {
            "contact": contact_path,
            "states": states_path,
            "accelerations": accelerations_path,
            "torques": torques_path,
        }
        self.widths = {
            "contact": layout.channels,
            "states": nq + nv,
            "accelerations": nv,
            "torques": nv,
        }
        self.nq = nq
        self.nv = nv
        self.layout = layout
        self.translational_dofs = tuple(translational_dofs)
        self.accelerations_in_degrees = accelerations_in_degrees
        self.time_tolerance = time_tolerance
        self._handles = {}
        self._consumed = False

    def __enter__(self):
        try:
            for name, path in self.paths.items():
                self._handles[name] = open(path, "r")
        except OSError:
            self.close()
            raise
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        for handle in self._handles.values():
            handle.close()
        self._handles = {}

    def _checked(self, name: str, line_no: int, row: np.ndarray) -> np.ndarray:
        expected = self.widths[name] + 1
        if row.size != expected:
            raise StreamAlignmentError(
                f"{name} stream: line {line_no} has {row.size} columns, expected {expected} "
                f"(time + {self.widths[name]})."
            )
        return row

    def _check_times(self, index: int, times: Tuple[float, ...]):
        if self.time_tolerance < 0:
            return
        reference = times[1]
        for name, tag in zip(("contact", "states", "accelerations", "torques"), times):
            if not abs(tag - reference) <= self.time_tolerance:
                raise StreamAlignmentError(
                    f"Frame {index}: {name} time {tag} does not match states time {reference} "
                    f"(tolerance {self.time_tolerance})."
                )

    def __iter__(self) -> Iterator[FrameInputs]:
        if not self._handles:
            raise RuntimeError("TrajectoryStreams must be opened with 'with' before iterating.")
        if self._consumed:
            raise RuntimeError("TrajectoryStreams can only be iterated once.")
        self._consumed = True
        return self._frames()

    def _frames(self) -> Iterator[FrameInputs]:
        rows = {name: _numeric_rows(handle, name) for name, handle in self._handles.items()}
        index = 0
        while True:
            state = next(rows["states"], None)
            if state is None:
                leftovers = [name for name in ("contact", "accelerations", "torques")
                             if next(rows[name], None) is not None]
                if leftovers:
                    print(f"Warning: rows left unread in {', '.join(leftovers)} after the states stream ended.")
                return

            read = {"states": self._checked("states", *state)}
            for name in ("contact", "accelerations", "torques"):
                item = next(rows[name], None)
                if item is None:
                    raise StreamAlignmentError(
                        f"{name} stream ended at frame {index} before the states stream."
                    )
                read[name] = self._checked(name, *item)

            times = tuple(float(read[name][0]) for name in ("contact", "states", "accelerations", "torques"))
            self._check_times(index, times)

            yield FrameInputs(
                index=index,
                time=times[1],
                times=times,
                contact=read["contact"][1:],
                coordinates=read["states"][1:],
                accelerations=convert_accelerations(
                    read["accelerations"][1:], self.translational_dofs, self.accelerations_in_degrees
                ),
                measured=read["torques"][1:],
            )
            index += 1
