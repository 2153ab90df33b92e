import argparse

from joint_space_forces.config import (
    ATTACHMENT_OFFSET, TRANSLATIONAL_DOFS, WARMUP_FRAMES, TIME_TOLERANCE,
    RIGHT_CONTACT_BODY, LEFT_CONTACT_BODY, RIGHT_ATTACHMENT_BODY, LEFT_ATTACHMENT_BODY,
)
from joint_space_forces.errors import UsageError

_TRUE = ("1", "true")
_FALSE = ("0", "false")


class _Parser(argparse.ArgumentParser):
    # argparse exits with status 2; usage errors here exit 1 through main().
    def error(self, message):
        raise UsageError(message)


def _boolean(value):
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"7th argument, if given, has to be boolean (received '{value}').")


def _index_list(value):
    try:
        indices = [int(item) for item in value.split(",") if item.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated DOF indices (received '{value}').")
    if any(index < 0 for index in indices):
        raise argparse.ArgumentTypeError(f"DOF indices must be non-negative (received '{value}').")
    return indices


def build_parser():
    parser = _Parser(
        description="Decompose recorded gait into joint-space inertial, Coriolis, gravity, "
                    "contact and net torque contributions, and write the residual."
    )

    parser.add_argument("model", help="Path to the MuJoCo model (MJCF or URDF)")
    parser.add_argument("external_forces", help="External force file (18 channels per row)")
    parser.add_argument("states", help="States file from RRA (positions then velocities, rad)")
    parser.add_argument("accelerations", help="Accelerations file from RRA (deg, translations in m)")
    parser.add_argument("net_torques", help="Net joint torques file from inverse dynamics")
    parser.add_argument("output_dir", help="Directory for the result files")
    parser.add_argument(
        "verbose",
        nargs="?",
        type=_boolean,
        default=False,
        help="Print every frame's joint-space forces (0/1, default: 0)",
    )

    parser.add_argument("--right-contact-body", default=RIGHT_CONTACT_BODY,
                        help=f"Body receiving the right contact (default: {RIGHT_CONTACT_BODY})")
    parser.add_argument("--left-contact-body", default=LEFT_CONTACT_BODY,
                        help=f"Body receiving the left contact (default: {LEFT_CONTACT_BODY})")
    parser.add_argument("--right-attachment-body", default=RIGHT_ATTACHMENT_BODY,
                        help=f"Body carrying the right APO point (default: {RIGHT_ATTACHMENT_BODY})")
    parser.add_argument("--left-attachment-body", default=LEFT_ATTACHMENT_BODY,
                        help=f"Body carrying the left APO point (default: {LEFT_ATTACHMENT_BODY})")

    parser.add_argument(
        "--attachment-offset",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        default=list(ATTACHMENT_OFFSET),
        help="APO point in the attachment body frame, m (default: 0 -0.35 0)",
    )

    # One comma-separated token, so a trailing VERBOSE positional is never taken as an index.
    parser.add_argument(
        "--translational-dofs",
        type=_index_list,
        default=list(TRANSLATIONAL_DOFS),
        metavar="I,J,...",
        help="DOF indices whose accelerations are not converted from degrees, e.g. 3,4,5 "
             "(default: 3,4,5; an empty string converts every DOF)",
    )

    parser.add_argument(
        "--accelerations-in-radians",
        action="store_true",
        help="Accelerations file is already in radians; skip unit conversion",
    )

    parser.add_argument(
        "--warmup-frames",
        type=int,
        default=WARMUP_FRAMES,
        help=f"Frames computed but not written at the start (default: {WARMUP_FRAMES})",
    )

    parser.add_argument(
        "--time-tolerance",
        type=float,
        default=TIME_TOLERANCE,
        help=f"Allowed time-tag disagreement between streams, s; negative disables (default: {TIME_TOLERANCE})",
    )

    parser.add_argument("--timed", action="store_true", help="Prefix every output row with the frame time")
    parser.add_argument("--save-mat", action="store_true", help="Also save all contributions to a .mat file")
    parser.add_argument("--plot", action="store_true", help="Save a residual plot")
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")

    return parser


def parse_args(argv=None):
    args = build_parser().parse_args(argv)
    if args.warmup_frames < 0:
        raise UsageError(f"--warmup-frames must be non-negative (received {args.warmup_frames}).")
    return args
