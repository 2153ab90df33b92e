import sys

import numpy as np

from joint_space_forces.args import parse_args
from joint_space_forces.errors import JointSpaceForcesError, UsageError
from joint_space_forces.model import BodyRoles
from joint_space_forces import run
from joint_space_forces.streams import ContactLayout


def config_from_args(args) -> run.EngineConfig:
    return run.EngineConfig(
        model_path=args.model,
        contact_path=args.external_forces,
        states_path=args.states,
        accelerations_path=args.accelerations,
        torques_path=args.net_torques,
        output_dir=args.output_dir,
        verbose=args.verbose,
        roles=BodyRoles(
            right_contact=args.right_contact_body,
            left_contact=args.left_contact_body,
            right_attachment=args.right_attachment_body,
            left_attachment=args.left_attachment_body,
        ),
        attachment_offset=tuple(args.attachment_offset),
        layout=ContactLayout(),
        translational_dofs=tuple(args.translational_dofs),
        accelerations_in_degrees=not args.accelerations_in_radians,
        warmup_frames=args.warmup_frames,
        time_tolerance=args.time_tolerance,
        timed=args.timed,
        save_mat=args.save_mat,
        plot=args.plot,
        progress=not args.no_progress,
    )


def main(argv=None) -> int:
    try:
        args = parse_args(argv)
    except UsageError as exc:
        print(f"Error (usage): {exc}")
        print("Expected: MODEL EXTERNAL_FORCES STATES ACCELERATIONS NET_TORQUES OUTPUT_DIR [VERBOSE]")
        return 1

    try:
        summary = run.decompose_trial(config_from_args(args))
    except JointSpaceForcesError as exc:
        print(f"Error ({exc.kind}): {exc}")
        return 1
    except (OSError, ValueError, RuntimeError) as exc:
        print(f"Error: {exc}")
        return 1
    except Exception as exc:
        print(f"Unrecognized error: {exc!r}")
        return 1

    print()
    print(f"Processed {summary.frames_read} frames, wrote {summary.frames_written}.")
    if summary.residual_rms is not None:
        with np.printoptions(precision=4, suppress=True):
            print(f"Residual RMS per DOF: {summary.residual_rms}")
    print("Successfully completed execution.")
    print("Now check the residual forces!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
