import numpy as np
import pytest

from conftest import slider_trial
from joint_space_forces.errors import ModelLoadError, StreamAlignmentError
from joint_space_forces.model import BodyRoles
from joint_space_forces.run import EngineConfig, decompose_trial


def _config(paths, output_dir, **kwargs):
    kwargs.setdefault("translational_dofs", (0,))
    kwargs.setdefault("progress", False)
    return EngineConfig(
        model_path="slider.xml",
        contact_path=paths["contact"],
        states_path=paths["states"],
        accelerations_path=paths["accelerations"],
        torques_path=paths["torques"],
        output_dir=output_dir,
        **kwargs,
    )


def test_three_frame_trial_writes_two_rows(tmp_path, slider_model):
    paths = slider_trial(tmp_path, accelerations=[0.0, 2.0, 0.0])
    out = tmp_path / "results"

    summary = decompose_trial(_config(paths, out), model=slider_model)

    assert summary.frames_read == 3
    assert summary.frames_written == 2
    internal = np.loadtxt(out / "net_internal_values.txt", ndmin=2)
    residual = np.loadtxt(out / "residual_force.txt", ndmin=2)
    assert internal.shape == (2, 1)
    assert residual.shape == (2, 1)
    assert internal[0, 0] == 2.0
    assert residual[0, 0] == -2.0
    assert internal[1, 0] == 0.0
    assert residual[1, 0] == 0.0


@pytest.mark.parametrize("frames", [2, 5, 9])
def test_output_row_counts(tmp_path, slider_model, frames):
    paths = slider_trial(tmp_path, accelerations=[1.0, 0.0] * (frames // 2) + [1.0] * (frames % 2))
    out = tmp_path / "results"

    decompose_trial(_config(paths, out), model=slider_model)

    for name in ("residual_force.txt", "net_internal_values.txt"):
        assert len((out / name).read_text().splitlines()) == frames - 1
    for name in ("right_apo_jacobian.txt", "left_apo_jacobian.txt"):
        assert len((out / name).read_text().splitlines()) == 6 * (frames - 1)


def test_measured_torque_closes_residual(tmp_path, slider_model):
    paths = slider_trial(tmp_path, accelerations=[1.0, 3.0, -2.0], torques=[[1.0], [3.0], [-2.0]])
    out = tmp_path / "results"

    summary = decompose_trial(_config(paths, out), model=slider_model)

    np.testing.assert_array_equal(np.loadtxt(out / "residual_force.txt"), [0.0, 0.0])
    np.testing.assert_array_equal(summary.residual_rms, [0.0])


def test_missing_role_fails_before_outputs(tmp_path, slider_model):
    paths = slider_trial(tmp_path, accelerations=[0.0, 1.0])
    out = tmp_path / "results"
    cfg = _config(paths, out, roles=BodyRoles(right_contact="toes_r"))

    with pytest.raises(ModelLoadError, match="toes_r"):
        decompose_trial(cfg, model=slider_model)
    assert not out.exists()


def test_misaligned_streams_are_reported(tmp_path, slider_model):
    paths = slider_trial(tmp_path, accelerations=[0.0, 1.0, 2.0])
    lines = paths["accelerations"].read_text().splitlines(keepends=True)
    paths["accelerations"].write_text("".join(lines[1:]))

    with pytest.raises(StreamAlignmentError):
        decompose_trial(_config(paths, tmp_path / "results"), model=slider_model)


def test_verbose_prints_each_contribution(tmp_path, slider_model, capsys):
    paths = slider_trial(tmp_path, accelerations=[0.0, 1.0])

    decompose_trial(_config(paths, tmp_path / "results", verbose=True), model=slider_model)

    out = capsys.readouterr().out
    assert "Degrees of freedom: 1" in out
    assert out.count("Joint-space force due to inertia:") == 2
    assert "Joint-space force due to left foot contact:" in out
    assert "Reached end of states file." in out


def test_supplemental_outputs(tmp_path, slider_model):
    paths = slider_trial(tmp_path, accelerations=[0.0, 1.0, 0.0])
    out = tmp_path / "results"

    decompose_trial(_config(paths, out, save_mat=True, plot=True), model=slider_model)

    assert (out / "joint_space_forces.mat").exists()
    assert (out / "residual_forces.png").exists()


def test_progress_bar_reaches_all_frames(tmp_path, slider_model, capsys):
    paths = slider_trial(tmp_path, accelerations=[0.0, 1.0, 0.0])

    decompose_trial(_config(paths, tmp_path / "results", progress=True), model=slider_model)

    assert "[3/3]" in capsys.readouterr().out
