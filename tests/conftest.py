import mujoco
import numpy as np
import pytest

# One slide DOF, total mass 1, no gravity. The four role bodies ride on the pelvis.
SLIDER_XML = """
<mujoco model="slider">
  <option gravity="0 0 0"/>
  <worldbody>
    <body name="pelvis">
      <joint name="pelvis_tx" type="slide" axis="1 0 0"/>
      <inertial pos="0 0 0" mass="0.5" diaginertia="0.01 0.01 0.01"/>
      <body name="femur_r" pos="0 -0.1 -0.2">
        <inertial pos="0 0 0" mass="0.125" diaginertia="0.001 0.001 0.001"/>
      </body>
      <body name="femur_l" pos="0 0.1 -0.2">
        <inertial pos="0 0 0" mass="0.125" diaginertia="0.001 0.001 0.001"/>
      </body>
      <body name="calcn_r" pos="0 -0.1 -0.9">
        <inertial pos="0 0 0" mass="0.125" diaginertia="0.001 0.001 0.001"/>
      </body>
      <body name="calcn_l" pos="0 0.1 -0.9">
        <inertial pos="0 0 0" mass="0.125" diaginertia="0.001 0.001 0.001"/>
      </body>
    </body>
  </worldbody>
</mujoco>
"""

# Planar pelvis (x, z) with a hip and ankle hinge per leg, under gravity.
LEGS_XML = """
<mujoco model="legs">
  <option gravity="0 0 -9.81"/>
  <worldbody>
    <body name="pelvis" pos="0 0 1">
      <joint name="pelvis_tx" type="slide" axis="1 0 0"/>
      <joint name="pelvis_tz" type="slide" axis="0 0 1"/>
      <inertial pos="0 0 0.1" mass="10" diaginertia="0.1 0.1 0.1"/>
      <body name="femur_r" pos="0 -0.1 0">
        <joint name="hip_r" type="hinge" axis="0 1 0"/>
        <inertial pos="0 0 -0.2" mass="8" diaginertia="0.1 0.1 0.02"/>
        <body name="calcn_r" pos="0 0 -0.9">
          <joint name="ankle_r" type="hinge" axis="0 1 0"/>
          <inertial pos="0.05 0 0" mass="1" diaginertia="0.003 0.003 0.001"/>
        </body>
      </body>
      <body name="femur_l" pos="0 0.1 0">
        <joint name="hip_l" type="hinge" axis="0 1 0"/>
        <inertial pos="0 0 -0.2" mass="8" diaginertia="0.1 0.1 0.02"/>
        <body name="calcn_l" pos="0 0 -0.9">
          <joint name="ankle_l" type="hinge" axis="0 1 0"/>
          <inertial pos="0.05 0 0" mass="1" diaginertia="0.003 0.003 0.001"/>
        </body>
      </body>
    </body>
  </worldbody>
</mujoco>
"""

LEGS_TOTAL_MASS = 10 + 2 * (8 + 1)


@pytest.fixture
def slider_model():
    return mujoco.MjModel.from_xml_string(SLIDER_XML)


@pytest.fixture
def legs_model():
    return mujoco.MjModel.from_xml_string(LEGS_XML)


def _write_rows(path, times, rows):
    with open(path, "w") as handle:
        for t, row in zip(times, rows):
            values = [t] + [float(v) for v in np.atleast_1d(row)]
            handle.write("\t".join(repr(v) for v in values) + "\n")


def write_trial(directory, times, contact, states, accelerations, torques):
    """Write the four input streams; returns their paths keyed by stream name."""
    paths = {
        "contact": directory / "external_forces.txt",
        "states": directory / "states.txt",
        "accelerations": directory / "accelerations.txt",
        "torques": directory / "net_torques.txt",
    }
    _write_rows(paths["contact"], times, contact)
    _write_rows(paths["states"], times, states)
    _write_rows(paths["accelerations"], times, accelerations)
    _write_rows(paths["torques"], times, torques)
    return paths


def slider_trial(directory, accelerations, torques=None):
    frames = len(accelerations)
    times = [0.01 * i for i in range(frames)]
    if torques is None:
        torques = [[0.0]] * frames
    return write_trial(
        directory,
        times,
        contact=[np.zeros(18)] * frames,
        states=[[0.0, 0.0]] * frames,
        accelerations=[[a] for a in accelerations],
        torques=torques,
    )
