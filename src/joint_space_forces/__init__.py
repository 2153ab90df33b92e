"""
Joint-space force decomposition

Splits recorded gait into inertial, Coriolis, gravity and contact torques
with MuJoCo and closes them against the measured net joint torque.
"""
