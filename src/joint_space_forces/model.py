from dataclasses import dataclass, fields
from pathlib import Path

import mujoco

from joint_space_forces.config import (
    RIGHT_CONTACT_BODY, LEFT_CONTACT_BODY,
    RIGHT_ATTACHMENT_BODY, LEFT_ATTACHMENT_BODY,
)
from joint_space_forces.errors import ModelLoadError


@dataclass(frozen=True)
class BodyRoles:
    """Names of the model bodies that receive the contacts and carry the APO."""

    right_contact: str = RIGHT_CONTACT_BODY
    left_contact: str = LEFT_CONTACT_BODY
    right_attachment: str = RIGHT_ATTACHMENT_BODY
    left_attachment: str = LEFT_ATTACHMENT_BODY


@dataclass(frozen=True)
class ResolvedBodies:
    right_contact: int
    left_contact: int
    right_attachment: int
    left_attachment: int


def load_model(model_path) -> mujoco.MjModel:
    path = Path(model_path)
    if not path.exists():
        raise ModelLoadError(f"Model file not found: {path}")
    try:
        return mujoco.MjModel.from_xml_path(str(path))
    except ValueError as exc:
        raise ModelLoadError(f"Could not load model {path}: {exc}") from exc


def resolve_bodies(model: mujoco.MjModel, roles: BodyRoles) -> ResolvedBodies:
    """Look up every role once; a role without a matching body is fatal."""
    ids = {}
    for field in fields(roles):
        name = getattr(roles, field.name)
        body_id = mujoco.mj_name2id(model, mujoco.mjtObj.mjOBJ_BODY, name)
        if body_id < 0:
            raise ModelLoadError(f"No body named '{name}' for role '{field.name}' in model.")
        if body_id == 0:
            raise ModelLoadError(f"Role '{field.name}' cannot use the world body.")
        ids[field.name] = body_id
    return ResolvedBodies(**ids)


def describe(model: mujoco.MjModel) -> str:
    return f"Number of bodies: {model.nbody}\nDegrees of freedom: {model.nv}"
