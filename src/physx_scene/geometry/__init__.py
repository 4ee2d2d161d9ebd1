"""Geometry reconstruction and transform resolution."""

from .reconstruct import (
    GeometryKind,
    TriangleMeshData,
    decode_convex_blob,
    decode_triangle_blob,
    geometry_kind,
    reconstruct,
)
from .transform import (
    Pose,
    ScaleDescriptor,
    apply_transform,
    compose_transforms,
    pose_to_matrix,
    quaternion_to_rotation_matrix,
    resolve_pose,
    resolve_scale,
    scale_matrix,
)

__all__ = [
    "GeometryKind",
    "TriangleMeshData",
    "decode_convex_blob",
    "decode_triangle_blob",
    "geometry_kind",
    "reconstruct",
    "Pose",
    "ScaleDescriptor",
    "apply_transform",
    "compose_transforms",
    "pose_to_matrix",
    "quaternion_to_rotation_matrix",
    "resolve_pose",
    "resolve_scale",
    "scale_matrix",
]
