"""Shape poses, geometry scale descriptors and the matrices built from them."""

from dataclasses import dataclass, field
from typing import Union
from xml.etree.ElementTree import Element

import numpy as np
import trimesh
from scipy.spatial.transform import Rotation

from physx_scene.document.indexer import find_field
from physx_scene.document.scalars import element_text, parse_scalars

Surface = Union[trimesh.Trimesh, trimesh.PointCloud]

IDENTITY_QUATERNION = (0.0, 0.0, 0.0, 1.0)


def _identity_quaternion() -> np.ndarray:
    return np.array(IDENTITY_QUATERNION)


@dataclass
class Pose:
    """Rotation and translation of a shape relative to its body.

    Attributes:
        rotation: [x, y, z, w] quaternion (scalar-last, as serialized).
        translation: [x, y, z] offset.
    """

    rotation: np.ndarray = field(default_factory=_identity_quaternion)
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        """Ensure arrays are numpy arrays."""
        self.rotation = np.asarray(self.rotation, dtype=np.float64)
        self.translation = np.asarray(self.translation, dtype=np.float64)

    @classmethod
    def identity(cls) -> "Pose":
        """Create an identity pose (origin, no rotation)."""
        return cls()

    def to_matrix(self) -> np.ndarray:
        """Convert pose to 4x4 transformation matrix."""
        return pose_to_matrix(self.translation, self.rotation)


@dataclass
class ScaleDescriptor:
    """Non-uniform geometry scale and the orientation it is applied along.

    Attributes:
        scale: [x, y, z] scale factors.
        rotation: [x, y, z, w] quaternion of the scaling basis.
    """

    scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    rotation: np.ndarray = field(default_factory=_identity_quaternion)

    def __post_init__(self):
        """Ensure arrays are numpy arrays."""
        self.scale = np.asarray(self.scale, dtype=np.float64)
        self.rotation = np.asarray(self.rotation, dtype=np.float64)

    @classmethod
    def identity(cls) -> "ScaleDescriptor":
        """Unit scale, no rotation."""
        return cls()

    def to_matrix(self) -> np.ndarray:
        """Scale first, then rotate, as one 4x4 matrix."""
        return compose_transforms(
            pose_to_matrix(np.zeros(3), self.rotation),
            scale_matrix(self.scale),
        )


def quaternion_to_rotation_matrix(quaternion: np.ndarray) -> np.ndarray:
    """Convert quaternion to 3x3 rotation matrix.

    Args:
        quaternion: [x, y, z, w] (scalar-last convention).

    Returns:
        3x3 rotation matrix. A quaternion holding NaN yields a NaN matrix;
        an all-zero quaternion yields the identity.
    """
    quaternion = np.asarray(quaternion, dtype=np.float64)

    if not np.all(np.isfinite(quaternion)):
        return np.full((3, 3), np.nan)
    if np.linalg.norm(quaternion) == 0.0:
        return np.eye(3)

    return Rotation.from_quat(quaternion).as_matrix()


def pose_to_matrix(position: np.ndarray, quaternion: np.ndarray) -> np.ndarray:
    """Create a 4x4 transformation matrix from position and quaternion.

    Args:
        position: [x, y, z] translation.
        quaternion: [x, y, z, w] rotation (scalar-last convention).

    Returns:
        4x4 homogeneous transformation matrix.
    """
    transform = np.eye(4)
    transform[:3, :3] = quaternion_to_rotation_matrix(quaternion)
    transform[:3, 3] = position
    return transform


def scale_matrix(scale: np.ndarray) -> np.ndarray:
    """4x4 matrix scaling along the x, y and z axes."""
    transform = np.eye(4)
    transform[:3, :3] = np.diag(np.asarray(scale, dtype=np.float64))
    return transform


def compose_transforms(*transforms: np.ndarray) -> np.ndarray:
    """Compose multiple 4x4 transformation matrices.

    The product is taken left to right, so for column vectors the last
    matrix is applied first: compose(A, B) @ v == A @ (B @ v).

    Args:
        *transforms: Variable number of 4x4 transformation matrices.

    Returns:
        Composed 4x4 transformation matrix.
    """
    if not transforms:
        return np.eye(4)

    result = transforms[0].copy()
    for t in transforms[1:]:
        result = result @ t

    return result


def apply_transform(
    surface: Surface,
    transform: np.ndarray,
    copy: bool = True,
) -> Surface:
    """Apply a 4x4 homogeneous transformation to a surface.

    Args:
        surface: Triangle mesh or point cloud.
        transform: 4x4 homogeneous transformation matrix.
        copy: If True, return a copy; if False, modify in place.

    Returns:
        Transformed surface.
    """
    if copy:
        surface = surface.copy()

    surface.apply_transform(transform)
    return surface


def resolve_pose(shape: Element) -> Pose:
    """Decode a shape's LocalPose field.

    The field holds seven scalars: the rotation quaternion (x, y, z, w)
    followed by the translation (x, y, z). A missing or short field
    resolves to the identity pose.
    """
    values = parse_scalars(element_text(find_field(shape, "LocalPose")))
    if len(values) < 7:
        return Pose.identity()

    return Pose(rotation=values[:4], translation=values[4:7])


def resolve_scale(geometry: Element) -> ScaleDescriptor:
    """Decode a geometry's Scale field.

    The engine stores mesh scale as <Scale><Scale>sx sy sz</Scale>
    <Rotation>x y z w</Rotation></Scale>; either part may be missing and
    then keeps its default.
    """
    descriptor = ScaleDescriptor.identity()

    outer = find_field(geometry, "Scale")
    if outer is None:
        return descriptor

    scale = parse_scalars(element_text(find_field(outer, "Scale")))
    if len(scale) >= 3:
        descriptor.scale = scale[:3]

    rotation = parse_scalars(element_text(find_field(outer, "Rotation")))
    if len(rotation) >= 4:
        descriptor.rotation = rotation[:4]

    return descriptor
