"""Renderable surfaces for the five serialized geometry variants.

Every builder returns an unplaced surface in the geometry's own frame, or
None when a field or a referenced blob is missing. Pose and scale are
applied later by the scene builder.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional
from xml.etree.ElementTree import Element

import numpy as np
import trimesh
from scipy.spatial import QhullError

from physx_scene.config import DecoderConfig
from physx_scene.document.indexer import (
    IndexEntry,
    SceneIndex,
    find_field,
    is_class_tag,
    local_name,
)
from physx_scene.document.scalars import element_text, parse_id, parse_scalars
from physx_scene.geometry.transform import Surface

logger = logging.getLogger(__name__)


class GeometryKind(Enum):
    """Geometry variants a shape can carry."""

    TRIANGLE_MESH = "triangle_mesh"
    BOX = "box"
    CONVEX_MESH = "convex_mesh"
    SPHERE = "sphere"
    CAPSULE = "capsule"

    @property
    def class_name(self) -> str:
        """Serialized class name, without the `Px` prefix."""
        return _CLASS_NAMES[self]


_CLASS_NAMES = {
    GeometryKind.TRIANGLE_MESH: "TriangleMeshGeometry",
    GeometryKind.BOX: "BoxGeometry",
    GeometryKind.CONVEX_MESH: "ConvexMeshGeometry",
    GeometryKind.SPHERE: "SphereGeometry",
    GeometryKind.CAPSULE: "CapsuleGeometry",
}

# Rotations taking trimesh's +Z capsule axis onto the configured axis
_CAPSULE_AXIS_TRANSFORMS = {
    "x": trimesh.transformations.rotation_matrix(np.pi / 2, [0, 1, 0]),
    "y": trimesh.transformations.rotation_matrix(-np.pi / 2, [1, 0, 0]),
    "z": np.eye(4),
}


@dataclass
class TriangleMeshData:
    """Raw buffers of a triangle mesh blob.

    Attributes:
        points: Nx3 vertex positions.
        triangles: Mx3 vertex indices, or None if the blob has none.
        cooked_data: Engine-internal cooked buffer. Decoded but not used
            for display.
    """

    points: np.ndarray
    triangles: Optional[np.ndarray] = None
    cooked_data: Optional[np.ndarray] = None


def geometry_kind(
    element: Element, accept_unprefixed: bool = True
) -> Optional[GeometryKind]:
    """Identify the variant of a geometry element from its tag."""
    for kind in GeometryKind:
        if is_class_tag(element.tag, kind.class_name, accept_unprefixed):
            return kind
    return None


def _as_points(values: np.ndarray) -> np.ndarray:
    """Reshape a flat scalar list into Nx3 points, dropping a partial tail."""
    count = len(values) // 3
    return values[: count * 3].reshape(count, 3)


def decode_triangle_blob(entry: IndexEntry) -> Optional[TriangleMeshData]:
    """Decode the buffers of a triangle mesh blob.

    Returns:
        TriangleMeshData, or None if the blob has no Points field.
    """
    points_element = find_field(entry.element, "Points")
    if points_element is None:
        return None

    triangles = None
    triangles_element = find_field(entry.element, "Triangles")
    if triangles_element is not None:
        triangles = _as_points(parse_scalars(element_text(triangles_element)))

    cooked_data = None
    cooked_element = find_field(entry.element, "CookedData")
    if cooked_element is not None:
        cooked_data = parse_scalars(element_text(cooked_element))

    return TriangleMeshData(
        points=_as_points(parse_scalars(element_text(points_element))),
        triangles=triangles,
        cooked_data=cooked_data,
    )


def decode_convex_blob(entry: IndexEntry) -> Optional[np.ndarray]:
    """Decode the hull points of a convex mesh blob.

    The engine writes this field as lower-case `points`.

    Returns:
        Nx3 points, or None if the blob has no points field.
    """
    points_element = find_field(entry.element, "points")
    if points_element is None:
        return None
    return _as_points(parse_scalars(element_text(points_element)))


def _blob_id(geometry: Element, name: str) -> Optional[int]:
    return parse_id(element_text(find_field(geometry, name)))


def _positive_scalar(
    geometry: Element, name: str, allow_zero: bool = False
) -> Optional[float]:
    """Read a single finite, positive scalar field."""
    values = parse_scalars(element_text(find_field(geometry, name)))
    if len(values) < 1 or not np.isfinite(values[0]):
        return None
    if values[0] < 0 or (values[0] == 0 and not allow_zero):
        return None
    return float(values[0])


def _build_triangle_mesh(
    geometry: Element, index: SceneIndex, config: DecoderConfig
) -> Optional[Surface]:
    blob_id = _blob_id(geometry, "TriangleMesh")
    entry = index.triangle_meshes.get(blob_id) if blob_id is not None else None
    if entry is None:
        logger.warning(f"Triangle mesh {blob_id} not found")
        return None

    data = decode_triangle_blob(entry)
    if data is None or len(data.points) == 0:
        logger.warning(f"Triangle mesh {blob_id} has no points")
        return None

    vertex_count = len(data.points)

    if data.triangles is not None and len(data.triangles) > 0:
        triangles = data.triangles
        if not np.all(np.isfinite(triangles)) or np.any(triangles != np.round(triangles)):
            logger.warning(f"Triangle mesh {blob_id} has malformed indices")
            return None
        faces = triangles.astype(np.int64)
        if faces.min() < 0 or faces.max() >= vertex_count:
            logger.warning(
                f"Triangle mesh {blob_id} indexes past its {vertex_count} points"
            )
            return None
    elif vertex_count >= 3:
        # Unindexed or empty index list: consecutive point triplets are triangles
        faces = np.arange(vertex_count - vertex_count % 3).reshape(-1, 3)
    else:
        return trimesh.PointCloud(data.points)

    return trimesh.Trimesh(vertices=data.points, faces=faces, process=False)


def _build_box(
    geometry: Element, index: SceneIndex, config: DecoderConfig
) -> Optional[Surface]:
    half = parse_scalars(element_text(find_field(geometry, "HalfExtents")))
    if len(half) < 3 or not np.all(np.isfinite(half[:3])):
        logger.warning("Box geometry without usable HalfExtents")
        return None

    return trimesh.creation.box(extents=2.0 * half[:3])


def _build_convex_mesh(
    geometry: Element, index: SceneIndex, config: DecoderConfig
) -> Optional[Surface]:
    blob_id = _blob_id(geometry, "ConvexMesh")
    entry = index.convex_meshes.get(blob_id) if blob_id is not None else None
    if entry is None:
        logger.warning(f"Convex mesh {blob_id} not found")
        return None

    points = decode_convex_blob(entry)
    if points is None or len(points) < 4:
        logger.warning(f"Convex mesh {blob_id} has too few points for a hull")
        return None

    try:
        return trimesh.convex.convex_hull(points)
    except (QhullError, ValueError) as e:
        logger.warning(f"Convex hull of mesh {blob_id} failed: {e}")
        return None


def _build_sphere(
    geometry: Element, index: SceneIndex, config: DecoderConfig
) -> Optional[Surface]:
    radius = _positive_scalar(geometry, "Radius")
    if radius is None:
        logger.warning("Sphere geometry without usable Radius")
        return None

    return trimesh.creation.uv_sphere(
        radius=radius, count=list(config.tessellation.sphere_segments)
    )


def _build_capsule(
    geometry: Element, index: SceneIndex, config: DecoderConfig
) -> Optional[Surface]:
    radius = _positive_scalar(geometry, "Radius")
    half_height = _positive_scalar(geometry, "HalfHeight", allow_zero=True)
    if radius is None or half_height is None:
        logger.warning("Capsule geometry without usable Radius/HalfHeight")
        return None

    capsule = trimesh.creation.capsule(
        height=2.0 * half_height,
        radius=radius,
        count=list(config.tessellation.capsule_segments),
    )
    if capsule.bounds is None:
        logger.warning("Capsule geometry produced no vertices")
        return None

    # Center between the two cap centers
    capsule.apply_translation(-capsule.bounds.mean(axis=0))
    capsule.apply_transform(_CAPSULE_AXIS_TRANSFORMS[config.capsule_axis])
    return capsule


_BUILDERS: Dict[
    GeometryKind,
    Callable[[Element, SceneIndex, DecoderConfig], Optional[Surface]],
] = {
    GeometryKind.TRIANGLE_MESH: _build_triangle_mesh,
    GeometryKind.BOX: _build_box,
    GeometryKind.CONVEX_MESH: _build_convex_mesh,
    GeometryKind.SPHERE: _build_sphere,
    GeometryKind.CAPSULE: _build_capsule,
}


def _paint(surface: Surface, rgba) -> None:
    if isinstance(surface, trimesh.PointCloud):
        surface.colors = np.tile(rgba, (len(surface.vertices), 1))
    else:
        surface.visual.face_colors = rgba


def reconstruct(
    geometry: Element,
    index: SceneIndex,
    config: Optional[DecoderConfig] = None,
) -> Optional[Surface]:
    """Build the surface of one geometry variant element.

    Args:
        geometry: The variant element, e.g. <PxBoxGeometry>.
        index: Id tables used to resolve mesh blobs.
        config: Tessellation and colour settings.

    Returns:
        Unplaced trimesh.Trimesh or trimesh.PointCloud, or None if the
        variant is unsupported or its data cannot be resolved.
    """
    config = config or DecoderConfig()

    kind = geometry_kind(geometry, index.accept_unprefixed_tags)
    if kind is None:
        logger.warning(f"Unsupported geometry type: {local_name(geometry.tag)}")
        return None

    surface = _BUILDERS[kind](geometry, index, config)
    if surface is not None:
        _paint(surface, config.color_rgba(kind.value))
    return surface
