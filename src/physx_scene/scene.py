"""Assembly of a rigid body's shapes into one positioned group.

Example:
    from physx_scene import PhysxSceneDecoder

    decoder = PhysxSceneDecoder()
    decoder.load_file("level_collision.xml")
    group = decoder.build()  # first rigid static in the document
    group.to_scene().export("level_collision.glb")
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional
from xml.etree.ElementTree import Element

import numpy as np
import trimesh

from physx_scene.config import DecoderConfig
from physx_scene.document.indexer import (
    SHAPE_REF,
    IndexEntry,
    SceneIndex,
    find_field,
    is_class_tag,
)
from physx_scene.document.scalars import element_text, parse_id
from physx_scene.geometry.reconstruct import GeometryKind, geometry_kind, reconstruct
from physx_scene.geometry.transform import (
    Pose,
    ScaleDescriptor,
    Surface,
    apply_transform,
    compose_transforms,
    resolve_pose,
    resolve_scale,
)

logger = logging.getLogger(__name__)

# build() target meaning "the first rigid static in the document"
DEFAULT_BODY_ID = 0


@dataclass
class ReconstructedShape:
    """A decoded shape: its surface and the two transforms placing it.

    Attributes:
        shape_id: Id of the shape in the document.
        kind: Geometry variant the surface was built from.
        surface: Surface in the geometry's own frame.
        pose: Shape pose relative to the body.
        scale: Geometry scale and scaling orientation.
    """

    shape_id: int
    kind: GeometryKind
    surface: Surface
    pose: Pose = field(default_factory=Pose.identity)
    scale: ScaleDescriptor = field(default_factory=ScaleDescriptor.identity)

    @property
    def transform(self) -> np.ndarray:
        """Body-frame placement of the surface.

        Geometry scale is applied first, then the geometry rotation, then
        the shape rotation and translation.
        """
        return compose_transforms(self.pose.to_matrix(), self.scale.to_matrix())

    def world_surface(self) -> Surface:
        """Copy of the surface with the placement applied."""
        return apply_transform(self.surface, self.transform)


@dataclass
class ShapeGroup:
    """All shapes of one rigid body."""

    body_id: int
    children: List[ReconstructedShape] = field(default_factory=list)

    def to_scene(self) -> trimesh.Scene:
        """Convert to a trimesh scene with one node per shape."""
        scene = trimesh.Scene()
        for child in self.children:
            scene.add_geometry(
                child.surface,
                node_name=f"shape_{child.shape_id}",
                geom_name=f"shape_{child.shape_id}",
                transform=child.transform,
            )
        return scene


def shape_refs(
    body: Element, accept_unprefixed: bool = True
) -> List[Optional[int]]:
    """List the shape ids referenced by a body's Shapes field.

    Unparseable references are kept as None so callers can count them.
    """
    shapes = find_field(body, "Shapes")
    if shapes is None:
        return []

    refs = []
    for element in shapes.iter():
        if element is not shapes and is_class_tag(
            element.tag, SHAPE_REF, accept_unprefixed
        ):
            refs.append(parse_id(element_text(element)))
    return refs


def build_shape(
    shape: IndexEntry,
    index: SceneIndex,
    config: Optional[DecoderConfig] = None,
) -> Optional[ReconstructedShape]:
    """Decode one shape.

    Returns:
        ReconstructedShape, or None if the shape has no geometry or its
        geometry cannot be built.
    """
    wrapper = find_field(shape.element, "Geometry")
    if wrapper is None or len(wrapper) == 0:
        logger.warning(f"Shape {shape.id} has no geometry")
        return None

    geometry = wrapper[0]
    surface = reconstruct(geometry, index, config)
    if surface is None:
        logger.warning(f"Dropping shape {shape.id}: geometry could not be built")
        return None

    return ReconstructedShape(
        shape_id=shape.id,
        kind=geometry_kind(geometry, index.accept_unprefixed_tags),
        surface=surface,
        pose=resolve_pose(shape.element),
        scale=resolve_scale(geometry),
    )


def build_body(
    body_id: int,
    index: SceneIndex,
    config: Optional[DecoderConfig] = None,
) -> Optional[ShapeGroup]:
    """Build every shape of a rigid static.

    Args:
        body_id: Id of the body, or DEFAULT_BODY_ID for the first body
            indexed.
        index: Id tables of the parsed document.
        config: Tessellation and colour settings.

    Returns:
        ShapeGroup, possibly empty, or None if the body is unknown.
    """
    if body_id == DEFAULT_BODY_ID:
        if index.first_static_id is None:
            return None
        body_id = index.first_static_id

    body = index.statics.get(body_id)
    if body is None:
        logger.debug(f"Rigid static {body_id} not found")
        return None

    group = ShapeGroup(body_id=body_id)

    for shape_id in shape_refs(body.element, index.accept_unprefixed_tags):
        if shape_id is None or shape_id <= 0:
            continue

        shape = index.shapes.get(shape_id)
        if shape is None:
            logger.debug(f"Body {body_id} references missing shape {shape_id}")
            continue

        child = build_shape(shape, index, config)
        if child is not None:
            group.children.append(child)

    return group
