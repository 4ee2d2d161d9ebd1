"""Id-keyed index over a serialized PhysX collection.

The engine writes every object once and refers to it from elsewhere by a
numeric id, in no particular declaration order. A single pass over the
document files each indexable element under its id; nothing is decoded
until a body is built.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional
from xml.etree.ElementTree import Element

from physx_scene.document.scalars import element_text, parse_id

logger = logging.getLogger(__name__)

# Prefix the engine's serializer puts in front of every class tag
CLASS_PREFIX = "Px"

RIGID_STATIC = "RigidStatic"
SHAPE = "Shape"
SHAPE_REF = "ShapeRef"
TRIANGLE_MESH = "TriangleMesh"
CONVEX_MESH = "ConvexMesh"


@dataclass(frozen=True)
class IndexEntry:
    """An indexed document element."""

    id: int
    element: Element


@dataclass
class SceneIndex:
    """The four id tables built from one document."""

    statics: Dict[int, IndexEntry] = field(default_factory=dict)
    shapes: Dict[int, IndexEntry] = field(default_factory=dict)
    triangle_meshes: Dict[int, IndexEntry] = field(default_factory=dict)
    convex_meshes: Dict[int, IndexEntry] = field(default_factory=dict)
    first_static_id: Optional[int] = None
    accept_unprefixed_tags: bool = True

    def stats(self) -> Dict[str, int]:
        """Number of entries per table."""
        return {
            "statics": len(self.statics),
            "shapes": len(self.shapes),
            "triangles": len(self.triangle_meshes),
            "convexes": len(self.convex_meshes),
        }

    def clear(self) -> None:
        """Drop every entry and the default body id."""
        self.statics.clear()
        self.shapes.clear()
        self.triangle_meshes.clear()
        self.convex_meshes.clear()
        self.first_static_id = None

    def is_class(self, element: Element, name: str) -> bool:
        """Check whether an element is the serialized class `name`."""
        return is_class_tag(element.tag, name, self.accept_unprefixed_tags)


def local_name(tag: str) -> str:
    """Strip an XML namespace from a tag."""
    if tag.startswith("{"):
        return tag.rsplit("}", 1)[1]
    return tag


def is_class_tag(tag: str, name: str, accept_unprefixed: bool = True) -> bool:
    """Match a class tag with or without the serializer's `Px` prefix."""
    tag = local_name(tag)
    if tag == CLASS_PREFIX + name:
        return True
    return accept_unprefixed and tag == name


def find_field(element: Optional[Element], name: str) -> Optional[Element]:
    """Return the first descendant named `name`, depth-first, or None.

    Field names are matched exactly; the element itself is not considered.
    """
    if element is None:
        return None
    for child in element.iter():
        if child is not element and local_name(child.tag) == name:
            return child
    return None


def _index_class(
    root: Element,
    name: str,
    table: Dict[int, IndexEntry],
    accept_unprefixed: bool,
) -> Optional[int]:
    """Index every element of one class; return the first id filed."""
    first_id = None
    skipped = 0

    for element in root.iter():
        if not is_class_tag(element.tag, name, accept_unprefixed):
            continue

        entry_id = parse_id(element_text(find_field(element, "Id")))
        if entry_id is None:
            skipped += 1
            continue

        if entry_id in table:
            logger.debug(f"Duplicate {name} id {entry_id}, keeping the later one")
        table[entry_id] = IndexEntry(id=entry_id, element=element)

        if first_id is None:
            first_id = entry_id

    if skipped:
        logger.debug(f"Skipped {skipped} {name} element(s) without a usable Id")

    return first_id


def index_document(root: Element, accept_unprefixed_tags: bool = True) -> SceneIndex:
    """Build the id tables for a parsed document.

    Args:
        root: Root element of the parsed document.
        accept_unprefixed_tags: Also match class tags without the `Px` prefix.

    Returns:
        SceneIndex with statics, shapes, triangle and convex mesh blobs.
    """
    index = SceneIndex(accept_unprefixed_tags=accept_unprefixed_tags)

    index.first_static_id = _index_class(
        root, RIGID_STATIC, index.statics, accept_unprefixed_tags
    )
    _index_class(root, SHAPE, index.shapes, accept_unprefixed_tags)
    _index_class(root, TRIANGLE_MESH, index.triangle_meshes, accept_unprefixed_tags)
    _index_class(root, CONVEX_MESH, index.convex_meshes, accept_unprefixed_tags)

    stats = index.stats()
    logger.info(
        f"Indexed {stats['statics']} statics, {stats['shapes']} shapes, "
        f"{stats['triangles']} triangle meshes, {stats['convexes']} convex meshes"
    )
    return index
