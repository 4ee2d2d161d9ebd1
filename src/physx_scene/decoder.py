"""Decoder for PhysX collections serialized as XML.

Decoding has two phases. parse_xml() scans the document once and files
rigid statics, shapes and mesh blobs by id; build() then reconstructs the
shapes of one body on demand. Nothing raises for malformed content: an
unreadable document indexes nothing, and a body whose shapes cannot be
resolved builds a partial or empty group.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union
from xml.etree import ElementTree

from physx_scene.config import DecoderConfig
from physx_scene.document.indexer import IndexEntry, SceneIndex, index_document
from physx_scene.scene import DEFAULT_BODY_ID, ShapeGroup, build_body

logger = logging.getLogger(__name__)


class SceneLoadError(Exception):
    """Raised when a scene document cannot be read from disk."""

    pass


class PhysxSceneDecoder:
    """Indexes a serialized PhysX collection and builds its rigid statics."""

    def __init__(self, config: Optional[DecoderConfig] = None):
        """Initialize an empty decoder.

        Args:
            config: Tessellation, colour and tag matching settings.
        """
        self.config = config or DecoderConfig()
        self._index = self._empty_index()

    def _empty_index(self) -> SceneIndex:
        return SceneIndex(accept_unprefixed_tags=self.config.accept_unprefixed_tags)

    def parse_xml(self, text: Union[str, bytes]) -> None:
        """Index a document, replacing any previously parsed one.

        Args:
            text: XML document text.
        """
        try:
            root = ElementTree.fromstring(text)
        except ElementTree.ParseError as e:
            logger.error(f"Failed to parse scene document: {e}")
            self._index = self._empty_index()
            return

        self._index = index_document(
            root, accept_unprefixed_tags=self.config.accept_unprefixed_tags
        )

    def load_file(self, path: Union[str, Path]) -> None:
        """Read and index a document from disk.

        Args:
            path: Path to the XML file.

        Raises:
            SceneLoadError: If the file does not exist or cannot be read.
        """
        path = Path(path)

        if not path.exists():
            raise SceneLoadError(f"Scene file not found: {path}")

        try:
            data = path.read_bytes()
        except OSError as e:
            raise SceneLoadError(f"Failed to read scene file {path}: {e}") from e

        logger.info(f"Loading scene from: {path}")
        self.parse_xml(data)

    def build(self, body_id: int = DEFAULT_BODY_ID) -> Optional[ShapeGroup]:
        """Reconstruct the shapes of a rigid static.

        Args:
            body_id: Id of the rigid static; 0 selects the first one in the
                document.

        Returns:
            ShapeGroup (possibly empty), or None if there is no such body.
        """
        return build_body(body_id, self._index, self.config)

    @property
    def default_body_id(self) -> Optional[int]:
        """Id that build(0) resolves to, or None if nothing is indexed."""
        return self._index.first_static_id

    def get_static(self, entry_id: int) -> Optional[IndexEntry]:
        """Look up a rigid static by id."""
        return self._index.statics.get(entry_id)

    def get_shape(self, entry_id: int) -> Optional[IndexEntry]:
        """Look up a shape by id."""
        return self._index.shapes.get(entry_id)

    def get_triangle_mesh(self, entry_id: int) -> Optional[IndexEntry]:
        """Look up a triangle mesh blob by id."""
        return self._index.triangle_meshes.get(entry_id)

    def get_convex_mesh(self, entry_id: int) -> Optional[IndexEntry]:
        """Look up a convex mesh blob by id."""
        return self._index.convex_meshes.get(entry_id)

    def get_all_statics(self) -> Dict[int, IndexEntry]:
        return self._index.statics

    def get_all_shapes(self) -> Dict[int, IndexEntry]:
        return self._index.shapes

    def get_all_triangle_meshes(self) -> Dict[int, IndexEntry]:
        return self._index.triangle_meshes

    def get_all_convex_meshes(self) -> Dict[int, IndexEntry]:
        return self._index.convex_meshes

    def get_stats(self) -> Dict[str, int]:
        """Number of indexed statics, shapes, triangle and convex meshes."""
        return self._index.stats()

    def clear(self) -> None:
        """Release all tables; build() returns None until the next parse."""
        self._index.clear()
