"""Decoder turning serialized PhysX collections into renderable geometry."""

__version__ = "0.1.0"

from physx_scene.config import DecoderConfig
from physx_scene.decoder import PhysxSceneDecoder, SceneLoadError
from physx_scene.scene import ReconstructedShape, ShapeGroup

from physx_scene.visualization import save_group_screenshot, visualize_group

__all__ = [
    "DecoderConfig",
    "PhysxSceneDecoder",
    "SceneLoadError",
    "ReconstructedShape",
    "ShapeGroup",
    "visualize_group",
    "save_group_screenshot",
]
