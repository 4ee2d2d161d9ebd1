"""Decoder configuration dataclasses."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple, Union

import yaml


# Display colours of the debug front end, one per geometry kind
DEFAULT_COLORS: Dict[str, str] = {
    "triangle_mesh": "#60BF81",
    "box": "#347355",
    "convex_mesh": "#3B8C66",
    "sphere": "#223240",
    "capsule": "#93D94E",
}

CAPSULE_AXES = ("x", "y", "z")


@dataclass
class TessellationConfig:
    """Tessellation density of analytic primitives."""

    sphere_segments: List[int] = field(default_factory=lambda: [16, 16])
    capsule_segments: List[int] = field(default_factory=lambda: [8, 8])


@dataclass
class DecoderConfig:
    """Complete decoder configuration."""

    tessellation: TessellationConfig = field(default_factory=TessellationConfig)

    # Hex colour per geometry kind, keyed by GeometryKind.value
    colors: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COLORS))

    # PhysX capsules extend along their local X axis, 2 * HalfHeight between
    # cap centers. "y" reproduces the orientation of Y-up three.js viewers;
    # the length stays 2 * HalfHeight on every axis.
    capsule_axis: str = "x"

    # Match "RigidStatic" as well as the serializer's "PxRigidStatic"
    accept_unprefixed_tags: bool = True

    def __post_init__(self):
        """Validate enumerated options."""
        if self.capsule_axis not in CAPSULE_AXES:
            raise ValueError(
                f"capsule_axis must be one of {', '.join(CAPSULE_AXES)}, "
                f"got '{self.capsule_axis}'"
            )

    def color_rgba(self, kind: str) -> Tuple[int, int, int, int]:
        """Return the display colour of a geometry kind as RGBA bytes."""
        value = self.colors.get(kind, DEFAULT_COLORS.get(kind, "#808080"))
        rgb = int(value.lstrip("#"), 16)
        return ((rgb >> 16) & 0xFF, (rgb >> 8) & 0xFF, rgb & 0xFF, 255)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "DecoderConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            DecoderConfig instance.
        """
        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict) -> "DecoderConfig":
        """Create configuration from dictionary.

        Unknown keys are ignored.

        Args:
            data: Configuration dictionary.

        Returns:
            DecoderConfig instance.
        """
        config = cls()

        if "tessellation" in data:
            config.tessellation = TessellationConfig(**data["tessellation"])

        if "colors" in data:
            config.colors.update(data["colors"])

        if "capsule_axis" in data:
            config.capsule_axis = data["capsule_axis"]
            config.__post_init__()

        if "accept_unprefixed_tags" in data:
            config.accept_unprefixed_tags = bool(data["accept_unprefixed_tags"])

        return config

    def to_dict(self) -> dict:
        """Convert configuration to dictionary.

        Returns:
            Configuration as dictionary.
        """
        return {
            "tessellation": {
                "sphere_segments": list(self.tessellation.sphere_segments),
                "capsule_segments": list(self.tessellation.capsule_segments),
            },
            "colors": dict(self.colors),
            "capsule_axis": self.capsule_axis,
            "accept_unprefixed_tags": self.accept_unprefixed_tags,
        }

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to YAML file.

        Args:
            path: Output path for YAML file.
        """
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)
