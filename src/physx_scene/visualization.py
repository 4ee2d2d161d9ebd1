"""Visualization of decoded rigid bodies.

This module provides PyVista-based display of a ShapeGroup, either in an
interactive window or rendered off screen to an image.

Example:
    from physx_scene import PhysxSceneDecoder
    from physx_scene.visualization import visualize_group

    decoder = PhysxSceneDecoder()
    decoder.load_file("collision.xml")
    visualize_group(decoder.build())
"""

from pathlib import Path
from typing import Union

import numpy as np
import trimesh

from physx_scene.scene import ShapeGroup

try:
    import pyvista as pv
    PYVISTA_AVAILABLE = True
except ImportError:
    PYVISTA_AVAILABLE = False


def _check_pyvista():
    """Raise ImportError if PyVista is not available."""
    if not PYVISTA_AVAILABLE:
        raise ImportError(
            "PyVista is required for visualization. "
            "Install it with: pip install physx-scene[viz]"
        )


def surface_to_pyvista(
    surface: Union[trimesh.Trimesh, trimesh.PointCloud],
) -> "pv.PolyData":
    """Convert a trimesh surface or point cloud to PyVista PolyData."""
    _check_pyvista()
    if isinstance(surface, trimesh.PointCloud):
        return pv.PolyData(np.asarray(surface.vertices))

    faces = np.column_stack([
        np.full(len(surface.faces), 3),
        surface.faces
    ]).ravel()
    return pv.PolyData(np.asarray(surface.vertices), faces)


def _surface_color(surface) -> np.ndarray:
    """First colour of a surface as RGB floats in [0, 1]."""
    if isinstance(surface, trimesh.PointCloud):
        colors = surface.colors
    else:
        colors = surface.visual.face_colors
    if colors is None or len(colors) == 0:
        return np.array([0.5, 0.5, 0.5])
    return np.asarray(colors[0][:3], dtype=np.float64) / 255.0


def _populate(plotter: "pv.Plotter", group: ShapeGroup, show_edges: bool) -> None:
    for child in group.children:
        world = child.world_surface()
        plotter.add_mesh(
            surface_to_pyvista(world),
            color=_surface_color(child.surface),
            show_edges=show_edges,
            label=f"{child.kind.value} {child.shape_id}",
        )

    info_text = f"Body {group.body_id}\nShapes: {len(group.children)}"
    plotter.add_text(info_text, position="upper_left", font_size=10)
    plotter.add_axes()


def visualize_group(
    group: ShapeGroup,
    window_size: tuple = (1200, 800),
    title: str = "PhysX Scene",
    show_edges: bool = True,
    background_color: str = "white",
) -> None:
    """Show a decoded body interactively.

    Args:
        group: ShapeGroup from PhysxSceneDecoder.build().
        window_size: Window dimensions (width, height).
        title: Window title.
        show_edges: Draw triangle edges, useful for collision meshes.
        background_color: Background color.
    """
    _check_pyvista()

    plotter = pv.Plotter(window_size=window_size, title=title)
    plotter.set_background(background_color)
    _populate(plotter, group, show_edges)

    if group.children:
        plotter.add_legend()
    plotter.show()


def save_group_screenshot(
    group: ShapeGroup,
    output_path: Union[str, Path],
    camera_position: str = "iso",
    window_size: tuple = (1200, 800),
    show_edges: bool = True,
) -> None:
    """Render a decoded body to an image file.

    Useful for headless environments where interactive display is not
    available.

    Args:
        group: ShapeGroup from PhysxSceneDecoder.build().
        output_path: Path to save the image (PNG, JPG, etc.).
        camera_position: Camera angle ('iso', 'xy', 'xz', 'yz', or custom).
        window_size: Image dimensions (width, height).
        show_edges: Draw triangle edges.
    """
    _check_pyvista()

    plotter = pv.Plotter(off_screen=True, window_size=window_size)
    plotter.set_background("white")
    _populate(plotter, group, show_edges)

    plotter.camera_position = camera_position

    plotter.screenshot(str(output_path))
    plotter.close()
