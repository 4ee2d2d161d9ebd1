"""Pytest fixtures for PhysX scene decoder tests."""

from pathlib import Path

import numpy as np
import pytest

from physx_scene import PhysxSceneDecoder


def wrap_collection(*elements: str) -> str:
    """Wrap serialized objects in a PhysX collection root."""
    body = "\n".join(elements)
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        f'<PhysXCollection version="3.4.2">\n{body}\n</PhysXCollection>'
    )


def rigid_static(body_id: int, *shape_ids) -> str:
    """Serialize a PxRigidStatic referencing the given shape ids."""
    refs = "".join(f"<PxShapeRef>{shape_id}</PxShapeRef>" for shape_id in shape_ids)
    return (
        "<PxRigidStatic>"
        f"<Id>{body_id}</Id>"
        "<GlobalPose>0 0 0 1 0 0 0</GlobalPose>"
        f"<Shapes>{refs}</Shapes>"
        "</PxRigidStatic>"
    )


def shape(shape_id: int, geometry: str, local_pose: str = None) -> str:
    """Serialize a PxShape around one geometry element."""
    pose = f"<LocalPose>{local_pose}</LocalPose>" if local_pose is not None else ""
    return (
        "<PxShape>"
        f"<Id>{shape_id}</Id>"
        f"{pose}"
        f"<Geometry>{geometry}</Geometry>"
        "</PxShape>"
    )


def box_geometry(half_extents: str) -> str:
    return f"<PxBoxGeometry><HalfExtents>{half_extents}</HalfExtents></PxBoxGeometry>"


def mesh_scale(scale: str = "1 1 1", rotation: str = "0 0 0 1") -> str:
    return f"<Scale><Scale>{scale}</Scale><Rotation>{rotation}</Rotation></Scale>"


@pytest.fixture
def unit_box_document() -> str:
    """One body (id 5) with one unit-half box shape (id 9) at the origin."""
    return wrap_collection(
        rigid_static(5, 9),
        shape(9, box_geometry("1 1 1")),
    )


@pytest.fixture
def cube_points() -> np.ndarray:
    """Corners of a cube with half extent 1."""
    return np.array([
        [x, y, z]
        for x in (-1.0, 1.0)
        for y in (-1.0, 1.0)
        for z in (-1.0, 1.0)
    ])


@pytest.fixture
def mixed_document(cube_points: np.ndarray) -> str:
    """A body with one shape of every geometry kind.

    Body 100 references shapes 1 to 5:
    1: triangle mesh (blob 30), translated by [0, 0, 5]
    2: box with half extents [1, 2, 3]
    3: convex mesh (blob 40)
    4: sphere of radius 2
    5: capsule of radius 1 and half height 2
    """
    flat_cube = " ".join(str(v) for v in cube_points.ravel())
    return wrap_collection(
        # Blobs and shapes declared after the body that references them
        rigid_static(100, 1, 2, 3, 4, 5),
        shape(
            1,
            "<PxTriangleMeshGeometry>"
            f"{mesh_scale()}"
            "<TriangleMesh>30</TriangleMesh>"
            "</PxTriangleMeshGeometry>",
            local_pose="0 0 0 1 0 0 5",
        ),
        shape(2, box_geometry("1 2 3")),
        shape(
            3,
            "<PxConvexMeshGeometry>"
            f"{mesh_scale()}"
            "<ConvexMesh>40</ConvexMesh>"
            "</PxConvexMeshGeometry>",
        ),
        shape(4, "<PxSphereGeometry><Radius>2</Radius></PxSphereGeometry>"),
        shape(
            5,
            "<PxCapsuleGeometry><Radius>1</Radius>"
            "<HalfHeight>2</HalfHeight></PxCapsuleGeometry>",
        ),
        "<PxTriangleMesh>"
        "<Id>30</Id>"
        "<Points>0 0 0\n\t\t\t1 0 0\n\t\t\t0 1 0\n\t\t\t0 0 1</Points>"
        "<Triangles>0 2 1 0 1 3 0 3 2 1 2 3</Triangles>"
        "<CookedData>1 2 3 4</CookedData>"
        "</PxTriangleMesh>",
        f"<PxConvexMesh><Id>40</Id><points>{flat_cube}</points></PxConvexMesh>",
    )


@pytest.fixture
def decoder() -> PhysxSceneDecoder:
    """Decoder with default configuration."""
    return PhysxSceneDecoder()


@pytest.fixture
def mixed_document_file(tmp_path: Path, mixed_document: str) -> Path:
    """The mixed document written to disk."""
    path = tmp_path / "collection.xml"
    path.write_text(mixed_document, encoding="utf-8")
    return path
