"""Unit tests for pose, scale and matrix utilities."""

import xml.etree.ElementTree as ET

import numpy as np
import pytest
import trimesh

from physx_scene.geometry.transform import (
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

# 90 degrees around Z as (x, y, z, w)
QUARTER_TURN_Z = np.array([0.0, 0.0, np.sin(np.pi / 4), np.cos(np.pi / 4)])


class TestResolvePose:
    """Tests for LocalPose decoding."""

    def test_identity_rotation_with_translation(self):
        """Quaternion comes first (x, y, z, w), translation last."""
        element = ET.fromstring("<PxShape><LocalPose>0 0 0 1 2 3 4</LocalPose></PxShape>")

        pose = resolve_pose(element)

        np.testing.assert_array_equal(pose.rotation, [0, 0, 0, 1])
        np.testing.assert_array_equal(pose.translation, [2, 3, 4])

    def test_missing_field(self):
        """A shape without LocalPose has the identity pose."""
        pose = resolve_pose(ET.fromstring("<PxShape><Id>1</Id></PxShape>"))

        np.testing.assert_array_equal(pose.rotation, [0, 0, 0, 1])
        np.testing.assert_array_equal(pose.translation, [0, 0, 0])

    def test_short_field(self):
        """Fewer than seven scalars fall back to the identity pose."""
        element = ET.fromstring("<PxShape><LocalPose>0 0 0 1 2 3</LocalPose></PxShape>")

        pose = resolve_pose(element)

        np.testing.assert_array_equal(pose.translation, [0, 0, 0])

    def test_malformed_scalar_propagates_nan(self):
        """A malformed token stays in the pose as NaN."""
        element = ET.fromstring("<PxShape><LocalPose>0 0 0 1 x 3 4</LocalPose></PxShape>")

        pose = resolve_pose(element)

        assert np.isnan(pose.translation[0])
        np.testing.assert_array_equal(pose.translation[1:], [3, 4])

    def test_pose_to_matrix(self):
        """Pose matrix rotates then translates."""
        pose = Pose(rotation=QUARTER_TURN_Z, translation=[10, 0, 0])

        point = pose.to_matrix() @ np.array([1.0, 0.0, 0.0, 1.0])

        np.testing.assert_array_almost_equal(point[:3], [10, 1, 0])


class TestResolveScale:
    """Tests for the nested Scale field."""

    def test_scale_and_rotation(self):
        """Both nested fields are decoded."""
        element = ET.fromstring(
            "<PxConvexMeshGeometry><Scale><Scale>2 3 4</Scale>"
            "<Rotation>0 0 0.7071068 0.7071068</Rotation></Scale>"
            "<ConvexMesh>1</ConvexMesh></PxConvexMeshGeometry>"
        )

        descriptor = resolve_scale(element)

        np.testing.assert_array_equal(descriptor.scale, [2, 3, 4])
        np.testing.assert_array_almost_equal(descriptor.rotation, QUARTER_TURN_Z)

    def test_missing_field(self):
        """No Scale field gives unit scale and no rotation."""
        descriptor = resolve_scale(ET.fromstring("<PxTriangleMeshGeometry/>"))

        np.testing.assert_array_equal(descriptor.scale, [1, 1, 1])
        np.testing.assert_array_equal(descriptor.rotation, [0, 0, 0, 1])

    def test_parts_default_independently(self):
        """A missing nested Scale keeps unit scale even if Rotation is set."""
        element = ET.fromstring(
            "<PxTriangleMeshGeometry><Scale><Rotation>0 0 1 0</Rotation></Scale>"
            "</PxTriangleMeshGeometry>"
        )

        descriptor = resolve_scale(element)

        np.testing.assert_array_equal(descriptor.scale, [1, 1, 1])
        np.testing.assert_array_equal(descriptor.rotation, [0, 0, 1, 0])

    def test_scale_applied_before_rotation(self):
        """The descriptor scales along the axes first, then rotates."""
        descriptor = ScaleDescriptor(scale=[2, 1, 1], rotation=QUARTER_TURN_Z)

        point = descriptor.to_matrix() @ np.array([1.0, 0.0, 0.0, 1.0])

        np.testing.assert_array_almost_equal(point[:3], [0, 2, 0])


class TestMatrices:
    """Tests for matrix helpers."""

    def test_quaternion_to_rotation_matrix(self):
        """Quarter turn around Z maps x onto y."""
        rotation = quaternion_to_rotation_matrix(QUARTER_TURN_Z)

        np.testing.assert_array_almost_equal(rotation @ [1, 0, 0], [0, 1, 0])

    def test_nan_quaternion(self):
        """A NaN quaternion yields a NaN matrix rather than raising."""
        rotation = quaternion_to_rotation_matrix([np.nan, 0, 0, 1])

        assert np.all(np.isnan(rotation))

    def test_zero_quaternion(self):
        """An all-zero quaternion is treated as no rotation."""
        np.testing.assert_array_equal(quaternion_to_rotation_matrix([0, 0, 0, 0]), np.eye(3))

    def test_pose_to_matrix_identity(self):
        """Identity quaternion and zero translation give the identity."""
        np.testing.assert_array_almost_equal(
            pose_to_matrix(np.zeros(3), [0, 0, 0, 1]), np.eye(4)
        )

    def test_scale_matrix(self):
        """Scale matrix has the factors on its diagonal."""
        np.testing.assert_array_equal(
            np.diag(scale_matrix([2, 3, 4])), [2, 3, 4, 1]
        )

    def test_compose_empty(self):
        """Composing nothing gives the identity."""
        np.testing.assert_array_equal(compose_transforms(), np.eye(4))

    def test_compose_order(self):
        """The right-most transform is applied first."""
        translate = pose_to_matrix([5, 0, 0], [0, 0, 0, 1])
        scale = scale_matrix([2, 2, 2])

        point = compose_transforms(translate, scale) @ np.array([1.0, 0.0, 0.0, 1.0])

        np.testing.assert_array_almost_equal(point[:3], [7, 0, 0])


class TestApplyTransform:
    """Tests for applying transforms to surfaces."""

    def test_translation_copies(self):
        """Transform returns a moved copy and leaves the input alone."""
        box = trimesh.creation.box(extents=[2, 2, 2])
        original = box.vertices.copy()

        moved = apply_transform(box, pose_to_matrix([1, 2, 3], [0, 0, 0, 1]))

        np.testing.assert_array_almost_equal(moved.bounds.mean(axis=0), [1, 2, 3])
        np.testing.assert_array_equal(box.vertices, original)

    def test_point_cloud(self):
        """Point clouds are transformed like meshes."""
        cloud = trimesh.PointCloud([[0, 0, 0], [1, 0, 0]])

        moved = apply_transform(cloud, pose_to_matrix([0, 0, 1], [0, 0, 0, 1]))

        np.testing.assert_array_almost_equal(moved.vertices[:, 2], [1, 1])

    @pytest.mark.parametrize("copy", [True, False])
    def test_copy_flag(self, copy):
        """copy=False transforms in place."""
        box = trimesh.creation.box(extents=[2, 2, 2])

        result = apply_transform(box, pose_to_matrix([1, 0, 0], [0, 0, 0, 1]), copy=copy)

        assert (result is box) == (not copy)
