#!/usr/bin/env python3
"""
test_rigid_transform.py - 강체 변환 / 지수 사상 단위 테스트
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parents[1]))

import cv2
import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from pose_perturb.geometry.rigid_transform import (
    se3_params_to_transform,
    rotation_from_axis_angle,
    invert_rigid,
    translation_transform,
    transform_point,
    is_rotation_matrix,
    is_rigid_transform,
    validate_rigid_transform,
    flatten_row_major,
    skew
)


class TestExponentialMap:
    """지수 사상 테스트"""

    def test_zero_is_exact_identity(self):
        T = se3_params_to_transform(np.zeros(6))
        assert np.array_equal(T, np.eye(4))

    def test_translation_maps_directly(self):
        T = se3_params_to_transform([0, 0, 0, 1.5, -2.0, 5.0])
        np.testing.assert_array_equal(T[:3, :3], np.eye(3))
        np.testing.assert_array_equal(T[:3, 3], [1.5, -2.0, 5.0])

    def test_rotation_independent_of_translation(self):
        """회전-이동 결합항 없음: 이동 블록 = 파라미터 그대로"""
        params = np.array([0.3, -0.2, 0.1, 10.0, 20.0, 30.0])
        T = se3_params_to_transform(params)
        np.testing.assert_array_equal(T[:3, 3], params[3:])
        np.testing.assert_array_almost_equal(T[:3, :3], rotation_from_axis_angle(params[:3]))

    def test_matches_scipy_rotvec(self):
        rng = np.random.default_rng(7)
        for _ in range(20):
            w = rng.normal(scale=0.8, size=3)
            R = rotation_from_axis_angle(w)
            np.testing.assert_allclose(R, Rotation.from_rotvec(w).as_matrix(), atol=1e-12)

    def test_matches_opencv_rodrigues(self):
        w = np.array([0.1, -0.4, 0.25])
        R_cv, _ = cv2.Rodrigues(w.reshape(3, 1))
        np.testing.assert_allclose(rotation_from_axis_angle(w), R_cv, atol=1e-10)

    def test_small_angle_continuity(self):
        """θ -> 0 근처에서 테일러 전개와 닫힌 식이 일치"""
        for scale in [1e-12, 1e-8, 1e-5, 9e-5, 1.1e-4, 1e-3]:
            w = np.array([1.0, -2.0, 0.5]) / np.sqrt(5.25) * scale
            R = rotation_from_axis_angle(w)
            assert np.all(np.isfinite(R))
            np.testing.assert_allclose(R, Rotation.from_rotvec(w).as_matrix(), atol=1e-14)

    def test_sampled_rotations_orthonormal(self):
        rng = np.random.default_rng(0)
        for _ in range(50):
            params = np.concatenate([rng.normal(scale=1.0, size=3), rng.normal(scale=10.0, size=3)])
            T = se3_params_to_transform(params)
            R = T[:3, :3]
            np.testing.assert_allclose(R @ R.T, np.eye(3), atol=1e-12)
            assert abs(np.linalg.det(R) - 1.0) < 1e-12
            np.testing.assert_array_equal(T[3], [0, 0, 0, 1])

    def test_rotation_angle_is_vector_norm(self):
        w = np.array([0.0, 0.0, np.deg2rad(30)])
        R = rotation_from_axis_angle(w)
        angle = np.arccos((np.trace(R) - 1) / 2)
        assert abs(np.rad2deg(angle) - 30) < 1e-10

    def test_wrong_length_raises(self):
        with pytest.raises(ValueError):
            se3_params_to_transform([0, 0, 0])


class TestRigidHelpers:
    """강체 변환 보조 함수 테스트"""

    def test_skew(self):
        v = np.array([1.0, 2.0, 3.0])
        u = np.array([-0.5, 4.0, 2.0])
        np.testing.assert_allclose(skew(v) @ u, np.cross(v, u))

    def test_invert_rigid(self):
        T = se3_params_to_transform([0.2, 0.5, -0.3, 10, -4, 7])
        np.testing.assert_allclose(invert_rigid(T) @ T, np.eye(4), atol=1e-12)
        np.testing.assert_allclose(invert_rigid(T), np.linalg.inv(T), atol=1e-12)

    def test_translation_transform(self):
        T = translation_transform([1, 2, 3])
        np.testing.assert_array_equal(transform_point(T, [0, 0, 0]), [1, 2, 3])

    def test_is_rigid(self):
        T = se3_params_to_transform([0.1, 0.2, 0.3, 1, 2, 3])
        assert is_rigid_transform(T)
        assert is_rotation_matrix(T[:3, :3])

        scaled = T.copy()
        scaled[:3, :3] *= 2.0
        assert not is_rigid_transform(scaled)

        reflected = np.diag([1.0, 1.0, -1.0, 1.0])
        assert not is_rigid_transform(reflected)

        bad_row = np.eye(4)
        bad_row[3, 0] = 1.0
        assert not is_rigid_transform(bad_row)

    def test_validate_rigid_transform(self):
        with pytest.raises(ValueError):
            validate_rigid_transform(np.eye(3))
        with pytest.raises(ValueError):
            validate_rigid_transform(np.full((4, 4), np.nan))
        with pytest.raises(ValueError):
            validate_rigid_transform(np.diag([2.0, 1.0, 1.0, 1.0]))

        T = validate_rigid_transform(np.eye(4).tolist())
        assert T.dtype == np.float64

    def test_flatten_row_major(self):
        T = np.arange(16, dtype=np.float64).reshape(4, 4)
        flat = flatten_row_major(T)
        np.testing.assert_array_equal(flat, np.arange(16))


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
