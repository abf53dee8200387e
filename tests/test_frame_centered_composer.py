#!/usr/bin/env python3
"""
test_frame_centered_composer.py - 회전 중심 기준 합성 단위 테스트
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parents[1]))

import numpy as np
import pytest

from conftest import ANCHOR, make_rigid
from pose_perturb.geometry.frame_centered_composer import FrameCenteredComposer
from pose_perturb.geometry.rigid_transform import (
    se3_params_to_transform,
    invert_rigid,
    transform_point
)


def _anchor_in_cam(composer: FrameCenteredComposer, pose: np.ndarray) -> np.ndarray:
    """섭동된 자세에서 회전 중심의 카메라 투영 좌표계 좌표"""
    return transform_point(composer.cam_extrinsic @ invert_rigid(pose), composer.anchor_wrt_vol)


class TestFrameCenteredComposer:
    """FrameCenteredComposer 테스트"""

    def test_anchor_in_camera_frame(self, camera, gt_pose):
        composer = FrameCenteredComposer(gt_pose, camera.extrinsic, ANCHOR)
        np.testing.assert_allclose(composer.anchor_wrt_cam, [0.0, 0.0, 1000.0], atol=1e-9)

    def test_shift_transforms(self, camera, gt_pose):
        composer = FrameCenteredComposer(gt_pose, camera.extrinsic, ANCHOR)
        np.testing.assert_allclose(
            composer.shift_to_anchor @ composer.shift_from_anchor, np.eye(4), atol=1e-12
        )
        np.testing.assert_allclose(composer.shift_from_anchor[:3, 3], composer.anchor_wrt_cam)

    def test_identity_offset_reproduces_ground_truth(self, camera, gt_pose):
        composer = FrameCenteredComposer(gt_pose, camera.extrinsic, ANCHOR)
        np.testing.assert_allclose(composer.compose(np.eye(4)), gt_pose, atol=1e-9)

    @pytest.mark.parametrize("anchor", [
        [0.0, 0.0, 0.0],
        [-250.0, 37.5, 1200.0],
        [1e4, -1e4, 3.0],
    ])
    def test_identity_invariant_for_any_anchor(self, anchor):
        extrinsic = make_rigid([-20, 35, 170], [15.0, -40.0, 600.0])
        gt = make_rigid([90, 10, -120], [-5.0, 300.0, 42.0])
        composer = FrameCenteredComposer(gt, extrinsic, anchor)
        np.testing.assert_allclose(composer.compose(np.eye(4)), gt, atol=1e-8)

    def test_rotation_offset_keeps_anchor_fixed(self, camera, gt_pose):
        """순수 회전 오프셋은 회전 중심의 카메라 좌표를 바꾸지 않음"""
        composer = FrameCenteredComposer(gt_pose, camera.extrinsic, ANCHOR)
        offset = se3_params_to_transform([0.05, -0.1, 0.2, 0, 0, 0])
        pose = composer.compose(offset)

        np.testing.assert_allclose(_anchor_in_cam(composer, pose), composer.anchor_wrt_cam, atol=1e-8)
        assert not np.allclose(pose, gt_pose)

    def test_translation_offset_moves_anchor(self, camera, gt_pose):
        """순수 이동 오프셋 t 는 회전 중심을 카메라 좌표계에서 -t 만큼 이동"""
        composer = FrameCenteredComposer(gt_pose, camera.extrinsic, ANCHOR)
        t = np.array([1.0, -2.0, 5.0])
        pose = composer.compose(se3_params_to_transform(np.concatenate([np.zeros(3), t])))

        np.testing.assert_allclose(_anchor_in_cam(composer, pose), composer.anchor_wrt_cam - t, atol=1e-8)

    def test_composed_pose_is_rigid(self, camera, gt_pose):
        composer = FrameCenteredComposer(gt_pose, camera.extrinsic, ANCHOR)
        pose = composer.compose(se3_params_to_transform([0.3, 0.2, -0.1, 4, 5, 6]))
        R = pose[:3, :3]
        np.testing.assert_allclose(R @ R.T, np.eye(3), atol=1e-10)
        np.testing.assert_allclose(pose[3], [0, 0, 0, 1])

    def test_explicit_extrinsic_inverse(self, camera, gt_pose):
        composer = FrameCenteredComposer(
            gt_pose, camera.extrinsic, ANCHOR, cam_extrinsic_inv=camera.extrinsic_inv
        )
        np.testing.assert_allclose(composer.compose(np.eye(4)), gt_pose, atol=1e-9)

    def test_ground_truth_is_copy(self, camera, gt_pose):
        composer = FrameCenteredComposer(gt_pose, camera.extrinsic, ANCHOR)
        gt = composer.ground_truth
        gt[0, 0] = 99.0
        assert composer.gt_cam_extrins_to_vol[0, 0] != 99.0

    def test_invalid_inputs(self, camera, gt_pose):
        with pytest.raises(ValueError):
            FrameCenteredComposer(gt_pose, camera.extrinsic, [1.0, 2.0])
        with pytest.raises(ValueError):
            FrameCenteredComposer(np.diag([2.0, 1.0, 1.0, 1.0]), camera.extrinsic, ANCHOR)
        with pytest.raises(ValueError):
            FrameCenteredComposer(gt_pose, np.eye(3), ANCHOR)

        composer = FrameCenteredComposer(gt_pose, camera.extrinsic, ANCHOR)
        with pytest.raises(ValueError):
            composer.compose(np.eye(3))


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
