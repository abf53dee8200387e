"""
공용 테스트 픽스처

정답 자세에서 회전 중심이 월드 원점에 오도록 구성한 케이스:
    G = [R_gt | anchor]  ->  G^-1 · anchor = 0
    E = [R_ext | (0, 0, 1000)]  ->  카메라 좌표계에서 회전 중심 = (0, 0, 1000)
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parents[1]))

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from pose_perturb.camera.camera_model import CameraModel, VolumeGeometry
from pose_perturb.input.data_loader import RegistrationCase


ANCHOR = np.array([100.0, 120.0, 80.0])


def make_rigid(euler_xyz_deg, translation) -> np.ndarray:
    T = np.eye(4)
    T[:3, :3] = Rotation.from_euler('xyz', euler_xyz_deg, degrees=True).as_matrix()
    T[:3, 3] = translation
    return T


@pytest.fixture
def camera() -> CameraModel:
    return CameraModel(
        intrinsic=np.array([
            [1000.0, 0.0, 320.0],
            [0.0, 1000.0, 240.0],
            [0.0, 0.0, 1.0]
        ]),
        extrinsic=make_rigid([5, -10, 15], [0.0, 0.0, 1000.0]),
        num_rows=480,
        num_cols=640,
        pixel_row_spacing=0.194,
        pixel_col_spacing=0.194
    )


@pytest.fixture
def gt_pose() -> np.ndarray:
    return make_rigid([30, -45, 60], ANCHOR)


@pytest.fixture
def volume() -> VolumeGeometry:
    # 중심 = (size - 1) / 2 = ANCHOR
    return VolumeGeometry(size=[201, 241, 161])


@pytest.fixture
def case(camera, gt_pose, volume) -> RegistrationCase:
    return RegistrationCase(
        camera=camera,
        gt_cam_extrins_to_vol=gt_pose,
        anchor_wrt_vol=volume.center(),
        volume=volume
    )
