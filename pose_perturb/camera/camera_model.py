"""
camera_model.py - 투영 카메라 모델 및 볼륨 기하

CameraModel: 내부 파라미터(3x3), 외부 파라미터(4x4), 검출기 크기/픽셀 간격
VolumeGeometry: 볼륨 크기/간격/원점/방향 -> 물리 좌표 중심(회전 중심)

Version: 1.0
"""

import cv2
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Any
import logging

from ..geometry.rigid_transform import invert_rigid, validate_rigid_transform

logger = logging.getLogger(__name__)


@dataclass
class CameraModel:
    """
    투영 카메라 모델 (실행 중 불변)

    Attributes:
        intrinsic: 3x3 내부 파라미터 행렬 (픽셀 단위)
        extrinsic: 4x4 외부 파라미터 (월드 -> 카메라 투영 좌표계)
        num_rows: 검출기 행 수
        num_cols: 검출기 열 수
        pixel_row_spacing: 행 방향 픽셀 간격 (mm/pixel)
        pixel_col_spacing: 열 방향 픽셀 간격 (mm/pixel)
    """
    intrinsic: np.ndarray
    extrinsic: np.ndarray
    num_rows: int
    num_cols: int
    pixel_row_spacing: float = 1.0
    pixel_col_spacing: float = 1.0
    extrinsic_inv: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        self.intrinsic = np.asarray(self.intrinsic, dtype=np.float64)
        if self.intrinsic.shape != (3, 3):
            raise ValueError(f"intrinsic: expected 3x3 matrix, got {self.intrinsic.shape}")
        if not np.all(np.isfinite(self.intrinsic)):
            raise ValueError("intrinsic: matrix contains non-finite values")

        self.extrinsic = validate_rigid_transform(self.extrinsic, "extrinsic", tol=1e-4)
        self.extrinsic_inv = invert_rigid(self.extrinsic)

        self.num_rows = int(self.num_rows)
        self.num_cols = int(self.num_cols)
        if self.num_rows < 1 or self.num_cols < 1:
            raise ValueError(f"Invalid detector size: {self.num_rows} x {self.num_cols}")
        if self.pixel_row_spacing <= 0 or self.pixel_col_spacing <= 0:
            raise ValueError(
                f"Pixel spacing must be positive, got "
                f"({self.pixel_row_spacing}, {self.pixel_col_spacing})"
            )

    def project(self, points_wrt_world: np.ndarray) -> np.ndarray:
        """
        월드 좌표 점들을 검출기 픽셀 좌표로 투영

        Args:
            points_wrt_world: (N, 3) 또는 (3,) 점

        Returns:
            (N, 2) 픽셀 좌표 [u(열), v(행)]
        """
        pts = np.asarray(points_wrt_world, dtype=np.float64).reshape(-1, 3)
        rvec, _ = cv2.Rodrigues(self.extrinsic[:3, :3])
        tvec = self.extrinsic[:3, 3].reshape(3, 1)
        uv, _ = cv2.projectPoints(pts, rvec, tvec, self.intrinsic, None)
        return uv.reshape(-1, 2)

    def contains_pixel(self, uv: np.ndarray) -> bool:
        """픽셀 좌표가 검출기 안에 있는지 여부"""
        u, v = np.asarray(uv, dtype=np.float64).reshape(2)
        return bool(0 <= u < self.num_cols and 0 <= v < self.num_rows)

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환 (YAML 저장용)"""
        return {
            'intrinsic': self.intrinsic.tolist(),
            'extrinsic': self.extrinsic.tolist(),
            'num_rows': self.num_rows,
            'num_cols': self.num_cols,
            'pixel_row_spacing': float(self.pixel_row_spacing),
            'pixel_col_spacing': float(self.pixel_col_spacing)
        }


@dataclass
class VolumeGeometry:
    """
    볼륨 영상 기하 정보

    Attributes:
        size: 축별 복셀 수 [nx, ny, nz]
        spacing: 축별 복셀 간격 (mm)
        origin: 첫 복셀 중심의 물리 좌표 (mm)
        direction: 3x3 방향 코사인 행렬
    """
    size: np.ndarray
    spacing: np.ndarray = field(default_factory=lambda: np.ones(3))
    origin: np.ndarray = field(default_factory=lambda: np.zeros(3))
    direction: np.ndarray = field(default_factory=lambda: np.eye(3))

    def __post_init__(self):
        self.size = np.asarray(self.size, dtype=np.float64).reshape(-1)
        self.spacing = np.asarray(self.spacing, dtype=np.float64).reshape(-1)
        self.origin = np.asarray(self.origin, dtype=np.float64).reshape(-1)
        self.direction = np.asarray(self.direction, dtype=np.float64)

        for name, arr in (('size', self.size), ('spacing', self.spacing), ('origin', self.origin)):
            if arr.shape != (3,):
                raise ValueError(f"volume {name}: expected 3 values, got {arr.size}")
        if self.direction.shape != (3, 3):
            raise ValueError(f"volume direction: expected 3x3 matrix, got {self.direction.shape}")
        if np.any(self.size < 1) or np.any(self.spacing <= 0):
            raise ValueError(f"Invalid volume size/spacing: {self.size}, {self.spacing}")

    def center(self) -> np.ndarray:
        """
        볼륨 중심의 물리 좌표

        center = origin + direction · (spacing ⊙ (size - 1) / 2)
        """
        half_extent = self.spacing * (self.size - 1.0) / 2.0
        return self.origin + self.direction @ half_extent
