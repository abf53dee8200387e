"""
offset_decomposer.py - 오프셋 강체 변환 분해 모듈

샘플링된 오프셋 변환(합성 전 원본 오프셋)을 해석 가능한 값으로 분해합니다:
- 총 회전 각도 (도): arccos((trace(R) - 1) / 2)
- 총 이동 크기 (mm): ||t||
- 카메라 좌표축 기준 오일러 XYZ 각도 (도) + 축별 이동 (mm)

오일러 규약:
    내재적(intrinsic) XYZ, 즉 R = Rx(roll) · Ry(pitch) · Rz(yaw)
    scipy 의 'XYZ' (대문자) 순서와 동일합니다.

Version: 1.0
"""

import numpy as np
from scipy.spatial.transform import Rotation
from typing import Tuple, Dict, Any, List
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)


@dataclass
class EulerAngles:
    """
    오일러 각도 (degrees)

    Attributes:
        roll: X축 회전
        pitch: Y축 회전
        yaw: Z축 회전
    """
    roll: float
    pitch: float
    yaw: float

    def to_array(self) -> np.ndarray:
        """numpy 배열로 변환 [roll, pitch, yaw]"""
        return np.array([self.roll, self.pitch, self.yaw])

    def __repr__(self) -> str:
        return f"EulerAngles(X={self.roll:.3f}, Y={self.pitch:.3f}, Z={self.yaw:.3f})"


@dataclass
class OffsetSummary:
    """
    오프셋 분해 결과 (샘플당 1개, 읽기 전용)

    CSV 열 순서: total_rotation_deg, total_translation_mm,
    rotation X/Y/Z (deg), translation X/Y/Z (mm)
    """
    total_rotation_deg: float
    total_translation_mm: float
    euler: EulerAngles
    translation: np.ndarray      # [x, y, z] mm
    gimbal_lock_warning: bool = False

    def to_row(self) -> List[float]:
        """분해 스트림의 8개 열 값"""
        return [
            self.total_rotation_deg,
            self.total_translation_mm,
            self.euler.roll,
            self.euler.pitch,
            self.euler.yaw,
            float(self.translation[0]),
            float(self.translation[1]),
            float(self.translation[2])
        ]

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환"""
        return {
            'total_rotation_deg': self.total_rotation_deg,
            'total_translation_mm': self.total_translation_mm,
            'euler': {
                'x': self.euler.roll,
                'y': self.euler.pitch,
                'z': self.euler.yaw
            },
            'translation': self.translation.tolist(),
            'gimbal_lock_warning': self.gimbal_lock_warning
        }


def rotation_angle_from_matrix(R: np.ndarray) -> float:
    """
    회전 행렬의 총 회전 각도 (라디안)

    trace 인자를 [-1, 1] 로 잘라 0°/180° 근처에서도 NaN 이 나오지 않습니다.
    """
    cos_angle = (np.trace(R) - 1.0) / 2.0
    return float(np.arccos(np.clip(cos_angle, -1.0, 1.0)))


def compute_rot_angle_trans_mag(offset: np.ndarray) -> Tuple[float, float]:
    """
    오프셋 변환의 (회전 각도 [rad], 이동 크기)
    """
    return rotation_angle_from_matrix(offset[:3, :3]), float(np.linalg.norm(offset[:3, 3]))


class OffsetDecomposer:
    """
    오프셋 강체 변환 분해기

    Example:
        >>> decomposer = OffsetDecomposer()
        >>> summary = decomposer.decompose(offset_4x4)
        >>> print(f"{summary.total_rotation_deg:.2f} deg, {summary.total_translation_mm:.2f} mm")
    """

    EULER_SEQUENCE = 'XYZ'      # 내재적 XYZ (scipy 대문자 규약)
    GIMBAL_LOCK_THRESHOLD = 85.0  # 도 (±90°에서 ±5° 이내)

    def __init__(self, warn_gimbal_lock: bool = True):
        """
        Args:
            warn_gimbal_lock: 짐벌 락 경고 활성화
        """
        self.warn_gimbal_lock = warn_gimbal_lock

    def decompose(self, offset: np.ndarray) -> OffsetSummary:
        """
        오프셋 변환을 OffsetSummary 로 분해

        Args:
            offset: 4x4 원본 오프셋 변환 (합성 전)

        Returns:
            OffsetSummary
        """
        if offset.shape != (4, 4):
            raise ValueError(f"Expected 4x4 matrix, got {offset.shape}")

        angle_rad, trans_mag = compute_rot_angle_trans_mag(offset)
        euler, translation = self.to_euler_and_translation(offset)

        return OffsetSummary(
            total_rotation_deg=float(np.rad2deg(angle_rad)),
            total_translation_mm=trans_mag,
            euler=euler,
            translation=translation,
            gimbal_lock_warning=self._check_gimbal_lock(euler.pitch)
        )

    def to_euler_and_translation(
        self,
        offset: np.ndarray
    ) -> Tuple[EulerAngles, np.ndarray]:
        """4x4 변환에서 오일러 각도(도)와 이동 추출"""
        rot = Rotation.from_matrix(offset[:3, :3])
        euler_array = rot.as_euler(self.EULER_SEQUENCE, degrees=True)
        euler = EulerAngles(
            roll=float(euler_array[0]),
            pitch=float(euler_array[1]),
            yaw=float(euler_array[2])
        )
        return euler, offset[:3, 3].copy()

    def from_euler_and_translation(
        self,
        euler: EulerAngles,
        translation: np.ndarray
    ) -> np.ndarray:
        """오일러 각도(도)와 이동으로 4x4 변환 복원"""
        rot = Rotation.from_euler(
            self.EULER_SEQUENCE,
            euler.to_array(),
            degrees=True
        )
        T = np.eye(4)
        T[:3, :3] = rot.as_matrix()
        T[:3, 3] = np.asarray(translation, dtype=np.float64)
        return T

    def _check_gimbal_lock(self, pitch: float) -> bool:
        """
        짐벌 락 근접 여부 확인

        XYZ 순서에서 가운데 축(Y) 각도가 ±90°에 근접하면
        X 와 Z 회전의 구분이 불가능해집니다. 값은 그대로 유한하게 반환합니다.
        """
        if not self.warn_gimbal_lock:
            return False

        if abs(abs(pitch) - 90) < (90 - self.GIMBAL_LOCK_THRESHOLD):
            logger.warning(f"Approaching gimbal lock (rotation Y={pitch:.1f})")
            return True

        return False


def decompose_offset(offset: np.ndarray) -> OffsetSummary:
    """편의 함수: 기본 설정(내재적 XYZ)으로 오프셋 분해"""
    return OffsetDecomposer().decompose(offset)
