"""
rigid_transform.py - 강체 변환 유틸리티 및 지수 사상

4x4 동차 변환 행렬 [R|t; 0 1] 을 numpy 배열로 다룹니다.
- 강체 변환 검증 / 역변환 / 순수 이동 변환 생성
- 6차원 파라미터 (축-각 회전 3 + 이동 3) -> 강체 변환 (지수 사상)

파라미터 순서: [rx, ry, rz, tx, ty, tz]
    rx, ry, rz: 축-각 (Lie 대수) 회전 좌표 (라디안)
    tx, ty, tz: 이동 (mm)

Version: 1.0
"""

import numpy as np
from typing import Sequence, Union
import logging

logger = logging.getLogger(__name__)

ArrayLike = Union[np.ndarray, Sequence[float]]

# 이 각도(라디안) 미만에서는 Rodrigues 계수를 테일러 전개로 계산
SMALL_ANGLE_THRESHOLD = 1e-4

RIGID_TOLERANCE = 1e-6


def skew(v: ArrayLike) -> np.ndarray:
    """3-벡터의 반대칭 행렬 [v]x"""
    x, y, z = np.asarray(v, dtype=np.float64)
    return np.array([
        [0.0, -z, y],
        [z, 0.0, -x],
        [-y, x, 0.0]
    ])


def rotation_from_axis_angle(rotvec: ArrayLike) -> np.ndarray:
    """
    축-각 벡터에서 회전 행렬 생성 (Rodrigues 공식)

        R = I + a(θ)[w]x + b(θ)[w]x²
        a(θ) = sin(θ)/θ,  b(θ) = (1 - cos(θ))/θ²

    θ -> 0 근처에서는 a, b 를 테일러 전개로 계산하므로
    0 나눗셈이나 불연속이 없습니다. 영 벡터는 정확히 단위 행렬입니다.

    Args:
        rotvec: 축-각 벡터 (라디안), 크기 = 회전 각도

    Returns:
        3x3 회전 행렬
    """
    w = np.asarray(rotvec, dtype=np.float64).reshape(3)
    theta_sq = float(np.dot(w, w))
    theta = np.sqrt(theta_sq)

    if theta < SMALL_ANGLE_THRESHOLD:
        a = 1.0 - theta_sq / 6.0 + theta_sq * theta_sq / 120.0
        b = 0.5 - theta_sq / 24.0 + theta_sq * theta_sq / 720.0
    else:
        a = np.sin(theta) / theta
        b = (1.0 - np.cos(theta)) / theta_sq

    K = skew(w)
    return np.eye(3) + a * K + b * (K @ K)


def se3_params_to_transform(params: ArrayLike) -> np.ndarray:
    """
    6차원 파라미터를 강체 변환으로 변환 (지수 사상)

    회전은 축-각 Rodrigues 공식으로, 이동은 그대로 이동 블록에 들어갑니다.
    회전-이동 결합항(SE(3) 의 V 행렬)은 적용하지 않습니다.

    Args:
        params: [rx, ry, rz, tx, ty, tz]

    Returns:
        4x4 강체 변환
    """
    p = np.asarray(params, dtype=np.float64)
    if p.shape != (6,):
        raise ValueError(f"Expected 6 pose parameters, got shape {p.shape}")

    T = np.eye(4)
    T[:3, :3] = rotation_from_axis_angle(p[:3])
    T[:3, 3] = p[3:]
    return T


def make_transform(rotation: ArrayLike = None, translation: ArrayLike = None) -> np.ndarray:
    """회전 블록과 이동 블록으로 4x4 변환 구성 (생략 시 단위/영)"""
    T = np.eye(4)
    if rotation is not None:
        T[:3, :3] = np.asarray(rotation, dtype=np.float64)
    if translation is not None:
        T[:3, 3] = np.asarray(translation, dtype=np.float64).reshape(3)
    return T


def translation_transform(translation: ArrayLike) -> np.ndarray:
    """순수 이동 변환"""
    return make_transform(translation=translation)


def invert_rigid(T: np.ndarray) -> np.ndarray:
    """
    강체 변환의 역변환

    [R|t]^-1 = [R^T | -R^T t]
    """
    R = T[:3, :3]
    t = T[:3, 3]
    T_inv = np.eye(4)
    T_inv[:3, :3] = R.T
    T_inv[:3, 3] = -R.T @ t
    return T_inv


def transform_point(T: np.ndarray, point: ArrayLike) -> np.ndarray:
    """3D 점에 변환 적용"""
    p = np.asarray(point, dtype=np.float64).reshape(3)
    return T[:3, :3] @ p + T[:3, 3]


def is_rotation_matrix(R: np.ndarray, tol: float = RIGID_TOLERANCE) -> bool:
    """R R^T = I, det(R) = +1 여부"""
    R = np.asarray(R, dtype=np.float64)
    if R.shape != (3, 3):
        return False
    if not np.allclose(R @ R.T, np.eye(3), atol=tol):
        return False
    return abs(np.linalg.det(R) - 1.0) < tol


def is_rigid_transform(T: np.ndarray, tol: float = RIGID_TOLERANCE) -> bool:
    """4x4 강체 변환 여부 (회전 블록 + 마지막 행 (0, 0, 0, 1))"""
    T = np.asarray(T, dtype=np.float64)
    if T.shape != (4, 4):
        return False
    if not np.allclose(T[3], [0.0, 0.0, 0.0, 1.0], atol=tol):
        return False
    return is_rotation_matrix(T[:3, :3], tol)


def validate_rigid_transform(
    T: ArrayLike,
    name: str = "transform",
    tol: float = RIGID_TOLERANCE
) -> np.ndarray:
    """
    강체 변환 검증 후 float64 배열로 반환

    Raises:
        ValueError: 4x4 가 아니거나 강체 변환이 아닌 경우
    """
    arr = np.asarray(T, dtype=np.float64)
    if arr.shape != (4, 4):
        raise ValueError(f"{name}: expected 4x4 matrix, got {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name}: matrix contains non-finite values")
    if not is_rigid_transform(arr, tol):
        raise ValueError(f"{name}: not a rigid transform (rotation not orthonormal or bad bottom row)")
    return arr


def flatten_row_major(T: np.ndarray) -> np.ndarray:
    """4x4 행렬을 행 우선 16개 값으로 펼침"""
    return np.asarray(T, dtype=np.float64).reshape(-1).copy()
