"""
data_loader.py - 정합 케이스 데이터 로더

YAML 케이스 파일에서 카메라 모델, 정답 자세, 회전 중심을 읽습니다.

케이스 파일 형식:
    camera:
      intrinsic: 3x3
      extrinsic: 4x4
      num_rows: int
      num_cols: int
      pixel_row_spacing: float
      pixel_col_spacing: float
    gt_cam_extrins_to_vol: 4x4
    anchor: [x, y, z]            # 또는
    volume:
      size: [nx, ny, nz]
      spacing: [sx, sy, sz]
      origin: [ox, oy, oz]
      direction: 3x3              # 생략 시 단위 행렬

Version: 1.0
"""

import yaml
import numpy as np
from dataclasses import dataclass
from typing import Optional, Dict, Any, Sequence
from pathlib import Path
import logging

from ..camera.camera_model import CameraModel, VolumeGeometry
from ..geometry.rigid_transform import (
    invert_rigid,
    transform_point,
    translation_transform,
    validate_rigid_transform
)

logger = logging.getLogger(__name__)


@dataclass
class RegistrationCase:
    """단일 정합 케이스 (실행 중 불변)"""
    camera: CameraModel
    gt_cam_extrins_to_vol: np.ndarray
    anchor_wrt_vol: np.ndarray
    volume: Optional[VolumeGeometry] = None
    source_path: Optional[str] = None

    @property
    def anchor_projection(self) -> np.ndarray:
        """정답 자세에서 회전 중심의 검출기 픽셀 좌표 [u, v]"""
        vol_to_world = invert_rigid(self.gt_cam_extrins_to_vol)
        return self.camera.project(transform_point(vol_to_world, self.anchor_wrt_vol))[0]

    def to_dict(self) -> Dict[str, Any]:
        d = {
            'camera': self.camera.to_dict(),
            'gt_cam_extrins_to_vol': self.gt_cam_extrins_to_vol.tolist(),
            'anchor': self.anchor_wrt_vol.tolist()
        }
        if self.volume is not None:
            d['volume'] = {
                'size': self.volume.size.astype(int).tolist(),
                'spacing': self.volume.spacing.tolist(),
                'origin': self.volume.origin.tolist(),
                'direction': self.volume.direction.tolist()
            }
        return d


def _require(d: Dict[str, Any], key: str, where: str) -> Any:
    if not isinstance(d, dict) or key not in d or d[key] is None:
        raise ValueError(f"Missing field '{key}' in {where}")
    return d[key]


def _parse_camera(d: Dict[str, Any]) -> CameraModel:
    return CameraModel(
        intrinsic=np.asarray(_require(d, 'intrinsic', 'camera'), dtype=np.float64),
        extrinsic=np.asarray(_require(d, 'extrinsic', 'camera'), dtype=np.float64),
        num_rows=_require(d, 'num_rows', 'camera'),
        num_cols=_require(d, 'num_cols', 'camera'),
        pixel_row_spacing=float(d.get('pixel_row_spacing', 1.0)),
        pixel_col_spacing=float(d.get('pixel_col_spacing', 1.0))
    )


def _parse_volume(d: Dict[str, Any]) -> VolumeGeometry:
    return VolumeGeometry(
        size=_require(d, 'size', 'volume'),
        spacing=d.get('spacing', [1.0, 1.0, 1.0]),
        origin=d.get('origin', [0.0, 0.0, 0.0]),
        direction=d.get('direction', np.eye(3).tolist())
    )


def parse_case(
    case_dict: Dict[str, Any],
    gt_correction_mm: Optional[Sequence[float]] = None,
    source_path: Optional[str] = None
) -> RegistrationCase:
    """
    딕셔너리에서 RegistrationCase 생성

    Args:
        case_dict: 케이스 딕셔너리
        gt_correction_mm: 정답 자세 앞에 곱할 이동 보정 (mm)
        source_path: 원본 파일 경로 (로그용)

    Raises:
        ValueError: 필수 필드 누락 또는 형식 오류
    """
    if not isinstance(case_dict, dict):
        raise ValueError(f"Case data must be a mapping, got {type(case_dict).__name__}")

    camera_dict = _require(case_dict, 'camera', 'case')
    try:
        camera = _parse_camera(camera_dict)
    except TypeError as e:
        raise ValueError(f"camera: malformed field value: {e}") from e

    try:
        gt = validate_rigid_transform(
            _require(case_dict, 'gt_cam_extrins_to_vol', 'case'),
            'gt_cam_extrins_to_vol',
            tol=1e-4
        )
    except TypeError as e:
        raise ValueError(f"gt_cam_extrins_to_vol: malformed matrix: {e}") from e

    if gt_correction_mm is not None and np.any(np.asarray(gt_correction_mm) != 0):
        gt = translation_transform(gt_correction_mm) @ gt
        logger.info(f"applied ground truth correction: {list(gt_correction_mm)}")

    volume = None
    if case_dict.get('volume') is not None:
        try:
            volume = _parse_volume(case_dict['volume'])
        except TypeError as e:
            raise ValueError(f"volume: malformed field value: {e}") from e

    if case_dict.get('anchor') is not None:
        try:
            anchor = np.asarray(case_dict['anchor'], dtype=np.float64).reshape(-1)
        except (TypeError, ValueError) as e:
            raise ValueError(f"anchor: malformed vector: {e}") from e
        if anchor.shape != (3,) or not np.all(np.isfinite(anchor)):
            raise ValueError(f"anchor: expected a finite 3-vector, got {case_dict['anchor']}")
    elif volume is not None:
        anchor = volume.center()
    else:
        raise ValueError("Case must provide either 'anchor' or 'volume'")

    logger.debug(f"ground truth cam extrins to vol:\n{gt}")

    return RegistrationCase(
        camera=camera,
        gt_cam_extrins_to_vol=gt,
        anchor_wrt_vol=anchor,
        volume=volume,
        source_path=source_path
    )


def load_case(
    filepath: str,
    gt_correction_mm: Optional[Sequence[float]] = None
) -> RegistrationCase:
    """
    YAML 케이스 파일 로드

    Raises:
        FileNotFoundError: 파일 없음
        ValueError: 형식 오류
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Case file not found: {filepath}")

    logger.info(f"reading case data from {filepath}...")

    with open(path, 'r') as f:
        try:
            case_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse case file {filepath}: {e}") from e

    if case_dict is None:
        raise ValueError(f"Case file is empty: {filepath}")

    return parse_case(case_dict, gt_correction_mm=gt_correction_mm, source_path=str(path))


def save_case(case: RegistrationCase, filepath: str):
    """RegistrationCase 를 YAML 파일로 저장"""
    with open(filepath, 'w') as f:
        yaml.dump(case.to_dict(), f, default_flow_style=None)

    logger.info(f"Case saved to {filepath}")
