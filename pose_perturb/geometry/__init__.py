"""
geometry 모듈 - 강체 변환, 오프셋 분해 및 합성

주요 기능:
- 축-각 지수 사상 (Rodrigues 공식)
- 오프셋 분해 (총 회전 각도, 이동 크기, 오일러 XYZ)
- 볼륨 중심 기준 오프셋 합성
"""

from .rigid_transform import (
    se3_params_to_transform,
    rotation_from_axis_angle,
    invert_rigid,
    translation_transform,
    transform_point,
    is_rigid_transform,
    validate_rigid_transform,
    flatten_row_major
)

from .offset_decomposer import (
    OffsetDecomposer,
    OffsetSummary,
    EulerAngles,
    compute_rot_angle_trans_mag,
    decompose_offset
)

from .frame_centered_composer import FrameCenteredComposer

__all__ = [
    'se3_params_to_transform',
    'rotation_from_axis_angle',
    'invert_rigid',
    'translation_transform',
    'transform_point',
    'is_rigid_transform',
    'validate_rigid_transform',
    'flatten_row_major',
    'OffsetDecomposer',
    'OffsetSummary',
    'EulerAngles',
    'compute_rot_angle_trans_mag',
    'decompose_offset',
    'FrameCenteredComposer',
]
