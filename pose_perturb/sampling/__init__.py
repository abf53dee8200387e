"""
sampling 모듈 - 자세 파라미터 샘플링
"""

from .param_sampler import (
    PoseParamSampler,
    IndependentNormalSampler,
    create_rng,
    draw_pose_param_samples
)

__all__ = [
    'PoseParamSampler',
    'IndependentNormalSampler',
    'create_rng',
    'draw_pose_param_samples',
]
