"""
pose_perturb - 2D/3D 영상 정합용 카메라 자세 섭동 생성기

주요 특징:
- 축별 독립 정규분포 자세 파라미터 샘플링 (0번 = 정답 자세)
- 축-각 지수 사상으로 강체 오프셋 생성
- 볼륨 중심 기준 오프셋 합성
- 오프셋 분해 (총 회전/이동, 오일러 XYZ + 축별 이동)

Version: 1.0
"""

__version__ = "1.0.0"

from .geometry.rigid_transform import (
    se3_params_to_transform,
    rotation_from_axis_angle,
    invert_rigid,
    is_rigid_transform
)

from .geometry.offset_decomposer import (
    OffsetDecomposer,
    OffsetSummary,
    EulerAngles,
    decompose_offset
)

from .geometry.frame_centered_composer import FrameCenteredComposer

from .sampling.param_sampler import (
    PoseParamSampler,
    IndependentNormalSampler,
    create_rng,
    draw_pose_param_samples
)

from .camera.camera_model import CameraModel, VolumeGeometry
from .input.data_loader import RegistrationCase, load_case
from .output.result_exporter import ResultExporter
from .main import PerturbationGenerator, PerturbationSample, run_perturbation

__all__ = [
    # Geometry
    'se3_params_to_transform',
    'rotation_from_axis_angle',
    'invert_rigid',
    'is_rigid_transform',
    'OffsetDecomposer',
    'OffsetSummary',
    'EulerAngles',
    'decompose_offset',
    'FrameCenteredComposer',
    # Sampling
    'PoseParamSampler',
    'IndependentNormalSampler',
    'create_rng',
    'draw_pose_param_samples',
    # Camera / Input / Output
    'CameraModel',
    'VolumeGeometry',
    'RegistrationCase',
    'load_case',
    'ResultExporter',
    # Pipeline
    'PerturbationGenerator',
    'PerturbationSample',
    'run_perturbation',
]
