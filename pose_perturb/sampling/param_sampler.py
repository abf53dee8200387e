"""
param_sampler.py - 자세 파라미터 샘플러

6차원 자세 파라미터 [rx, ry, rz, tx, ty, tz] 를 확률 분포에서 추출합니다.
난수 생성기(numpy Generator)는 호출자가 명시적으로 넘기며,
샘플러는 내부에 전역 난수 상태를 두지 않습니다.

배치 규칙:
- 0번 샘플은 항상 영 벡터 (섭동 없음 = 정답 자세), 추출하지 않음
- 1..n-1 번 샘플만 분포에서 추출
- 전체 파라미터 행렬은 후속 처리 전에 한 번에 추출 (시드 고정 시 재현성)

Version: 1.0
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import Optional, Sequence
import logging

logger = logging.getLogger(__name__)

NUM_POSE_PARAMS = 6


def create_rng(seed: Optional[int] = None) -> np.random.Generator:
    """
    난수 생성기 생성

    Args:
        seed: 부호 없는 정수 시드 (None 이면 시스템 엔트로피 사용)
    """
    if seed is None:
        logger.info("seeding RNG engine with system entropy...")
        return np.random.default_rng()

    if seed < 0:
        raise ValueError(f"RNG seed must be non-negative, got {seed}")

    logger.info(f"using specified seed for RNG: {seed}")
    return np.random.default_rng(seed)


class PoseParamSampler(ABC):
    """자세 파라미터 샘플링 인터페이스"""

    @abstractmethod
    def sample_pose_params(self, num_samples: int, rng: np.random.Generator) -> np.ndarray:
        """
        Args:
            num_samples: 샘플 수
            rng: 난수 생성기

        Returns:
            (num_samples, 6) 파라미터 행렬, 행 = 샘플
        """


class IndependentNormalSampler(PoseParamSampler):
    """
    축별 독립 영평균 정규분포 샘플러

    Example:
        >>> sampler = IndependentNormalSampler.from_degrees([1, 1, 1], [1, 1, 5])
        >>> params = sampler.sample_pose_params(10, np.random.default_rng(0))
    """

    def __init__(
        self,
        rot_std_devs_rad: Sequence[float],
        trans_std_devs: Sequence[float]
    ):
        """
        Args:
            rot_std_devs_rad: X/Y/Z 회전 표준편차 (라디안)
            trans_std_devs: X/Y/Z 이동 표준편차 (mm)
        """
        rot = np.asarray(rot_std_devs_rad, dtype=np.float64).reshape(-1)
        trans = np.asarray(trans_std_devs, dtype=np.float64).reshape(-1)

        if rot.shape != (3,) or trans.shape != (3,):
            raise ValueError(
                f"Expected 3 rotation and 3 translation std-devs, got {rot.size} and {trans.size}"
            )

        std_devs = np.concatenate([rot, trans])
        if np.any(std_devs < 0) or not np.all(np.isfinite(std_devs)):
            raise ValueError(f"Std-devs must be finite and non-negative, got {std_devs}")

        self.std_devs = std_devs
        self.mean = np.zeros(NUM_POSE_PARAMS)

    @classmethod
    def from_degrees(
        cls,
        rot_std_devs_deg: Sequence[float],
        trans_std_devs: Sequence[float]
    ) -> 'IndependentNormalSampler':
        """회전 표준편차를 도 단위로 받아 생성"""
        return cls(np.deg2rad(np.asarray(rot_std_devs_deg, dtype=np.float64)), trans_std_devs)

    def sample_pose_params(self, num_samples: int, rng: np.random.Generator) -> np.ndarray:
        if num_samples < 0:
            raise ValueError(f"num_samples must be non-negative, got {num_samples}")
        return rng.normal(loc=self.mean, scale=self.std_devs, size=(num_samples, NUM_POSE_PARAMS))

    def __repr__(self) -> str:
        rot_deg = np.rad2deg(self.std_devs[:3])
        return (
            f"IndependentNormalSampler(rot_deg={np.round(rot_deg, 4).tolist()}, "
            f"trans={np.round(self.std_devs[3:], 4).tolist()})"
        )


def draw_pose_param_samples(
    sampler: PoseParamSampler,
    num_samples: int,
    rng: np.random.Generator
) -> np.ndarray:
    """
    정답 자세를 0번으로 하는 파라미터 배치 추출

    Args:
        sampler: 파라미터 샘플러
        num_samples: 전체 샘플 수 (>= 1)
        rng: 난수 생성기

    Returns:
        (num_samples, 6) 행렬, 0번 행은 영 벡터

    Raises:
        ValueError: num_samples < 1
    """
    if num_samples < 1:
        raise ValueError(f"number of samples must be positive, got {num_samples}")

    params = np.zeros((num_samples, NUM_POSE_PARAMS))

    # 첫 샘플은 항상 정답 자세
    logger.debug("setting first sample to zero...")

    if num_samples > 1:
        logger.info(f"sampling remaining {num_samples - 1} pose parameters...")
        params[1:] = sampler.sample_pose_params(num_samples - 1, rng)

    return params
