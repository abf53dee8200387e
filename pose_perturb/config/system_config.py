"""
system_config.py - 시스템 설정 관리

pose_perturb 의 샘플링/입력/출력 설정을 통합 관리합니다.

Version: 1.0
"""

import yaml
import numpy as np
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Optional
import logging

logger = logging.getLogger(__name__)


@dataclass
class SamplingConfig:
    """샘플링 설정"""
    num_samples: int = 1

    # 축별 표준편차
    rot_std_devs_deg: List[float] = field(default_factory=lambda: [1.0, 1.0, 1.0])
    trans_std_devs_mm: List[float] = field(default_factory=lambda: [1.0, 1.0, 5.0])

    # None 이면 시스템 엔트로피로 시드
    rng_seed: Optional[int] = None

    @property
    def rot_std_devs_rad(self) -> np.ndarray:
        """회전 표준편차 (라디안)"""
        return np.deg2rad(np.asarray(self.rot_std_devs_deg, dtype=np.float64))

    def validate(self):
        """
        샘플링 전 설정 검증

        Raises:
            ValueError: 샘플 수 < 1, 표준편차 개수 오류, 음수 또는 NaN/inf 표준편차, 음수 시드
        """
        if not isinstance(self.num_samples, (int, np.integer)) or self.num_samples < 1:
            raise ValueError(f"number of samples must be positive, got {self.num_samples}")

        for name, values in (('rot_std_devs_deg', self.rot_std_devs_deg),
                             ('trans_std_devs_mm', self.trans_std_devs_mm)):
            arr = np.asarray(values, dtype=np.float64)
            if arr.shape != (3,):
                raise ValueError(f"{name}: expected 3 values, got {values}")
            if not np.all(np.isfinite(arr)) or np.any(arr < 0):
                raise ValueError(f"{name}: std-devs must be finite and non-negative, got {values}")

        if self.rng_seed is not None and (not isinstance(self.rng_seed, (int, np.integer)) or self.rng_seed < 0):
            raise ValueError(f"rng_seed must be a non-negative integer, got {self.rng_seed}")


@dataclass
class InputConfig:
    """입력 데이터 설정"""
    case_path: Optional[str] = None

    # 정답 자세 앞에 곱하는 이동 보정 (mm)
    gt_correction_mm: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])


@dataclass
class OutputConfig:
    """출력 설정"""
    output_dir: str = "output"
    write_csv: bool = True
    write_offsets: bool = False

    # 로깅
    log_level: str = "INFO"
    log_to_file: bool = False


@dataclass
class SystemConfig:
    """pose_perturb 전체 설정"""
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    input: InputConfig = field(default_factory=InputConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sampling': asdict(self.sampling),
            'input': asdict(self.input),
            'output': asdict(self.output)
        }

    def save(self, filepath: str):
        """설정을 YAML 파일로 저장"""
        with open(filepath, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

        logger.info(f"Config saved to {filepath}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'SystemConfig':
        """
        딕셔너리에서 설정 생성

        Raises:
            ValueError: 알 수 없는 키 또는 섹션 형식 오류
        """
        if not isinstance(d, dict):
            raise ValueError(f"Config must be a mapping, got {type(d).__name__}")

        try:
            return cls(
                sampling=SamplingConfig(**(d.get('sampling') or {})),
                input=InputConfig(**(d.get('input') or {})),
                output=OutputConfig(**(d.get('output') or {}))
            )
        except TypeError as e:
            raise ValueError(f"Invalid config: {e}") from e


def load_config(filepath: str) -> SystemConfig:
    """
    YAML 파일에서 설정 로드

    Args:
        filepath: 설정 파일 경로

    Returns:
        SystemConfig: 로드된 설정 (파일이 없거나 비어 있으면 기본값)

    Raises:
        ValueError: YAML 파싱 실패 또는 알 수 없는 설정 키
    """
    path = Path(filepath)

    if not path.exists():
        logger.warning(f"Config file not found: {filepath}, using defaults")
        return SystemConfig()

    with open(path, 'r') as f:
        try:
            config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse config file {filepath}: {e}") from e

    if config_dict is None:
        return SystemConfig()

    return SystemConfig.from_dict(config_dict)
