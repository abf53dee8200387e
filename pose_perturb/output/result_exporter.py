"""
result_exporter.py - 샘플 결과 CSV 내보내기

샘플별 결과를 세 개의 CSV 스트림으로 저장합니다 (행 i = 샘플 i):
1. offset_amounts.csv          : 분해된 오프셋 8개 값
2. se3_lie_params.csv          : 원본 6차원 파라미터
3. cam_extrins_to_vol_poses.csv: 합성된 4x4 자세 (행 우선 16개 값)

선택적으로 원본 오프셋 변환도 저장합니다 (offset_xforms.csv).

Version: 1.0
"""

import numpy as np
import pandas as pd
from pathlib import Path
from typing import Dict, List, Optional, Any
import logging

from ..geometry.offset_decomposer import OffsetSummary
from ..geometry.rigid_transform import flatten_row_major

logger = logging.getLogger(__name__)

OFFSET_COLUMNS = [
    'total rotation (deg)', 'total trans. (mm)',
    'rotation X (deg)', 'rotation Y (deg)', 'rotation Z (deg)',
    'translation X (mm)', 'translation Y (mm)', 'translation Z (mm)'
]

PARAM_COLUMNS = [f'se3-dim-{i}' for i in range(1, 7)]

POSE_COLUMNS = [f'row{r}_col{c}' for r in range(1, 5) for c in range(1, 5)]

OFFSET_FILENAME = 'offset_amounts.csv'
PARAM_FILENAME = 'se3_lie_params.csv'
POSE_FILENAME = 'cam_extrins_to_vol_poses.csv'
OFFSET_XFORM_FILENAME = 'offset_xforms.csv'


def prepare_output_dir(output_dir: str) -> Path:
    """
    출력 디렉토리 준비 (없으면 생성)

    Raises:
        NotADirectoryError: 경로가 존재하지만 디렉토리가 아닌 경우
    """
    path = Path(output_dir)
    if path.exists() and not path.is_dir():
        raise NotADirectoryError(f"output directory path exists, but is not a directory: {output_dir}")

    if not path.exists():
        logger.info(f"creating output directory {output_dir}...")
        path.mkdir(parents=True, exist_ok=True)

    return path


class ResultExporter:
    """
    샘플 결과 수집 및 CSV 저장

    Example:
        >>> exporter = ResultExporter("output")
        >>> exporter.add_sample(0, params, summary, pose)
        >>> paths = exporter.save()
    """

    def __init__(self, output_dir: str = "output", write_offsets: bool = False):
        """
        Args:
            output_dir: 출력 디렉토리
            write_offsets: 원본 오프셋 변환 스트림도 저장
        """
        self.output_dir = Path(output_dir)
        self.write_offsets = write_offsets

        self._offset_rows: List[List[float]] = []
        self._param_rows: List[List[float]] = []
        self._pose_rows: List[List[float]] = []
        self._offset_xform_rows: List[List[float]] = []

    def add_sample(
        self,
        sample_idx: int,
        params: np.ndarray,
        summary: OffsetSummary,
        pose: np.ndarray,
        offset: Optional[np.ndarray] = None
    ):
        """
        샘플 결과 추가

        Args:
            sample_idx: 샘플 인덱스 (0부터 순서대로)
            params: 6차원 파라미터
            summary: 오프셋 분해 결과
            pose: 합성된 4x4 자세
            offset: 원본 4x4 오프셋 (write_offsets 일 때 필요)

        Raises:
            ValueError: 인덱스 순서 위반 또는 형식 오류
        """
        if sample_idx != len(self._param_rows):
            raise ValueError(
                f"Samples must be added in order: expected index {len(self._param_rows)}, got {sample_idx}"
            )

        params = np.asarray(params, dtype=np.float64).reshape(-1)
        if params.shape != (6,):
            raise ValueError(f"Expected 6 pose parameters, got {params.size}")
        if np.asarray(pose).shape != (4, 4):
            raise ValueError(f"Expected 4x4 pose, got {np.asarray(pose).shape}")

        if self.write_offsets:
            if offset is None:
                raise ValueError("offset transform required when write_offsets is enabled")
            self._offset_xform_rows.append(flatten_row_major(offset).tolist())

        self._offset_rows.append(summary.to_row())
        self._param_rows.append(params.tolist())
        self._pose_rows.append(flatten_row_major(pose).tolist())

    def __len__(self) -> int:
        return len(self._param_rows)

    def to_dataframes(self) -> Dict[str, pd.DataFrame]:
        """스트림별 DataFrame"""
        frames = {
            OFFSET_FILENAME: pd.DataFrame(self._offset_rows, columns=OFFSET_COLUMNS),
            PARAM_FILENAME: pd.DataFrame(self._param_rows, columns=PARAM_COLUMNS),
            POSE_FILENAME: pd.DataFrame(self._pose_rows, columns=POSE_COLUMNS)
        }
        if self.write_offsets:
            frames[OFFSET_XFORM_FILENAME] = pd.DataFrame(self._offset_xform_rows, columns=POSE_COLUMNS)
        return frames

    def save(self) -> Dict[str, Path]:
        """
        CSV 파일 저장

        Returns:
            {파일명: 경로}
        """
        out_dir = prepare_output_dir(str(self.output_dir))

        paths = {}
        for filename, df in self.to_dataframes().items():
            filepath = out_dir / filename
            logger.info(f"writing {filename} ({len(df)} rows)...")
            df.to_csv(filepath, index=False, float_format='%.17g')
            paths[filename] = filepath

        return paths

    def get_summary(self) -> Dict[str, Any]:
        """회전/이동 크기 요약 통계"""
        if not self._offset_rows:
            return {'num_samples': 0}

        offsets = np.asarray(self._offset_rows)
        return {
            'num_samples': len(self._offset_rows),
            'rotation_deg_mean': float(np.mean(offsets[:, 0])),
            'rotation_deg_max': float(np.max(offsets[:, 0])),
            'translation_mm_mean': float(np.mean(offsets[:, 1])),
            'translation_mm_max': float(np.max(offsets[:, 1]))
        }

    def clear(self):
        """수집된 결과 초기화"""
        self._offset_rows.clear()
        self._param_rows.clear()
        self._pose_rows.clear()
        self._offset_xform_rows.clear()
