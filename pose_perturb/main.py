"""
main.py - pose_perturb 자세 섭동 생성 파이프라인

정답 자세 주변의 합성 카메라 자세 섭동을 생성합니다.

파이프라인:
1. 파라미터 행렬 일괄 추출 (0번 = 정답, 나머지 정규분포)
2. 샘플별 지수 사상 -> 원본 오프셋 변환 O
3. 오프셋 분해 (총 회전/이동, 오일러 XYZ + 축별 이동)
4. 회전 중심 기준 합성 -> 섭동된 카메라 extrinsic -> 볼륨 자세
5. 외부 콜백(영상 합성 등) 호출 및 결과 기록

Version: 1.0
"""

import argparse
import logging
import sys
import numpy as np
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Dict, Any

from .config.system_config import SystemConfig, load_config
from .input.data_loader import RegistrationCase, load_case
from .sampling.param_sampler import (
    PoseParamSampler,
    IndependentNormalSampler,
    create_rng,
    draw_pose_param_samples
)
from .geometry.rigid_transform import se3_params_to_transform
from .geometry.offset_decomposer import OffsetDecomposer, OffsetSummary
from .geometry.frame_centered_composer import FrameCenteredComposer
from .output.result_exporter import ResultExporter, prepare_output_dir

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_BAD_USE = 1
EXIT_BAD_INPUT = 2


@dataclass
class PerturbationSample:
    """
    단일 샘플 결과

    pose 는 섭동된 카메라 extrinsic -> 볼륨 변환입니다.
    """
    sample_idx: int
    params: np.ndarray       # [rx, ry, rz, tx, ty, tz]
    offset: np.ndarray       # 4x4 원본 오프셋
    summary: OffsetSummary
    pose: np.ndarray         # 4x4 합성 자세

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sample_idx': self.sample_idx,
            'params': self.params.tolist(),
            'offset': self.offset.tolist(),
            'summary': self.summary.to_dict(),
            'pose': self.pose.tolist()
        }


class PerturbationGenerator:
    """
    자세 섭동 생성기

    회전 중심/샌드위치 변환은 생성 시 한 번 계산하고
    샘플마다 오프셋만 바뀝니다.

    Example:
        >>> case = load_case("case.yaml")
        >>> generator = PerturbationGenerator(case, IndependentNormalSampler.from_degrees([1, 1, 1], [1, 1, 5]))
        >>> samples = generator.generate(5, create_rng(0))
        >>> print(samples[1].summary.total_rotation_deg)
    """

    def __init__(
        self,
        case: RegistrationCase,
        sampler: PoseParamSampler,
        decomposer: Optional[OffsetDecomposer] = None
    ):
        """
        Args:
            case: 정합 케이스 (카메라, 정답 자세, 회전 중심)
            sampler: 파라미터 샘플러
            decomposer: 오프셋 분해기 (None 이면 내재적 XYZ)
        """
        self.case = case
        self.sampler = sampler
        self.decomposer = decomposer or OffsetDecomposer()

        self.composer = FrameCenteredComposer(
            gt_cam_extrins_to_vol=case.gt_cam_extrins_to_vol,
            cam_extrinsic=case.camera.extrinsic,
            anchor_wrt_vol=case.anchor_wrt_vol,
            cam_extrinsic_inv=case.camera.extrinsic_inv
        )

        self._check_anchor_in_view()

        logger.info(f"PerturbationGenerator initialized with {sampler!r}")

    def _check_anchor_in_view(self):
        """회전 중심이 검출기 밖으로 투영되면 경고"""
        uv = self.case.anchor_projection
        if not self.case.camera.contains_pixel(uv):
            logger.warning(
                f"Center of rotation projects outside the detector: "
                f"uv=[{uv[0]:.1f}, {uv[1]:.1f}], "
                f"detector={self.case.camera.num_cols}x{self.case.camera.num_rows}"
            )
        else:
            logger.debug(f"center of rot projects to uv=[{uv[0]:.1f}, {uv[1]:.1f}]")

    def process_sample(self, sample_idx: int, params: np.ndarray) -> PerturbationSample:
        """
        단일 파라미터 벡터 처리

        Args:
            sample_idx: 샘플 인덱스
            params: 6차원 파라미터

        Returns:
            PerturbationSample
        """
        offset = se3_params_to_transform(params)
        summary = self.decomposer.decompose(offset)
        pose = self.composer.compose(offset)

        return PerturbationSample(
            sample_idx=sample_idx,
            params=np.asarray(params, dtype=np.float64).copy(),
            offset=offset,
            summary=summary,
            pose=pose
        )

    def generate(
        self,
        num_samples: int,
        rng: np.random.Generator,
        on_sample: Optional[Callable[[PerturbationSample], None]] = None,
        exporter: Optional[ResultExporter] = None
    ) -> List[PerturbationSample]:
        """
        섭동 샘플 배치 생성

        파라미터 행렬 전체를 먼저 추출한 뒤 인덱스 순서대로 처리합니다.

        Args:
            num_samples: 샘플 수 (>= 1)
            rng: 난수 생성기
            on_sample: 샘플별 외부 콜백 (예: DRR/엣지 영상 합성)
            exporter: 결과 기록기

        Returns:
            샘플 리스트 (0번 = 정답 자세)
        """
        params = draw_pose_param_samples(self.sampler, num_samples, rng)

        samples = []
        for sample_idx in range(num_samples):
            logger.info(f"processing sample index: {sample_idx}")

            sample = self.process_sample(sample_idx, params[sample_idx])

            logger.debug(
                f"  offset: rot={sample.summary.total_rotation_deg:.3f} deg, "
                f"trans={sample.summary.total_translation_mm:.3f} mm"
            )

            if on_sample is not None:
                on_sample(sample)

            if exporter is not None:
                exporter.add_sample(
                    sample_idx,
                    sample.params,
                    sample.summary,
                    sample.pose,
                    offset=sample.offset
                )

            samples.append(sample)

        return samples

    @property
    def ground_truth(self) -> np.ndarray:
        return self.composer.ground_truth

    @classmethod
    def from_config(cls, config: SystemConfig, case: RegistrationCase) -> 'PerturbationGenerator':
        """
        설정에서 생성기 생성

        Args:
            config: SystemConfig
            case: 정합 케이스
        """
        sampler = IndependentNormalSampler(
            config.sampling.rot_std_devs_rad,
            config.sampling.trans_std_devs_mm
        )
        return cls(case, sampler)


def run_perturbation(
    config: SystemConfig,
    case: Optional[RegistrationCase] = None,
    on_sample: Optional[Callable[[PerturbationSample], None]] = None
) -> List[PerturbationSample]:
    """
    설정 기반 전체 실행 (편의 함수)

    Args:
        config: 시스템 설정
        case: 정합 케이스 (None 이면 config.input.case_path 에서 로드)
        on_sample: 샘플별 외부 콜백

    Returns:
        샘플 리스트
    """
    config.sampling.validate()

    if case is None:
        if not config.input.case_path:
            raise ValueError("No case provided and config.input.case_path is not set")
        case = load_case(config.input.case_path, gt_correction_mm=config.input.gt_correction_mm)

    rng = create_rng(config.sampling.rng_seed)
    generator = PerturbationGenerator.from_config(config, case)

    exporter = None
    if config.output.write_csv:
        exporter = ResultExporter(config.output.output_dir, write_offsets=config.output.write_offsets)

    samples = generator.generate(config.sampling.num_samples, rng, on_sample=on_sample, exporter=exporter)

    if exporter is not None:
        exporter.save()
        logger.info(f"Summary: {exporter.get_summary()}")

    return samples


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """로깅 설정"""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='pose_perturb: 정답 자세 주변 합성 카메라 자세 섭동 생성',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
    # 시드 고정, 10개 샘플
    pose_perturb case.yaml 10 ./output --rng-seed 42

    # 표준편차 지정
    pose_perturb case.yaml 100 ./output --rot-std-devs-deg 2 2 2 --trans-std-devs-mm 1 1 10
'''
    )
    parser.add_argument('case', type=str,
                        help='정합 케이스 파일 경로 (YAML)')
    parser.add_argument('num_samples', type=int,
                        help='샘플 수 (0번 = 정답 자세)')
    parser.add_argument('output_dir', type=str,
                        help='출력 디렉토리')
    parser.add_argument('--config', type=str, default=None,
                        help='설정 파일 경로 (YAML)')
    parser.add_argument('--rng-seed', type=int, default=None,
                        help='난수 시드 (생략 시 시스템 엔트로피)')
    parser.add_argument('--rot-std-devs-deg', type=float, nargs=3, default=None,
                        metavar=('X', 'Y', 'Z'),
                        help='회전 표준편차 (도)')
    parser.add_argument('--trans-std-devs-mm', type=float, nargs=3, default=None,
                        metavar=('X', 'Y', 'Z'),
                        help='이동 표준편차 (mm)')
    parser.add_argument('--write-offsets', action='store_true',
                        help='원본 오프셋 변환 CSV 도 저장')
    parser.add_argument('--log-to-file', action='store_true',
                        help='출력 디렉토리에 로그 파일 저장')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='상세 로그 출력')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """메인 실행"""
    parser = build_parser()

    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # --help 는 0, 인자 오류는 잘못된 사용
        return EXIT_SUCCESS if e.code == 0 else EXIT_BAD_USE

    # 설정 로드 후 명령행 인자로 덮어쓰기
    try:
        config = load_config(args.config) if args.config else SystemConfig()
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_BAD_USE

    config.input.case_path = args.case
    config.sampling.num_samples = args.num_samples
    config.output.output_dir = args.output_dir
    if args.rng_seed is not None:
        config.sampling.rng_seed = args.rng_seed
    if args.rot_std_devs_deg is not None:
        config.sampling.rot_std_devs_deg = list(args.rot_std_devs_deg)
    if args.trans_std_devs_mm is not None:
        config.sampling.trans_std_devs_mm = list(args.trans_std_devs_mm)
    if args.write_offsets:
        config.output.write_offsets = True
    if args.log_to_file:
        config.output.log_to_file = True
    if args.verbose:
        config.output.log_level = "DEBUG"

    try:
        config.sampling.validate()
        out_dir = prepare_output_dir(config.output.output_dir)
    except (ValueError, NotADirectoryError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_BAD_USE

    log_file = str(out_dir / 'pose_perturb.log') if config.output.log_to_file else None
    setup_logging(config.output.log_level, log_file)

    try:
        case = load_case(config.input.case_path, gt_correction_mm=config.input.gt_correction_mm)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Failed to read case data: {e}")
        return EXIT_BAD_INPUT

    samples = run_perturbation(config, case=case)

    logger.info(f"Generated {len(samples)} samples in {Path(config.output.output_dir)}")
    logger.info("exiting...")

    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
