"""
frame_centered_composer.py - 회전 중심 기준 오프셋 합성

원점 기준으로 정의된 오프셋 변환 O 를, 카메라 투영 좌표계에서 본
볼륨 중심(회전 중심)을 기준으로 하는 섭동으로 바꾼 뒤
정답(ground truth) 자세와 합성합니다.

    c_cam           = E · G^-1 · c_vol
    shift_to        = Trans(-c_cam)
    shift_from      = Trans(+c_cam)
    extrins_to_ctr  = shift_to · E
    ctr_to_vol      = G · E^-1 · shift_from
    perturbed       = ctr_to_vol · O · extrins_to_ctr

    G: 카메라 extrinsic -> 볼륨 정답 변환
    E: 카메라 extrinsic (월드/볼륨 -> 카메라 투영 좌표계)

O = I 이면 결과는 G 와 같습니다.

Version: 1.0
"""

import numpy as np
from typing import Optional
import logging

from .rigid_transform import (
    ArrayLike,
    invert_rigid,
    transform_point,
    translation_transform,
    validate_rigid_transform
)

logger = logging.getLogger(__name__)


class FrameCenteredComposer:
    """
    회전 중심 기준 자세 합성기

    회전 중심과 앞/뒤 샌드위치 변환은 생성 시 한 번만 계산되고,
    샘플마다 오프셋 O 만 바뀝니다.

    Example:
        >>> composer = FrameCenteredComposer(gt_cam_to_vol, cam.extrinsic, anchor)
        >>> pose = composer.compose(offset_4x4)
    """

    def __init__(
        self,
        gt_cam_extrins_to_vol: ArrayLike,
        cam_extrinsic: ArrayLike,
        anchor_wrt_vol: ArrayLike,
        cam_extrinsic_inv: Optional[ArrayLike] = None
    ):
        """
        Args:
            gt_cam_extrins_to_vol: 정답 카메라 extrinsic -> 볼륨 변환 (4x4)
            cam_extrinsic: 카메라 extrinsic (4x4)
            anchor_wrt_vol: 볼륨 좌표계의 회전 중심 (3,)
            cam_extrinsic_inv: extrinsic 역변환 (None 이면 계산)
        """
        self.gt_cam_extrins_to_vol = validate_rigid_transform(
            gt_cam_extrins_to_vol, "gt_cam_extrins_to_vol", tol=1e-4
        )
        self.cam_extrinsic = validate_rigid_transform(cam_extrinsic, "cam_extrinsic", tol=1e-4)

        if cam_extrinsic_inv is None:
            self.cam_extrinsic_inv = invert_rigid(self.cam_extrinsic)
        else:
            self.cam_extrinsic_inv = validate_rigid_transform(
                cam_extrinsic_inv, "cam_extrinsic_inv", tol=1e-4
            )

        anchor = np.asarray(anchor_wrt_vol, dtype=np.float64).reshape(-1)
        if anchor.shape != (3,) or not np.all(np.isfinite(anchor)):
            raise ValueError(f"anchor point must be a finite 3-vector, got {anchor_wrt_vol}")
        self.anchor_wrt_vol = anchor

        # 1. 카메라 투영 좌표계에서의 회전 중심
        self.anchor_wrt_cam = transform_point(
            self.cam_extrinsic @ invert_rigid(self.gt_cam_extrins_to_vol),
            self.anchor_wrt_vol
        )

        # 2. 순수 이동 변환
        self.shift_to_anchor = translation_transform(-self.anchor_wrt_cam)
        self.shift_from_anchor = translation_transform(self.anchor_wrt_cam)

        # 3, 4. 샌드위치 변환
        self.extrins_to_anchor = self.shift_to_anchor @ self.cam_extrinsic
        self.anchor_to_vol = (
            self.gt_cam_extrins_to_vol @ self.cam_extrinsic_inv @ self.shift_from_anchor
        )

        logger.debug(f"center of rot wrt vol: {self.anchor_wrt_vol}")
        logger.debug(f"center of rot wrt cam proj frame: {self.anchor_wrt_cam}")

    def compose(self, offset: np.ndarray) -> np.ndarray:
        """
        오프셋을 정답 자세와 합성

        Args:
            offset: 원점 기준 4x4 오프셋 변환 O

        Returns:
            섭동된 카메라 extrinsic -> 볼륨 변환 (4x4)
        """
        if offset.shape != (4, 4):
            raise ValueError(f"Expected 4x4 offset, got {offset.shape}")
        return self.anchor_to_vol @ offset @ self.extrins_to_anchor

    @property
    def ground_truth(self) -> np.ndarray:
        """정답 카메라 extrinsic -> 볼륨 변환 (복사본)"""
        return self.gt_cam_extrins_to_vol.copy()
