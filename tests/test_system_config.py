#!/usr/bin/env python3
"""
test_system_config.py - 설정 관리 단위 테스트
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parents[1]))

import numpy as np
import pytest

from pose_perturb.config.system_config import (
    SystemConfig,
    SamplingConfig,
    load_config
)


class TestSamplingConfig:
    """SamplingConfig 테스트"""

    def test_defaults(self):
        cfg = SamplingConfig()
        assert cfg.num_samples == 1
        assert cfg.rot_std_devs_deg == [1.0, 1.0, 1.0]
        assert cfg.trans_std_devs_mm == [1.0, 1.0, 5.0]
        assert cfg.rng_seed is None
        cfg.validate()

    def test_rot_std_devs_rad(self):
        cfg = SamplingConfig(rot_std_devs_deg=[180.0, 90.0, 0.0])
        np.testing.assert_allclose(cfg.rot_std_devs_rad, [np.pi, np.pi / 2, 0.0])

    @pytest.mark.parametrize("kwargs", [
        {'num_samples': 0},
        {'num_samples': -3},
        {'rot_std_devs_deg': [1.0, 1.0]},
        {'trans_std_devs_mm': [1.0, -1.0, 1.0]},
        {'rng_seed': -5},
        {'rot_std_devs_deg': [float('nan'), 1.0, 1.0]},
        {'trans_std_devs_mm': [1.0, float('inf'), 1.0]},
        {'num_samples': None},
        {'rng_seed': 'abc'},
    ])
    def test_validate_rejects(self, kwargs):
        with pytest.raises(ValueError):
            SamplingConfig(**kwargs).validate()


class TestSystemConfig:
    """SystemConfig 저장/로드 테스트"""

    def test_save_load_roundtrip(self, tmp_path):
        config = SystemConfig()
        config.sampling.num_samples = 25
        config.sampling.rng_seed = 42
        config.sampling.trans_std_devs_mm = [2.0, 2.0, 10.0]
        config.input.case_path = "case.yaml"
        config.input.gt_correction_mm = [-0.5, -0.5, -0.5]
        config.output.output_dir = "out"
        config.output.write_offsets = True

        path = tmp_path / "config.yaml"
        config.save(str(path))
        loaded = load_config(str(path))

        assert loaded.to_dict() == config.to_dict()

    def test_missing_file_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "missing.yaml"))
        assert config.to_dict() == SystemConfig().to_dict()

    def test_empty_file_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)).to_dict() == SystemConfig().to_dict()

    def test_partial_dict(self):
        config = SystemConfig.from_dict({'sampling': {'num_samples': 7}})
        assert config.sampling.num_samples == 7
        assert config.output.output_dir == "output"

    def test_unknown_key_raises(self):
        with pytest.raises(ValueError, match='num_sample'):
            SystemConfig.from_dict({'sampling': {'num_sample': 1}})

    def test_unknown_key_in_file_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("output:\n  out_dir: elsewhere\n")
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_malformed_file_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("sampling: [1, 2\n")
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_not_a_mapping(self):
        with pytest.raises(ValueError):
            SystemConfig.from_dict([1, 2, 3])


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
