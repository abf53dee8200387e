"""
config 모듈 - 설정 관리
"""

from .system_config import SystemConfig, SamplingConfig, InputConfig, OutputConfig, load_config

__all__ = ['SystemConfig', 'SamplingConfig', 'InputConfig', 'OutputConfig', 'load_config']
