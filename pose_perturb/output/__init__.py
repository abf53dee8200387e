"""
output 모듈 - 결과 내보내기
"""

from .result_exporter import ResultExporter, prepare_output_dir

__all__ = ['ResultExporter', 'prepare_output_dir']
