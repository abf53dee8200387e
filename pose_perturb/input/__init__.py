"""
input 모듈 - 정합 케이스 데이터 입력
"""

from .data_loader import RegistrationCase, load_case, parse_case, save_case

__all__ = ['RegistrationCase', 'load_case', 'parse_case', 'save_case']
