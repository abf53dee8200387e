"""
camera 모듈 - 카메라 모델 및 볼륨 기하
"""

from .camera_model import CameraModel, VolumeGeometry

__all__ = ['CameraModel', 'VolumeGeometry']
