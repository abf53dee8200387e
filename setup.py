#!/usr/bin/env python3
"""
pose_perturb Setup Script
"""

from setuptools import setup, find_packages

setup(
    name='pose_perturb',
    version='1.0.0',
    description='Synthetic camera pose perturbation generator for 2D/3D registration',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.8',
    install_requires=[
        'numpy>=1.20.0',
        'scipy>=1.7.0',
        'opencv-python>=4.5.0',
        'pyyaml>=5.4.0',
        'pandas>=1.3.0',
    ],
    extras_require={
        'dev': [
            'pytest>=6.0.0',
            'pytest-cov>=2.0.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'pose_perturb=pose_perturb.main:main',
        ],
    },
)
