"""
Input inspection run before any record is processed.
"""

from .detection import (
    InputDetectionResult,
    detect_format,
    detect_input,
    detect_quality_offset,
)

__all__ = [
    'detect_format',
    'detect_quality_offset',
    'detect_input',
    'InputDetectionResult',
]
