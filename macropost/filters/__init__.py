"""
Trend/cycle decomposition filters.
"""

from macropost.filters.hp import (
    DecompositionResult, HPFilter, hp_filter, hp_filter_frame, penalty_matrix,
    trend_roughness
)

__all__ = [
    'DecompositionResult',
    'HPFilter',
    'hp_filter',
    'hp_filter_frame',
    'penalty_matrix',
    'trend_roughness',
]
