"""
Unit conversions and percentage-change transforms for forecast series.
"""

from macropost.transforms.series import (
    percapita, nominal_to_real, nominal_to_realpercapita, annual_to_quarter,
    diff_log, q2q_pct_change, real_q2q_pct_change, hp_adjust
)
from macropost.transforms.table import (
    FILTERED_POPULATION_GROWTH, UNFILTERED_POPULATION_GROWTH,
    resolve_mnemonic, percapita_column, nominal_to_real_column,
    nominal_to_realpercapita_column, real_q2q_pct_change_column,
    hp_adjust_column
)

__all__ = [
    'percapita',
    'nominal_to_real',
    'nominal_to_realpercapita',
    'annual_to_quarter',
    'diff_log',
    'q2q_pct_change',
    'real_q2q_pct_change',
    'hp_adjust',
    'FILTERED_POPULATION_GROWTH',
    'UNFILTERED_POPULATION_GROWTH',
    'resolve_mnemonic',
    'percapita_column',
    'nominal_to_real_column',
    'nominal_to_realpercapita_column',
    'real_q2q_pct_change_column',
    'hp_adjust_column',
]
