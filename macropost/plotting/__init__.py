"""
Charts of scenario forecasts in deviations from baseline.
"""

from macropost.plotting.scenario import (
    DEVIATION_SUFFIX, ScenarioPlots, select_forecast_product, deviation_ylabel, detexify,
    scenario_filename, plot_history_and_forecast, plot_scenario,
    plot_scenario_variable
)

__all__ = [
    'DEVIATION_SUFFIX',
    'ScenarioPlots',
    'select_forecast_product',
    'deviation_ylabel',
    'detexify',
    'scenario_filename',
    'plot_history_and_forecast',
    'plot_scenario',
    'plot_scenario_variable',
]
