# macropost/plotting/scenario.py
"""
Scenario Deviation Plots

Plots alternative-scenario forecasts expressed as deviations from the
baseline forecast. The forecasts themselves are produced elsewhere and are
passed in as a DataFrame with one column per variable; this module chooses
the forecast product, builds axis labels and file names, draws one line
chart per variable and saves it.

Functions:
    select_forecast_product: Map the untransformed / four-quarter flags to a product
    deviation_ylabel: Y-axis label for a deviation plot
    detexify: ASCII version of a variable name for use in file names
    scenario_filename: Output path of a scenario plot
    plot_history_and_forecast: Draw history and forecast of one variable
    plot_scenario: Plot several variables, collecting per-variable failures
    plot_scenario_variable: Plot a single variable
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import matplotlib.dates as mdates
from matplotlib.figure import Figure

from macropost.core.config import get_config
from macropost.core.exceptions import (
    MacroPostError, raise_domain_error, raise_shape_error
)
from macropost.core.types import FilePath, ForecastProduct, SeriesLike
from macropost.core.validation import as_float_array, validate_columns

# Set up module-level logger
logger = logging.getLogger("macropost.plotting.scenario")

DEVIATION_SUFFIX = " (deviations from baseline)"

_GREEK = {
    "α": "alpha", "β": "beta", "γ": "gamma", "δ": "delta", "ϵ": "epsilon",
    "ε": "epsilon", "ζ": "zeta", "η": "eta", "θ": "theta", "ι": "iota",
    "κ": "kappa", "λ": "lambda", "μ": "mu", "ν": "nu", "ξ": "xi",
    "π": "pi", "ρ": "rho", "σ": "sigma", "τ": "tau", "υ": "upsilon",
    "ϕ": "phi", "φ": "phi", "χ": "chi", "ψ": "psi", "ω": "omega",
    "Γ": "Gamma", "Δ": "Delta", "Θ": "Theta", "Λ": "Lambda", "Ξ": "Xi",
    "Π": "Pi", "Σ": "Sigma", "Φ": "Phi", "Ψ": "Psi", "Ω": "Omega",
    "′": "_prime",
}


@dataclass
class ScenarioPlots:
    """Figures produced for one scenario.

    Attributes:
        product: Forecast product the figures were drawn from
        plots: Figure per successfully plotted variable, in input order
        failures: Exception per variable that could not be plotted
        files: Saved file per variable
    """

    product: ForecastProduct
    plots: Dict[str, Figure] = field(default_factory=dict)
    failures: Dict[str, Exception] = field(default_factory=dict)
    files: Dict[str, Path] = field(default_factory=dict)

    def __getitem__(self, var: str) -> Figure:
        return self.plots[var]

    def __len__(self) -> int:
        return len(self.plots)

    @property
    def ok(self) -> bool:
        return not self.failures


def select_forecast_product(untrans: bool = False, fourquarter: bool = False) -> ForecastProduct:
    """Choose the forecast product to plot.

    Raises:
        DomainError: If both ``untrans`` and ``fourquarter`` are set
    """
    if untrans and fourquarter:
        raise_domain_error(
            "Only one of untrans or fourquarter can be true",
            param_name="untrans, fourquarter",
            param_value=(untrans, fourquarter),
            constraint="mutually exclusive"
        )
    if untrans:
        return ForecastProduct.UNTRANSFORMED
    if fourquarter:
        return ForecastProduct.FOUR_QUARTER
    return ForecastProduct.FORECAST


def deviation_ylabel(label: str) -> str:
    return label + DEVIATION_SUFFIX


def detexify(name: str) -> str:
    """Replace Greek letters and characters unsafe in file names."""
    out = "".join(_GREEK.get(ch, ch) for ch in str(name))
    return re.sub(r"[^A-Za-z0-9_.\-]+", "_", out)


def scenario_filename(plotroot: FilePath, scenario: str, product: ForecastProduct,
                      var: str, fileformat: Optional[str] = None) -> Path:
    """Path of the saved plot for one variable of a scenario.

    Example: ``<plotroot>/forecast_obs_gdp_scen=highrates.png``
    """
    if fileformat is None:
        fileformat = get_config("plotting", "file_format", "png")
    fileformat = fileformat.lstrip(".")
    return Path(plotroot) / f"{product.value}_{detexify(var)}_scen={detexify(scenario)}.{fileformat}"


def _as_series(data: Optional[SeriesLike], name: str) -> pd.Series:
    if data is None:
        return pd.Series(dtype=np.float64)
    if isinstance(data, pd.Series):
        return pd.Series(as_float_array(data, name=name), index=data.index, name=data.name)
    return pd.Series(as_float_array(data, name=name))


def plot_history_and_forecast(
    history: Optional[SeriesLike],
    forecast: SeriesLike,
    title: str = "",
    ylabel: str = "",
    output_file: FilePath = "",
    tick_size: Optional[int] = None,
    legend: Optional[str] = None,
    start_date: Optional[Union[pd.Timestamp, str]] = None,
    figsize: Optional[Tuple[float, float]] = None,
    dpi: Optional[int] = None
) -> Figure:
    """
    Draw the history and forecast of one variable.

    Args:
        history: Historical values; may be None or empty
        forecast: Forecast values
        title: Plot title
        ylabel: Label for the y-axis
        output_file: File to save the figure to; empty to skip saving
        tick_size: Spacing of x-axis ticks in years for date indexes
        legend: "none" for no legend, otherwise a matplotlib legend location
        start_date: First forecast period, marked with a vertical line
        figsize: Figure size in inches
        dpi: Resolution of the saved file

    Returns:
        Figure: The matplotlib figure
    """
    if tick_size is None:
        tick_size = int(get_config("plotting", "tick_size", 1))
    if legend is None:
        legend = get_config("plotting", "legend", "none")
    if figsize is None:
        figsize = tuple(get_config("plotting", "figsize", (8, 5)))
    if dpi is None:
        dpi = int(get_config("plotting", "dpi", 100))

    hist = _as_series(history, "history")
    fcast = _as_series(forecast, "forecast")

    fig, ax = plt.subplots(figsize=figsize)
    try:
        _draw(fig, ax, hist, fcast, title, ylabel, output_file,
              tick_size, legend, start_date, dpi)
    except Exception:
        plt.close(fig)
        raise
    return fig


def _draw(fig: Figure, ax: Any, hist: pd.Series, fcast: pd.Series, title: str,
          ylabel: str, output_file: FilePath, tick_size: int, legend: str,
          start_date: Optional[Union[pd.Timestamp, str]], dpi: int) -> None:
    if len(hist) > 0:
        ax.plot(hist.index, hist.to_numpy(), color="black", label="History")
    ax.plot(fcast.index, fcast.to_numpy(), color="firebrick", label="Forecast")
    ax.axhline(0.0, color="grey", linewidth=0.8)

    if isinstance(fcast.index, pd.DatetimeIndex):
        if start_date is not None:
            ax.axvline(pd.Timestamp(start_date), color="black", linestyle="--", linewidth=0.8)
        ax.xaxis.set_major_locator(mdates.YearLocator(base=tick_size))
        ax.xaxis.set_major_formatter(mdates.DateFormatter("%Y"))

    ax.set_ylabel(ylabel)
    if title:
        ax.set_title(title)
    if legend and legend != "none":
        ax.legend(loc=legend)
    ax.grid(True, linestyle='--', alpha=0.5)
    fig.tight_layout()

    if output_file:
        path = Path(output_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(path, dpi=dpi)
        logger.info(f"Saved plot to {path}")


def plot_scenario(
    forecasts: pd.DataFrame,
    variables: Sequence[str],
    scenario: str,
    history: Optional[pd.DataFrame] = None,
    untrans: bool = False,
    fourquarter: bool = False,
    plotroot: Optional[FilePath] = None,
    titles: Optional[Sequence[str]] = None,
    ylabels: Optional[Mapping[str, str]] = None,
    tick_size: Optional[int] = None,
    legend: Optional[str] = None,
    start_date: Optional[Union[pd.Timestamp, str]] = None,
    fileformat: Optional[str] = None
) -> ScenarioPlots:
    """
    Plot variables in deviations from baseline for one scenario.

    Each variable is plotted independently: a variable missing from
    ``forecasts`` or failing to plot is logged and recorded in
    ``ScenarioPlots.failures`` while the others are still drawn.

    Args:
        forecasts: Scenario forecasts in deviations from baseline, one column
            per variable
        variables: Variables to plot
        scenario: Scenario key, used in file names
        history: Optional history, one column per variable
        untrans: Plot the untransformed (model units) forecast
        fourquarter: Plot the four-quarter forecast
        plotroot: Directory to save plots in; empty or None (with no
            configured ``plotting.plotroot``) disables saving
        titles: One title per variable (default: the variable names)
        ylabels: Y-axis label per variable (default: the variable name)
        tick_size: Spacing of x-axis ticks in years
        legend: Legend mode
        start_date: First forecast period
        fileformat: Image file extension

    Returns:
        ScenarioPlots: Figures, saved files and failures

    Raises:
        DomainError: If both ``untrans`` and ``fourquarter`` are set
        ShapeError: If ``titles`` does not have one entry per variable
    """
    product = select_forecast_product(untrans=untrans, fourquarter=fourquarter)

    variables = list(variables)
    if titles is None or len(titles) == 0:
        titles = list(variables)
    elif len(titles) != len(variables):
        raise_shape_error(
            f"Expected {len(variables)} titles, got {len(titles)}",
            array_name="titles",
            expected_shape=f"({len(variables)},)",
            actual_shape=(len(titles),)
        )
    if plotroot is None:
        plotroot = get_config("plotting", "plotroot", "")
    ylabels = ylabels or {}

    result = ScenarioPlots(product=product)
    for var, title in zip(variables, titles):
        output_file = ""
        if plotroot:
            output_file = scenario_filename(plotroot, scenario, product, var, fileformat)

        try:
            validate_columns(forecasts, [var], table_name="forecasts")
            hist = None
            if history is not None and var in history:
                hist = history[var]
            fig = plot_history_and_forecast(
                hist, forecasts[var],
                title=title,
                ylabel=deviation_ylabel(ylabels.get(var, var)),
                output_file=output_file,
                tick_size=tick_size,
                legend=legend,
                start_date=start_date
            )
        except (MacroPostError, OSError, ValueError) as e:
            logger.warning(f"Could not plot {var} for scenario {scenario}: {e}")
            result.failures[var] = e
            continue

        result.plots[var] = fig
        if output_file:
            result.files[var] = Path(output_file)

    if result.failures:
        logger.warning(
            f"Scenario {scenario}: {len(result.failures)} of {len(variables)} "
            f"variable(s) failed: {', '.join(result.failures)}"
        )
    return result


def plot_scenario_variable(forecasts: pd.DataFrame, var: str, scenario: str,
                           title: str = "", **kwargs) -> Figure:
    """
    Plot a single variable of a scenario.

    Unlike ``plot_scenario``, a failure is raised rather than collected.
    """
    plots = plot_scenario(forecasts, [var], scenario,
                          titles=[title] if title else None, **kwargs)
    if var in plots.failures:
        raise plots.failures[var]
    return plots[var]
