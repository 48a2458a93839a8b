# macropost/transforms/table.py

"""
Column-oriented wrappers around the series transforms.

Forecast results usually arrive as a table holding the target variable next
to the population, deflator and population-growth series it is combined
with. These helpers resolve the column names once, check that the table
holds them and call the matching function in macropost.transforms.series.
They only read from the table and always return a new series.
"""

import logging
from typing import Optional, Union

from macropost.core.config import get_config
from macropost.core.exceptions import raise_domain_error
from macropost.core.types import Deflator, PopulationMeasure, Series, SeriesLike, Table
from macropost.core.validation import validate_columns
from macropost.transforms.series import (
    hp_adjust, nominal_to_real, nominal_to_realpercapita, percapita,
    real_q2q_pct_change
)

logger = logging.getLogger("macropost.transforms.table")

UNFILTERED_POPULATION_GROWTH = "unfiltered_population_growth"
FILTERED_POPULATION_GROWTH = "filtered_population_growth"

MnemonicLike = Union[Deflator, PopulationMeasure, str]


def resolve_mnemonic(choice: Optional[MnemonicLike], kind: str = "deflator") -> str:
    """Resolve a deflator or population choice to a column name.

    Enum members map to their mnemonic. Strings are matched against member
    names case-insensitively ("GDP", "pce"), then against mnemonics
    ("GDPCTPI"); any other string is taken as a column name as-is.

    Args:
        choice: Enum member, member name, mnemonic or column name. None
            selects the configured default.
        kind: "deflator" or "population"

    Returns:
        str: The column name

    Raises:
        DomainError: If ``kind`` is unknown or ``choice`` has the wrong type
    """
    if kind == "deflator":
        enum_type = Deflator
        if choice is None:
            choice = get_config("transforms", "deflator", "GDP")
    elif kind == "population":
        enum_type = PopulationMeasure
        if choice is None:
            choice = get_config("transforms", "population_mnemonic", "CNP16OV")
    else:
        raise_domain_error(
            f"Unknown mnemonic kind: {kind}",
            param_name="kind",
            param_value=kind,
            constraint="'deflator' or 'population'"
        )

    if isinstance(choice, enum_type):
        return choice.mnemonic
    if isinstance(choice, (Deflator, PopulationMeasure)):
        raise_domain_error(
            f"{choice} cannot be used as a {kind}",
            param_name=kind,
            param_value=choice,
            constraint=f"a {enum_type.__name__} member"
        )
    if not isinstance(choice, str):
        raise_domain_error(
            f"{kind} must be a {enum_type.__name__} member or a string, got {type(choice).__name__}",
            param_name=kind,
            param_value=choice
        )

    upper = choice.upper()
    for member in enum_type:
        if upper == member.name or choice == member.mnemonic:
            return member.mnemonic
    return choice


def percapita_column(table: Table, col: str,
                     population: Optional[MnemonicLike] = None,
                     strict: Optional[bool] = None) -> Series:
    """Per-capita value of column ``col`` using the chosen population column."""
    population_col = resolve_mnemonic(population, "population")
    validate_columns(table, [col, population_col])
    return percapita(table[col], table[population_col], strict=strict)


def nominal_to_real_column(table: Table, col: str,
                           deflator: Optional[MnemonicLike] = None,
                           strict: Optional[bool] = None) -> Series:
    """Real value of column ``col`` using the chosen deflator column."""
    deflator_col = resolve_mnemonic(deflator, "deflator")
    validate_columns(table, [col, deflator_col])
    return nominal_to_real(table[col], table[deflator_col], strict=strict)


def nominal_to_realpercapita_column(table: Table, col: str,
                                    population: Optional[MnemonicLike] = None,
                                    deflator: Optional[MnemonicLike] = None,
                                    scale: Optional[float] = None,
                                    strict: Optional[bool] = None) -> Series:
    """Real per-capita value of column ``col``.

    The table is left exactly as it was passed in; no helper column is added.
    """
    population_col = resolve_mnemonic(population, "population")
    deflator_col = resolve_mnemonic(deflator, "deflator")
    validate_columns(table, [col, population_col, deflator_col])
    return nominal_to_realpercapita(
        table[col], table[population_col], table[deflator_col],
        scale=scale, strict=strict
    )


def real_q2q_pct_change_column(table: Table, col: str,
                               deflator: Optional[MnemonicLike] = None,
                               strict: Optional[bool] = None) -> Series:
    """Real quarter-to-quarter percentage change of column ``col``.

    ``deflator`` selects the price index, e.g. Deflator.GDP or Deflator.PCE.
    """
    deflator_col = resolve_mnemonic(deflator, "deflator")
    validate_columns(table, [col, deflator_col])
    logger.debug(f"Deflating {col} with {deflator_col}")
    return real_q2q_pct_change(table[col], table[deflator_col], strict=strict)


def hp_adjust_column(y: SeriesLike, table: Table,
                     strict: Optional[bool] = None) -> Series:
    """Adjust ``y`` with the population growth columns of ``table``."""
    validate_columns(table, [UNFILTERED_POPULATION_GROWTH, FILTERED_POPULATION_GROWTH])
    return hp_adjust(
        y,
        table[UNFILTERED_POPULATION_GROWTH],
        table[FILTERED_POPULATION_GROWTH],
        strict=strict
    )
