# tests/test_transforms.py

"""
Tests for the series transforms and their table wrappers.

The test suite includes:
- Tests for the elementwise unit conversions
- Tests for log-difference and percentage-change transforms
- Tests for missing-value handling and strict validation
- Tests for pandas index propagation
- Tests for the column-oriented wrappers and mnemonic resolution
- Property-based tests with hypothesis
"""

import numpy as np
import pandas as pd
import pytest
from hypothesis import HealthCheck, given, settings, strategies as st
from numpy.testing import assert_allclose, assert_array_equal

from macropost.core.config import set_config
from macropost.core.exceptions import DomainError, MissingDataError, ShapeError
from macropost.core.types import Deflator, PopulationMeasure
from macropost.transforms import (
    FILTERED_POPULATION_GROWTH, UNFILTERED_POPULATION_GROWTH,
    annual_to_quarter, diff_log, hp_adjust, hp_adjust_column, nominal_to_real,
    nominal_to_real_column, nominal_to_realpercapita,
    nominal_to_realpercapita_column, percapita, percapita_column,
    q2q_pct_change, real_q2q_pct_change, real_q2q_pct_change_column,
    resolve_mnemonic
)


positive_floats = st.floats(min_value=1e-3, max_value=1e6, allow_nan=False, allow_infinity=False)


class TestUnitConversions:
    """Tests for per-capita, real and annual-to-quarterly conversions."""

    def test_percapita(self):
        value = np.array([100.0, 200.0, 300.0])
        population = np.array([10.0, 20.0, 50.0])

        assert_allclose(percapita(value, population), [10.0, 10.0, 6.0])

    def test_percapita_length_mismatch(self):
        with pytest.raises(ShapeError) as excinfo:
            percapita(np.ones(5), np.ones(4))
        assert excinfo.value.array_name == "population"
        assert excinfo.value.actual_shape == (4,)

    def test_percapita_zero_population(self):
        """Division by zero follows IEEE semantics instead of raising."""
        result = percapita(np.array([1.0, 0.0]), np.array([0.0, 0.0]))
        assert np.isposinf(result[0])
        assert np.isnan(result[1])

    def test_nominal_to_real(self):
        value = np.array([110.0, 121.0])
        deflator = np.array([1.1, 1.21])

        assert_allclose(nominal_to_real(value, deflator), [100.0, 100.0])

    def test_nominal_to_realpercapita_composition(self, rng):
        value = rng.uniform(1, 100, 20)
        population = rng.uniform(1, 10, 20)
        deflator = rng.uniform(0.5, 2, 20)

        result = nominal_to_realpercapita(value, population, deflator, scale=1000.0)
        expected = 1000.0 * nominal_to_real(percapita(value, population), deflator)
        assert_allclose(result, expected)

    def test_nominal_to_realpercapita_default_scale(self):
        result = nominal_to_realpercapita(np.array([8.0]), np.array([2.0]), np.array([4.0]))
        assert_allclose(result, [1.0])

    def test_nominal_to_realpercapita_configured_scale(self):
        set_config("transforms", "scale", 100.0)
        result = nominal_to_realpercapita(np.array([8.0]), np.array([2.0]), np.array([4.0]))
        assert_allclose(result, [100.0])

    def test_nominal_to_realpercapita_length_mismatch(self):
        with pytest.raises(ShapeError):
            nominal_to_realpercapita(np.ones(4), np.ones(4), np.ones(3))

    def test_annual_to_quarter(self):
        assert_allclose(annual_to_quarter([4.0, 8.0, -2.0]), [1.0, 2.0, -0.5])

    def test_inputs_not_modified(self):
        value = np.array([1.0, 2.0, 3.0])
        population = np.array([1.0, 1.0, 1.0])
        result = percapita(value, population)
        result[0] = 99.0

        assert_array_equal(value, [1.0, 2.0, 3.0])
        assert_array_equal(population, [1.0, 1.0, 1.0])


class TestGrowthTransforms:
    """Tests for log differences and percentage changes."""

    def test_diff_log_values(self):
        x = np.array([1.0, np.e, np.e ** 3])
        result = diff_log(x)

        assert len(result) == 3
        assert np.isnan(result[0])
        assert_allclose(result[1:], [1.0, 2.0])

    def test_diff_log_preserves_length(self, trending_series):
        result = diff_log(trending_series)
        assert result.shape == trending_series.shape
        assert np.isnan(result[0])
        assert np.all(np.isfinite(result[1:]))

    def test_diff_log_single_and_empty(self):
        single = diff_log([5.0])
        assert single.shape == (1,)
        assert np.isnan(single[0])
        assert diff_log([]).shape == (0,)

    def test_diff_log_non_positive(self):
        """Log of zero or a negative value gives -inf or NaN without raising."""
        result = diff_log(np.array([1.0, 0.0, -1.0, 1.0]))
        assert np.isneginf(result[1])
        assert np.isnan(result[2])
        assert np.isnan(result[3])

    def test_q2q_pct_change_is_scaled_diff_log(self, trending_series):
        assert_array_equal(q2q_pct_change(trending_series), 100 * diff_log(trending_series))

    def test_q2q_pct_change_value(self):
        result = q2q_pct_change([100.0, 110.0])
        assert_allclose(result[1], 100 * np.log(1.1))

    def test_real_q2q_pct_change(self, rng):
        value = rng.uniform(50, 150, 30)
        deflator = rng.uniform(0.9, 1.1, 30)

        result = real_q2q_pct_change(value, deflator)
        expected = 100 * (diff_log(value) - diff_log(deflator))
        assert_array_equal(result, expected)
        assert np.isnan(result[0])

    def test_real_q2q_pct_change_constant_deflator(self, trending_series):
        deflator = np.full_like(trending_series, 1.7)
        assert_allclose(real_q2q_pct_change(trending_series, deflator)[1:],
                        q2q_pct_change(trending_series)[1:])

    def test_real_q2q_pct_change_length_mismatch(self):
        with pytest.raises(ShapeError):
            real_q2q_pct_change(np.ones(5), np.ones(4))

    def test_hp_adjust(self):
        y = np.array([1.0, 2.0, 3.0])
        unfiltered = np.array([0.01, 0.02, 0.03])
        filtered = np.array([0.02, 0.02, 0.02])

        assert_allclose(hp_adjust(y, unfiltered, filtered), [0.0, 2.0, 4.0])

    def test_hp_adjust_equal_growth_is_identity(self, trending_series):
        growth = np.full_like(trending_series, 0.004)
        assert_allclose(hp_adjust(trending_series, growth, growth), trending_series)

    def test_hp_adjust_length_mismatch(self):
        with pytest.raises(ShapeError):
            hp_adjust(np.ones(4), np.ones(4), np.ones(5))


class TestMissingValues:
    """Tests for missing-value propagation and strict validation."""

    def test_none_becomes_nan(self):
        result = percapita([1.0, None, 3.0], [1.0, 1.0, 1.0])
        assert_allclose(result[[0, 2]], [1.0, 3.0])
        assert np.isnan(result[1])

    def test_strict_raises(self):
        with pytest.raises(MissingDataError) as excinfo:
            percapita([1.0, None, 3.0], [1.0, 1.0, 1.0], strict=True)
        assert excinfo.value.index == (1,)

    def test_strict_from_config(self):
        set_config("transforms", "strict_missing", True)
        with pytest.raises(MissingDataError):
            diff_log(pd.Series([1.0, np.nan, 2.0]))

    def test_explicit_strict_overrides_config(self):
        set_config("transforms", "strict_missing", True)
        result = annual_to_quarter([4.0, np.nan], strict=False)
        assert np.isnan(result[1])

    def test_text_values_rejected(self):
        with pytest.raises(DomainError) as excinfo:
            percapita(pd.Series(["a", "b"]), pd.Series([1.0, 2.0]))
        assert excinfo.value.param_name == "value"

        with pytest.raises(DomainError):
            annual_to_quarter(["4.0", "eight"])

    def test_dates_rejected(self, quarterly_index):
        dates = pd.Series(quarterly_index)
        with pytest.raises(DomainError):
            diff_log(dates)
        with pytest.raises(DomainError):
            diff_log(quarterly_index.to_numpy())

    def test_nullable_pandas_series(self):
        s = pd.Series([4.0, None, 8.0], dtype="Float64")
        result = annual_to_quarter(s)
        assert isinstance(result, pd.Series)
        assert_allclose(result.to_numpy()[[0, 2]], [1.0, 2.0])
        assert np.isnan(result.iloc[1])


class TestPandasSupport:
    """Tests for index and name propagation with pandas input."""

    def test_series_index_preserved(self, macro_table):
        result = percapita(macro_table["GDP"], macro_table["CNP16OV"])

        assert isinstance(result, pd.Series)
        assert result.index.equals(macro_table.index)
        assert result.name == "GDP"

    def test_mixed_input_uses_series_index(self, quarterly_index):
        s = pd.Series(np.arange(1.0, 121.0), index=quarterly_index, name="x")
        result = nominal_to_real(np.arange(1.0, 121.0), s)

        assert isinstance(result, pd.Series)
        assert result.index.equals(quarterly_index)
        assert_allclose(result.to_numpy(), 1.0)

    def test_array_input_returns_array(self):
        result = diff_log(np.array([1.0, 2.0]))
        assert isinstance(result, np.ndarray)
        assert result.dtype == np.float64

    def test_q2q_pct_change_series(self, macro_table):
        result = q2q_pct_change(macro_table["GDP"])
        assert isinstance(result, pd.Series)
        assert result.index.equals(macro_table.index)
        assert np.isnan(result.iloc[0])


class TestTableTransforms:
    """Tests for the column-oriented wrappers."""

    def test_resolve_mnemonic_enum(self):
        assert resolve_mnemonic(Deflator.GDP) == "GDPCTPI"
        assert resolve_mnemonic(Deflator.PCE) == "PCEPILFE"
        assert resolve_mnemonic(PopulationMeasure.CNP16OV, "population") == "CNP16OV"

    def test_resolve_mnemonic_strings(self):
        assert resolve_mnemonic("pce") == "PCEPILFE"
        assert resolve_mnemonic("GDPCTPI") == "GDPCTPI"
        assert resolve_mnemonic("my_deflator") == "my_deflator"

    def test_resolve_mnemonic_defaults(self):
        assert resolve_mnemonic(None) == "GDPCTPI"
        assert resolve_mnemonic(None, "population") == "CNP16OV"

        set_config("transforms", "deflator", "PCE")
        assert resolve_mnemonic(None) == "PCEPILFE"

    def test_resolve_mnemonic_errors(self):
        with pytest.raises(DomainError):
            resolve_mnemonic(PopulationMeasure.CNP16OV, "deflator")
        with pytest.raises(DomainError):
            resolve_mnemonic(3.5)
        with pytest.raises(DomainError):
            resolve_mnemonic("GDP", "prices")

    def test_percapita_column(self, macro_table):
        result = percapita_column(macro_table, "GDP")
        assert_allclose(result.to_numpy(),
                        (macro_table["GDP"] / macro_table["CNP16OV"]).to_numpy())

    def test_nominal_to_real_column(self, macro_table):
        result = nominal_to_real_column(macro_table, "GDP", Deflator.PCE)
        assert_allclose(result.to_numpy(),
                        (macro_table["GDP"] / macro_table["PCEPILFE"]).to_numpy())

    def test_nominal_to_realpercapita_column_leaves_table_unchanged(self, macro_table):
        before = macro_table.copy()
        result = nominal_to_realpercapita_column(macro_table, "GDP", scale=1000.0)

        pd.testing.assert_frame_equal(macro_table, before)
        expected = 1000.0 * macro_table["GDP"] / macro_table["CNP16OV"] / macro_table["GDPCTPI"]
        assert_allclose(result.to_numpy(), expected.to_numpy())

    def test_real_q2q_pct_change_column(self, macro_table):
        gdp_based = real_q2q_pct_change_column(macro_table, "GDP", Deflator.GDP)
        pce_based = real_q2q_pct_change_column(macro_table, "GDP", Deflator.PCE)

        expected = real_q2q_pct_change(macro_table["GDP"], macro_table["PCEPILFE"])
        pd.testing.assert_series_equal(pce_based, expected)
        assert not np.allclose(gdp_based.to_numpy()[1:], pce_based.to_numpy()[1:])

    def test_missing_column(self, macro_table):
        table = macro_table.drop(columns=["PCEPILFE"])
        with pytest.raises(ShapeError) as excinfo:
            real_q2q_pct_change_column(table, "GDP", Deflator.PCE)
        assert excinfo.value.missing_columns == ["PCEPILFE"]

    def test_hp_adjust_column(self, macro_table):
        y = q2q_pct_change(macro_table["GDP"])
        result = hp_adjust_column(y, macro_table)

        gap = macro_table[UNFILTERED_POPULATION_GROWTH] - macro_table[FILTERED_POPULATION_GROWTH]
        assert_allclose(result.to_numpy(), (y + 100 * gap).to_numpy())

    def test_hp_adjust_column_missing_growth(self, macro_table):
        table = macro_table.drop(columns=[UNFILTERED_POPULATION_GROWTH, FILTERED_POPULATION_GROWTH])
        with pytest.raises(ShapeError) as excinfo:
            hp_adjust_column(np.ones(len(table)), table)
        assert set(excinfo.value.missing_columns) == {
            UNFILTERED_POPULATION_GROWTH, FILTERED_POPULATION_GROWTH
        }


class TestTransformProperties:
    """Property-based tests for the transforms."""

    @given(data=st.lists(st.tuples(positive_floats, positive_floats), min_size=1, max_size=40))
    @settings(max_examples=25, deadline=None,
              suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_percapita_elementwise(self, data):
        value = np.array([v for v, _ in data])
        population = np.array([p for _, p in data])

        assert_allclose(percapita(value, population), value / population)

    @given(data=st.lists(positive_floats, min_size=2, max_size=40))
    @settings(max_examples=25, deadline=None,
              suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_diff_log_inverts_cumulative_growth(self, data):
        x = np.array(data)
        result = diff_log(x)

        assert np.isnan(result[0])
        assert_allclose(np.log(x[0]) + np.cumsum(result[1:]), np.log(x[1:]), rtol=1e-9, atol=1e-9)
