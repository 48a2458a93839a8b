"""
macropost test suite

Tests for the series transforms, the Hodrick-Prescott filter, the scenario
plots and the configuration and error-handling infrastructure.
"""
