"""Regression fitting and error metrics."""

from smoothcv.evaluation.regression import RegressionEvaluator, RegressionModel

__all__ = ["RegressionEvaluator", "RegressionModel"]
