"""
Tests for the logicle coefficient solver.
"""

import math
import sys

import numpy as np
import pytest

from logicle._solver import Coefficients, solve, solve_d, validate, zeroin
from logicle.errors import ConvergenceError, InvalidParameterError, LogicleError


class TestValidate:
    @pytest.mark.parametrize(
        "t, w, m, a",
        [
            (0, 0.5, 4.5, 0),
            (-1000, 0.5, 4.5, 0),
            (262144, -0.1, 4.5, 0),
            (262144, 0.5, 0, 0),
            (262144, 0.5, -4.5, 0),
            (262144, 0.5, 4.5, -1),
            (float("nan"), 0.5, 4.5, 0),
            (float("inf"), 0.5, 4.5, 0),
            ("262144", 0.5, 4.5, 0),
        ],
    )
    def test_invalid_parameters(self, t, w, m, a):
        with pytest.raises(InvalidParameterError):
            validate(t, w, m, a)

    @pytest.mark.parametrize(
        "t, w, m, a",
        [
            (262144, 0.5, 4.5, 0),
            (262144, 0, 4.5, 0),
            (1, 2.25, 4.5, 2),
            (1e6, 1, 5, 0.5),
        ],
    )
    def test_valid_parameters(self, t, w, m, a):
        validate(t, w, m, a)

    def test_invalid_parameter_is_value_error(self):
        with pytest.raises(ValueError):
            solve(0, 0.5, 4.5, 0)

    def test_invalid_parameter_is_logicle_error(self):
        with pytest.raises(LogicleError):
            solve(262144, 0.5, 4.5, -1)

    def test_invalid_iterations(self):
        with pytest.raises(InvalidParameterError):
            solve(262144, 0.5, 4.5, 0, max_iterations=0)


class TestZeroin:
    def test_square_root(self):
        root = zeroin(lambda x: x * x - 2, 0.0, 2.0, tolerance=1e-12, max_iterations=100)
        assert root == pytest.approx(math.sqrt(2), rel=1e-10)

    def test_root_at_endpoint(self):
        assert zeroin(lambda x: x - 1, 1.0, 2.0, tolerance=1e-12, max_iterations=100) == 1.0
        assert zeroin(lambda x: x - 2, 1.0, 2.0, tolerance=1e-12, max_iterations=100) == 2.0

    def test_not_bracketed(self):
        with pytest.raises(ConvergenceError):
            zeroin(lambda x: x * x + 1, -1.0, 1.0, tolerance=1e-12, max_iterations=100)

    def test_iteration_budget(self):
        with pytest.raises(ConvergenceError) as error:
            zeroin(lambda x: x ** 3 - 2, 0.0, 2.0, tolerance=1e-15, max_iterations=2)
        assert error.value.iterations == 2
        assert 0.0 <= error.value.estimate <= 2.0


class TestSolveD:
    @pytest.mark.parametrize("w", [0.25, 0.5, 1.0, 2.0])
    @pytest.mark.parametrize("a", [0, 0.5, 1.0])
    def test_root_of_logicle_condition(self, w, a):
        m = 4.5
        b = (m + a) * np.log(10)
        width = w / (m + a)

        d = solve_d(b, width)

        assert 0 < d < b
        assert abs(width * (b + d) + 2 * (np.log(d) - np.log(b))) < 1e-10

    def test_zero_width_is_arcsinh(self):
        b = 4.5 * np.log(10)
        assert solve_d(b, 0) == b

    def test_root_far_below_machine_epsilon(self):
        # m=100 with the linear section spanning half of it puts d near 2e-23
        b = 100 * np.log(10)
        width = 50 / 100

        d = solve_d(b, width)

        assert 0 < d < 1e-20
        assert abs(width * (b + d) + 2 * (np.log(d) - np.log(b))) < 1e-9

    def test_iteration_budget(self):
        b = 4.5 * np.log(10)
        with pytest.raises(ConvergenceError):
            solve_d(b, 0.5 / 4.5, max_iterations=1)


class TestSolve:
    @pytest.mark.parametrize(
        "t, w, m, a",
        [
            (262144, 0.5, 4.5, 0),
            (262144, 0, 4.5, 0),
            (262144, 1.0, 4.5, 1.0),
            (10000, 2.0, 4.5, 0),
            (1, 0.1, 2, 0),
            (1e6, 1.5, 6, 0.5),
        ],
    )
    def test_finite_coefficients(self, t, w, m, a):
        coefficients = solve(t, w, m, a)

        assert isinstance(coefficients, Coefficients)
        assert all(np.isfinite(coefficients))
        assert coefficients.a > 0
        assert coefficients.c >= 0
        assert coefficients.b == pytest.approx((m + a) * np.log(10))

    def test_top_of_scale(self):
        a, b, c, d, f = solve(262144, 0.5, 4.5, 0)
        assert a * np.exp(b) - c * np.exp(-d) + f == pytest.approx(262144, rel=1e-9)

    def test_zero_width_coefficients(self):
        # w=0 and a=0 reduces to x = 2*a*sinh(b*y)
        coefficients = solve(10000, 0, 4.5, 0)

        assert coefficients.d == coefficients.b
        assert coefficients.c == pytest.approx(coefficients.a)
        assert coefficients.f == pytest.approx(0, abs=1e-12)

    def test_tiny_d_coefficients(self):
        coefficients = solve(1, 50, 100, 0)

        assert all(np.isfinite(coefficients))
        assert coefficients.a > 0
        assert coefficients.d < 1e-20

    def test_wide_linear_width(self):
        # wider than m/2 is allowed, but warned about
        with pytest.warns(UserWarning):
            coefficients = solve(262144, 2.5, 4.5, 0)

        assert all(np.isfinite(coefficients))
        assert coefficients.a > 0
        assert coefficients.c >= 0

    def test_deterministic(self):
        assert solve(262144, 0.5, 4.5, 0) == solve(262144, 0.5, 4.5, 0)

    def test_tolerance_option(self):
        coarse = solve(262144, 0.5, 4.5, 0, tolerance=1e-3)
        fine = solve(262144, 0.5, 4.5, 0)
        assert coarse.d == pytest.approx(fine.d, rel=2e-3)

    def test_iteration_budget(self):
        with pytest.raises(ConvergenceError):
            solve(262144, 0.5, 4.5, 0, max_iterations=1)

    def test_convergence_error_is_arithmetic_error(self):
        with pytest.raises(ArithmeticError):
            solve(262144, 1.0, 4.5, 1.0, max_iterations=1)

    def test_machine_epsilon_tolerance(self):
        b = 4.5 * np.log(10)
        d = solve_d(b, 0.5 / 4.5, tolerance=2 * sys.float_info.epsilon)
        assert d == solve(262144, 0.5, 4.5, 0).d
