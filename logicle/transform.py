##############################################################################     ##    ######
#    A.J. Zwijnenburg                   2021-06-02           v1.0                 #  #      ##
#    Copyright (C) 2021 - AJ Zwijnenburg          GPLv3 license                  ######   ##
##############################################################################  ##    ## ######

## Copyright notice ##########################################################
# Logicle Tools provides a python implementation of the logicle data transform.
# Copyright (C) 2021 - AJ Zwijnenburg
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
##############################################################################

"""
The logicle transformation. Converts data from the untransformed (global) scale to the
transformed (local) scale, where the local scale runs from 0 (bottom) to 1 (top of scale).

:class: Parameters
The logicle shape parameters (T, W, M, A)

:class: LogicleScale
Immutable logicle transform; built once from the shape parameters and afterwards only evaluated.
.scale()        - transforms a single (global) value into the local scale
.scaler()       - transforms a list / np.ndarray / pd.Series of values
.inverse()      - reverts a single local value into the global scale
.unscaler()     - reverts a list / np.ndarray / pd.Series of values
.slope()        - the derivative of the inverse at a local value

:func: make_scale
Builds a LogicleScale from the shape parameters

:func: scale
Functional form of LogicleScale.scale()

:func: unscale
Functional form of LogicleScale.inverse()

"""
from __future__ import annotations
from typing import Any, Callable, List, NamedTuple, Union

import numpy as np
import pandas as pd

from ._solver import solve
from .errors import ConvergenceError
from .errors import InvalidParameterError

class Parameters(NamedTuple):
    """
    The logicle shape parameters
        :param t: top of scale
        :param w: the number of decades in the linear section
        :param m: the number of (positive) decades
        :param a: the number of additional negative decades
    """
    t: float
    w: float
    m: float
    a: float

class LogicleScale():
    """
    Represents the logicle transformation, see Parks et al. (2006).
    The inverse transform is the biexponential function x = a*exp(b*y) - c*exp(-d*y) + f.
    The forward transform is calculated by numerically inverting the biexponential.
        :param t: global end value / top of scale
        :param w: the number of decades in the linear section
        :param m: the number of (positive) decades
        :param a: the number of additional negative decades
        :param tolerance: the convergence tolerance of the root finders; None for double precision
        :param max_iterations: maximum number of iterations of the root finders
    """
    ITERATIONS: int = 100
    TOLERANCE: float = 1e-12

    __slots__ = ("parameters", "coefficients", "zero", "tolerance", "max_iterations")

    def __init__(self, t: float=262144, w: float=0.5, m: float=4.5, a: float=0, tolerance: float=None, max_iterations: int=ITERATIONS):
        if tolerance is not None and not tolerance > 0:
            raise InvalidParameterError(f"tolerance has to be >0, not '{tolerance}'")

        coefficients = solve(t, w, m, a, tolerance=tolerance, max_iterations=max_iterations)

        object.__setattr__(self, "parameters", Parameters(t=t, w=w, m=m, a=a))
        object.__setattr__(self, "coefficients", coefficients)
        object.__setattr__(self, "tolerance", tolerance)
        object.__setattr__(self, "max_iterations", max_iterations)

        # local location of the global zero (x1 in the paper)
        object.__setattr__(self, "zero", (a + w) / (m + a))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"LogicleScale is immutable, cannot set '{name}'")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"LogicleScale is immutable, cannot delete '{name}'")

    @property
    def a(self) -> float:
        return self.coefficients.a

    @property
    def b(self) -> float:
        return self.coefficients.b

    @property
    def c(self) -> float:
        return self.coefficients.c

    @property
    def d(self) -> float:
        return self.coefficients.d

    @property
    def f(self) -> float:
        return self.coefficients.f

    def inverse(self, data: float) -> float:
        """
        Reverts the scaled data back into unscaled form.
        Expects a data range of 0-1, but is defined for all values
            :param data: the local value
        """
        a, b, c, d, f = self.coefficients
        return float(a * np.exp(b * data) - c * np.exp(-d * data) + f)

    def slope(self, data: float) -> float:
        """
        Returns the derivative of the inverse transform
            :param data: the local value
        """
        a, b, c, d, _ = self.coefficients
        return float(a * b * np.exp(b * data) + c * d * np.exp(-d * data))

    def scale(self, data: float) -> float:
        """
        Scales the value according to logicle transform.
        Uses Halley's method to find the root of inverse(x) - data
            :param data: the global value
        """
        # Handle true zero and missing values separately
        if data == 0:
            return self.zero
        if np.isnan(data):
            return np.nan

        a, b, c, d, f = self.coefficients

        # Initial guess at solution, kept on the same side of the inflection point (zero) as the root
        x: float = None
        if abs(data) < f:
            # Use linear approximation in the quasi linear region
            x = self.zero + data / self.slope(self.zero)
        elif data > 0:
            # otherwise use ordinary logarithm of the dominating exponent
            x = max(np.log(data / a) / b, self.zero)
        else:
            x = min(-np.log(-data / c) / d, self.zero)

        iteration: int = 0
        for iteration in range(1, self.max_iterations + 1):
            # compute the function and its first two derivatives
            ae2bx: float = a * np.exp(b * x)
            ce2mdx: float = c * np.exp(-d * x)

            y: float = (ae2bx + f) - (ce2mdx + data)
            dy: float = (b * ae2bx) + (d * ce2mdx)
            ddy: float = (b * b * ae2bx) - (d * d * ce2mdx)

            if y == 0:
                return float(x)

            # This is Halley's method with cubic convergence
            delta: float = y / (dy * (1 - ((y * ddy) / (2 * dy * dy))))
            x -= delta

            if not np.isfinite(x):
                break

            # try for double precision unless in extended range
            tolerance: float = self.TOLERANCE if self.tolerance is None else self.tolerance
            if abs(x) > 1:
                tolerance *= abs(x)

            # if we have reached the desired precision we're done
            if abs(delta) < tolerance:
                return float(x)

        raise ConvergenceError(
            f"logicle transform of '{data}' did not converge within {self.max_iterations} iterations",
            iterations=iteration,
            estimate=float(x)
        )

    def scaler(self, data: Union[List[float], np.ndarray, pd.Series]) -> Union[List[float], np.ndarray, pd.Series]:
        """
        The scaling function. Returns the same container type as data
            :param data: the data to scale
        """
        return self._apply(self.scale, data)

    def unscaler(self, data: Union[List[float], np.ndarray, pd.Series]) -> Union[List[float], np.ndarray, pd.Series]:
        """
        The inverse scaling function. Returns the same container type as data
            :param data: the scaled data to revert
        """
        return self._apply(self.inverse, data)

    @staticmethod
    def _apply(function: Callable[[float], float], data: Union[List[float], np.ndarray, pd.Series]) -> Union[List[float], np.ndarray, pd.Series]:
        """
        Applies function to each element of data. None values in lists are kept as is
            :param function: the function to apply
            :param data: the data
        """
        if isinstance(data, pd.Series):
            return pd.Series([function(x) for x in data], index=data.index, name=data.name, dtype=float)

        if isinstance(data, np.ndarray):
            values = [function(x) for x in data.ravel()]
            return np.array(values, dtype=float).reshape(data.shape)

        data = list(data)
        for i in range(0, len(data)):
            if data[i] is None:
                continue
            data[i] = function(data[i])

        return data

    def __call__(self, data: float) -> float:
        return self.scale(data)

    def __eq__(self, other) -> bool:
        if not isinstance(other, LogicleScale):
            return False

        if self.parameters != other.parameters:
            return False
        if self.coefficients != other.coefficients:
            return False

        return True

    def __hash__(self) -> int:
        return hash(self.parameters)

    def __reduce__(self):
        # __setattr__ is blocked, so copy/pickle rebuild through __init__
        return (LogicleScale, (*self.parameters, self.tolerance, self.max_iterations))

    def __repr__(self) -> str:
        return f"(LogicleScale:[{self.parameters.t};{self.parameters.w:.2f};{self.parameters.m:.2f};{self.parameters.a:.1f}])"

def make_scale(t: float, w: float, m: float, a: float, tolerance: float=None, max_iterations: int=LogicleScale.ITERATIONS) -> LogicleScale:
    """
    Builds a LogicleScale from the shape parameters
        :param t: top of scale
        :param w: the number of decades in the linear section
        :param m: the number of (positive) decades
        :param a: the number of additional negative decades
        :param tolerance: the convergence tolerance of the root finders; None for double precision
        :param max_iterations: maximum number of iterations of the root finders
    """
    return LogicleScale(t=t, w=w, m=m, a=a, tolerance=tolerance, max_iterations=max_iterations)

def scale(instance: LogicleScale, data: float) -> float:
    """
    Transforms a global value into the local scale
        :param instance: the scale
        :param data: the global value
    """
    return instance.scale(data)

def unscale(instance: LogicleScale, data: float) -> float:
    """
    Reverts a local value into the global scale
        :param instance: the scale
        :param data: the local value
    """
    return instance.inverse(data)
