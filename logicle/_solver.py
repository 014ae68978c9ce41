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
Solver for the logicle coefficients.
Source paper: David R. Parks, Mario Roederer, Wayne A. Moore.  A new “Logicle” display method avoids deceptive effects 
of logarithmic scaling for low signals and compensated data.  Cytometry Part A, Volume 69A, Issue 6, pages 541-551, June 2006.
Coefficient formulas as in the Gating-ML 2.0 biexponential (logicle) definition.

:class: Coefficients
The (a, b, c, d, f) coefficients of the biexponential function x = a*exp(b*y) - c*exp(-d*y) + f

:func: validate
Checks the scale parameters (T, W, M, A) for validity

:func: solve
Calculates the Coefficients from the scale parameters

"""
from __future__ import annotations
from typing import Callable, NamedTuple

import numpy as np
import sys
import warnings

from .errors import ConvergenceError
from .errors import InvalidParameterError

class Coefficients(NamedTuple):
    """
    The biexponential coefficients. Immutable.
    """
    a: float
    b: float
    c: float
    d: float
    f: float

def validate(t: float, w: float, m: float, a: float) -> None:
    """
    Checks the logicle parameters, raises InvalidParameterError if invalid.
    Warns if the linear section is wider than half the positive decades
        :param t: top of scale
        :param w: the number of decades in the linear section
        :param m: the number of (positive) decades
        :param a: the number of additional negative decades
    """
    for name, value in (("t", t), ("w", w), ("m", m), ("a", a)):
        try:
            finite = bool(np.isfinite(value))
        except TypeError:
            raise InvalidParameterError(f"parameter {name} has to be a real number, not '{value}'") from None
        if not finite:
            raise InvalidParameterError(f"parameter {name} has to be a finite number, not '{value}'")

    if t <= 0:
        raise InvalidParameterError(f"top of scale (t) has to be >0, not '{t}'")
    if m <= 0:
        raise InvalidParameterError(f"positive decades (m) has to be >0, not '{m}'")
    if w < 0:
        raise InvalidParameterError(f"linear width (w) has to be >=0, not '{w}'")
    if a < 0:
        raise InvalidParameterError(f"negative decades (a) has to be >=0, not '{a}'")

    if 2 * w > m:
        warnings.warn(f"linear width (w) {w} is larger than m/2 ({m/2}), the global zero is placed above the top of the linear section")

def solve(t: float, w: float, m: float, a: float, tolerance: float=None, max_iterations: int=100) -> Coefficients:
    """
    Calculates the biexponential coefficients for the logicle parameters
        :param t: top of scale
        :param w: the number of decades in the linear section
        :param m: the number of (positive) decades
        :param a: the number of additional negative decades
        :param tolerance: the acceptable error in ln(d); None for double precision
        :param max_iterations: maximum number of root finder iterations
    """
    validate(t, w, m, a)
    if max_iterations < 1:
        raise InvalidParameterError(f"max_iterations has to be >=1, not '{max_iterations}'")

    # Actual parameters, formulas from biexponential paper
    width: float = w / (m + a)
    x2: float = a / (m + a)
    x1: float = x2 + width
    x0: float = x1 + width
    b: float = (m + a) * np.log(10.0)

    d: float = solve_d(b, width, tolerance=tolerance, max_iterations=max_iterations)

    c_a: float = np.exp((b + d) * x0)
    f_a: float = c_a * np.exp(-d * x1) - np.exp(b * x1)
    coef_a: float = t / (np.exp(b) - c_a * np.exp(-d) + f_a)

    coefficients = Coefficients(
        a=float(coef_a),
        b=float(b),
        c=float(c_a * coef_a),
        d=float(d),
        f=float(f_a * coef_a)
    )

    if not all(np.isfinite(coefficients)):
        raise ConvergenceError(f"non-finite coefficients {coefficients} for t={t}, w={w}, m={m}, a={a}")

    return coefficients

def solve_d(b: float, w: float, tolerance: float=None, max_iterations: int=100) -> float:
    """
    Finds d in the interval (0, b] for which: w * (b + d) + 2 * (ln(d) - ln(b)) = 0
        :param b: the b coefficient
        :param w: the linear width as fraction of the total decades
        :param tolerance: the acceptable error in ln(d); None for double precision
        :param max_iterations: maximum number of root finder iterations
    """
    # w==0 means it's really arcsinh
    if w == 0:
        return b

    if tolerance is None:
        tolerance = 2 * sys.float_info.epsilon

    # Search in ln(d); for wide linear sections d can be many decades smaller than b
    def residual(log_d: float) -> float:
        return w * (b + np.exp(log_d)) + 2 * (log_d - np.log(b))

    log_d: float = zeroin(
        f=residual,
        lower=np.log(sys.float_info.min),
        upper=np.log(b),
        tolerance=tolerance,
        max_iterations=max_iterations
    )
    d: float = float(np.exp(log_d))

    if not np.isfinite(residual(log_d)) or d <= 0:
        raise ConvergenceError(f"no finite residual for d={d}", estimate=d)

    return d

def zeroin(f: Callable[[float], float], lower: float, upper: float, tolerance: float, max_iterations: int) -> float:
    """
    Brent's root finder (bisection, secant and inverse quadratic interpolation), after R's stats/src/zeroin.c
    The root has to be bracketed by lower and upper.
        :param f: the function under investigation
        :param lower: left border of the search range
        :param upper: right border of the search range
        :param tolerance: acceptable tolerance
        :param max_iterations: maximum number of iterations
    """
    a: float = lower
    b: float = upper
    fa: float = f(a)
    fb: float = f(b)

    # First test if we have found a root at an endpoint
    if fa == 0.0:
        return a
    if fb == 0.0:
        return b

    if (fa > 0.0) == (fb > 0.0):
        raise ConvergenceError(f"root is not bracketed by [{lower}, {upper}]: f(lower)={fa}, f(upper)={fb}", iterations=0)

    c: float = a
    fc: float = fa

    for _ in range(0, max_iterations):
        # Distance from the last but one to the last approximation
        prev_step: float = b - a

        if abs(fc) < abs(fb):
            # Swap data for b to be the best approximation
            a, b, c = b, c, b
            fa, fb, fc = fb, fc, fb

        tol_act: float = 2 * sys.float_info.epsilon * abs(b) + tolerance / 2
        new_step: float = (c - b) / 2

        if abs(new_step) <= tol_act or fb == 0.0:
            # Acceptable approximation is found
            return b

        # Decide if the interpolation can be tried
        if abs(prev_step) >= tol_act and abs(fa) > abs(fb):
            # interpolation step is calculated in the form of p/q
            cb: float = c - b
            if a == c:
                # only two distinct points, so linear interpolation
                t1: float = fb / fa
                p: float = cb * t1
                q: float = 1.0 - t1
            else:
                # inverse quadratic interpolation
                q = fa / fc
                t1 = fb / fc
                t2: float = fb / fa
                p = t2 * (cb * q * (q - t1) - (b - a) * (t1 - 1.0))
                q = (q - 1.0) * (t1 - 1.0) * (t2 - 1.0)

            # make p positive and assign the possible minus to q
            if p > 0.0:
                q = -q
            else:
                p = -p

            # if b+p/q falls in [b,c] and isnt too large it is accepted
            if p < (0.75 * cb * q - abs(tol_act * q) / 2) and p < abs(prev_step * q / 2):
                new_step = p / q

        # Adjust the step to be not less than tolerance
        if abs(new_step) < tol_act:
            new_step = tol_act if new_step > 0.0 else -tol_act

        # Store the previous approximation and step
        a, fa = b, fb
        b += new_step
        fb = f(b)

        if (fb > 0.0 and fc > 0.0) or (fb < 0.0 and fc < 0.0):
            # Adjust c for it to have a sign opposite to that of b
            c, fc = a, fa

    raise ConvergenceError(f"root finder did not converge within {max_iterations} iterations", iterations=max_iterations, estimate=b)
