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
Estimation of the logicle parameters from data.
The top of scale (T) and linear width (W) are inferred from the data, the positive (M) and 
negative (A) decades default to typical flow cytometry values.

:func: estimate_parameters
Returns the logicle Parameters for the data

:func: estimate_scale
Returns a LogicleScale for the data

"""
from __future__ import annotations
from typing import List, Union

import numpy as np
import pandas as pd

from .errors import InvalidParameterError
from .transform import LogicleScale
from .transform import Parameters

def estimate_parameters(data: Union[List[float], np.ndarray, pd.Series], t: float=None, w: float=None, m: float=4.5, a: float=0) -> Parameters:
    """
    Estimates the missing logicle parameters from the data. Non-finite values are ignored.
    T defaults to the maximum of the data.
    W is derived from the 5th percentile (r) of the negative data as (M - log10(T/|r|))/2, 
    or 0 if the data contains no negative values.
        :param data: the (untransformed) data
        :param t: top of scale, None to estimate
        :param w: the number of decades in the linear section, None to estimate
        :param m: the number of (positive) decades
        :param a: the number of additional negative decades
    """
    values = np.asarray(data, dtype=float).ravel()
    values = values[np.isfinite(values)]

    if values.size == 0:
        raise InvalidParameterError("cannot estimate logicle parameters from data without finite values")

    if t is None:
        t = float(np.max(values))

    if w is None:
        if not t > 0:
            raise InvalidParameterError(f"cannot estimate the linear width for a top of scale (t) <= 0, got '{t}'")

        negative = values[values < 0]
        if negative.size == 0:
            # no negative values, W=0 makes this more like a normal log scale
            w = 0.0
        else:
            # 5th percentile, to be robust against outliers
            r = float(np.quantile(negative, 0.05))
            w = float((m - np.log10(t / abs(r))) / 2)

    return Parameters(t=t, w=w, m=m, a=a)

def estimate_scale(data: Union[List[float], np.ndarray, pd.Series], t: float=None, w: float=None, m: float=4.5, a: float=0, tolerance: float=None, max_iterations: int=LogicleScale.ITERATIONS) -> LogicleScale:
    """
    Builds a LogicleScale, estimating the missing parameters from the data. See estimate_parameters()
        :param data: the (untransformed) data
        :param t: top of scale, None to estimate
        :param w: the number of decades in the linear section, None to estimate
        :param m: the number of (positive) decades
        :param a: the number of additional negative decades
        :param tolerance: the convergence tolerance of the root finders; None for double precision
        :param max_iterations: maximum number of iterations of the root finders
    """
    parameters = estimate_parameters(data, t=t, w=w, m=m, a=a)

    return LogicleScale(*parameters, tolerance=tolerance, max_iterations=max_iterations)
