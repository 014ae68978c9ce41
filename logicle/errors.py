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
Exceptions raised by the logicle package.

:class: LogicleError
Base class of all logicle exceptions

:class: InvalidParameterError
Raised when the scale parameters (T, W, M, A) are outside of their domain

:class: ConvergenceError
Raised when a numeric root finder did not converge within its iteration budget

"""

class LogicleError(Exception):
    """
    Base class for all exceptions raised by the logicle package
    """
    pass

class InvalidParameterError(LogicleError, ValueError):
    """
    A scale parameter is outside of its valid domain. Always raised before any numeric solving.
    """
    pass

class ConvergenceError(LogicleError, ArithmeticError):
    """
    A root finder did not reach its tolerance within the maximum amount of iterations.
        :param message: the error message
        :param iterations: the amount of iterations performed
        :param estimate: the last (unconverged) approximation
    """
    def __init__(self, message: str, iterations: int=None, estimate: float=None):
        super().__init__(message)
        self.iterations: int = iterations
        self.estimate: float = estimate
