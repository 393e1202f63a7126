# Copyright 2010-2025 Google LLC
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Sparse linear expressions over variables.

A LinearExpression is a mutable accumulator b + sum_{i in I} a_i * x_i. It is
only used to describe a constraint row or the objective: its terms are copied
into the model when the constraint or objective is created, so later changes
to the expression do not affect the model.

Coefficients whose magnitude falls below ZERO_TOLERANCE are dropped, both when
they are added and when arithmetic brings an existing coefficient below it.
"""

import types
from typing import Any, Dict, Iterable, Iterator, Mapping, Tuple

ZERO_TOLERANCE = 1e-10


def is_zero(value: float) -> bool:
    """Returns True if value is small enough to be treated as a zero entry."""
    return abs(value) < ZERO_TOLERANCE


class LinearExpression:
    """For variables x, an expression: b + sum_{i in I} a_i * x_i.

    Variables are used as keys, so any hashable object works in tests, but
    models only accept their own Variable objects.

    Example:
      expr = LinearExpression.of(x, 3.0).plus(y, 2.0).plus_constant(1.0)
      expr += 4 * z
    """

    __slots__ = "_terms", "_constant"

    def __init__(self) -> None:
        self._terms: Dict[Any, float] = {}
        self._constant: float = 0.0

    @classmethod
    def of(cls, var: Any, coeff: float = 1.0) -> "LinearExpression":
        return cls().plus(var, coeff)

    @classmethod
    def constant(cls, value: float) -> "LinearExpression":
        return cls().plus_constant(value)

    @classmethod
    def sum_of(cls, variables: Iterable[Any]) -> "LinearExpression":
        expr = cls()
        for var in variables:
            expr.plus(var)
        return expr

    @classmethod
    def weighted_sum(cls, terms: Mapping[Any, float]) -> "LinearExpression":
        expr = cls()
        for var, coeff in terms.items():
            expr.plus(var, coeff)
        return expr

    @property
    def terms(self) -> Mapping[Any, float]:
        """A read-only view of the non-zero terms."""
        return types.MappingProxyType(self._terms)

    @property
    def offset(self) -> float:
        return self._constant

    def variables(self) -> Iterator[Any]:
        return iter(self._terms)

    def coefficient(self, var: Any) -> float:
        return self._terms.get(var, 0.0)

    def items(self) -> Iterator[Tuple[Any, float]]:
        return iter(self._terms.items())

    def plus(self, var: Any, coeff: float = 1.0) -> "LinearExpression":
        """Adds coeff * var in place and returns self."""
        if is_zero(coeff):
            return self
        value = self._terms.get(var, 0.0) + coeff
        if is_zero(value):
            self._terms.pop(var, None)
        else:
            self._terms[var] = value
        return self

    def minus(self, var: Any, coeff: float = 1.0) -> "LinearExpression":
        return self.plus(var, -coeff)

    def plus_expression(self, other: "LinearExpression") -> "LinearExpression":
        for var, coeff in other.items():
            self.plus(var, coeff)
        self._constant += other.offset
        return self

    def minus_expression(self, other: "LinearExpression") -> "LinearExpression":
        for var, coeff in other.items():
            self.plus(var, -coeff)
        self._constant -= other.offset
        return self

    def times(self, multiplier: float) -> "LinearExpression":
        """Scales every term and the constant in place and returns self."""
        scaled = {}
        for var, coeff in self._terms.items():
            value = coeff * multiplier
            if not is_zero(value):
                scaled[var] = value
        self._terms = scaled
        self._constant *= multiplier
        return self

    def plus_constant(self, value: float) -> "LinearExpression":
        self._constant += value
        return self

    def copy(self) -> "LinearExpression":
        result = LinearExpression()
        result._terms = dict(self._terms)
        result._constant = self._constant
        return result

    def is_empty(self) -> bool:
        return not self._terms and is_zero(self._constant)

    def evaluate(self, variable_values: Mapping[Any, float]) -> float:
        """Returns the value of this expression for given variable values.

        Args:
          variable_values: Must contain a value for every variable in the
            expression.

        Returns:
          The value of this expression when replacing variables by their value.
        """
        result = self._constant
        for var, coeff in self._terms.items():
            result += coeff * variable_values[var]
        return result

    def _add(self, other: Any, sign: float) -> "LinearExpression":
        if isinstance(other, (int, float)):
            return self.plus_constant(sign * other)
        if isinstance(other, LinearExpression):
            if sign > 0:
                return self.plus_expression(other)
            return self.minus_expression(other)
        return self.plus(other, sign)

    def __len__(self) -> int:
        return len(self._terms)

    def __iadd__(self, other: Any) -> "LinearExpression":
        return self._add(other, 1.0)

    def __isub__(self, other: Any) -> "LinearExpression":
        return self._add(other, -1.0)

    def __add__(self, other: Any) -> "LinearExpression":
        return self.copy()._add(other, 1.0)

    def __radd__(self, other: Any) -> "LinearExpression":
        return self.copy()._add(other, 1.0)

    def __sub__(self, other: Any) -> "LinearExpression":
        return self.copy()._add(other, -1.0)

    def __rsub__(self, other: Any) -> "LinearExpression":
        return self.copy().times(-1.0)._add(other, 1.0)

    def __mul__(self, other: float) -> "LinearExpression":
        if not isinstance(other, (int, float)):
            return NotImplemented
        return self.copy().times(other)

    def __rmul__(self, other: float) -> "LinearExpression":
        return self.__mul__(other)

    def __truediv__(self, other: float) -> "LinearExpression":
        if not isinstance(other, (int, float)):
            return NotImplemented
        return self.copy().times(1.0 / other)

    def __neg__(self) -> "LinearExpression":
        return self.copy().times(-1.0)

    def __str__(self):
        if self.is_empty():
            return "0"
        parts = []
        for var, coeff in self._terms.items():
            if not parts:
                sign = "-" if coeff < 0 else ""
            else:
                sign = " - " if coeff < 0 else " + "
            magnitude = abs(coeff)
            if is_zero(magnitude - 1.0):
                parts.append(f"{sign}{var}")
            else:
                parts.append(f"{sign}{magnitude}*{var}")
        if not is_zero(self._constant):
            if not parts:
                parts.append(str(self._constant))
            else:
                sign = " - " if self._constant < 0 else " + "
                parts.append(f"{sign}{abs(self._constant)}")
        return "".join(parts)

    def __repr__(self):
        result = f"LinearExpression({self._constant}, " + "{"
        result += ", ".join(
            f"{var!r}: {coefficient}" for var, coefficient in self._terms.items()
        )
        result += "})"
        return result
