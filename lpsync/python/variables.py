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

"""Decision variables of a model."""

import enum
from typing import Any

from lpsync.python import expressions


@enum.unique
class VarType(enum.Enum):
    """The domain of a variable.

    Attributes:
      CONTINUOUS: Any value within the bounds.
      INTEGER: Any integer value within the bounds.
      BINARY: An integer variable whose bounds are clamped to [0, 1] by the
        backend.
    """

    CONTINUOUS = "continuous"
    INTEGER = "integer"
    BINARY = "binary"


class Variable:
    """A decision variable of a model.

    A Variable is an identity: two Variable objects are equal when they have the
    same logical index in the same model, whatever their bounds. The index is
    assigned at creation and is never reused, even after the variable is
    removed. Bounds are read-only here, change them with
    Model.update_variable_bounds().

    Variables can be combined with numbers and other variables to build
    expressions:
      expr = 3 * x + 2 * y - 1

    Do not create a Variable directly, use Model.add_variable() instead.
    """

    __slots__ = "_storage", "_index", "_name", "_lower_bound", "_upper_bound", "_var_type"

    def __init__(
        self,
        storage: Any,
        index: int,
        name: str,
        lower_bound: float,
        upper_bound: float,
        var_type: VarType,
    ) -> None:
        """Internal only, prefer Model.add_variable()."""
        if not isinstance(index, int):
            raise TypeError(f"index type should be int, was:{type(index).__name__!r}")
        self._storage = storage
        self._index: int = index
        self._name: str = name
        self._lower_bound: float = lower_bound
        self._upper_bound: float = upper_bound
        self._var_type: VarType = var_type

    @property
    def index(self) -> int:
        return self._index

    @property
    def name(self) -> str:
        return self._name

    @property
    def lower_bound(self) -> float:
        return self._lower_bound

    @property
    def upper_bound(self) -> float:
        return self._upper_bound

    @property
    def var_type(self) -> VarType:
        return self._var_type

    @property
    def storage(self) -> Any:
        """Internal use only."""
        return self._storage

    def is_integral(self) -> bool:
        return self._var_type != VarType.CONTINUOUS

    def _set_bounds(self, lower_bound: float, upper_bound: float) -> None:
        self._lower_bound = lower_bound
        self._upper_bound = upper_bound

    def _as_expression(self) -> expressions.LinearExpression:
        return expressions.LinearExpression.of(self)

    def __add__(self, other: Any) -> expressions.LinearExpression:
        return self._as_expression() + other

    def __radd__(self, other: Any) -> expressions.LinearExpression:
        return self._as_expression() + other

    def __sub__(self, other: Any) -> expressions.LinearExpression:
        return self._as_expression() - other

    def __rsub__(self, other: Any) -> expressions.LinearExpression:
        return (-self._as_expression()) + other

    def __mul__(self, other: float) -> expressions.LinearExpression:
        if not isinstance(other, (int, float)):
            return NotImplemented
        return expressions.LinearExpression.of(self, other)

    def __rmul__(self, other: float) -> expressions.LinearExpression:
        return self.__mul__(other)

    def __truediv__(self, other: float) -> expressions.LinearExpression:
        if not isinstance(other, (int, float)):
            return NotImplemented
        return expressions.LinearExpression.of(self, 1.0 / other)

    def __neg__(self) -> expressions.LinearExpression:
        return expressions.LinearExpression.of(self, -1.0)

    def __str__(self):
        return self._name

    def __repr__(self):
        return f"<Variable index: {self._index}, name: {self._name!r}>"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Variable):
            return self._index == other._index and self._storage is other._storage
        return False

    def __hash__(self) -> int:
        return hash(self._index)
