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

"""Linear constraints of a model."""

import enum
import math
from typing import Any, Optional, Tuple


@enum.unique
class ConstraintType(enum.Enum):
    """The sense of a single-sided (or equality) linear constraint."""

    EQUAL = "=="
    LESS_EQUAL = "<="
    GREATER_EQUAL = ">="


class LinearConstraint:
    """A linear constraint of a model.

    A LinearConstraint is either single sided:
      sum_{i in I} a_i * x_i  {==, <=, >=}  rhs
    or a range:
      lhs <= sum_{i in I} a_i * x_i <= rhs
    in which case constraint_type is None. The type and the range-ness are fixed
    at creation, only the right hand side (and the left hand side of a range) can
    change. The coefficients a_i live in the model, see Model.row().

    Two LinearConstraint objects are equal when they have the same logical index
    in the same model.

    Do not create a LinearConstraint directly, use Model.add_constraint() or
    Model.add_range_constraint() instead.
    """

    __slots__ = "_storage", "_index", "_name", "_constraint_type", "_lhs", "_rhs"

    def __init__(
        self,
        storage: Any,
        index: int,
        name: str,
        constraint_type: Optional[ConstraintType],
        lhs: float,
        rhs: float,
    ) -> None:
        """Internal only, prefer Model functions."""
        if not isinstance(index, int):
            raise TypeError(f"index type should be int, was:{type(index).__name__!r}")
        self._storage = storage
        self._index: int = index
        self._name: str = name
        self._constraint_type: Optional[ConstraintType] = constraint_type
        self._lhs: float = lhs
        self._rhs: float = rhs

    @property
    def index(self) -> int:
        return self._index

    @property
    def name(self) -> str:
        return self._name

    @property
    def constraint_type(self) -> Optional[ConstraintType]:
        """The sense of the constraint, None for a range constraint."""
        return self._constraint_type

    @property
    def rhs(self) -> float:
        return self._rhs

    @property
    def lhs(self) -> float:
        """The lower side of a range constraint, -inf otherwise."""
        return self._lhs

    @property
    def storage(self) -> Any:
        """Internal use only."""
        return self._storage

    def is_range(self) -> bool:
        return self._constraint_type is None

    def row_bounds(self) -> Tuple[float, float]:
        """Returns the (lower, upper) bounds of the row of this constraint."""
        if self._constraint_type is None:
            return self._lhs, self._rhs
        if self._constraint_type == ConstraintType.EQUAL:
            return self._rhs, self._rhs
        if self._constraint_type == ConstraintType.LESS_EQUAL:
            return -math.inf, self._rhs
        return self._rhs, math.inf

    def _set_rhs(self, rhs: float) -> None:
        self._rhs = rhs

    def _set_range(self, lhs: float, rhs: float) -> None:
        self._lhs = lhs
        self._rhs = rhs

    def __str__(self):
        return self._name

    def __repr__(self):
        if self.is_range():
            return (
                f"<LinearConstraint index: {self._index}, name: {self._name!r},"
                f" range: [{self._lhs}, {self._rhs}]>"
            )
        return (
            f"<LinearConstraint index: {self._index}, name: {self._name!r},"
            f" {self._constraint_type.value} {self._rhs}>"
        )

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, LinearConstraint):
            return self._index == other._index and self._storage is other._storage
        return False

    def __hash__(self) -> int:
        return hash(self._index)
