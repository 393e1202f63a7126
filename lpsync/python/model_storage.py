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

"""In memory storage of an optimization model, kept in sync with a backend.

Most users should not use this class directly and use Model defined in
model.py.

Stores a mixed integer programming problem of the form:

  {max/min} c*x + d
  s.t.  lb_c <= A * x <= ub_c
        lb_v <=     x <= ub_v
                    x_i integer for i in I

Variables and constraints are identified by a logical index that begins at
zero, increases with each creation and is never reused. Removing a variable or
a constraint tombstones it: every later operation addressed to it raises
BadVariableError or BadConstraintError, except removing it again which does
nothing. The matrix A is stored as one sparse row per live constraint, and no
zero entry is ever stored.

Every change is reported to the Synchronizer given at construction. Between
begin_update() and end_update() only structural changes (additions and
removals) are reported as they happen; bound, right hand side, coefficient and
objective changes are recorded in dirty sets and reported by end_update(), in
this order: variable bounds, modified constraints, objective, and finally
Synchronizer.on_end_update().
"""

import enum
import math
import types
from typing import Dict, Iterator, Mapping, Optional, Set, Tuple, Union

from lpsync.python import errors
from lpsync.python import expressions
from lpsync.python import linear_constraints
from lpsync.python import synchronizer as synchronizer_lib
from lpsync.python import variables

Variable = variables.Variable
LinearConstraint = linear_constraints.LinearConstraint
ConstraintType = linear_constraints.ConstraintType
VarType = variables.VarType

ExpressionTypes = Union[expressions.LinearExpression, variables.Variable]


@enum.unique
class ObjectiveSense(enum.Enum):
    MINIMIZE = "minimize"
    MAXIMIZE = "maximize"


class ModelStorage:
    """The solver independent record of a model.

    Attributes:
      name: The name of the model, used only for debugging.
    """

    def __init__(
        self,
        name: str = "",
        synchronizer: Optional[synchronizer_lib.Synchronizer] = None,
    ) -> None:
        self.name: str = name
        self._synchronizer: synchronizer_lib.Synchronizer = (
            synchronizer or synchronizer_lib.NullSynchronizer()
        )

        # All variables and constraints ever created, in order of creation.
        self._variables: Dict[int, Variable] = {}
        self._constraints: Dict[int, LinearConstraint] = {}
        self._variables_by_name: Dict[str, Variable] = {}
        self._constraints_by_name: Dict[str, LinearConstraint] = {}
        self._deleted_variables: Set[Variable] = set()
        self._deleted_constraints: Set[LinearConstraint] = set()
        self._next_var_index: int = 0
        self._next_con_index: int = 0
        self._next_var_name: int = 0
        self._next_con_name: int = 0

        # One sparse row per live constraint.
        self._matrix: Dict[LinearConstraint, Dict[Variable, float]] = {}

        self._objective_sense: ObjectiveSense = ObjectiveSense.MINIMIZE
        self._objective_offset: float = 0.0
        self._objective: Dict[Variable, float] = {}

        # Batch state. Dicts are used as insertion ordered sets.
        self._in_batch: bool = False
        self._dirty_variables: Dict[Variable, None] = {}
        self._dirty_constraints: Dict[LinearConstraint, None] = {}
        self._objective_dirty: bool = False

        self._synchronizer.attach(self)

    @property
    def synchronizer(self) -> synchronizer_lib.Synchronizer:
        return self._synchronizer

    @property
    def in_batch(self) -> bool:
        return self._in_batch

    ####################
    # Variables
    ####################

    def add_variable(
        self,
        lb: float = 0.0,
        ub: float = math.inf,
        var_type: VarType = VarType.CONTINUOUS,
        name: Optional[str] = None,
    ) -> Variable:
        """Adds a variable, lb > ub is not checked here but by the backend at solve time.

        Args:
          lb: The lower bound of the variable.
          ub: The upper bound of the variable.
          var_type: The domain of the variable.
          name: A name unique among live variables, one of the form x<k> is
            generated when None.

        Returns:
          The new variable.

        Raises:
          ValueError: The name is used by another live variable.
        """
        self._synchronizer.check_open()
        if name is None:
            name, self._next_var_name = _generate_name(
                "x", self._variables_by_name, self._next_var_name
            )
        elif name in self._variables_by_name:
            raise ValueError(f"a variable named {name!r} already exists")
        var = Variable(self, self._next_var_index, name, lb, ub, var_type)
        self._next_var_index += 1
        self._variables[var.index] = var
        self._variables_by_name[name] = var
        self._synchronizer.on_variable_added(var)
        return var

    def update_variable_bounds(self, var: Variable, lb: float, ub: float) -> None:
        self._synchronizer.check_open()
        self._check_variable(var)
        var._set_bounds(lb, ub)  # pylint: disable=protected-access
        if self._in_batch:
            self._dirty_variables[var] = None
        else:
            self._synchronizer.on_variable_bounds_changed(var)

    def remove_variable(self, var: Variable) -> None:
        """Removes var from the model, its objective term and every row.

        Removing an already removed variable does nothing.

        Args:
          var: The variable to remove.

        Raises:
          BadVariableError: var is from another model.
        """
        self._synchronizer.check_open()
        if var in self._deleted_variables:
            return
        self._check_variable(var)
        self._deleted_variables.add(var)
        del self._variables_by_name[var.name]
        self._objective.pop(var, None)
        for row in self._matrix.values():
            row.pop(var, None)
        self._dirty_variables.pop(var, None)
        self._synchronizer.on_variable_removed(var)

    def variable_exists(self, var: Variable) -> bool:
        return (
            isinstance(var, Variable)
            and var.storage is self
            and var not in self._deleted_variables
        )

    def variables(self) -> Iterator[Variable]:
        """Yields the live variables in order of creation."""
        for var in self._variables.values():
            if var not in self._deleted_variables:
                yield var

    def variable_by_name(self, name: str) -> Optional[Variable]:
        """Returns the live variable with this name, None if there is none."""
        return self._variables_by_name.get(name)

    ####################
    # Constraints
    ####################

    def add_constraint(
        self,
        expr: ExpressionTypes,
        constraint_type: ConstraintType,
        rhs: float,
        name: Optional[str] = None,
    ) -> LinearConstraint:
        """Adds the constraint `expr {==, <=, >=} rhs`.

        The constant of expr is moved to the right hand side.

        Args:
          expr: The left hand side, its terms are copied into a new row.
          constraint_type: The sense of the constraint.
          rhs: The right hand side.
          name: A name unique among live constraints, one of the form c<k> is
            generated when None.

        Returns:
          The new constraint.

        Raises:
          BadVariableError: expr uses a removed variable or one of another model.
          ValueError: The name is used by another live constraint.
        """
        expr = _as_expression(expr)
        return self._add_constraint(
            expr, name, constraint_type, -math.inf, rhs - expr.offset
        )

    def add_range_constraint(
        self,
        expr: ExpressionTypes,
        lb: float,
        ub: float,
        name: Optional[str] = None,
    ) -> LinearConstraint:
        """Adds the constraint `lb <= expr <= ub`, see add_constraint()."""
        expr = _as_expression(expr)
        return self._add_constraint(
            expr, name, None, lb - expr.offset, ub - expr.offset
        )

    def _add_constraint(
        self,
        expr: expressions.LinearExpression,
        name: Optional[str],
        constraint_type: Optional[ConstraintType],
        lhs: float,
        rhs: float,
    ) -> LinearConstraint:
        self._synchronizer.check_open()
        for var in expr.variables():
            self._check_variable(var)
        if name is None:
            name, self._next_con_name = _generate_name(
                "c", self._constraints_by_name, self._next_con_name
            )
        elif name in self._constraints_by_name:
            raise ValueError(f"a constraint named {name!r} already exists")
        con = LinearConstraint(
            self, self._next_con_index, name, constraint_type, lhs, rhs
        )
        self._next_con_index += 1
        self._constraints[con.index] = con
        self._constraints_by_name[name] = con
        self._matrix[con] = dict(expr.items())
        self._synchronizer.on_constraint_added(con)
        return con

    def update_constraint_rhs(self, con: LinearConstraint, rhs: float) -> None:
        """Sets the right hand side, the upper side for a range constraint."""
        self._synchronizer.check_open()
        self._check_constraint(con)
        con._set_rhs(rhs)  # pylint: disable=protected-access
        self._constraint_changed(con)

    def update_constraint_range(
        self, con: LinearConstraint, lb: float, ub: float
    ) -> None:
        """Sets both sides of a range constraint.

        Args:
          con: A range constraint.
          lb: The new lower side.
          ub: The new upper side.

        Raises:
          BadConstraintError: con has been removed or is from another model.
          ValueError: con is not a range constraint.
        """
        self._synchronizer.check_open()
        self._check_constraint(con)
        if not con.is_range():
            raise ValueError(f"constraint {con} is not a range constraint")
        con._set_range(lb, ub)  # pylint: disable=protected-access
        self._constraint_changed(con)

    def _constraint_changed(self, con: LinearConstraint) -> None:
        if self._in_batch:
            self._dirty_constraints[con] = None
        else:
            self._synchronizer.on_constraint_bounds_changed(con)

    def remove_constraint(self, con: LinearConstraint) -> None:
        """Removes con from the model, removing an already removed constraint does nothing."""
        self._synchronizer.check_open()
        if con in self._deleted_constraints:
            return
        self._check_constraint(con)
        self._deleted_constraints.add(con)
        del self._constraints_by_name[con.name]
        del self._matrix[con]
        self._dirty_constraints.pop(con, None)
        self._synchronizer.on_constraint_removed(con)

    def constraint_exists(self, con: LinearConstraint) -> bool:
        return (
            isinstance(con, LinearConstraint)
            and con.storage is self
            and con not in self._deleted_constraints
        )

    def constraints(self) -> Iterator[LinearConstraint]:
        """Yields the live constraints in order of creation."""
        for con in self._constraints.values():
            if con not in self._deleted_constraints:
                yield con

    def constraint_by_name(self, name: str) -> Optional[LinearConstraint]:
        return self._constraints_by_name.get(name)

    def row(self, con: LinearConstraint) -> Mapping[Variable, float]:
        """Returns a read-only view of the non-zero coefficients of con."""
        self._check_constraint(con)
        return types.MappingProxyType(self._matrix[con])

    def update_coefficient(
        self, con: LinearConstraint, var: Variable, coeff: float
    ) -> None:
        """Sets the coefficient of var in con, a near zero coefficient removes the entry."""
        self._synchronizer.check_open()
        self._check_constraint(con)
        self._check_variable(var)
        row = self._matrix[con]
        if expressions.is_zero(coeff):
            row.pop(var, None)
        else:
            row[var] = coeff
        if self._in_batch:
            self._dirty_constraints[con] = None
        else:
            self._synchronizer.on_coefficient_changed(con, var, coeff)

    def get_coefficient(self, con: LinearConstraint, var: Variable) -> float:
        self._check_constraint(con)
        self._check_variable(var)
        return self._matrix[con].get(var, 0.0)

    ####################
    # Objective
    ####################

    @property
    def objective_sense(self) -> ObjectiveSense:
        return self._objective_sense

    @property
    def objective_offset(self) -> float:
        return self._objective_offset

    def objective_coefficients(self) -> Mapping[Variable, float]:
        """Returns a read-only view of the non-zero objective coefficients."""
        return types.MappingProxyType(self._objective)

    def objective_coefficient(self, var: Variable) -> float:
        self._check_variable(var)
        return self._objective.get(var, 0.0)

    def set_objective(self, expr: ExpressionTypes, sense: ObjectiveSense) -> None:
        """Replaces the sense, the offset and every coefficient of the objective."""
        self._synchronizer.check_open()
        expr = _as_expression(expr)
        for var in expr.variables():
            self._check_variable(var)
        self._objective_sense = sense
        self._objective_offset = expr.offset
        self._objective = dict(expr.items())
        if self._in_batch:
            self._objective_dirty = True
        else:
            self._synchronizer.on_objective_changed()

    def update_objective_coefficient(self, var: Variable, coeff: float) -> None:
        self._synchronizer.check_open()
        self._check_variable(var)
        if expressions.is_zero(coeff):
            self._objective.pop(var, None)
        else:
            self._objective[var] = coeff
        if self._in_batch:
            self._objective_dirty = True
        else:
            self._synchronizer.on_objective_coefficient_changed(var, coeff)

    def set_objective_sense(self, sense: ObjectiveSense) -> None:
        self._synchronizer.check_open()
        self._objective_sense = sense
        if self._in_batch:
            self._objective_dirty = True
        else:
            self._synchronizer.on_objective_sense_changed()

    def set_objective_offset(self, offset: float) -> None:
        self._synchronizer.check_open()
        self._objective_offset = offset
        if self._in_batch:
            self._objective_dirty = True
        else:
            self._synchronizer.on_objective_offset_changed()

    ####################
    # Batches
    ####################

    def begin_update(self) -> None:
        """Starts recording changes instead of reporting them one by one.

        Raises:
          RuntimeError: A batch is already open, batches do not nest.
        """
        self._synchronizer.check_open()
        if self._in_batch:
            raise RuntimeError("begin_update() called while a batch is open")
        self._in_batch = True
        self._dirty_variables.clear()
        self._dirty_constraints.clear()
        self._objective_dirty = False
        self._synchronizer.on_begin_update()

    def end_update(self) -> None:
        """Reports the changes recorded since begin_update(), does nothing outside a batch.

        A failure while reporting leaves the backend partially updated.
        """
        if not self._in_batch:
            return
        self._in_batch = False
        try:
            for var in self._dirty_variables:
                self._synchronizer.on_variable_bounds_changed(var)
            for con in self._dirty_constraints:
                self._synchronizer.on_constraint_modified(con)
            if self._objective_dirty:
                self._synchronizer.on_objective_changed()
            self._synchronizer.on_end_update()
        finally:
            self._dirty_variables.clear()
            self._dirty_constraints.clear()
            self._objective_dirty = False

    ####################
    # Inspection
    ####################

    @property
    def num_variables(self) -> int:
        return len(self._variables) - len(self._deleted_variables)

    @property
    def num_constraints(self) -> int:
        return len(self._constraints) - len(self._deleted_constraints)

    @property
    def num_non_zeros(self) -> int:
        return sum(len(row) for row in self._matrix.values())

    def is_all_continuous(self) -> bool:
        return all(var.var_type == VarType.CONTINUOUS for var in self.variables())

    ####################
    # Helpers
    ####################

    def _check_variable(self, var: Variable) -> None:
        if not isinstance(var, Variable):
            raise TypeError(f"expected a Variable, got: {type(var).__name__!r}")
        if var.storage is not self or var in self._deleted_variables:
            raise errors.BadVariableError(var)

    def _check_constraint(self, con: LinearConstraint) -> None:
        if not isinstance(con, LinearConstraint):
            raise TypeError(
                f"expected a LinearConstraint, got: {type(con).__name__!r}"
            )
        if con.storage is not self or con in self._deleted_constraints:
            raise errors.BadConstraintError(con)


def _as_expression(expr: ExpressionTypes) -> expressions.LinearExpression:
    if isinstance(expr, Variable):
        return expressions.LinearExpression.of(expr)
    if isinstance(expr, expressions.LinearExpression):
        return expr
    raise TypeError(
        f"expected a LinearExpression or a Variable, got: {type(expr).__name__!r}"
    )


def _generate_name(prefix: str, used: Mapping[str, object], start: int) -> Tuple[str, int]:
    """Returns the first unused name prefix<k> with k >= start, and k + 1."""
    index = start
    while f"{prefix}{index}" in used:
        index += 1
    return f"{prefix}{index}", index + 1
