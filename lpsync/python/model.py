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

"""A linear model that can be edited between solves."""

import contextlib
import datetime
import enum
import math
from typing import Iterator, Mapping, Optional

from lpsync.python import expressions
from lpsync.python import highs_synchronizer
from lpsync.python import linear_constraints
from lpsync.python import model_storage
from lpsync.python import parameters
from lpsync.python import solution
from lpsync.python import solve as solve_lib
from lpsync.python import statistics as statistics_lib
from lpsync.python import synchronizer
from lpsync.python import variables

Variable = variables.Variable
VarType = variables.VarType
LinearConstraint = linear_constraints.LinearConstraint
ConstraintType = linear_constraints.ConstraintType
ObjectiveSense = model_storage.ObjectiveSense
ExpressionTypes = model_storage.ExpressionTypes


@enum.unique
class SolverType(enum.Enum):
    """The backend a model is kept in sync with.

    Attributes:
      HIGHS: The HiGHS LP/MIP solver.
      NONE: No backend, the model can be built and inspected but not solved.
    """

    HIGHS = "highs"
    NONE = "none"


class Model:
    """An optimization model kept in sync with a solver.

    The model is copied to the solver by the first solve. After that every
    change is applied to the solver incrementally, either immediately or, for
    changes made in a batch, when the batch ends:

    with lp.Model("production") as m:
      x = m.add_variable(0.0, 10.0, name="x")
      y = m.add_variable(0.0, 10.0, name="y")
      m.maximize(3 * x + 2 * y)
      c = m.add_constraint(x + y, lp.ConstraintType.LESS_EQUAL, 8.0)
      print(m.solve())
      m.update_constraint_rhs(c, 9.0)
      print(m.solve())

    Attributes:
      storage: The variables, constraints and objective of the model.
    """

    __slots__ = "storage", "_synchronizer", "_solve_time"

    def __init__(
        self, name: str = "", solver_type: SolverType = SolverType.HIGHS
    ) -> None:
        if solver_type == SolverType.HIGHS:
            sync = highs_synchronizer.HighsSynchronizer()
        else:
            sync = synchronizer.NullSynchronizer()
        self._synchronizer: synchronizer.Synchronizer = sync
        self.storage = model_storage.ModelStorage(name, sync)
        self._solve_time = datetime.timedelta()

    @property
    def name(self) -> str:
        return self.storage.name

    @property
    def solver_type(self) -> SolverType:
        if isinstance(self._synchronizer, highs_synchronizer.HighsSynchronizer):
            return SolverType.HIGHS
        return SolverType.NONE

    @property
    def synchronizer(self) -> synchronizer.Synchronizer:
        return self._synchronizer

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
        return self.storage.add_variable(lb, ub, var_type, name)

    def add_integer_variable(
        self, lb: float = 0.0, ub: float = math.inf, name: Optional[str] = None
    ) -> Variable:
        return self.storage.add_variable(lb, ub, VarType.INTEGER, name)

    def add_binary_variable(self, name: Optional[str] = None) -> Variable:
        return self.storage.add_variable(0.0, 1.0, VarType.BINARY, name)

    def update_variable_bounds(self, var: Variable, lb: float, ub: float) -> None:
        self.storage.update_variable_bounds(var, lb, ub)

    def remove_variable(self, var: Variable) -> None:
        self.storage.remove_variable(var)

    def variables(self) -> Iterator[Variable]:
        return self.storage.variables()

    def variable_by_name(self, name: str) -> Optional[Variable]:
        return self.storage.variable_by_name(name)

    def variable_exists(self, var: Variable) -> bool:
        return self.storage.variable_exists(var)

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
        return self.storage.add_constraint(expr, constraint_type, rhs, name)

    def add_range_constraint(
        self,
        expr: ExpressionTypes,
        lb: float,
        ub: float,
        name: Optional[str] = None,
    ) -> LinearConstraint:
        return self.storage.add_range_constraint(expr, lb, ub, name)

    def update_constraint_rhs(self, con: LinearConstraint, rhs: float) -> None:
        self.storage.update_constraint_rhs(con, rhs)

    def update_constraint_range(
        self, con: LinearConstraint, lb: float, ub: float
    ) -> None:
        self.storage.update_constraint_range(con, lb, ub)

    def remove_constraint(self, con: LinearConstraint) -> None:
        self.storage.remove_constraint(con)

    def update_coefficient(
        self, con: LinearConstraint, var: Variable, coeff: float
    ) -> None:
        self.storage.update_coefficient(con, var, coeff)

    def constraints(self) -> Iterator[LinearConstraint]:
        return self.storage.constraints()

    def constraint_by_name(self, name: str) -> Optional[LinearConstraint]:
        return self.storage.constraint_by_name(name)

    def constraint_exists(self, con: LinearConstraint) -> bool:
        return self.storage.constraint_exists(con)

    def row(self, con: LinearConstraint) -> Mapping[Variable, float]:
        return self.storage.row(con)

    ####################
    # Objective
    ####################

    def set_objective(self, expr: ExpressionTypes, sense: ObjectiveSense) -> None:
        self.storage.set_objective(expr, sense)

    def minimize(self, expr: ExpressionTypes) -> None:
        self.storage.set_objective(expr, ObjectiveSense.MINIMIZE)

    def maximize(self, expr: ExpressionTypes) -> None:
        self.storage.set_objective(expr, ObjectiveSense.MAXIMIZE)

    def update_objective_coefficient(self, var: Variable, coeff: float) -> None:
        self.storage.update_objective_coefficient(var, coeff)

    def set_objective_sense(self, sense: ObjectiveSense) -> None:
        self.storage.set_objective_sense(sense)

    def set_objective_offset(self, offset: float) -> None:
        self.storage.set_objective_offset(offset)

    def objective_expression(self) -> expressions.LinearExpression:
        """Returns a copy of the objective, its offset included."""
        expr = expressions.LinearExpression.weighted_sum(
            self.storage.objective_coefficients()
        )
        return expr.plus_constant(self.storage.objective_offset)

    ####################
    # Batches
    ####################

    def begin_update(self) -> None:
        self.storage.begin_update()

    def end_update(self) -> None:
        self.storage.end_update()

    @contextlib.contextmanager
    def batch(self) -> Iterator["Model"]:
        """Groups the changes made in the `with` block into one batch.

        with m.batch():
          for i in range(1000):
            m.add_variable(name=f"y{i}")

        The batch is ended even if the block raises.

        Yields:
          This model.
        """
        self.storage.begin_update()
        try:
            yield self
        finally:
            self.storage.end_update()

    ####################
    # Solving
    ####################

    def solve(
        self, params: Optional[parameters.SolveParameters] = None
    ) -> solution.Solution:
        """Solves the model, see solve.solve().

        Raises:
          RuntimeError: The model has no solver or a batch is open.
        """
        result = solve_lib.solve(self._highs(), params)
        self._solve_time = result.solve_time
        return result

    def set_option(self, key: str, value: parameters.OptionValue) -> None:
        """Sets a solver specific option, like SolveParameters.backend_options."""
        self._highs().set_option(key, value)

    def set_warm_start(self, values: Mapping[Variable, float]) -> None:
        """Sets the values used by the next solve with warm_start set."""
        self._highs().set_warm_start(values)

    def write_lp(self, path: str) -> None:
        """Writes the model in LP format, path must end with '.lp'."""
        self._write(path, ".lp")

    def write_mps(self, path: str) -> None:
        """Writes the model in MPS format, path must end with '.mps'."""
        self._write(path, ".mps")

    def _write(self, path: str, extension: str) -> None:
        # HiGHS picks the format from the extension.
        if not str(path).endswith(extension):
            raise ValueError(f"expected a path ending with {extension}, got: {path}")
        self._highs().write_model(str(path))

    def _highs(self) -> highs_synchronizer.HighsSynchronizer:
        if not isinstance(self._synchronizer, highs_synchronizer.HighsSynchronizer):
            raise RuntimeError(f"model {self.name!r} has no solver")
        return self._synchronizer

    ####################
    # Inspection
    ####################

    @property
    def num_variables(self) -> int:
        return self.storage.num_variables

    @property
    def num_constraints(self) -> int:
        return self.storage.num_constraints

    @property
    def num_non_zeros(self) -> int:
        return self.storage.num_non_zeros

    def statistics(self) -> statistics_lib.ModelStatistics:
        build_time = datetime.timedelta()
        if isinstance(self._synchronizer, highs_synchronizer.HighsSynchronizer):
            build_time = self._synchronizer.build_time
        return statistics_lib.compute_statistics(
            self.storage, build_time=build_time, solve_time=self._solve_time
        )

    def model_ranges(self) -> statistics_lib.ModelRanges:
        return statistics_lib.compute_model_ranges(self.storage)

    ####################
    # Lifecycle
    ####################

    def close(self) -> None:
        """Releases the solver, the model can't be changed or solved afterwards."""
        if isinstance(self._synchronizer, highs_synchronizer.HighsSynchronizer):
            self._synchronizer.close()

    def __enter__(self) -> "Model":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
