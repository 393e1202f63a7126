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

"""The outcome of a solve."""

import dataclasses
import datetime
import enum
import math
from typing import Mapping

import immutabledict

from lpsync.python import linear_constraints
from lpsync.python import variables


@enum.unique
class SolutionStatus(enum.Enum):
    """Why the solver stopped.

    Only OPTIMAL and FEASIBLE solutions carry variable values. The other
    statuses are regular outcomes the caller has to handle, not errors.

    Attributes:
      OPTIMAL: A provably optimal solution was found (up to tolerances).
      FEASIBLE: A feasible solution was found but optimality is not proven.
      INFEASIBLE: The problem has no feasible solution.
      UNBOUNDED: The problem is unbounded (or the solver could not tell
        unbounded from infeasible).
      TIME_LIMIT: The time limit was reached.
      ITERATION_LIMIT: The iteration limit was reached.
      NODE_LIMIT: The branch-and-bound node limit was reached.
      SOLUTION_LIMIT: The limit on the number of improving solutions was
        reached.
      INTERRUPTED: The solve was interrupted.
      NUMERICAL_ERROR: The solver failed, usually because of numerical issues.
      UNKNOWN: Any other outcome.
    """

    OPTIMAL = "optimal"
    FEASIBLE = "feasible"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    TIME_LIMIT = "time_limit"
    ITERATION_LIMIT = "iteration_limit"
    NODE_LIMIT = "node_limit"
    SOLUTION_LIMIT = "solution_limit"
    INTERRUPTED = "interrupted"
    NUMERICAL_ERROR = "numerical_error"
    UNKNOWN = "unknown"


@dataclasses.dataclass(frozen=True)
class Solution:
    """An immutable snapshot of the outcome of one solve.

    Attributes:
      status: Why the solver stopped.
      objective_value: The objective value of the solution, NaN if none.
      gap: The relative MIP gap, 0.0 for LPs.
      solve_time: Wall clock time spent in the backend solve call.
      iterations: The number of simplex iterations.
      node_count: The number of branch-and-bound nodes.
      variable_values: The value of each variable, empty unless is_feasible().
      dual_values: The dual value of each constraint, only set for feasible
        solves of models without integer variables.
    """

    status: SolutionStatus = SolutionStatus.UNKNOWN
    objective_value: float = math.nan
    gap: float = 0.0
    solve_time: datetime.timedelta = datetime.timedelta()
    iterations: int = 0
    node_count: int = 0
    variable_values: Mapping[variables.Variable, float] = immutabledict.immutabledict()
    dual_values: Mapping[linear_constraints.LinearConstraint, float] = (
        immutabledict.immutabledict()
    )

    def __post_init__(self):
        object.__setattr__(
            self, "variable_values", immutabledict.immutabledict(self.variable_values)
        )
        object.__setattr__(
            self, "dual_values", immutabledict.immutabledict(self.dual_values)
        )

    def value(self, var: variables.Variable) -> float:
        """Returns the value of var, 0.0 if the solution has none."""
        return self.variable_values.get(var, 0.0)

    def dual(self, con: linear_constraints.LinearConstraint) -> float:
        """Returns the dual value of con, 0.0 if the solution has none."""
        return self.dual_values.get(con, 0.0)

    def is_optimal(self) -> bool:
        return self.status == SolutionStatus.OPTIMAL

    def is_feasible(self) -> bool:
        return self.status in (SolutionStatus.OPTIMAL, SolutionStatus.FEASIBLE)

    def __str__(self) -> str:
        result = f"Solution[status={self.status.name}"
        if self.is_feasible():
            result += f", objective={self.objective_value}"
            if self.gap > 0:
                result += f", gap={self.gap * 100:.2f}%"
        result += f", time={self.solve_time.total_seconds() * 1000:.0f}ms"
        if self.node_count > 0:
            result += f", nodes={self.node_count}"
        return result + "]"
