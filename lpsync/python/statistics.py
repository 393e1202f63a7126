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

"""Statistics about the size and the numerics of a model."""

import dataclasses
import datetime
import math
from typing import Iterable, Optional

from lpsync.python import model_storage
from lpsync.python import variables


@dataclasses.dataclass(frozen=True)
class ModelStatistics:
    """The size of a model and the time spent building and solving it.

    Attributes:
      num_variables: The number of live variables.
      num_constraints: The number of live constraints.
      num_non_zeros: The number of non-zero constraint coefficients.
      num_integers: The number of INTEGER variables.
      num_binaries: The number of BINARY variables.
      build_time: Time of the last full build of the backend model.
      solve_time: Time of the last solve.
    """

    num_variables: int = 0
    num_constraints: int = 0
    num_non_zeros: int = 0
    num_integers: int = 0
    num_binaries: int = 0
    build_time: datetime.timedelta = datetime.timedelta()
    solve_time: datetime.timedelta = datetime.timedelta()

    @property
    def num_continuous(self) -> int:
        return self.num_variables - self.num_integers - self.num_binaries

    def __str__(self) -> str:
        return (
            f"Variables   : {self.num_variables} ({self.num_continuous} continuous,"
            f" {self.num_integers} integer, {self.num_binaries} binary)\n"
            f"Constraints : {self.num_constraints}\n"
            f"Non-zeros   : {self.num_non_zeros}\n"
            f"Build time  : {self.build_time.total_seconds() * 1000:.0f}ms\n"
            f"Solve time  : {self.solve_time.total_seconds() * 1000:.0f}ms"
        )


def compute_statistics(
    storage: model_storage.ModelStorage,
    build_time: datetime.timedelta = datetime.timedelta(),
    solve_time: datetime.timedelta = datetime.timedelta(),
) -> ModelStatistics:
    """Counts the live entities of storage."""
    num_integers = 0
    num_binaries = 0
    for var in storage.variables():
        if var.var_type == variables.VarType.INTEGER:
            num_integers += 1
        elif var.var_type == variables.VarType.BINARY:
            num_binaries += 1
    return ModelStatistics(
        num_variables=storage.num_variables,
        num_constraints=storage.num_constraints,
        num_non_zeros=storage.num_non_zeros,
        num_integers=num_integers,
        num_binaries=num_binaries,
        build_time=build_time,
        solve_time=solve_time,
    )


@dataclasses.dataclass(frozen=True)
class Range:
    """A closed range of values [minimum, maximum]."""

    minimum: float
    maximum: float


def merge_optional_ranges(
    lhs: Optional[Range], rhs: Optional[Range]
) -> Optional[Range]:
    """Returns the smallest range containing both, None if both are None."""
    if lhs is None or rhs is None:
        return rhs if lhs is None else lhs
    return Range(min(lhs.minimum, rhs.minimum), max(lhs.maximum, rhs.maximum))


def absolute_finite_non_zeros_range(values: Iterable[float]) -> Optional[Range]:
    """Returns the range of the absolute values of the finite non-zeros.

    Args:
      values: The values to scan.

    Returns:
      The range, None if values has no finite non-zero.
    """
    magnitudes = [abs(v) for v in values if v != 0.0 and math.isfinite(v)]
    if not magnitudes:
        return None
    return Range(min(magnitudes), max(magnitudes))


@dataclasses.dataclass(frozen=True)
class ModelRanges:
    """The ranges of the absolute values of the finite non-zeros of a model.

    A range is None when there is no such value, e.g. an empty objective or
    only unbounded variables. Large ratios between the extremes of a range are a
    hint of numerical trouble.

    Attributes:
      objective_terms: The objective coefficients, the offset excluded.
      variable_bounds: The lower and upper bounds of the variables.
      constraint_bounds: The row bounds of the constraints.
      constraint_coefficients: The constraint matrix entries.
    """

    objective_terms: Optional[Range]
    variable_bounds: Optional[Range]
    constraint_bounds: Optional[Range]
    constraint_coefficients: Optional[Range]

    def __str__(self) -> str:
        """Returns one line per range, numbers formatted as f'{x:.2e}'.

        The last line does not end with a new line.
        """
        lines = []
        for label, value in (
            ("Objective terms         : ", self.objective_terms),
            ("Variable bounds         : ", self.variable_bounds),
            ("Constraint bounds       : ", self.constraint_bounds),
            ("Constraint coefficients : ", self.constraint_coefficients),
        ):
            if value is None:
                lines.append(label + "no finite values")
            else:
                # Width 9 fits d.dde+ddd, so the columns stay aligned.
                lines.append(label + f"[{value.minimum:<9.2e}, {value.maximum:<9.2e}]")
        return "\n".join(lines)


def compute_model_ranges(storage: model_storage.ModelStorage) -> ModelRanges:
    """Returns the ranges of the finite non-zero values of storage."""
    live_variables = list(storage.variables())
    live_constraints = list(storage.constraints())
    return ModelRanges(
        objective_terms=absolute_finite_non_zeros_range(
            storage.objective_coefficients().values()
        ),
        variable_bounds=merge_optional_ranges(
            absolute_finite_non_zeros_range(v.lower_bound for v in live_variables),
            absolute_finite_non_zeros_range(v.upper_bound for v in live_variables),
        ),
        constraint_bounds=absolute_finite_non_zeros_range(
            bound for con in live_constraints for bound in con.row_bounds()
        ),
        constraint_coefficients=absolute_finite_non_zeros_range(
            coeff for con in live_constraints for coeff in storage.row(con).values()
        ),
    )
