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

"""Configures the solving of a model."""

import dataclasses
import datetime
import enum
from typing import Dict, Optional, Union

OptionValue = Union[bool, int, float, str]


@enum.unique
class Presolve(enum.Enum):
    """Whether the backend simplifies the problem before solving it.

    Attributes:
      ON: Always presolve.
      OFF: Never presolve.
      AUTO: Let the backend decide.
    """

    ON = "on"
    OFF = "off"
    AUTO = "auto"

    @classmethod
    def from_string(cls, mode: str) -> "Presolve":
        """Returns the mode for 'on', 'off' or 'auto' (case insensitive).

        Raises:
          ValueError: mode is not one of the three modes.
        """
        try:
            return cls(mode.lower())
        except ValueError:
            raise ValueError(f"Invalid presolve mode: {mode!r}") from None


@dataclasses.dataclass
class SolveParameters:
    """Parameters to control a single solve.

    Limits and tolerances are applied on every solve: a solve with the default
    parameters resets what a previous solve configured.

    Attributes:
      time_limit: The maximum time the solver should spend on the problem, or
        None for no limit.
      relative_gap_tolerance: The relative MIP gap at which the solver can stop
        and claim optimality.
      primal_feasibility_tolerance: Tolerance on constraint and bound violations.
      dual_feasibility_tolerance: Tolerance on reduced costs (optimality).
      threads: The number of threads the solver may use, 0 lets it choose.
      iteration_limit: Limit on simplex iterations, None for no limit.
      node_limit: Limit on branch-and-bound nodes, None for no limit.
      solution_limit: Stop after this many improving MIP solutions, None for no
        limit.
      presolve: See Presolve.
      output_level: 0 is silent, 1 prints the solver log, 2 additionally forces
        the log to the console.
      warm_start: If true and a previous solve found a feasible solution, it is
        given to the solver as a starting point.
      backend_options: Options passed verbatim to the backend, after the generic
        parameters above so they take precedence. For HiGHS, the keys are option
        names like "simplex_strategy".
    """

    time_limit: Optional[datetime.timedelta] = None
    relative_gap_tolerance: float = 1e-4
    primal_feasibility_tolerance: float = 1e-7
    dual_feasibility_tolerance: float = 1e-7
    threads: int = 0
    iteration_limit: Optional[int] = None
    node_limit: Optional[int] = None
    solution_limit: Optional[int] = None
    presolve: Presolve = Presolve.AUTO
    output_level: int = 0
    warm_start: bool = False
    backend_options: Dict[str, OptionValue] = dataclasses.field(default_factory=dict)

    def __post_init__(self):
        if self.threads < 0:
            raise ValueError(f"threads must be >= 0, got: {self.threads}")
        if self.relative_gap_tolerance < 0:
            raise ValueError(
                "relative_gap_tolerance must be >= 0, got:"
                f" {self.relative_gap_tolerance}"
            )
        if isinstance(self.presolve, str):
            self.presolve = Presolve.from_string(self.presolve)

    @classmethod
    def quick(cls) -> "SolveParameters":
        """One minute, 1% gap."""
        return cls(
            time_limit=datetime.timedelta(seconds=60),
            relative_gap_tolerance=0.01,
        )

    @classmethod
    def balanced(cls) -> "SolveParameters":
        """Five minutes, 0.1% gap."""
        return cls(
            time_limit=datetime.timedelta(seconds=300),
            relative_gap_tolerance=0.001,
        )

    @classmethod
    def exact(cls) -> "SolveParameters":
        """No time limit and tight tolerances."""
        return cls(
            relative_gap_tolerance=1e-9,
            primal_feasibility_tolerance=1e-9,
            dual_feasibility_tolerance=1e-9,
        )
