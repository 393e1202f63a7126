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

"""Saves solutions to JSON files and reads them back as warm starts.

The file holds the summary of the solution and its variable values keyed by
variable name:

  {
    "status": "OPTIMAL",
    "objectiveValue": 22.0,
    "gap": 0.0,
    "solveTimeMs": 3,
    "iterations": 2,
    "nodeCount": 0,
    "variableValues": {"x": 6.0, "y": 2.0}
  }

Since variables are matched by name, a solution can be loaded in another
model (or another process) built with the same names.
"""

import json
import math
from typing import Any, Dict, Optional, Protocol

from absl import logging

from lpsync.python import solution as solution_lib
from lpsync.python import variables


class VariableLookup(Protocol):
    """Anything with variable_by_name(), e.g. a Model or a ModelStorage."""

    def variable_by_name(self, name: str) -> Optional[variables.Variable]:
        ...


def save_solution(solution: solution_lib.Solution, path: str) -> None:
    """Writes solution to path as JSON, see the module documentation."""
    objective = solution.objective_value
    data: Dict[str, Any] = {
        "status": solution.status.name,
        "objectiveValue": None if math.isnan(objective) else objective,
        "gap": solution.gap,
        "solveTimeMs": round(solution.solve_time.total_seconds() * 1000),
        "iterations": solution.iterations,
        "nodeCount": solution.node_count,
        "variableValues": {
            var.name: value for var, value in solution.variable_values.items()
        },
    }
    with open(path, "w") as f:
        json.dump(data, f, indent=2)


def load_solution_values(
    path: str, model: VariableLookup
) -> Dict[variables.Variable, float]:
    """Reads the variable values of a saved solution.

    Args:
      path: A file written by save_solution().
      model: Resolves the saved names, names without live variable are
        skipped.

    Returns:
      The value of each variable of model named in the file, suitable for
      Model.set_warm_start().

    Raises:
      OSError: path can't be read.
      ValueError: The file is not valid JSON or has no variable values.
    """
    with open(path) as f:
        data = json.load(f)
    saved = data.get("variableValues") if isinstance(data, dict) else None
    if not isinstance(saved, dict):
        raise ValueError(f"{path} has no variableValues object")
    values = {}
    for name, value in saved.items():
        var = model.variable_by_name(name)
        if var is not None:
            values[var] = float(value)
    if len(values) < len(saved):
        logging.info(
            "Skipped %d unknown variables loading %s", len(saved) - len(values), path
        )
    return values
