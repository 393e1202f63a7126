#!/usr/bin/env python3
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

"""Solves a growing knapsack problem, warm starting each solve from the last.

Items arrive in rounds. Every round adds its items to the model in one batch,
sets the capacity to 30% of the total weight and solves again, starting from
the previous solution. With --solution_path, the last solution is saved as
JSON, and the solution saved by a previous run seeds one extra final solve.
"""

from collections.abc import Sequence
import datetime
import os
import random
from typing import List, Optional

from absl import app
from absl import flags

from lpsync.python import lp

_NUM_ITEMS = flags.DEFINE_integer(
    "num_items", 50, "How many items arrive in each round."
)

_NUM_ROUNDS = flags.DEFINE_integer("num_rounds", 5, "How many rounds to solve.")

_SEED = flags.DEFINE_integer("seed", 0, "Seed of the random item generator.")

_TIME_LIMIT = flags.DEFINE_float(
    "time_limit", 10.0, "Time limit of each solve, in seconds."
)

_SOLUTION_PATH = flags.DEFINE_string(
    "solution_path", None, "Where to load and save the warm start solution."
)


def solve_rounds(
    model: lp.Model,
    num_items: int,
    num_rounds: int,
    seed: int,
    params: lp.SolveParameters,
) -> List[lp.Solution]:
    """Adds num_items items per round to model and solves after each round.

    Args:
      model: An empty model.
      num_items: The number of items added by each round.
      num_rounds: The number of rounds.
      seed: Seed of the weights and values of the items.
      params: Parameters of every solve, warm_start should be set.

    Returns:
      The solution of each round.
    """
    rng = random.Random(seed)
    capacity = model.add_constraint(
        lp.LinearExpression(), lp.ConstraintType.LESS_EQUAL, 0.0, "capacity"
    )
    model.set_objective_sense(lp.ObjectiveSense.MAXIMIZE)
    total_weight = 0.0
    results = []
    for r in range(num_rounds):
        with model.batch():
            for i in range(num_items):
                take = model.add_binary_variable(name=f"take_{r}_{i}")
                weight = rng.randint(1, 20)
                total_weight += weight
                model.update_coefficient(capacity, take, weight)
                model.update_objective_coefficient(take, rng.randint(1, 30))
            model.update_constraint_rhs(capacity, 0.3 * total_weight)
        result = model.solve(params)
        if not result.is_feasible():
            raise RuntimeError(f"round {r} failed to solve: {result}")
        print(f"Round {r}: {result}")
        results.append(result)
    return results


def main(argv: Sequence[str]) -> None:
    del argv  # Unused.

    params = lp.SolveParameters(
        time_limit=datetime.timedelta(seconds=_TIME_LIMIT.value),
        relative_gap_tolerance=0.001,
        warm_start=True,
    )
    path: Optional[str] = _SOLUTION_PATH.value
    with lp.Model(name="knapsack") as model:
        results = solve_rounds(
            model, _NUM_ITEMS.value, _NUM_ROUNDS.value, _SEED.value, params
        )
        if path:
            if os.path.exists(path):
                model.set_warm_start(lp.load_solution_values(path, model))
                print(f"Final solve from {path}: {model.solve(params)}")
            lp.save_solution(results[-1], path)
        print(model.statistics())


if __name__ == "__main__":
    app.run(main)
