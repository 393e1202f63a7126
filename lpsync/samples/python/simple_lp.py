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

"""Solves a small production planning LP, then changes it and solves again."""

from collections.abc import Sequence

from absl import app

from lpsync.python import lp


# Model the problem:
#   max 3.0 * x + 2.0 * y
#   s.t. x + y <= 8   (capacity)
#        2 * x + y <= 14   (labor)
#        x, y in [0.0, 10.0]
#
def main(argv: Sequence[str]) -> None:
    del argv  # Unused.

    with lp.Model(name="production") as model:
        x = model.add_variable(lb=0.0, ub=10.0, name="x")
        y = model.add_variable(lb=0.0, ub=10.0, name="y")
        capacity = model.add_constraint(
            x + y, lp.ConstraintType.LESS_EQUAL, 8.0, name="capacity"
        )
        model.add_constraint(
            2 * x + y, lp.ConstraintType.LESS_EQUAL, 14.0, name="labor"
        )
        model.maximize(3 * x + 2 * y)

        result = model.solve()
        if not result.is_optimal():
            raise RuntimeError(f"model failed to solve: {result}")
        print(f"Objective value: {result.objective_value}")
        print(f"Value for variable x: {result.value(x)}")
        print(f"Value for variable y: {result.value(y)}")
        print(f"Dual value of capacity: {result.dual(capacity)}")

        # Only the changed row bound is sent to the solver.
        model.update_constraint_rhs(capacity, 9.0)
        result = model.solve()
        print(f"Objective value with more capacity: {result.objective_value}")
        print(model.statistics())


if __name__ == "__main__":
    app.run(main)
