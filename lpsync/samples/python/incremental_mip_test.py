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

from absl.testing import absltest
from lpsync.python import lp
from lpsync.samples.python import incremental_mip


class IncrementalMipTest(absltest.TestCase):

    def test_solve_rounds(self) -> None:
        params = lp.SolveParameters(relative_gap_tolerance=0.0, warm_start=True)
        with lp.Model(name="knapsack") as model:
            results = incremental_mip.solve_rounds(
                model, num_items=8, num_rounds=3, seed=1, params=params
            )
            self.assertLen(results, 3)
            self.assertEqual(model.num_variables, 24)
            capacity = model.constraint_by_name("capacity")
            for result in results:
                self.assertEqual(result.status, lp.SolutionStatus.OPTIMAL)
            # Each round keeps the previous solution feasible.
            for previous, current in zip(results, results[1:]):
                self.assertGreaterEqual(
                    current.objective_value, previous.objective_value - 1e-6
                )
            last = results[-1]
            used = sum(
                coeff * last.value(var) for var, coeff in model.row(capacity).items()
            )
            self.assertLessEqual(used, capacity.row_bounds()[1] + 1e-6)


if __name__ == "__main__":
    absltest.main()
