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

import datetime
import math

from absl.testing import absltest
from absl.testing import parameterized
import highspy
from lpsync.python import highs_synchronizer
from lpsync.python import linear_constraints
from lpsync.python import model_storage
from lpsync.python import parameters
from lpsync.python import solution
from lpsync.python import solve
from lpsync.python import variables

ConstraintType = linear_constraints.ConstraintType
ObjectiveSense = model_storage.ObjectiveSense
SolutionStatus = solution.SolutionStatus
ModelStatus = highspy.HighsModelStatus
RunStatus = highspy.HighsStatus


class SolveTest(absltest.TestCase):

    def setUp(self):
        super().setUp()
        self.sync = self.enter_context(highs_synchronizer.HighsSynchronizer())
        self.storage = model_storage.ModelStorage("test_model", self.sync)

    def _production_lp(self):
        x = self.storage.add_variable(0.0, 10.0, name="x")
        y = self.storage.add_variable(0.0, 10.0, name="y")
        c = self.storage.add_constraint(x + y, ConstraintType.LESS_EQUAL, 8.0, "c")
        d = self.storage.add_constraint(2 * x + y, ConstraintType.LESS_EQUAL, 14.0, "d")
        self.storage.set_objective(3 * x + 2 * y, ObjectiveSense.MAXIMIZE)
        return x, y, c, d

    def test_lp(self) -> None:
        x, y, c, d = self._production_lp()
        result = solve.solve(self.sync)
        self.assertEqual(result.status, SolutionStatus.OPTIMAL)
        self.assertTrue(result.is_optimal())
        self.assertAlmostEqual(result.objective_value, 22.0, places=6)
        self.assertAlmostEqual(result.value(x), 6.0, places=6)
        self.assertAlmostEqual(result.value(y), 2.0, places=6)
        self.assertEqual(result.gap, 0.0)
        self.assertEqual(result.node_count, 0)
        self.assertGreaterEqual(result.iterations, 0)
        self.assertGreaterEqual(result.solve_time, datetime.timedelta())
        # Both constraints are tight, with HiGHS' sign convention for maximization.
        self.assertAlmostEqual(abs(result.dual(c)), 1.0, places=6)
        self.assertAlmostEqual(abs(result.dual(d)), 1.0, places=6)

    def test_resolve_after_changes(self) -> None:
        x, y, c, _ = self._production_lp()
        self.assertAlmostEqual(solve.solve(self.sync).objective_value, 22.0, places=6)
        self.storage.update_constraint_rhs(c, 9.0)
        result = solve.solve(self.sync)
        self.assertAlmostEqual(result.objective_value, 23.0, places=6)
        self.assertAlmostEqual(result.value(x), 5.0, places=6)
        self.assertAlmostEqual(result.value(y), 4.0, places=6)

        z = self.storage.add_variable(0.0, 1.0, name="z")
        self.storage.update_objective_coefficient(z, 100.0)
        result = solve.solve(self.sync)
        self.assertAlmostEqual(result.objective_value, 123.0, places=6)
        self.assertAlmostEqual(result.value(z), 1.0, places=6)

        self.storage.remove_variable(x)
        result = solve.solve(self.sync)
        self.assertAlmostEqual(result.objective_value, 118.0, places=6)
        self.assertNotIn(x, result.variable_values)

    def test_resolve_after_batch(self) -> None:
        x, y, c, d = self._production_lp()
        solve.solve(self.sync)
        self.storage.begin_update()
        self.storage.remove_constraint(d)
        self.storage.update_coefficient(c, x, 2.0)
        self.storage.update_variable_bounds(y, 0.0, 3.0)
        self.storage.end_update()
        # max 3x + 2y, 2x + y <= 8, y <= 3: x = 2.5, y = 3 gives 13.5.
        result = solve.solve(self.sync)
        self.assertAlmostEqual(result.objective_value, 13.5, places=6)
        self.assertAlmostEqual(result.value(x), 2.5, places=6)
        self.assertAlmostEqual(result.value(y), 3.0, places=6)

    def test_fresh_copy_solves_the_same(self) -> None:
        x, _, c, _ = self._production_lp()
        self.storage.add_variable(0.0, 4.0, name="w")
        self.storage.remove_variable(x)
        self.storage.update_constraint_rhs(c, 5.0)
        result = solve.solve(self.sync)

        with highs_synchronizer.HighsSynchronizer() as copy_sync:
            copy = model_storage.ModelStorage("copy", copy_sync)
            copy_vars = {}
            for var in self.storage.variables():
                copy_vars[var] = copy.add_variable(
                    var.lower_bound, var.upper_bound, var.var_type, var.name
                )
            for con in self.storage.constraints():
                lb, ub = con.row_bounds()
                expr = sum(
                    coeff * copy_vars[var]
                    for var, coeff in self.storage.row(con).items()
                )
                copy.add_range_constraint(expr, lb, ub, con.name)
            objective = sum(
                coeff * copy_vars[var]
                for var, coeff in self.storage.objective_coefficients().items()
            )
            copy.set_objective(objective, ObjectiveSense.MAXIMIZE)
            copy_result = solve.solve(copy_sync)
            for var in self.storage.variables():
                self.assertEqual(
                    copy_sync.column_index(copy_vars[var]),
                    self.sync.column_index(var),
                )
        self.assertEqual(copy_result.status, result.status)
        self.assertAlmostEqual(copy_result.objective_value, result.objective_value)
        for var, value in result.variable_values.items():
            self.assertAlmostEqual(copy_result.value(copy_vars[var]), value)

    def test_unconstrained(self) -> None:
        x = self.storage.add_variable(1.0, 5.0)
        self.storage.set_objective(2 * x + 1, ObjectiveSense.MINIMIZE)
        result = solve.solve(self.sync)
        self.assertEqual(result.status, SolutionStatus.OPTIMAL)
        self.assertAlmostEqual(result.objective_value, 3.0, places=6)

    def test_mip(self) -> None:
        a = self.storage.add_variable(0.0, 10.0, variables.VarType.INTEGER, "a")
        b = self.storage.add_variable(0.0, 10.0, variables.VarType.INTEGER, "b")
        c = self.storage.add_variable(0.0, 10.0, variables.VarType.INTEGER, "c")
        self.storage.add_constraint(2 * a + 3 * b + c, ConstraintType.LESS_EQUAL, 5.0)
        self.storage.add_constraint(4 * a + b + 2 * c, ConstraintType.LESS_EQUAL, 11.0)
        self.storage.add_constraint(
            3 * a + 4 * b + 2 * c, ConstraintType.LESS_EQUAL, 8.0
        )
        self.storage.set_objective(5 * a + 4 * b + 3 * c, ObjectiveSense.MAXIMIZE)
        result = solve.solve(self.sync)
        self.assertEqual(result.status, SolutionStatus.OPTIMAL)
        self.assertAlmostEqual(result.objective_value, 13.0, places=6)
        self.assertAlmostEqual(result.value(a), 2.0, places=6)
        self.assertAlmostEqual(result.value(b), 0.0, places=6)
        self.assertAlmostEqual(result.value(c), 1.0, places=6)
        self.assertEmpty(result.dual_values)
        self.assertLessEqual(result.gap, 1e-4)

    def test_binary(self) -> None:
        b = self.storage.add_variable(0.0, 1.0, variables.VarType.BINARY, "b")
        x = self.storage.add_variable(0.0, 10.0, name="x")
        self.storage.add_constraint(x - 10 * b, ConstraintType.LESS_EQUAL, 0.0)
        self.storage.set_objective(x - 3 * b, ObjectiveSense.MAXIMIZE)
        result = solve.solve(self.sync)
        self.assertAlmostEqual(result.objective_value, 7.0, places=6)
        self.assertAlmostEqual(result.value(b), 1.0, places=6)

    def test_infeasible(self) -> None:
        x = self.storage.add_variable(0.0, 3.0)
        self.storage.add_constraint(x, ConstraintType.GREATER_EQUAL, 5.0)
        result = solve.solve(self.sync, parameters.SolveParameters(presolve="off"))
        self.assertEqual(result.status, SolutionStatus.INFEASIBLE)
        self.assertFalse(result.is_feasible())
        self.assertEmpty(result.variable_values)
        self.assertTrue(math.isnan(result.objective_value))
        self.assertIsNone(self.sync.warm_start)

    def test_unbounded(self) -> None:
        x = self.storage.add_variable(0.0, math.inf)
        y = self.storage.add_variable(0.0, math.inf)
        self.storage.add_constraint(x - y, ConstraintType.LESS_EQUAL, 1.0)
        self.storage.set_objective(x + y, ObjectiveSense.MAXIMIZE)
        result = solve.solve(self.sync)
        self.assertEqual(result.status, SolutionStatus.UNBOUNDED)

    def test_solution_becomes_warm_start(self) -> None:
        x, _, _, _ = self._production_lp()
        first = solve.solve(self.sync)
        self.assertEqual(dict(self.sync.warm_start), dict(first.variable_values))
        z = self.storage.add_variable(0.0, 1.0, name="z")
        second = solve.solve(self.sync, parameters.SolveParameters(warm_start=True))
        self.assertEqual(second.status, SolutionStatus.OPTIMAL)
        self.assertAlmostEqual(second.objective_value, 22.0, places=6)
        self.assertAlmostEqual(second.value(x), 6.0, places=6)
        self.assertIn(z, second.variable_values)

    def test_solve_in_batch(self) -> None:
        self._production_lp()
        self.storage.begin_update()
        with self.assertRaisesRegex(RuntimeError, "batch is open"):
            solve.solve(self.sync)
        self.storage.end_update()

    def test_solve_builds(self) -> None:
        self._production_lp()
        self.assertFalse(self.sync.is_built)
        solve.solve(self.sync)
        self.assertTrue(self.sync.is_built)


class ApplyParametersTest(absltest.TestCase):

    def test_limits_are_reset(self) -> None:
        highs = highspy.Highs()
        solve.apply_parameters(
            highs,
            parameters.SolveParameters(
                time_limit=datetime.timedelta(seconds=5),
                iteration_limit=100,
                node_limit=10,
                solution_limit=2,
                threads=1,
                presolve=parameters.Presolve.OFF,
                relative_gap_tolerance=0.05,
            ),
        )
        options = highs.getOptions()
        self.assertEqual(options.time_limit, 5.0)
        self.assertEqual(options.simplex_iteration_limit, 100)
        self.assertEqual(options.mip_max_nodes, 10)
        self.assertEqual(options.mip_max_improving_sols, 2)
        self.assertEqual(options.presolve, "off")
        self.assertEqual(options.mip_rel_gap, 0.05)

        solve.apply_parameters(highs, parameters.SolveParameters())
        options = highs.getOptions()
        self.assertEqual(options.time_limit, math.inf)
        self.assertEqual(options.mip_max_nodes, 2147483647)
        self.assertEqual(options.presolve, "choose")
        self.assertEqual(options.mip_rel_gap, 1e-4)
        self.assertFalse(options.output_flag)

    def test_output_level(self) -> None:
        highs = highspy.Highs()
        solve.apply_parameters(highs, parameters.SolveParameters(output_level=2))
        options = highs.getOptions()
        self.assertTrue(options.output_flag)
        self.assertTrue(options.log_to_console)

    def test_backend_options_win(self) -> None:
        highs = highspy.Highs()
        solve.apply_parameters(
            highs,
            parameters.SolveParameters(
                relative_gap_tolerance=0.05,
                backend_options={"mip_rel_gap": 0.2, "simplex_strategy": 4},
            ),
        )
        options = highs.getOptions()
        self.assertEqual(options.mip_rel_gap, 0.2)
        self.assertEqual(options.simplex_strategy, 4)


class MapStatusTest(parameterized.TestCase):

    @parameterized.named_parameters(
        ("optimal", ModelStatus.kOptimal, SolutionStatus.OPTIMAL),
        ("empty", ModelStatus.kModelEmpty, SolutionStatus.OPTIMAL),
        ("infeasible", ModelStatus.kInfeasible, SolutionStatus.INFEASIBLE),
        ("unbounded", ModelStatus.kUnbounded, SolutionStatus.UNBOUNDED),
        (
            "unbounded_or_infeasible",
            ModelStatus.kUnboundedOrInfeasible,
            SolutionStatus.UNBOUNDED,
        ),
        ("time_limit", ModelStatus.kTimeLimit, SolutionStatus.TIME_LIMIT),
        ("iteration_limit", ModelStatus.kIterationLimit, SolutionStatus.ITERATION_LIMIT),
        ("solution_limit", ModelStatus.kSolutionLimit, SolutionStatus.SOLUTION_LIMIT),
        ("interrupt", ModelStatus.kInterrupt, SolutionStatus.INTERRUPTED),
        ("objective_bound", ModelStatus.kObjectiveBound, SolutionStatus.FEASIBLE),
        ("solve_error", ModelStatus.kSolveError, SolutionStatus.NUMERICAL_ERROR),
        ("not_set", ModelStatus.kNotset, SolutionStatus.UNKNOWN),
        ("unknown", ModelStatus.kUnknown, SolutionStatus.UNKNOWN),
    )
    def test_model_status(self, model_status, expected) -> None:
        self.assertEqual(solve.map_status(RunStatus.kOk, model_status), expected)
        self.assertEqual(solve.map_status(RunStatus.kWarning, model_status), expected)

    def test_run_error(self) -> None:
        self.assertEqual(
            solve.map_status(RunStatus.kError, ModelStatus.kOptimal),
            SolutionStatus.NUMERICAL_ERROR,
        )

    def test_node_limit(self) -> None:
        params = parameters.SolveParameters(node_limit=10)
        self.assertEqual(
            solve.map_status(RunStatus.kWarning, ModelStatus.kSolutionLimit, params, 10),
            SolutionStatus.NODE_LIMIT,
        )
        self.assertEqual(
            solve.map_status(RunStatus.kWarning, ModelStatus.kSolutionLimit, params, 3),
            SolutionStatus.SOLUTION_LIMIT,
        )

    @parameterized.named_parameters(
        ("optimal", ModelStatus.kOptimal),
        ("objective_bound", ModelStatus.kObjectiveBound),
        ("objective_target", ModelStatus.kObjectiveTarget),
    )
    def test_feasible_without_values_is_unknown(self, model_status) -> None:
        self.assertEqual(
            solve.map_status(RunStatus.kOk, model_status, has_values=False),
            SolutionStatus.UNKNOWN,
        )

    def test_limits_without_values_are_kept(self) -> None:
        self.assertEqual(
            solve.map_status(
                RunStatus.kWarning, ModelStatus.kTimeLimit, has_values=False
            ),
            SolutionStatus.TIME_LIMIT,
        )


if __name__ == "__main__":
    absltest.main()
