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

import math

from absl.testing import absltest
from lpsync.python import errors
from lpsync.python import expressions
from lpsync.python import linear_constraints
from lpsync.python import model_storage
from lpsync.python import variables
from lpsync.python.testing import recording_synchronizer

ConstraintType = linear_constraints.ConstraintType
ObjectiveSense = model_storage.ObjectiveSense
VarType = variables.VarType


class ModelStorageTest(absltest.TestCase):

    def setUp(self):
        super().setUp()
        self.sync = recording_synchronizer.RecordingSynchronizer()
        self.storage = model_storage.ModelStorage("test_model", self.sync)

    def test_attach(self) -> None:
        self.assertIs(self.sync.storage, self.storage)
        self.assertIs(self.storage.synchronizer, self.sync)

    def test_default_synchronizer(self) -> None:
        storage = model_storage.ModelStorage()
        x = storage.add_variable()
        storage.remove_variable(x)
        self.assertEqual(storage.num_variables, 0)

    def test_add_variable(self) -> None:
        x = self.storage.add_variable(-1.0, 2.5, VarType.INTEGER, "x")
        self.assertEqual(x.index, 0)
        self.assertEqual(x.name, "x")
        self.assertEqual(x.lower_bound, -1.0)
        self.assertEqual(x.upper_bound, 2.5)
        self.assertEqual(x.var_type, VarType.INTEGER)
        self.assertTrue(x.is_integral())
        self.assertIs(x.storage, self.storage)
        self.assertEqual(self.sync.take(), [("variable_added", x)])

    def test_add_variable_defaults(self) -> None:
        x = self.storage.add_variable()
        self.assertEqual(x.lower_bound, 0.0)
        self.assertEqual(x.upper_bound, math.inf)
        self.assertEqual(x.var_type, VarType.CONTINUOUS)

    def test_inverted_bounds_are_accepted(self) -> None:
        x = self.storage.add_variable(3.0, 1.0)
        self.assertEqual((x.lower_bound, x.upper_bound), (3.0, 1.0))

    def test_generated_names(self) -> None:
        x0 = self.storage.add_variable()
        taken = self.storage.add_variable(name="x1")
        x2 = self.storage.add_variable()
        c0 = self.storage.add_constraint(x0, ConstraintType.LESS_EQUAL, 1.0)
        self.assertEqual(x0.name, "x0")
        self.assertEqual(taken.name, "x1")
        self.assertEqual(x2.name, "x2")
        self.assertEqual(c0.name, "c0")

    def test_duplicate_names(self) -> None:
        x = self.storage.add_variable(name="x")
        with self.assertRaisesRegex(ValueError, "already exists"):
            self.storage.add_variable(name="x")
        self.storage.add_constraint(x, ConstraintType.EQUAL, 1.0, name="c")
        with self.assertRaisesRegex(ValueError, "already exists"):
            self.storage.add_constraint(x, ConstraintType.EQUAL, 1.0, name="c")

    def test_name_is_free_after_removal(self) -> None:
        x = self.storage.add_variable(name="x")
        self.storage.remove_variable(x)
        self.assertIsNone(self.storage.variable_by_name("x"))
        new_x = self.storage.add_variable(name="x")
        self.assertNotEqual(new_x, x)
        self.assertIs(self.storage.variable_by_name("x"), new_x)

    def test_indices_are_never_reused(self) -> None:
        x = self.storage.add_variable()
        self.storage.remove_variable(x)
        y = self.storage.add_variable()
        self.assertEqual(y.index, 1)

    def test_active_variables(self) -> None:
        created = [self.storage.add_variable() for _ in range(5)]
        self.storage.remove_variable(created[1])
        self.storage.remove_variable(created[3])
        self.assertEqual(
            list(self.storage.variables()), [created[0], created[2], created[4]]
        )
        self.assertEqual(self.storage.num_variables, 3)
        self.assertTrue(self.storage.variable_exists(created[0]))
        self.assertFalse(self.storage.variable_exists(created[1]))

    def test_update_variable_bounds(self) -> None:
        x = self.storage.add_variable()
        self.sync.take()
        self.storage.update_variable_bounds(x, 1.0, 4.0)
        self.assertEqual((x.lower_bound, x.upper_bound), (1.0, 4.0))
        self.assertEqual(self.sync.take(), [("variable_bounds_changed", x)])

    def test_remove_variable_purges_rows_and_objective(self) -> None:
        x = self.storage.add_variable(name="x")
        y = self.storage.add_variable(name="y")
        c = self.storage.add_constraint(x + y, ConstraintType.LESS_EQUAL, 1.0)
        self.storage.set_objective(2 * x + y, ObjectiveSense.MINIMIZE)
        self.sync.take()
        self.storage.remove_variable(x)
        self.assertDictEqual(dict(self.storage.row(c)), {y: 1.0})
        self.assertDictEqual(dict(self.storage.objective_coefficients()), {y: 1.0})
        self.assertEqual(self.storage.num_non_zeros, 1)
        self.assertEqual(self.sync.take(), [("variable_removed", x)])

    def test_remove_variable_twice(self) -> None:
        x = self.storage.add_variable()
        self.storage.remove_variable(x)
        self.sync.take()
        self.storage.remove_variable(x)
        self.assertEmpty(self.sync.take())
        self.assertEqual(self.storage.num_variables, 0)

    def test_removed_variable_is_rejected(self) -> None:
        x = self.storage.add_variable()
        c = self.storage.add_constraint(
            expressions.LinearExpression(), ConstraintType.LESS_EQUAL, 1.0
        )
        self.storage.remove_variable(x)
        with self.assertRaises(errors.BadVariableError):
            self.storage.update_variable_bounds(x, 0.0, 1.0)
        with self.assertRaises(errors.BadVariableError):
            self.storage.update_coefficient(c, x, 1.0)
        with self.assertRaises(errors.BadVariableError):
            self.storage.update_objective_coefficient(x, 1.0)
        with self.assertRaises(errors.BadVariableError):
            self.storage.add_constraint(x + 0, ConstraintType.EQUAL, 0.0)
        with self.assertRaises(errors.BadVariableError):
            self.storage.set_objective(2 * x, ObjectiveSense.MAXIMIZE)

    def test_variable_of_another_model_is_rejected(self) -> None:
        other = model_storage.ModelStorage("other")
        x = other.add_variable()
        with self.assertRaises(errors.BadVariableError):
            self.storage.update_variable_bounds(x, 0.0, 1.0)
        with self.assertRaises(errors.BadVariableError):
            self.storage.remove_variable(x)
        self.assertFalse(self.storage.variable_exists(x))

    def test_wrong_type_is_rejected(self) -> None:
        with self.assertRaises(TypeError):
            self.storage.update_variable_bounds("x", 0.0, 1.0)
        with self.assertRaises(TypeError):
            self.storage.add_constraint(3.0, ConstraintType.EQUAL, 0.0)

    def test_add_constraint(self) -> None:
        x = self.storage.add_variable(name="x")
        y = self.storage.add_variable(name="y")
        expr = 2 * x + 3 * y
        c = self.storage.add_constraint(expr, ConstraintType.LESS_EQUAL, 10.0, "cap")
        self.assertEqual(c.name, "cap")
        self.assertEqual(c.constraint_type, ConstraintType.LESS_EQUAL)
        self.assertEqual(c.rhs, 10.0)
        self.assertFalse(c.is_range())
        self.assertDictEqual(dict(self.storage.row(c)), {x: 2.0, y: 3.0})
        self.assertIs(self.storage.constraint_by_name("cap"), c)
        # The row is a copy of the expression.
        expr.plus(x, 1.0)
        self.assertEqual(self.storage.get_coefficient(c, x), 2.0)

    def test_add_constraint_moves_constant_to_rhs(self) -> None:
        x = self.storage.add_variable()
        c = self.storage.add_constraint(x + 2, ConstraintType.LESS_EQUAL, 10.0)
        self.assertEqual(c.rhs, 8.0)
        r = self.storage.add_range_constraint(x - 1, 0.0, 4.0)
        self.assertEqual((r.lhs, r.rhs), (1.0, 5.0))

    def test_add_constraint_on_variable(self) -> None:
        x = self.storage.add_variable()
        c = self.storage.add_constraint(x, ConstraintType.GREATER_EQUAL, 1.0)
        self.assertDictEqual(dict(self.storage.row(c)), {x: 1.0})

    def test_range_constraint(self) -> None:
        x = self.storage.add_variable()
        y = self.storage.add_variable()
        r = self.storage.add_range_constraint(x + y, 5.0, 15.0)
        self.assertTrue(r.is_range())
        self.assertIsNone(r.constraint_type)
        self.assertEqual(r.row_bounds(), (5.0, 15.0))
        self.storage.update_constraint_rhs(r, 20.0)
        self.assertEqual(r.row_bounds(), (5.0, 20.0))
        self.storage.update_constraint_range(r, 1.0, 2.0)
        self.assertEqual(r.row_bounds(), (1.0, 2.0))

    def test_update_range_of_single_sided_constraint(self) -> None:
        x = self.storage.add_variable()
        c = self.storage.add_constraint(x, ConstraintType.EQUAL, 1.0)
        with self.assertRaisesRegex(ValueError, "not a range"):
            self.storage.update_constraint_range(c, 0.0, 1.0)

    def test_update_constraint_rhs(self) -> None:
        x = self.storage.add_variable()
        c = self.storage.add_constraint(x, ConstraintType.EQUAL, 1.0)
        self.sync.take()
        self.storage.update_constraint_rhs(c, 3.0)
        self.assertEqual(c.row_bounds(), (3.0, 3.0))
        self.assertEqual(self.sync.take(), [("constraint_bounds_changed", c)])

    def test_remove_constraint(self) -> None:
        x = self.storage.add_variable()
        c = self.storage.add_constraint(x, ConstraintType.EQUAL, 1.0, name="c")
        self.sync.take()
        self.storage.remove_constraint(c)
        self.storage.remove_constraint(c)
        self.assertEqual(self.sync.take(), [("constraint_removed", c)])
        self.assertEqual(self.storage.num_constraints, 0)
        self.assertEqual(self.storage.num_non_zeros, 0)
        self.assertIsNone(self.storage.constraint_by_name("c"))
        self.assertFalse(self.storage.constraint_exists(c))
        with self.assertRaises(errors.BadConstraintError):
            self.storage.update_constraint_rhs(c, 2.0)
        with self.assertRaises(errors.BadConstraintError):
            self.storage.update_coefficient(c, x, 2.0)
        with self.assertRaises(errors.BadConstraintError):
            self.storage.row(c)

    def test_update_coefficient(self) -> None:
        x = self.storage.add_variable()
        y = self.storage.add_variable()
        c = self.storage.add_constraint(x, ConstraintType.LESS_EQUAL, 1.0)
        self.sync.take()
        self.storage.update_coefficient(c, y, 4.0)
        self.assertEqual(self.storage.get_coefficient(c, y), 4.0)
        self.assertEqual(self.storage.num_non_zeros, 2)
        self.storage.update_coefficient(c, x, 1e-12)
        self.assertNotIn(x, self.storage.row(c))
        self.assertEqual(self.storage.num_non_zeros, 1)
        self.assertEqual(
            self.sync.take(),
            [("coefficient_changed", c, y, 4.0), ("coefficient_changed", c, x, 1e-12)],
        )

    def test_set_objective(self) -> None:
        x = self.storage.add_variable()
        y = self.storage.add_variable()
        self.storage.set_objective(x + 2 * y + 5, ObjectiveSense.MAXIMIZE)
        self.assertEqual(self.storage.objective_sense, ObjectiveSense.MAXIMIZE)
        self.assertEqual(self.storage.objective_offset, 5.0)
        self.assertDictEqual(
            dict(self.storage.objective_coefficients()), {x: 1.0, y: 2.0}
        )
        self.storage.set_objective(3 * y, ObjectiveSense.MINIMIZE)
        self.assertDictEqual(dict(self.storage.objective_coefficients()), {y: 3.0})
        self.assertEqual(self.storage.objective_offset, 0.0)
        self.assertEqual(self.storage.objective_coefficient(x), 0.0)

    def test_objective_updates(self) -> None:
        x = self.storage.add_variable()
        self.sync.take()
        self.storage.update_objective_coefficient(x, 2.0)
        self.storage.update_objective_coefficient(x, 0.0)
        self.storage.set_objective_sense(ObjectiveSense.MAXIMIZE)
        self.storage.set_objective_offset(1.5)
        self.assertEmpty(self.storage.objective_coefficients())
        self.assertEqual(self.storage.objective_offset, 1.5)
        self.assertEqual(
            self.sync.take(),
            [
                ("objective_coefficient_changed", x, 2.0),
                ("objective_coefficient_changed", x, 0.0),
                ("objective_sense_changed",),
                ("objective_offset_changed",),
            ],
        )

    def test_is_all_continuous(self) -> None:
        self.assertTrue(self.storage.is_all_continuous())
        self.storage.add_variable()
        self.assertTrue(self.storage.is_all_continuous())
        b = self.storage.add_variable(0.0, 1.0, VarType.BINARY)
        self.assertFalse(self.storage.is_all_continuous())
        self.storage.remove_variable(b)
        self.assertTrue(self.storage.is_all_continuous())


class BatchTest(absltest.TestCase):

    def setUp(self):
        super().setUp()
        self.sync = recording_synchronizer.RecordingSynchronizer()
        self.storage = model_storage.ModelStorage("test_model", self.sync)
        self.x = self.storage.add_variable(name="x")
        self.y = self.storage.add_variable(name="y")
        self.c = self.storage.add_constraint(
            self.x + self.y, ConstraintType.LESS_EQUAL, 4.0, name="c"
        )
        self.sync.take()

    def test_attribute_changes_are_flushed_in_order(self) -> None:
        self.storage.begin_update()
        self.assertTrue(self.storage.in_batch)
        self.storage.set_objective(self.x, ObjectiveSense.MAXIMIZE)
        self.storage.update_coefficient(self.c, self.x, 2.0)
        self.storage.update_variable_bounds(self.y, 0.0, 1.0)
        self.storage.update_variable_bounds(self.x, 0.0, 2.0)
        self.storage.update_variable_bounds(self.y, 0.0, 3.0)
        self.storage.update_constraint_rhs(self.c, 5.0)
        self.assertEqual(self.sync.take(), [("begin_update",)])
        self.storage.end_update()
        self.assertFalse(self.storage.in_batch)
        self.assertEqual(
            self.sync.take(),
            [
                ("variable_bounds_changed", self.y),
                ("variable_bounds_changed", self.x),
                ("constraint_modified", self.c),
                ("objective_changed",),
                ("end_update",),
            ],
        )
        self.assertEqual((self.y.lower_bound, self.y.upper_bound), (0.0, 3.0))

    def test_structural_changes_are_reported_immediately(self) -> None:
        self.storage.begin_update()
        z = self.storage.add_variable(name="z")
        d = self.storage.add_constraint(z, ConstraintType.EQUAL, 1.0)
        self.storage.remove_variable(self.x)
        self.storage.remove_constraint(self.c)
        self.assertEqual(
            self.sync.take(),
            [
                ("begin_update",),
                ("variable_added", z),
                ("constraint_added", d),
                ("variable_removed", self.x),
                ("constraint_removed", self.c),
            ],
        )
        self.storage.end_update()
        self.assertEqual(self.sync.take(), [("end_update",)])

    def test_removed_entities_are_not_flushed(self) -> None:
        self.storage.begin_update()
        self.storage.update_variable_bounds(self.x, 1.0, 2.0)
        self.storage.update_constraint_rhs(self.c, 3.0)
        self.storage.remove_variable(self.x)
        self.storage.remove_constraint(self.c)
        self.sync.take()
        self.storage.end_update()
        self.assertEqual(self.sync.take(), [("end_update",)])

    def test_nested_batch_is_rejected(self) -> None:
        self.storage.begin_update()
        with self.assertRaisesRegex(RuntimeError, "batch is open"):
            self.storage.begin_update()
        self.storage.end_update()
        self.assertFalse(self.storage.in_batch)

    def test_end_update_outside_batch(self) -> None:
        self.storage.end_update()
        self.assertEmpty(self.sync.take())

    def test_empty_batch(self) -> None:
        self.storage.begin_update()
        self.storage.end_update()
        self.assertEqual(self.sync.take(), [("begin_update",), ("end_update",)])

    def test_dirty_sets_are_cleared(self) -> None:
        self.storage.begin_update()
        self.storage.update_variable_bounds(self.x, 0.0, 1.0)
        self.storage.end_update()
        self.sync.take()
        self.storage.begin_update()
        self.storage.end_update()
        self.assertEqual(self.sync.take(), [("begin_update",), ("end_update",)])


if __name__ == "__main__":
    absltest.main()
