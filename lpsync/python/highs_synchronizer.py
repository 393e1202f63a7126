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

"""Keeps a HiGHS model consistent with a ModelStorage.

HiGHS identifies columns and rows by dense indices 0..n-1 and renumbers them
when some are deleted, while the storage identifies variables and constraints
by logical indices that never change. HighsSynchronizer owns the two IndexMaps
between them and translates every storage notification into the matching
HiGHS calls, so a model can be edited and solved again without rebuilding it.

The synchronizer is "unbuilt" until build() (called by the first solve)
copies the whole model to HiGHS, and is "built" afterwards. Notifications
received while unbuilt are ignored since build() reads the current state.
"""

import datetime
import itertools
import time
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from absl import logging
import highspy
import numpy as np

from lpsync.python import commands
from lpsync.python import errors
from lpsync.python import index_map
from lpsync.python import init
from lpsync.python import linear_constraints
from lpsync.python import model_storage
from lpsync.python import parameters
from lpsync.python import synchronizer
from lpsync.python import variables

Variable = variables.Variable
LinearConstraint = linear_constraints.LinearConstraint


class HighsSynchronizer(synchronizer.Synchronizer):
    """Mirrors a ModelStorage into a highspy.Highs instance.

    Outside of a batch each notification is applied immediately. Between
    on_begin_update() and on_end_update() the structural changes (additions
    and deletions) are queued as commands and executed in order when the batch
    ends, consecutive deletions being applied by a single HiGHS call. Bound,
    coefficient and objective changes of a batch are flushed by the storage
    just before on_end_update() and are applied immediately.

    Commands read the values to push from the storage when they are executed,
    and any command about an entity without HiGHS index does nothing. This
    makes the order of a batch irrelevant: every non-zero is pushed exactly
    once, by AddColumn or AddRow, whichever comes second.

    This class holds a HiGHS instance, it is recommended to release it as soon
    as possible with close() or the `with` statement:

    with HighsSynchronizer() as sync:
      storage = model_storage.ModelStorage(synchronizer=sync)
      ...

    Any method called after close() raises BackendClosedError.
    """

    def __init__(self) -> None:
        init.BackendBridge.init()
        self._highs = highspy.Highs()
        errors.check_status(
            self._highs.setOptionValue("output_flag", False), "setOptionValue"
        )
        self._storage: Optional[model_storage.ModelStorage] = None
        self._columns: index_map.IndexMap[Variable] = index_map.IndexMap()
        self._rows: index_map.IndexMap[LinearConstraint] = index_map.IndexMap()
        self._built = False
        self._in_batch = False
        self._pending: List[commands.Command] = []
        self._warm_start: Optional[Dict[Variable, float]] = None
        self._build_time = datetime.timedelta()
        self._closed = False

    def attach(self, storage: model_storage.ModelStorage) -> None:
        if self._storage is not None and self._storage is not storage:
            raise RuntimeError("the synchronizer is already attached to a model")
        self._storage = storage

    @property
    def storage(self) -> model_storage.ModelStorage:
        if self._storage is None:
            raise RuntimeError("the synchronizer is not attached to a model")
        return self._storage

    @property
    def backend(self) -> highspy.Highs:
        """The HiGHS instance, for calls not covered by this class."""
        self.check_open()
        return self._highs

    @property
    def is_built(self) -> bool:
        return self._built

    @property
    def build_time(self) -> datetime.timedelta:
        """Wall clock time of the last build()."""
        return self._build_time

    @property
    def closed(self) -> bool:
        return self._closed

    def column_index(self, var: Variable) -> Optional[int]:
        """Returns the HiGHS column of var, None if var has none."""
        return self._columns.get(var)

    def row_index(self, con: LinearConstraint) -> Optional[int]:
        """Returns the HiGHS row of con, None if con has none."""
        return self._rows.get(con)

    def column_variables(self) -> Sequence[Variable]:
        """The variables of the HiGHS columns, in column order."""
        return self._columns.keys()

    def row_constraints(self) -> Sequence[LinearConstraint]:
        """The constraints of the HiGHS rows, in row order."""
        return self._rows.keys()

    ####################
    # Whole model
    ####################

    def build(self) -> None:
        """Replaces the HiGHS model with the current content of the storage.

        Columns and rows are numbered in creation order of the live variables
        and constraints, so building twice the same storage gives the same
        HiGHS model.

        Raises:
          BackendError: HiGHS rejected the model.
          BackendClosedError: The synchronizer has been closed.
        """
        self.check_open()
        storage = self.storage
        start = time.monotonic()
        self._pending.clear()
        self._columns.rebuild(storage.variables())
        self._rows.rebuild(storage.constraints())
        num_col = len(self._columns)
        num_row = len(self._rows)

        objective = storage.objective_coefficients()
        col_cost = np.zeros(num_col, dtype=np.float64)
        col_lower = np.zeros(num_col, dtype=np.float64)
        col_upper = np.zeros(num_col, dtype=np.float64)
        integrality = []
        for j, var in enumerate(self._columns):
            col_cost[j] = objective.get(var, 0.0)
            col_lower[j], col_upper[j] = _column_bounds(var)
            integrality.append(_integrality(var))

        # The storage is row major, HiGHS wants the columns.
        row_lower = np.zeros(num_row, dtype=np.float64)
        row_upper = np.zeros(num_row, dtype=np.float64)
        entries: List[List[Tuple[int, float]]] = [[] for _ in range(num_col)]
        for i, con in enumerate(self._rows):
            row_lower[i], row_upper[i] = con.row_bounds()
            for var, coeff in storage.row(con).items():
                entries[self._columns.get(var)].append((i, coeff))
        a_start = np.zeros(num_col + 1, dtype=np.int32)
        a_start[1:] = np.cumsum([len(column) for column in entries], dtype=np.int32)
        num_nz = int(a_start[-1])
        a_index = np.fromiter(
            (i for column in entries for i, _ in column), dtype=np.int32, count=num_nz
        )
        a_value = np.fromiter(
            (v for column in entries for _, v in column),
            dtype=np.float64,
            count=num_nz,
        )

        lp = highspy.HighsLp()
        lp.num_col_ = num_col
        lp.num_row_ = num_row
        lp.sense_ = _objective_sense(storage.objective_sense)
        lp.offset_ = storage.objective_offset
        lp.col_cost_ = col_cost
        lp.col_lower_ = col_lower
        lp.col_upper_ = col_upper
        lp.row_lower_ = row_lower
        lp.row_upper_ = row_upper
        lp.a_matrix_.format_ = highspy.MatrixFormat.kColwise
        lp.a_matrix_.num_col_ = num_col
        lp.a_matrix_.num_row_ = num_row
        lp.a_matrix_.start_ = a_start
        lp.a_matrix_.index_ = a_index
        lp.a_matrix_.value_ = a_value
        if not storage.is_all_continuous():
            lp.integrality_ = integrality
        errors.check_status(self._highs.passModel(lp), "passModel")
        self._built = True

        self._build_time = datetime.timedelta(seconds=time.monotonic() - start)
        logging.info(
            "Built HiGHS model %r: %d columns, %d rows, %d non-zeros in %.3fs",
            storage.name,
            num_col,
            num_row,
            num_nz,
            self._build_time.total_seconds(),
        )

    def reset(self) -> None:
        """Drops the HiGHS model, the next solve builds it again.

        The warm start seed is kept.
        """
        self.check_open()
        errors.check_status(self._highs.clearModel(), "clearModel")
        self._columns.clear()
        self._rows.clear()
        self._pending.clear()
        self._built = False

    def set_option(self, key: str, value: parameters.OptionValue) -> None:
        """Sets a HiGHS option, the type of value must match the option's."""
        self.check_open()
        errors.check_status(
            self._highs.setOptionValue(key, value), f"setOptionValue({key})"
        )

    def write_model(self, path: str) -> None:
        """Writes the model to path, HiGHS picks the format from the extension."""
        if not self._built:
            self.build()
        errors.check_status(self._highs.writeModel(str(path)), "writeModel")

    @property
    def warm_start(self) -> Optional[Mapping[Variable, float]]:
        """The values given to the solver when solving with warm_start."""
        return self._warm_start

    def set_warm_start(self, values: Optional[Mapping[Variable, float]]) -> None:
        self.check_open()
        self._warm_start = None if values is None else dict(values)

    ####################
    # Notifications
    ####################

    def on_variable_added(self, var: Variable) -> None:
        self._structural(commands.AddColumn(var))

    def on_variable_bounds_changed(self, var: Variable) -> None:
        self._attribute(commands.ChangeColumnBounds(var))

    def on_variable_removed(self, var: Variable) -> None:
        self._structural(commands.DeleteColumn(var))

    def on_constraint_added(self, con: LinearConstraint) -> None:
        self._structural(commands.AddRow(con))

    def on_constraint_bounds_changed(self, con: LinearConstraint) -> None:
        self._attribute(commands.ChangeRowBounds(con))

    def on_constraint_modified(self, con: LinearConstraint) -> None:
        self._attribute(commands.ReplaceRow(con))

    def on_constraint_removed(self, con: LinearConstraint) -> None:
        self._structural(commands.DeleteRow(con))

    def on_coefficient_changed(
        self, con: LinearConstraint, var: Variable, coeff: float
    ) -> None:
        del coeff  # Read from the storage.
        self._attribute(commands.ChangeCoefficient(con, var))

    def on_objective_changed(self) -> None:
        self._attribute(commands.ReplaceObjective())

    def on_objective_coefficient_changed(self, var: Variable, coeff: float) -> None:
        del coeff  # Read from the storage.
        self._attribute(commands.ChangeColumnCost(var))

    def on_objective_sense_changed(self) -> None:
        self._attribute(commands.ChangeObjectiveSense())

    def on_objective_offset_changed(self) -> None:
        self._attribute(commands.ChangeObjectiveOffset())

    def on_begin_update(self) -> None:
        self.check_open()
        self._in_batch = True
        self._pending.clear()

    def on_end_update(self) -> None:
        self.check_open()
        self._in_batch = False
        pending, self._pending = self._pending, []
        for kind, group in itertools.groupby(pending, key=type):
            if kind is commands.DeleteColumn:
                self._delete_columns([command.variable for command in group])
            elif kind is commands.DeleteRow:
                self._delete_rows([command.constraint for command in group])
            else:
                for command in group:
                    self.execute(command)

    def _structural(self, command: commands.Command) -> None:
        self.check_open()
        if not self._built:
            return
        if self._in_batch:
            self._pending.append(command)
        else:
            self.execute(command)

    def _attribute(self, command: commands.Command) -> None:
        self.check_open()
        if self._built:
            self.execute(command)

    ####################
    # Commands
    ####################

    def execute(self, command: commands.Command) -> None:
        """Applies one command to the HiGHS model.

        Args:
          command: The change to apply, its values are read from the storage.

        Raises:
          BackendError: A HiGHS call failed, the HiGHS model may be left
            partially updated.
          TypeError: command is not a known command.
        """
        self.check_open()
        logging.vlog(1, "Executing %s", command)
        if isinstance(command, commands.AddColumn):
            self._add_column(command.variable)
        elif isinstance(command, commands.AddRow):
            self._add_row(command.constraint)
        elif isinstance(command, commands.ChangeColumnBounds):
            j = self._columns.get(command.variable)
            if j is not None:
                lb, ub = _column_bounds(command.variable)
                errors.check_status(
                    self._highs.changeColBounds(j, lb, ub), "changeColBounds"
                )
        elif isinstance(command, commands.ChangeRowBounds):
            i = self._rows.get(command.constraint)
            if i is not None:
                lb, ub = command.constraint.row_bounds()
                errors.check_status(
                    self._highs.changeRowBounds(i, lb, ub), "changeRowBounds"
                )
        elif isinstance(command, commands.DeleteColumn):
            self._delete_columns([command.variable])
        elif isinstance(command, commands.DeleteRow):
            self._delete_rows([command.constraint])
        elif isinstance(command, commands.ReplaceRow):
            if command.constraint in self._rows:
                self._delete_rows([command.constraint])
                self._add_row(command.constraint)
        elif isinstance(command, commands.ChangeCoefficient):
            i = self._rows.get(command.constraint)
            j = self._columns.get(command.variable)
            if i is not None and j is not None:
                value = self.storage.row(command.constraint).get(command.variable, 0.0)
                errors.check_status(
                    self._highs.changeCoeff(i, j, value), "changeCoeff"
                )
        elif isinstance(command, commands.ChangeColumnCost):
            j = self._columns.get(command.variable)
            if j is not None:
                cost = self.storage.objective_coefficients().get(command.variable, 0.0)
                errors.check_status(
                    self._highs.changeColCost(j, cost), "changeColCost"
                )
        elif isinstance(command, commands.ChangeObjectiveSense):
            self._push_sense()
        elif isinstance(command, commands.ChangeObjectiveOffset):
            self._push_offset()
        elif isinstance(command, commands.ReplaceObjective):
            self._push_sense()
            self._push_offset()
            self._push_costs()
        else:
            raise TypeError(f"unknown command: {command!r}")

    def _add_column(self, var: Variable) -> None:
        storage = self.storage
        if var in self._columns or not storage.variable_exists(var):
            return
        indices = []
        values = []
        for i, con in enumerate(self._rows):
            coeff = storage.row(con).get(var)
            if coeff is not None:
                indices.append(i)
                values.append(coeff)
        lb, ub = _column_bounds(var)
        cost = storage.objective_coefficients().get(var, 0.0)
        errors.check_status(
            self._highs.addCol(
                cost,
                lb,
                ub,
                len(indices),
                np.array(indices, dtype=np.int32),
                np.array(values, dtype=np.float64),
            ),
            "addCol",
        )
        j = self._columns.append(var)
        if var.is_integral():
            errors.check_status(
                self._highs.changeColIntegrality(j, highspy.HighsVarType.kInteger),
                "changeColIntegrality",
            )

    def _add_row(self, con: LinearConstraint) -> None:
        storage = self.storage
        if con in self._rows or not storage.constraint_exists(con):
            return
        entries = sorted(
            (self._columns.get(var), coeff)
            for var, coeff in storage.row(con).items()
            if var in self._columns
        )
        lb, ub = con.row_bounds()
        errors.check_status(
            self._highs.addRow(
                lb,
                ub,
                len(entries),
                np.array([j for j, _ in entries], dtype=np.int32),
                np.array([v for _, v in entries], dtype=np.float64),
            ),
            "addRow",
        )
        self._rows.append(con)

    def _delete_columns(self, variables_to_delete: List[Variable]) -> None:
        mask = self._columns.delete_mask(variables_to_delete)
        indices = np.flatnonzero(mask).astype(np.int32)
        if not indices.size:
            return
        errors.check_status(
            self._highs.deleteCols(indices.size, indices), "deleteCols"
        )
        self._columns.compact(mask)

    def _delete_rows(self, constraints_to_delete: List[LinearConstraint]) -> None:
        mask = self._rows.delete_mask(constraints_to_delete)
        indices = np.flatnonzero(mask).astype(np.int32)
        if not indices.size:
            return
        errors.check_status(self._highs.deleteRows(indices.size, indices), "deleteRows")
        self._rows.compact(mask)

    def _push_sense(self) -> None:
        errors.check_status(
            self._highs.changeObjectiveSense(
                _objective_sense(self.storage.objective_sense)
            ),
            "changeObjectiveSense",
        )

    def _push_offset(self) -> None:
        errors.check_status(
            self._highs.changeObjectiveOffset(self.storage.objective_offset),
            "changeObjectiveOffset",
        )

    def _push_costs(self) -> None:
        if not self._columns:
            return
        objective = self.storage.objective_coefficients()
        costs = np.array(
            [objective.get(var, 0.0) for var in self._columns], dtype=np.float64
        )
        indices = np.arange(len(self._columns), dtype=np.int32)
        errors.check_status(
            self._highs.changeColsCost(indices.size, indices, costs), "changeColsCost"
        )

    ####################
    # Lifecycle
    ####################

    def check_open(self) -> None:
        """Raises BackendClosedError if close() has been called."""
        if self._closed:
            raise errors.BackendClosedError()

    def close(self) -> None:
        """Releases the HiGHS instance, closing twice does nothing.

        This is optional, the HiGHS instance is also released when the
        synchronizer is garbage collected.
        """
        if self._closed:
            return
        self._closed = True
        self._columns.clear()
        self._rows.clear()
        self._pending.clear()
        self._warm_start = None
        self._built = False
        del self._highs

    def __enter__(self) -> "HighsSynchronizer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _column_bounds(var: Variable) -> Tuple[float, float]:
    """Returns the HiGHS bounds of var, binaries are clamped to [0, 1]."""
    if var.var_type == variables.VarType.BINARY:
        return max(0.0, var.lower_bound), min(1.0, var.upper_bound)
    return var.lower_bound, var.upper_bound


def _integrality(var: Variable) -> highspy.HighsVarType:
    if var.is_integral():
        return highspy.HighsVarType.kInteger
    return highspy.HighsVarType.kContinuous


def _objective_sense(sense: model_storage.ObjectiveSense) -> highspy.ObjSense:
    if sense == model_storage.ObjectiveSense.MAXIMIZE:
        return highspy.ObjSense.kMaximize
    return highspy.ObjSense.kMinimize
