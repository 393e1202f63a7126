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

"""The interface between a ModelStorage and a backend solver.

A ModelStorage notifies exactly one Synchronizer of every change. A
Synchronizer keeps a backend image of the model consistent with the storage,
either by applying each notification immediately or, between
on_begin_update() and on_end_update(), by queuing structural changes.

Example:
  storage = model_storage.ModelStorage(synchronizer=sync)
  x = storage.add_variable(0.0, 1.0)          => sync.on_variable_added(x)
  storage.update_variable_bounds(x, 0.0, 2.0)  => sync.on_variable_bounds_changed(x)
  storage.begin_update()                      => sync.on_begin_update()
  storage.update_variable_bounds(x, 0.0, 3.0)  => (recorded by the storage)
  storage.end_update()                        => sync.on_variable_bounds_changed(x)
                                                 sync.on_end_update()

Synchronizers read the current state (bounds, rows, objective) from the
storage they are attached to when they handle a notification, notifications
only name what changed.
"""

import abc
from typing import Any

from lpsync.python import linear_constraints
from lpsync.python import variables


class Synchronizer(abc.ABC):
    """Receives the changes made to a ModelStorage."""

    @abc.abstractmethod
    def attach(self, storage: Any) -> None:
        """Called once by the storage this synchronizer will mirror."""

    def check_open(self) -> None:
        """Raises if the backend can no longer follow changes.

        The storage calls it before any change, so that a failing change leaves
        the storage untouched.
        """

    @abc.abstractmethod
    def on_variable_added(self, var: variables.Variable) -> None:
        pass

    @abc.abstractmethod
    def on_variable_bounds_changed(self, var: variables.Variable) -> None:
        pass

    @abc.abstractmethod
    def on_variable_removed(self, var: variables.Variable) -> None:
        pass

    @abc.abstractmethod
    def on_constraint_added(self, con: linear_constraints.LinearConstraint) -> None:
        pass

    @abc.abstractmethod
    def on_constraint_bounds_changed(
        self, con: linear_constraints.LinearConstraint
    ) -> None:
        pass

    @abc.abstractmethod
    def on_constraint_modified(self, con: linear_constraints.LinearConstraint) -> None:
        """Called at the end of a batch for each constraint changed in the batch."""

    @abc.abstractmethod
    def on_constraint_removed(self, con: linear_constraints.LinearConstraint) -> None:
        pass

    @abc.abstractmethod
    def on_coefficient_changed(
        self,
        con: linear_constraints.LinearConstraint,
        var: variables.Variable,
        coeff: float,
    ) -> None:
        pass

    @abc.abstractmethod
    def on_objective_changed(self) -> None:
        """Called when the whole objective (sense, offset, terms) may have changed."""

    @abc.abstractmethod
    def on_objective_coefficient_changed(
        self, var: variables.Variable, coeff: float
    ) -> None:
        pass

    @abc.abstractmethod
    def on_objective_sense_changed(self) -> None:
        pass

    @abc.abstractmethod
    def on_objective_offset_changed(self) -> None:
        pass

    @abc.abstractmethod
    def on_begin_update(self) -> None:
        pass

    @abc.abstractmethod
    def on_end_update(self) -> None:
        """Called last when a batch is closed, after the dirty entities were flushed."""


class NullSynchronizer(Synchronizer):
    """A synchronizer without backend, for models that are never solved."""

    def attach(self, storage: Any) -> None:
        pass

    def on_variable_added(self, var: variables.Variable) -> None:
        pass

    def on_variable_bounds_changed(self, var: variables.Variable) -> None:
        pass

    def on_variable_removed(self, var: variables.Variable) -> None:
        pass

    def on_constraint_added(self, con: linear_constraints.LinearConstraint) -> None:
        pass

    def on_constraint_bounds_changed(
        self, con: linear_constraints.LinearConstraint
    ) -> None:
        pass

    def on_constraint_modified(self, con: linear_constraints.LinearConstraint) -> None:
        pass

    def on_constraint_removed(self, con: linear_constraints.LinearConstraint) -> None:
        pass

    def on_coefficient_changed(
        self,
        con: linear_constraints.LinearConstraint,
        var: variables.Variable,
        coeff: float,
    ) -> None:
        pass

    def on_objective_changed(self) -> None:
        pass

    def on_objective_coefficient_changed(
        self, var: variables.Variable, coeff: float
    ) -> None:
        pass

    def on_objective_sense_changed(self) -> None:
        pass

    def on_objective_offset_changed(self) -> None:
        pass

    def on_begin_update(self) -> None:
        pass

    def on_end_update(self) -> None:
        pass
