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

"""Commands queued by a synchronizer while a batch is open.

Each command names what changed, not the new values: values are read from the
model storage when the command is executed, so a command queued early in a
batch applies the state at the end of the batch.
"""

import dataclasses
from typing import Union

from lpsync.python import linear_constraints
from lpsync.python import variables


@dataclasses.dataclass(frozen=True)
class AddColumn:
    __slots__ = ("variable",)
    variable: variables.Variable


@dataclasses.dataclass(frozen=True)
class AddRow:
    __slots__ = ("constraint",)
    constraint: linear_constraints.LinearConstraint


@dataclasses.dataclass(frozen=True)
class ChangeColumnBounds:
    __slots__ = ("variable",)
    variable: variables.Variable


@dataclasses.dataclass(frozen=True)
class ChangeRowBounds:
    __slots__ = ("constraint",)
    constraint: linear_constraints.LinearConstraint


@dataclasses.dataclass(frozen=True)
class DeleteColumn:
    __slots__ = ("variable",)
    variable: variables.Variable


@dataclasses.dataclass(frozen=True)
class DeleteRow:
    __slots__ = ("constraint",)
    constraint: linear_constraints.LinearConstraint


@dataclasses.dataclass(frozen=True)
class ReplaceRow:
    """Deletes the row of a constraint and appends it again with its current data."""

    __slots__ = ("constraint",)
    constraint: linear_constraints.LinearConstraint


@dataclasses.dataclass(frozen=True)
class ChangeCoefficient:
    __slots__ = "constraint", "variable"
    constraint: linear_constraints.LinearConstraint
    variable: variables.Variable


@dataclasses.dataclass(frozen=True)
class ChangeColumnCost:
    __slots__ = ("variable",)
    variable: variables.Variable


@dataclasses.dataclass(frozen=True)
class ChangeObjectiveSense:
    __slots__ = ()


@dataclasses.dataclass(frozen=True)
class ChangeObjectiveOffset:
    __slots__ = ()


@dataclasses.dataclass(frozen=True)
class ReplaceObjective:
    """Pushes the sense, the offset and the cost of every column."""

    __slots__ = ()


Command = Union[
    AddColumn,
    AddRow,
    ChangeColumnBounds,
    ChangeRowBounds,
    DeleteColumn,
    DeleteRow,
    ReplaceRow,
    ChangeCoefficient,
    ChangeColumnCost,
    ChangeObjectiveSense,
    ChangeObjectiveOffset,
    ReplaceObjective,
]
