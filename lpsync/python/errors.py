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

"""Errors raised by lpsync and translation of HiGHS call statuses.

Here we try to use the standard Python errors a user would expect from a pure
Python model: invalid references are LookupErrors, backend failures are
RuntimeErrors.
"""

from typing import Any

from absl import logging
import highspy


class BadVariableError(LookupError):
    """Raised when a deleted variable (or one of another model) is used."""

    def __init__(self, variable: Any):
        super().__init__(f"Variable has been deleted: {variable}")
        self.variable = variable


class BadConstraintError(LookupError):
    """Raised when a deleted constraint (or one of another model) is used."""

    def __init__(self, constraint: Any):
        super().__init__(f"Constraint has been deleted: {constraint}")
        self.constraint = constraint


class BackendError(RuntimeError):
    """A call on the backend solver failed.

    There is no automatic retry and no rollback: after a failed structural call
    the model and the backend image are no longer guaranteed to match.

    Attributes:
      call: The name of the backend call that failed.
      status: The status returned by the backend.
    """

    def __init__(self, call: str, status: Any):
        super().__init__(f"HiGHS call {call} failed with status {status}")
        self.call = call
        self.status = status


class BackendClosedError(RuntimeError):
    """Raised when a backend is used after having been closed."""

    def __init__(self):
        super().__init__("the backend solver is closed")


def check_status(status: highspy.HighsStatus, call: str) -> None:
    """Raises BackendError if status is an error, logs a warning if it is one.

    Args:
      status: The status returned by a highspy call.
      call: The name of the call, used in messages.

    Raises:
      BackendError: If status is kError (or any value other than kOk and
        kWarning).
    """
    if status == highspy.HighsStatus.kOk:
        return
    if status == highspy.HighsStatus.kWarning:
        logging.warning("HiGHS call %s returned a warning", call)
        return
    raise BackendError(call, status)
