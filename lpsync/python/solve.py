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

"""Solve a model kept in sync with HiGHS by a HighsSynchronizer."""

import datetime
import math
import time
from typing import Optional

from absl import logging
import highspy

from lpsync.python import errors
from lpsync.python import highs_synchronizer
from lpsync.python import parameters
from lpsync.python import solution

# HiGHS' value for an unlimited integer option.
_UNLIMITED = 2147483647

_PRESOLVE_OPTION = {
    parameters.Presolve.ON: "on",
    parameters.Presolve.OFF: "off",
    parameters.Presolve.AUTO: "choose",
}

_MODEL_STATUS = {
    highspy.HighsModelStatus.kOptimal: solution.SolutionStatus.OPTIMAL,
    highspy.HighsModelStatus.kModelEmpty: solution.SolutionStatus.OPTIMAL,
    highspy.HighsModelStatus.kInfeasible: solution.SolutionStatus.INFEASIBLE,
    highspy.HighsModelStatus.kUnbounded: solution.SolutionStatus.UNBOUNDED,
    highspy.HighsModelStatus.kUnboundedOrInfeasible: (
        solution.SolutionStatus.UNBOUNDED
    ),
    highspy.HighsModelStatus.kTimeLimit: solution.SolutionStatus.TIME_LIMIT,
    highspy.HighsModelStatus.kIterationLimit: (
        solution.SolutionStatus.ITERATION_LIMIT
    ),
    highspy.HighsModelStatus.kSolutionLimit: solution.SolutionStatus.SOLUTION_LIMIT,
    highspy.HighsModelStatus.kInterrupt: solution.SolutionStatus.INTERRUPTED,
    highspy.HighsModelStatus.kObjectiveBound: solution.SolutionStatus.FEASIBLE,
    highspy.HighsModelStatus.kObjectiveTarget: solution.SolutionStatus.FEASIBLE,
    highspy.HighsModelStatus.kSolveError: solution.SolutionStatus.NUMERICAL_ERROR,
    highspy.HighsModelStatus.kPresolveError: (
        solution.SolutionStatus.NUMERICAL_ERROR
    ),
    highspy.HighsModelStatus.kPostsolveError: (
        solution.SolutionStatus.NUMERICAL_ERROR
    ),
}


def solve(
    sync: highs_synchronizer.HighsSynchronizer,
    params: Optional[parameters.SolveParameters] = None,
) -> solution.Solution:
    """Solves the model mirrored by sync.

    Builds the HiGHS model first if needed. When params.warm_start is set and a
    previous solve (or set_warm_start()) left a seed, the seed is projected on
    the current columns, columns without a value starting at 0.0. A feasible
    solution becomes the seed of the next warm started solve.

    Args:
      sync: The synchronizer of the model to solve.
      params: Configuration of the solve, the defaults when None.

    Returns:
      The outcome of the solve. Infeasibility, unboundedness and limits are
      reported by the status of the solution, not raised.

    Raises:
      BackendError: A HiGHS call failed.
      BackendClosedError: sync has been closed.
      RuntimeError: A batch is open on the model.
    """
    params = params or parameters.SolveParameters()
    storage = sync.storage
    if storage.in_batch:
        raise RuntimeError("solve() called while a batch is open")
    if not sync.is_built:
        sync.build()
    highs = sync.backend
    apply_parameters(highs, params)
    if params.warm_start and sync.warm_start:
        _apply_warm_start(sync)

    start = time.monotonic()
    run_status = highs.run()
    solve_time = datetime.timedelta(seconds=time.monotonic() - start)
    if run_status == highspy.HighsStatus.kWarning:
        logging.warning("HiGHS run() returned a warning")

    model_status = highs.getModelStatus()
    info = highs.getInfo()
    node_count = max(int(info.mip_node_count), 0)
    highs_solution = highs.getSolution()
    # A model without columns has no values to report.
    has_values = bool(highs_solution.value_valid) or not sync.column_variables()
    status = map_status(run_status, model_status, params, node_count, has_values)
    logging.info(
        "Solved %r in %.3fs: %s (HiGHS %s)",
        storage.name,
        solve_time.total_seconds(),
        status.name,
        highs.modelStatusToString(model_status),
    )

    all_continuous = storage.is_all_continuous()
    result = dict(
        status=status,
        solve_time=solve_time,
        iterations=max(int(info.simplex_iteration_count), 0),
        node_count=node_count,
    )
    if status not in (
        solution.SolutionStatus.OPTIMAL,
        solution.SolutionStatus.FEASIBLE,
    ):
        return solution.Solution(**result)

    col_value = list(highs_solution.col_value)
    values = {var: col_value[j] for j, var in enumerate(sync.column_variables())}
    duals = {}
    if all_continuous and highs_solution.dual_valid:
        row_dual = list(highs_solution.row_dual)
        duals = {con: row_dual[i] for i, con in enumerate(sync.row_constraints())}
    gap = 0.0
    if not all_continuous and info.mip_gap >= 0.0:
        gap = info.mip_gap
    sync.set_warm_start(values)
    return solution.Solution(
        objective_value=info.objective_function_value,
        gap=gap,
        variable_values=values,
        dual_values=duals,
        **result,
    )


def apply_parameters(highs: highspy.Highs, params: parameters.SolveParameters) -> None:
    """Sets the HiGHS options for params.

    Every limit is set, to its unlimited value when absent, so that the limits
    of a previous solve do not apply. The backend options are set last.

    Args:
      highs: The HiGHS instance to configure.
      params: The parameters to apply.

    Raises:
      BackendError: HiGHS rejected an option.
    """
    time_limit = math.inf
    if params.time_limit is not None:
        time_limit = params.time_limit.total_seconds()
    options = {
        "time_limit": float(time_limit),
        "mip_rel_gap": float(params.relative_gap_tolerance),
        "primal_feasibility_tolerance": float(params.primal_feasibility_tolerance),
        "dual_feasibility_tolerance": float(params.dual_feasibility_tolerance),
        "presolve": _PRESOLVE_OPTION[params.presolve],
        "output_flag": params.output_level > 0,
        "log_to_console": params.output_level > 1,
        "simplex_iteration_limit": _limit(params.iteration_limit),
        "mip_max_nodes": _limit(params.node_limit),
        "mip_max_improving_sols": _limit(params.solution_limit),
    }
    if params.threads > 0:
        options["threads"] = int(params.threads)
    options.update(params.backend_options)
    for key, value in options.items():
        errors.check_status(highs.setOptionValue(key, value), f"setOptionValue({key})")


def map_status(
    run_status: highspy.HighsStatus,
    model_status: highspy.HighsModelStatus,
    params: Optional[parameters.SolveParameters] = None,
    node_count: int = 0,
    has_values: bool = True,
) -> solution.SolutionStatus:
    """Returns the status of a solve from the statuses reported by HiGHS.

    Args:
      run_status: The status returned by Highs.run().
      model_status: The status returned by Highs.getModelStatus().
      params: The parameters of the solve, used to tell a node limit from a
        solution limit since HiGHS reports both the same way.
      node_count: The number of branch-and-bound nodes of the solve.
      has_values: Whether HiGHS holds primal values. HiGHS can stop on an
        objective bound before finding any, such a solve is UNKNOWN.

    Returns:
      The status of the solve.
    """
    if run_status == highspy.HighsStatus.kError:
        return solution.SolutionStatus.NUMERICAL_ERROR
    status = _MODEL_STATUS.get(model_status, solution.SolutionStatus.UNKNOWN)
    if (
        status == solution.SolutionStatus.SOLUTION_LIMIT
        and params is not None
        and params.node_limit is not None
        and node_count >= params.node_limit
    ):
        return solution.SolutionStatus.NODE_LIMIT
    if not has_values and status in (
        solution.SolutionStatus.OPTIMAL,
        solution.SolutionStatus.FEASIBLE,
    ):
        return solution.SolutionStatus.UNKNOWN
    return status


def _limit(value: Optional[int]) -> int:
    return _UNLIMITED if value is None else int(value)


def _apply_warm_start(sync: highs_synchronizer.HighsSynchronizer) -> None:
    seed = sync.warm_start
    start = highspy.HighsSolution()
    start.col_value = [seed.get(var, 0.0) for var in sync.column_variables()]
    errors.check_status(sync.backend.setSolution(start), "setSolution")
    logging.vlog(1, "Warm start with %d of %d values", len(seed), len(start.col_value))
