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

"""Module exporting all classes and functions needed to use lpsync.

For example instead of:
  from lpsync.python import model
  from lpsync.python import parameters

  m = model.Model()
  m.solve(parameters.SolveParameters(warm_start=True))

we can simply do:
  from lpsync.python import lp

  m = lp.Model()
  m.solve(lp.SolveParameters(warm_start=True))
"""

# pylint: disable=unused-import
# pylint: disable=g-importing-member

from lpsync.python.errors import BackendClosedError
from lpsync.python.errors import BackendError
from lpsync.python.errors import BadConstraintError
from lpsync.python.errors import BadVariableError
from lpsync.python.errors import check_status
from lpsync.python.expressions import is_zero
from lpsync.python.expressions import LinearExpression
from lpsync.python.expressions import ZERO_TOLERANCE
from lpsync.python.init import BackendBridge
from lpsync.python.linear_constraints import ConstraintType
from lpsync.python.linear_constraints import LinearConstraint
from lpsync.python.model import ExpressionTypes
from lpsync.python.model import Model
from lpsync.python.model import ObjectiveSense
from lpsync.python.model import SolverType
from lpsync.python.parameters import OptionValue
from lpsync.python.parameters import Presolve
from lpsync.python.parameters import SolveParameters
from lpsync.python.solution import Solution
from lpsync.python.solution import SolutionStatus
from lpsync.python.solution_io import load_solution_values
from lpsync.python.solution_io import save_solution
from lpsync.python.solution_io import VariableLookup
from lpsync.python.statistics import absolute_finite_non_zeros_range
from lpsync.python.statistics import compute_model_ranges
from lpsync.python.statistics import compute_statistics
from lpsync.python.statistics import merge_optional_ranges
from lpsync.python.statistics import ModelRanges
from lpsync.python.statistics import ModelStatistics
from lpsync.python.statistics import Range
from lpsync.python.variables import Variable
from lpsync.python.variables import VarType
