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

"""Process wide initialization of the HiGHS backend."""

import threading
from typing import Optional

from absl import logging
import highspy


class BackendBridge:
    """Initializes and tears down the HiGHS library once per process.

    HighsSynchronizer calls init() itself, calling it explicitly at program
    start only moves the cost of the first initialization out of model code.
    """

    _lock = threading.Lock()
    _version: Optional[str] = None

    @classmethod
    def init(cls) -> None:
        """Loads the backend and records its version, later calls do nothing."""
        with cls._lock:
            if cls._version is not None:
                return
            cls._version = highspy.Highs().version()
            logging.info("HiGHS %s initialized", cls._version)

    @classmethod
    def shutdown(cls) -> None:
        """Marks the backend as uninitialized.

        Every synchronizer should be closed before this is called.
        """
        with cls._lock:
            if cls._version is not None:
                logging.info("HiGHS %s shut down", cls._version)
            cls._version = None

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._version is not None

    @classmethod
    def version(cls) -> str:
        """Returns the version of the backend, initializing it if needed."""
        cls.init()
        return cls._version
