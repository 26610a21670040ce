# Copyright 2025 The swirl_ocean Authors.
#
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

"""Execution of the phases of a tendency evaluation.

Each phase launches one kernel per output field. JAX dispatches the kernels
asynchronously, so the outputs of a phase are futures until the `Barrier`
blocks on all of them. A phase starts only after the barrier of the previous
phase has returned.
"""

import enum
import time
from typing import Any, Callable, Mapping

from absl import logging
import jax


class Architecture(enum.Enum):
  """The backend the kernels run on."""

  CPU = 'cpu'
  GPU = 'gpu'


def get_device(architecture: Architecture) -> jax.Device:
  """Returns the first device of `architecture`.

  Args:
    architecture: The requested backend.

  Returns:
    The device that arrays are placed on.

  Raises:
    RuntimeError: If JAX has no backend for `architecture`.
  """
  return jax.devices(architecture.value)[0]


def launch(
    kernels: Mapping[str, Callable[..., Any]], *args: Any
) -> dict[str, Any]:
  """Launches every kernel in `kernels` on the same arguments.

  Args:
    kernels: The kernels keyed by the name of their output.
    *args: The arguments shared by all kernels.

  Returns:
    The outputs of the kernels keyed by name. They may still be computing.
  """
  return {name: kernel(*args) for name, kernel in kernels.items()}


class Barrier:
  """Joins all outputs of a phase before the next phase starts.

  Attributes:
    completed_phases: The names of the phases that have completed, in order.
  """

  def __init__(self):
    self.completed_phases = []
    self._last_time = time.perf_counter()

  def reset(self) -> None:
    self.completed_phases = []
    self._last_time = time.perf_counter()

  def wait(self, phase: str, outputs: Any) -> Any:
    """Blocks until every array in `outputs` is computed.

    Args:
      phase: The name of the phase that produced `outputs`.
      outputs: A pytree of arrays.

    Returns:
      `outputs`, with all computations completed.
    """
    outputs = jax.block_until_ready(outputs)
    now = time.perf_counter()
    logging.vlog(
        1,
        'Phase %s completed in %.3f ms.',
        phase,
        1e3 * (now - self._last_time),
    )
    self._last_time = now
    self.completed_phases.append(phase)
    return outputs
