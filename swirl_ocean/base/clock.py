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

"""The simulation clock read by the tendency kernels."""

import dataclasses


@dataclasses.dataclass(frozen=True)
class Clock:
  """Time keeping of a simulation.

  Attributes:
    time: The simulation time, in seconds.
    iteration: The number of completed time steps.
    stage: The sub-step of a multi-stage time stepper, starting from 1.
  """

  time: float = 0.0
  iteration: int = 0
  stage: int = 1

  def tick(self, dt: float) -> 'Clock':
    """Returns the clock advanced by one time step of size `dt`."""
    if dt <= 0.0:
      raise ValueError(f'`dt` must be positive, but got {dt}.')
    return Clock(time=self.time + dt, iteration=self.iteration + 1, stage=1)
