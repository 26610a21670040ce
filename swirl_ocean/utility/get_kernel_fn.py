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

"""Named one-dimensional stencils applied with shifted slices.

Each stencil is a weighted sum of shifted copies of a field along one axis.
Difference stencils are not scaled by the grid spacing; the caller divides by
Δ (or 2Δ for `kD`, whose points are two cells apart).

Name   Output at index i
ks     u[i-1] + u[i]
ks+    u[i] + u[i+1]
kD     u[i+1] - u[i-1]
kd     u[i] - u[i-1]
kd+    u[i+1] - u[i]
kdd    u[i+1] - 2 u[i] + u[i-1]

Face i sits to the left of node i, so `ks` and `kd` map nodes to faces, while
`ks+` and `kd+` map faces to nodes.
"""

import abc
from typing import Any

from swirl_ocean.utility import common_ops
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

# {'coeff': tuple[float, ...], 'shift': tuple[int, ...]}
SliceKernelType = dict[str, tuple[Any, ...]]
SliceKernelDictType = dict[str, SliceKernelType]
ScalarField = types.ScalarField

# Pairs of (weight, offset) for each stencil. An offset of +1 reads u[i+1].
_STENCILS = {
    'ks': ((1.0, -1), (1.0, 0)),
    'ks+': ((1.0, 0), (1.0, 1)),
    'kD': ((-1.0, -1), (1.0, 1)),
    'kd': ((-1.0, -1), (1.0, 0)),
    'kd+': ((-1.0, 0), (1.0, 1)),
    'kdd': ((1.0, -1), (-2.0, 0), (1.0, 1)),
}


def _as_slice_kernel(stencil) -> SliceKernelType:
  # `finite_diff_with_slice` takes shifts with the opposite sign to offsets.
  coeff, offset = zip(*stencil)
  return {'coeff': coeff, 'shift': tuple(-o for o in offset)}


class ApplyKernelOp(abc.ABC):
  """Applies named stencils to fields."""

  @abc.abstractmethod
  def apply_kernel_op(
      self, array: ScalarField, name: str, axis: str
  ) -> ScalarField:
    """Applies the stencil `name` along `axis`."""
    raise NotImplementedError('Calling an abstract method.')


class ApplyKernelSliceOp(ApplyKernelOp):
  """Stencils evaluated as sums of zero-padded shifted slices."""

  def __init__(
      self, grid_params: grid_parametrization.GridParametrization
  ) -> None:
    self._kernels: SliceKernelDictType = {
        name: _as_slice_kernel(stencil) for name, stencil in _STENCILS.items()
    }
    self._grid_params = grid_params

  @property
  def grid_params(self) -> grid_parametrization.GridParametrization:
    return self._grid_params

  def apply_kernel_op(
      self, array: ScalarField, name: str, axis: str
  ) -> ScalarField:
    if name not in self._kernels:
      raise ValueError(f'Unknown stencil {name!r} for axis {axis}.')
    kernel = self._kernels[name]
    return common_ops.finite_diff_with_slice(
        array, kernel['coeff'], kernel['shift'], axis, self._grid_params
    )
