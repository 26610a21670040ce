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

"""First and second derivatives of staggered ocean fields.

The closures, the advection scheme and the pressure term all take their
derivatives from `Derivatives`, which wraps the named stencils of
`get_kernel_fn` and scales them by the grid spacing.
"""

from typing import TypeAlias

from swirl_ocean.utility import get_kernel_fn
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

ScalarField: TypeAlias = types.ScalarField


class Derivatives:
  """Finite differences between cell centers and faces.

  The derivatives implemented are those of a second-order finite-volume code
  on a staggered mesh, where each variable lives either at nodes (cell
  centers) or at faces along each axis. The mesh must be uniform.

  Implementation details:
  Faces to the *left* of a node are given the same index. See the diagram
  below, where `.` represents a node and `|` represents a face.

  Index & coord loc.         i-1        i        i+1
                         |    .    |    .    |    .    |
  Index                 i-1        i        i+1
  Coord. loc.           i-3/2     i-1/2     i+1/2

  * For an array f evaluated on nodes: index i <==> coordinate location x_i
  * For an array f_face evaluated at faces: index i <==> coordinate location
    x_{i-1/2}.

  Example: Given f on nodes, compute ∂f/∂x on faces.
    df_dx_face[i] = (f[i] - f[i-1]) / dx. Use `deriv_node_to_face()`.

  Example: Given f on faces, compute ∂f/∂x on nodes.
    df_dx[i] = (f_face[i+1] - f_face[i]) / dx. Use `deriv_face_to_node()`.

  Example: Given f on nodes, compute ∂f/∂x on nodes.
    df_dx[i] = (f[i+1] - f[i-1]) / (2 * dx). Use `deriv_centered()`.

  Values in the outermost halo layers are not meaningful. They are never read
  by the interior stencils as long as the halo width covers the stencil reach.

  Attributes:
    kernel_op: Kernel op library.
    grid_params: The grid parametrization object.
  """

  def __init__(
      self,
      kernel_op: get_kernel_fn.ApplyKernelOp,
      grid_params: grid_parametrization.GridParametrization,
  ):
    self.kernel_op = kernel_op
    self.grid_params = grid_params

  def _spacing(self, axis: str) -> float:
    return self.grid_params.spacing(axis)

  def deriv_node_to_face(
      self, array_node: ScalarField, axis: str
  ) -> ScalarField:
    """Given the value of a field f at nodes, returns the derivative at faces.

    This function is often needed when computing diffusive fluxes from nodal
    values.

    Args:
      array_node: A 3D field given at nodes along `axis`.
      axis: The axis along which to compute the derivative.

    Returns:
      The derivative of array_node along axis, evaluated at faces along `axis`
      and at the original locations in the other dimensions.
    """
    return (
        self.kernel_op.apply_kernel_op(array_node, 'kd', axis)
        / self._spacing(axis)
    )

  def deriv_face_to_node(
      self, array_face: ScalarField, axis: str
  ) -> ScalarField:
    """Given the value of a field at faces, return the derivative at nodes.

    This function is often needed when computing divergences of fluxes that are
    evaluated at faces.

    Args:
      array_face: A 3D field given at faces along `axis`.
      axis: The axis along which to compute the derivative.

    Returns:
      The derivative of array_face along axis, evaluated at nodes along `axis`.
    """
    return (
        self.kernel_op.apply_kernel_op(array_face, 'kd+', axis)
        / self._spacing(axis)
    )

  def deriv_centered(self, array: ScalarField, axis: str) -> ScalarField:
    """Computes ∂f/∂{axis} at the location of `array`, centered stencil."""
    return self.kernel_op.apply_kernel_op(array, 'kD', axis) / (
        2.0 * self._spacing(axis)
    )

  def deriv_2(self, array: ScalarField, axis: str) -> ScalarField:
    """Computes ∂²f/∂{axis}² at the location of `array`."""
    return (
        self.kernel_op.apply_kernel_op(array, 'kdd', axis)
        / self._spacing(axis) ** 2
    )
