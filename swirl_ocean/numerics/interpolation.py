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

"""Interpolation between nodes and faces of the staggered grid."""

from typing import TypeAlias

from swirl_ocean.utility import get_kernel_fn
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

ScalarField: TypeAlias = types.ScalarField
FieldLocation: TypeAlias = grid_parametrization.FieldLocation
Location: TypeAlias = grid_parametrization.Location


def centered_node_to_face(
    v_node: ScalarField,
    axis: str,
    kernel_op: get_kernel_fn.ApplyKernelOp,
) -> ScalarField:
  """Performs centered 2nd-order interpolation from nodes to faces.

  * An array evaluated on nodes has index i <==> coordinate location x_i
  * An array evaluated on faces has index i <==> coordinate location x_{i-1/2}

  E.g., interpolating in x:
    v_face[i, j, k] = 0.5 * (v_node[i, j, k] + v_node[i-1, j, k])

  Args:
    v_node: A 3D array, evaluated on nodes along `axis`.
    axis: The axis along with the interpolation is performed.
    kernel_op: Kernel operation library.

  Returns:
    A 3D array interpolated from `v_node`, which is evaluated on faces in
    axis `axis`, and unchanged in the other axes.
  """
  return 0.5 * kernel_op.apply_kernel_op(v_node, 'ks', axis)


def centered_face_to_node(
    v_face: ScalarField,
    axis: str,
    kernel_op: get_kernel_fn.ApplyKernelOp,
) -> ScalarField:
  """Performs centered 2nd-order interpolation from faces to nodes.

  E.g., interpolating in x:
    v_node[i, j, k] = 0.5 * (v_face[i, j, k] + v_face[i+1, j, k])

  Args:
    v_face: A 3D array, evaluated on faces along `axis`.
    axis: The axis along with the interpolation is performed.
    kernel_op: Kernel operation library.

  Returns:
    A 3D array evaluated on nodes along `axis`.
  """
  return 0.5 * kernel_op.apply_kernel_op(v_face, 'ks+', axis)


def interpolate(
    value: ScalarField,
    source: FieldLocation,
    target: FieldLocation,
    kernel_op: get_kernel_fn.ApplyKernelOp,
) -> ScalarField:
  """Interpolates `value` from location `source` to location `target`.

  The interpolation is applied axis by axis, only along the axes where the
  two locations differ.

  Args:
    value: A 3D array evaluated at `source`.
    source: The staggered location of `value`.
    target: The staggered location of the result.
    kernel_op: Kernel operation library.

  Returns:
    `value` evaluated at `target`.
  """
  for axis, src, tgt in zip(grid_parametrization.AXES, source, target):
    if src == tgt:
      continue
    if src == Location.CENTER:
      value = centered_node_to_face(value, axis, kernel_op)
    else:
      value = centered_face_to_node(value, axis, kernel_op)
  return value
