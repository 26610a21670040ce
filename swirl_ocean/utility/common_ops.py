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

"""Library for common operations on halo-padded 3D fields."""

from typing import Any, Literal, TypeAlias

import jax
import jax.numpy as jnp
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

ScalarField: TypeAlias = types.ScalarField
FieldLocation: TypeAlias = grid_parametrization.FieldLocation
GridParametrization: TypeAlias = grid_parametrization.GridParametrization
Location: TypeAlias = grid_parametrization.Location


def finite_diff_with_slice(
    array: jax.Array,
    coeff: tuple[float, ...],
    shift: tuple[int, ...],
    axis: str,
    grid_params: GridParametrization,
) -> jax.Array:
  """Performs finite difference operation using slicing and zero padding.

  If `shift` is (-1, 0, 2), the slices along `axis` are defined as follows:
  [array[3:3+l], array[2:2+l], array[0:0+l]]
  where, l = [array.shape along `axis`] - 3.
  Each slice is multiplied by the corresponding coefficient in `coeff` and
  summed. The result is then zero padded to match the original shape of
  `array`, i.e. out[i] = sum(c * array[i - s] for c, s in zip(coeff, shift)).

  This function is logically equivalent to the following roll implementation:
  out = [
      c * np.roll(array, shift=s, axis=axis_index)
      for c, s in zip(coeff, shift)
  ]
  out = np.sum(np.stack(out, axis=0), axis=0)
  Followed by setting out[s_min:] and out[:s_max] along `axis` to 0.

  Args:
    array: A 3D array.
    coeff: The 1D kernel to be applied.
    shift: The 1D shift to be applied.
    axis: The axis along which the stencil is to be applied.
    grid_params: The grid parametrization object.

  Returns:
    The finite difference stencil operated on array.
  """
  if array.ndim != 3:
    raise ValueError(
        f'`array` must be a 3D array but its shape is {array.shape}.'
    )
  if len(coeff) != len(shift):
    raise ValueError(
        '`coeff` and `shift` must have the same length, but len(coeff):'
        f' {len(coeff)} and len(shift): {len(shift)}.'
    )
  s_max = max(shift) if max(shift) > 0 else 0
  s_min = min(shift) if min(shift) < 0 else 0
  axis_index = grid_params.get_axis_index(axis)
  slice_size = array.shape[axis_index] - (abs(s_max) + abs(s_min))

  def _get_slice(s: int) -> jax.Array:
    return jax.lax.dynamic_slice_in_dim(
        array, s_max - s, slice_size, axis=axis_index
    )

  out = [c * _get_slice(s) for c, s in zip(coeff, shift)]
  out = jnp.sum(jnp.stack(out, axis=0), axis=0)
  npad = [(0, 0)] * array.ndim
  npad[axis_index] = (s_max, -s_min)
  return jnp.pad(out, npad, 'constant')


def plane_index(axis_index: int, idx: Any) -> tuple[Any, ...]:
  """Generates the indices slice to get a plane from a 3D array at `idx`."""
  indices = [slice(None)] * 3
  indices[axis_index] = idx
  return tuple(indices)


def strip_halos(
    array: ScalarField, grid_params: GridParametrization
) -> ScalarField:
  """Removes the halos from a field.

  Args:
    array: A 3D field with the halos included.
    grid_params: The grid parametrization object.

  Returns:
    The interior of the field, of shape `grid_params.size`.
  """
  return jax.lax.dynamic_slice(
      array, grid_params.halo_width, grid_params.size
  )


def pad(
    array: ScalarField,
    grid_params: GridParametrization,
    value: float = 0.0,
) -> ScalarField:
  """Pads an interior-sized field with halos filled with `value`."""
  paddings = [(h, h) for h in grid_params.halo_width]
  return jnp.pad(array, paddings, constant_values=value)


def mask_wall_fluxes(
    flux: ScalarField, axis: str, grid_params: GridParametrization
) -> ScalarField:
  """Zeros a face-located flux on the walls of a bounded axis.

  The flux across a wall is supplied by the boundary conditions instead.

  Args:
    flux: A 3D field located on faces along `axis`.
    axis: The axis normal to the faces.
    grid_params: The grid parametrization object.

  Returns:
    `flux` with the values on the two walls set to zero if `axis` is bounded,
    and `flux` unchanged otherwise.
  """
  if not grid_params.is_bounded(axis):
    return flux
  axis_index = grid_params.get_axis_index(axis)
  h = grid_params.halo(axis)
  n = grid_params.n(axis)
  flux = flux.at[plane_index(axis_index, h)].set(0.0)
  return flux.at[plane_index(axis_index, h + n)].set(0.0)


def keep_interior(
    array: ScalarField,
    location: FieldLocation,
    grid_params: GridParametrization,
) -> ScalarField:
  """Zeros the halos of a tendency and the walls of a wall-normal velocity.

  Args:
    array: A 3D field with halos.
    location: The staggered location of the field.
    grid_params: The grid parametrization object.

  Returns:
    A field that equals `array` in the interior, and is zero in the halos. On
    bounded axes where the field lives on faces, the lower wall (the only wall
    inside the interior index range) is zero as well.
  """
  out = pad(strip_halos(array, grid_params), grid_params)
  for axis, loc in zip(grid_parametrization.AXES, location):
    if loc == Location.FACE and grid_params.is_bounded(axis):
      out = out.at[
          plane_index(grid_params.get_axis_index(axis), grid_params.halo(axis))
      ].set(0.0)
  return out


def get_face(
    value: ScalarField,
    axis: str,
    face: Literal[0, 1],
    index: int,
    grid_params: GridParametrization,
) -> ScalarField:
  """Gets the plane in `value` that is `index` cells inside the halos.

  Args:
    value: 3D array representing the field.
    axis: The axis normal to the plane.
    face: The face of the plane to slice, with 0 representing the lower face,
      and 1 representing the higher face.
    index: The number of cells between the plane and the halo region, i.e. 0
      is the first (or last) interior cell.
    grid_params: The grid parametrization object.

  Returns:
    A 2D plane that keeps the halos of the tangential axes.
  """
  axis_index = grid_params.get_axis_index(axis)
  h = grid_params.halo(axis)
  n = grid_params.n(axis)

  if face == 0:  # low
    idx = h + index
  elif face == 1:  # high
    idx = h + n - 1 - index
  else:
    raise ValueError(f'`face` should be 0 or 1 but got {face}.')

  return value[plane_index(axis_index, idx)]
