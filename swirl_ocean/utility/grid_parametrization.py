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

"""Regular Cartesian staggered grid parameterization.

Every field is stored as a 3D array in x-y-z order that includes `halo_width`
ghost cells on each side of each axis, i.e. its shape along an axis is
`n + 2 * halo_width` and the interior cells are `[halo_width, halo_width + n)`.

Fields live either at cell centers (nodes) or at cell faces along each axis.
Following the convention of the derivatives library, the face to the *left* of
a node carries the same index as the node:

  Index & coord loc.         i-1        i        i+1
                         |    .    |    .    |    .    |
  Face index            i-1        i        i+1

On a bounded axis the two walls are therefore the faces `halo_width` and
`halo_width + n`. The domain spans [0, lx] x [0, ly] x [-lz, 0].
"""

import enum
from typing import Any, Sequence, TypeAlias

from absl import logging
import jax
import jax.numpy as jnp
import numpy as np

AXES = ('x', 'y', 'z')


class Location(enum.Enum):
  """The location of a quantity along one axis of the staggered grid."""

  CENTER = 'center'
  FACE = 'face'


class Topology(enum.Enum):
  """The topology of the domain along one axis."""

  PERIODIC = 'periodic'
  BOUNDED = 'bounded'


# The staggered location of a field along x, y, and z.
FieldLocation: TypeAlias = tuple[Location, Location, Location]


def flip_location(location: FieldLocation, axis: str) -> FieldLocation:
  """Moves `location` from nodes to faces, or faces to nodes, along `axis`."""
  i = AXES.index(axis)
  flipped = list(location)
  flipped[i] = (
      Location.FACE if location[i] == Location.CENTER else Location.CENTER
  )
  return tuple(flipped)


def _validate_grid_size_wrt_halo_width(
    n: int, halo_width: int, axis: str
) -> None:
  """Checks that the grid has enough interior cells to fill its halos.

  Args:
    n: The number of interior cells along a particular axis.
    halo_width: The halo width along that axis.
    axis: The axis of the grid.

  Raises:
    ValueError: If the grid size is smaller than the halo width.
  """
  if n < halo_width:
    raise ValueError(
        f'n{axis} should be at least the halo width, but got n{axis}={n} and'
        f' halo_width={halo_width}.'
    )


def _as_triple(value: Any, name: str) -> tuple[Any, Any, Any]:
  """Converts a scalar or a length-3 sequence into a 3-tuple."""
  if isinstance(value, (str, Topology)) or np.isscalar(value):
    return (value, value, value)
  value = tuple(value)
  if len(value) != 3:
    raise ValueError(f'`{name}` must have 3 entries, but got {value}.')
  return value


class GridParametrization(object):
  """An immutable description of a regular Cartesian staggered grid."""

  def __init__(
      self,
      size: Sequence[int],
      length: Sequence[float],
      halo_width: int | Sequence[int] = 1,
      topology: str | Sequence[str | Topology] = (
          'periodic',
          'periodic',
          'bounded',
      ),
      dtype: Any = jnp.float32,
  ) -> None:
    """Creates the grid.

    Args:
      size: The number of interior cells in x, y, and z.
      length: The size of the domain in x, y, and z.
      halo_width: The number of halo cells on each side of each axis, either
        a single integer or one per axis.
      topology: The topology of each axis, 'periodic' or 'bounded'.
      dtype: The floating point type of the grid coordinates.

    Raises:
      ValueError: If any of the inputs is inconsistent.
    """
    size = tuple(int(n) for n in _as_triple(size, 'size'))
    length = tuple(float(l) for l in _as_triple(length, 'length'))
    halo_width = tuple(int(h) for h in _as_triple(halo_width, 'halo_width'))
    topology = tuple(Topology(t) for t in _as_triple(topology, 'topology'))

    for axis, n, l, h in zip(AXES, size, length, halo_width):
      if n <= 0:
        raise ValueError(f'n{axis} must be positive, but got {n}.')
      if l <= 0.0:
        raise ValueError(f'l{axis} must be positive, but got {l}.')
      if h < 1:
        raise ValueError(
            f'The halo width in {axis} must be at least 1, but got {h}.'
        )
      _validate_grid_size_wrt_halo_width(n, h, axis)

    self._size = size
    self._length = length
    self._halo_width = halo_width
    self._topology = topology
    self.dtype = dtype

    logging.info(
        'Grid: size = %r, length = %r, halo_width = %r, topology = %r.',
        size,
        length,
        halo_width,
        tuple(t.value for t in topology),
    )

  def get_axis_index(self, axis: str) -> int:
    """Returns the dimension of the data array that corresponds to `axis`."""
    if axis not in AXES:
      raise ValueError(f'`axis` must be one of {AXES}, but got {axis}.')
    return AXES.index(axis)

  def n(self, axis: str) -> int:
    """The number of interior cells along `axis`."""
    return self._size[self.get_axis_index(axis)]

  def halo(self, axis: str) -> int:
    """The halo width along `axis`."""
    return self._halo_width[self.get_axis_index(axis)]

  def spacing(self, axis: str) -> float:
    """The uniform grid spacing along `axis`."""
    i = self.get_axis_index(axis)
    return self._length[i] / self._size[i]

  def topology(self, axis: str) -> Topology:
    return self._topology[self.get_axis_index(axis)]

  def is_periodic(self, axis: str) -> bool:
    return self.topology(axis) == Topology.PERIODIC

  def is_bounded(self, axis: str) -> bool:
    return self.topology(axis) == Topology.BOUNDED

  @property
  def size(self) -> tuple[int, int, int]:
    return self._size

  @property
  def length(self) -> tuple[float, float, float]:
    return self._length

  @property
  def halo_width(self) -> tuple[int, int, int]:
    return self._halo_width

  @property
  def grid_spacings(self) -> tuple[float, float, float]:
    return tuple(self.spacing(axis) for axis in AXES)

  @property
  def dx(self) -> float:
    return self.spacing('x')

  @property
  def dy(self) -> float:
    return self.spacing('y')

  @property
  def dz(self) -> float:
    return self.spacing('z')

  @property
  def shape(self) -> tuple[int, int, int]:
    """The shape of a field array, halos included."""
    return tuple(n + 2 * h for n, h in zip(self._size, self._halo_width))

  @property
  def min_spacing(self) -> float:
    return min(self.grid_spacings)

  def plane_shape(self, axis: str) -> tuple[int, int]:
    """The shape of a boundary plane normal to `axis`, halos included."""
    shape = list(self.shape)
    del shape[self.get_axis_index(axis)]
    return tuple(shape)

  def _origin(self, axis: str) -> float:
    return -self._length[2] if axis == 'z' else 0.0

  def node_coordinates(self, axis: str, location: Location) -> jax.Array:
    """Coordinates of the centers or faces along `axis`, halos included.

    Args:
      axis: The axis of the coordinates.
      location: Whether the coordinates of cell centers or of the faces to
        their left are requested.

    Returns:
      A 1D array of length `n + 2 * halo_width`.
    """
    n = self.n(axis)
    h = self.halo(axis)
    offset = 0.5 if location == Location.CENTER else 0.0
    index = np.arange(-h, n + h, dtype=np.float64) + offset
    return jnp.asarray(
        self._origin(axis) + index * self.spacing(axis), dtype=self.dtype
    )

  def broadcastable_coordinates(
      self, axis: str, location: Location
  ) -> jax.Array:
    """Coordinates along `axis` reshaped to broadcast against a 3D field."""
    shape = [1, 1, 1]
    shape[self.get_axis_index(axis)] = -1
    return jnp.reshape(self.node_coordinates(axis, location), shape)

  def meshgrid(
      self, location: FieldLocation
  ) -> tuple[jax.Array, jax.Array, jax.Array]:
    """Broadcastable x, y, z coordinates of a field at `location`."""
    return tuple(
        self.broadcastable_coordinates(axis, loc)
        for axis, loc in zip(AXES, location)
    )

  def __str__(self):
    return (
        f'GridParametrization(size={self._size}, length={self._length},'
        f' halo_width={self._halo_width},'
        f' topology={tuple(t.value for t in self._topology)})'
    )
