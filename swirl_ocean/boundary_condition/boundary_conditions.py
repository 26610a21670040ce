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

"""Boundary conditions of the prognostic fields and halo filling.

A boundary condition is specified per field, per axis, and per side. On a
periodic axis it must be periodic. On a bounded axis the velocity component
normal to the walls is impermeable (`NO_PENETRATION`), while every other field
takes a `FLUX`, `VALUE` or `GRADIENT` condition. The condition of a boundary is
either a constant, an array broadcastable to the boundary plane, or a function:

  * continuous form: `f(ξ, η, t)` (or `f(ξ, η, t, parameters)`), where ξ and η
    are the coordinates of the field along the two tangential axes in x-y-z
    order, shaped to broadcast against each other;
  * discrete form: `f(grid, t, states)` (or `f(grid, t, states, parameters)`),
    returning a plane that broadcasts to the boundary plane of the field.

Fluxes are positive in the direction of increasing coordinate.
"""

import dataclasses
import enum
from typing import Any, Mapping, Sequence, TypeAlias

from absl import logging
import jax
import jax.numpy as jnp
from swirl_ocean.equations import common
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

FieldLocation: TypeAlias = grid_parametrization.FieldLocation
GridParametrization: TypeAlias = grid_parametrization.GridParametrization
Location: TypeAlias = grid_parametrization.Location
PlaneField: TypeAlias = types.PlaneField
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap

AXES = grid_parametrization.AXES


class BCType(enum.Enum):
  """A class defining the type of boundary conditions.

  PERIODIC: The field wraps around the axis.
  FLUX: The flux of the field across the boundary is prescribed. A flux
    condition without a value is a no-flux boundary.
  VALUE: The value of the field on the boundary is prescribed.
  GRADIENT: The derivative of the field along the axis, on the boundary, is
    prescribed.
  NO_PENETRATION: The velocity component normal to a wall vanishes on it.
  """

  PERIODIC = 1
  FLUX = 2
  VALUE = 3
  GRADIENT = 4
  NO_PENETRATION = 5


class SideType(enum.IntEnum):
  """A class defining the type of axis side."""

  LOWER = 0  # The low side of an axis.
  UPPER = 1  # The high side of an axis.


@dataclasses.dataclass(frozen=True)
class BoundaryCondition:
  """The boundary condition on one side of one axis of a field.

  Attributes:
    bc_type: The type of the boundary condition.
    condition: A constant, an array, or a function that evaluates to the
      prescribed flux, value or gradient. `None` means zero.
    discrete_form: Whether a function `condition` takes the discrete
      `(grid, t, states)` arguments instead of coordinates.
    parameters: Optional parameters passed as the last argument of a function
      `condition`.
  """

  bc_type: BCType
  condition: Any = None
  discrete_form: bool = False
  parameters: Any = None

  @property
  def is_no_flux(self) -> bool:
    return self.bc_type == BCType.FLUX and self.condition is None

  def evaluate(
      self,
      grid: GridParametrization,
      location: FieldLocation,
      axis: str,
      time: float | jax.Array,
      states: ScalarFieldMap | None = None,
  ) -> PlaneField:
    """Evaluates the condition on the boundary plane normal to `axis`.

    Args:
      grid: The grid parametrization object.
      location: The staggered location of the field the condition applies to.
      axis: The axis normal to the boundary.
      time: The current simulation time.
      states: The current prognostic fields, used by discrete-form conditions.

    Returns:
      A 2D array with the shape of the boundary plane (tangential halos
      included).
    """
    plane_shape = grid.plane_shape(axis)
    if self.condition is None:
      return jnp.zeros(plane_shape, dtype=grid.dtype)

    extra_args = () if self.parameters is None else (self.parameters,)
    if callable(self.condition):
      if self.discrete_form:
        value = self.condition(grid, time, states, *extra_args)
      else:
        tangential = [
            (a, loc) for a, loc in zip(AXES, location) if a != axis
        ]
        xi = grid.node_coordinates(*tangential[0])[:, jnp.newaxis]
        eta = grid.node_coordinates(*tangential[1])[jnp.newaxis, :]
        value = self.condition(xi, eta, time, *extra_args)
    else:
      value = self.condition

    return jnp.broadcast_to(jnp.asarray(value, dtype=grid.dtype), plane_shape)


def periodic_bc() -> BoundaryCondition:
  return BoundaryCondition(BCType.PERIODIC)


def no_flux_bc() -> BoundaryCondition:
  return BoundaryCondition(BCType.FLUX)


def no_penetration_bc() -> BoundaryCondition:
  return BoundaryCondition(BCType.NO_PENETRATION)


def flux_bc(
    condition: Any, discrete_form: bool = False, parameters: Any = None
) -> BoundaryCondition:
  """A boundary condition that prescribes the flux across the boundary."""
  return BoundaryCondition(BCType.FLUX, condition, discrete_form, parameters)


def value_bc(
    condition: Any, discrete_form: bool = False, parameters: Any = None
) -> BoundaryCondition:
  """A boundary condition that prescribes the value on the boundary."""
  return BoundaryCondition(BCType.VALUE, condition, discrete_form, parameters)


def gradient_bc(
    condition: Any, discrete_form: bool = False, parameters: Any = None
) -> BoundaryCondition:
  """A boundary condition that prescribes the gradient on the boundary."""
  return BoundaryCondition(
      BCType.GRADIENT, condition, discrete_form, parameters
  )


BoundaryPair: TypeAlias = tuple[BoundaryCondition, BoundaryCondition]


@dataclasses.dataclass(frozen=True)
class FieldBoundaryConditions:
  """The (lower, upper) boundary conditions of a field along each axis.

  An axis left as `None` takes the default conditions of the grid topology.
  """

  x: BoundaryPair | None = None
  y: BoundaryPair | None = None
  z: BoundaryPair | None = None

  def pair(self, axis: str) -> BoundaryPair | None:
    return getattr(self, axis)

  def get(self, axis: str, side: SideType) -> BoundaryCondition:
    pair = self.pair(axis)
    if pair is None:
      raise ValueError(f'No boundary condition is set along {axis}.')
    return pair[side]


BoundaryConditionDict: TypeAlias = Mapping[str, FieldBoundaryConditions]


def _default_pair(
    grid: GridParametrization, axis: str, location: FieldLocation
) -> BoundaryPair:
  """The boundary conditions used when none is specified."""
  if grid.is_periodic(axis):
    return (periodic_bc(), periodic_bc())
  if location[grid.get_axis_index(axis)] == Location.FACE:
    return (no_penetration_bc(), no_penetration_bc())
  return (no_flux_bc(), no_flux_bc())


def _validate_pair(
    grid: GridParametrization,
    name: str,
    axis: str,
    location: FieldLocation,
    pair: BoundaryPair,
) -> None:
  """Checks that a pair of boundary conditions matches the grid and field.

  Args:
    grid: The grid parametrization object.
    name: The name of the field.
    axis: The axis of the boundary conditions.
    location: The staggered location of the field.
    pair: The (lower, upper) boundary conditions.

  Raises:
    ValueError: If a condition conflicts with the topology of `axis` or with
      the location of the field.
  """
  for side, bc in zip(SideType, pair):
    if not isinstance(bc, BoundaryCondition):
      raise TypeError(
          f'The {side.name.lower()} {axis} boundary condition of {name} must'
          f' be a `BoundaryCondition`, but got {bc!r}.'
      )
    if grid.is_periodic(axis):
      if bc.bc_type != BCType.PERIODIC:
        raise ValueError(
            f'The {axis} axis is periodic, so the {side.name.lower()}'
            f' boundary condition of {name} must be periodic, but got'
            f' {bc.bc_type.name}.'
        )
      continue
    is_wall_normal = location[grid.get_axis_index(axis)] == Location.FACE
    if is_wall_normal and bc.bc_type != BCType.NO_PENETRATION:
      raise ValueError(
          f'{name} is normal to the walls of the bounded {axis} axis, so only'
          f' NO_PENETRATION is allowed, but got {bc.bc_type.name}.'
      )
    if not is_wall_normal and bc.bc_type in (
        BCType.PERIODIC,
        BCType.NO_PENETRATION,
    ):
      raise ValueError(
          f'{bc.bc_type.name} is not a valid {side.name.lower()} boundary'
          f' condition of {name} along the bounded {axis} axis.'
      )


def regularize_boundary_conditions(
    grid: GridParametrization,
    names: Sequence[str],
    boundary_conditions: BoundaryConditionDict | None = None,
) -> dict[str, FieldBoundaryConditions]:
  """Fills in defaults and validates the boundary-condition table.

  Args:
    grid: The grid parametrization object.
    names: The names of all prognostic fields.
    boundary_conditions: User specified boundary conditions keyed by field
      name. Fields or axes that are not specified take the defaults: periodic
      on periodic axes, no-penetration for wall-normal velocities, and no-flux
      otherwise.

  Returns:
    A complete boundary-condition table with an entry for every field and
    every axis.

  Raises:
    ValueError: If a boundary condition is given for a field that does not
      exist, or if a condition is inconsistent with the grid.
  """
  boundary_conditions = dict(boundary_conditions or {})
  unknown = sorted(set(boundary_conditions) - set(names))
  if unknown:
    raise ValueError(
        f'Boundary conditions are specified for nonexistent fields {unknown}.'
        f' Valid fields are {tuple(names)}.'
    )

  table = {}
  for name in names:
    user_bcs = boundary_conditions.get(name, FieldBoundaryConditions())
    if not isinstance(user_bcs, FieldBoundaryConditions):
      raise TypeError(
          f'Boundary conditions of {name} must be `FieldBoundaryConditions`,'
          f' but got {type(user_bcs)}.'
      )
    location = common.field_location(name)
    pairs = {}
    for axis in AXES:
      pair = user_bcs.pair(axis)
      if pair is None:
        pair = _default_pair(grid, axis, location)
      else:
        pair = tuple(pair)
        if len(pair) != 2:
          raise ValueError(
              f'Boundary conditions of {name} along {axis} must be a (lower,'
              f' upper) pair, but got {pair}.'
          )
        _validate_pair(grid, name, axis, location, pair)
      pairs[axis] = pair
    table[name] = FieldBoundaryConditions(**pairs)
    if name in boundary_conditions:
      logging.info(
          'Boundary conditions of %s: %s.',
          name,
          ', '.join(
              f'{axis}=({pairs[axis][0].bc_type.name},'
              f' {pairs[axis][1].bc_type.name})'
              for axis in AXES
          ),
      )
  return table


def _fill_periodic(
    array: ScalarField, axis: str, grid: GridParametrization
) -> ScalarField:
  """Copies the interior cells on the opposite side into the halos."""
  dim = grid.get_axis_index(axis)
  h = grid.halo(axis)
  n = grid.n(axis)
  low = jax.lax.slice_in_dim(array, n, n + h, axis=dim)
  interior = jax.lax.slice_in_dim(array, h, h + n, axis=dim)
  high = jax.lax.slice_in_dim(array, h, 2 * h, axis=dim)
  return jnp.concatenate([low, interior, high], axis=dim)


def _fill_wall_normal(
    array: ScalarField, axis: str, grid: GridParametrization
) -> ScalarField:
  """Sets the walls of a wall-normal velocity to 0 and reflects its halos."""
  dim = grid.get_axis_index(axis)
  h = grid.halo(axis)
  n = grid.n(axis)
  low = -jnp.flip(jax.lax.slice_in_dim(array, h + 1, 2 * h + 1, axis=dim), dim)
  wall = jnp.zeros_like(jax.lax.slice_in_dim(array, h, h + 1, axis=dim))
  interior = jax.lax.slice_in_dim(array, h + 1, h + n, axis=dim)
  high = -jnp.flip(jax.lax.slice_in_dim(array, n + 1, n + h, axis=dim), dim)
  return jnp.concatenate([low, wall, interior, wall, high], axis=dim)


def _ghost_values(
    bc: BoundaryCondition,
    mirror: ScalarField,
    distance: jax.Array,
    axis: str,
    location: FieldLocation,
    grid: GridParametrization,
    time: float | jax.Array,
    states: ScalarFieldMap | None,
) -> ScalarField:
  """Computes the halo values on one side of a bounded axis.

  Args:
    bc: The boundary condition on this side.
    mirror: The interior values reflected about the boundary.
    distance: The signed distance, in cells, from each mirrored interior value
      to its halo image, shaped to broadcast along `axis`.
    axis: The axis normal to the boundary.
    location: The staggered location of the field.
    grid: The grid parametrization object.
    time: The current simulation time.
    states: The current prognostic fields.

  Returns:
    The halo values that realize `bc` with second-order accuracy.
  """
  dim = grid.get_axis_index(axis)
  if bc.bc_type == BCType.VALUE:
    value = jnp.expand_dims(
        bc.evaluate(grid, location, axis, time, states), dim
    )
    return 2.0 * value - mirror
  if bc.bc_type == BCType.GRADIENT:
    gradient = jnp.expand_dims(
        bc.evaluate(grid, location, axis, time, states), dim
    )
    return mirror + gradient * grid.spacing(axis) * distance
  return mirror


def fill_halo_region(
    array: ScalarField,
    location: FieldLocation,
    grid: GridParametrization,
    field_bcs: FieldBoundaryConditions | None = None,
    time: float | jax.Array = 0.0,
    states: ScalarFieldMap | None = None,
) -> ScalarField:
  """Fills the halos of one field according to its boundary conditions.

  Periodic axes copy the opposite interior. On bounded axes, the wall-normal
  velocity is set to zero on the walls and reflected with odd symmetry; other
  fields are mirrored (flux conditions) or extrapolated to match a prescribed
  value or gradient on the wall.

  Args:
    array: The field, halos included.
    location: The staggered location of the field.
    grid: The grid parametrization object.
    field_bcs: The boundary conditions of the field. No-flux conditions are
      used on bounded axes if `None`.
    time: The current simulation time.
    states: The current prognostic fields, used by discrete-form conditions.

  Returns:
    The field with its halos filled.
  """
  for axis in AXES:
    dim = grid.get_axis_index(axis)
    if grid.is_periodic(axis):
      array = _fill_periodic(array, axis, grid)
      continue
    if location[dim] == Location.FACE:
      array = _fill_wall_normal(array, axis, grid)
      continue

    h = grid.halo(axis)
    n = grid.n(axis)
    if field_bcs is None:
      lower, upper = no_flux_bc(), no_flux_bc()
    else:
      lower = field_bcs.get(axis, SideType.LOWER)
      upper = field_bcs.get(axis, SideType.UPPER)
    shape = [1, 1, 1]
    shape[dim] = h
    # Halo `h - 1 - m` mirrors interior cell `h + m`, (2m + 1) cells apart.
    low_distance = -jnp.reshape(jnp.arange(2 * h - 1, 0, -2), shape)
    high_distance = jnp.reshape(jnp.arange(1, 2 * h, 2), shape)
    low_mirror = jnp.flip(jax.lax.slice_in_dim(array, h, 2 * h, axis=dim), dim)
    high_mirror = jnp.flip(
        jax.lax.slice_in_dim(array, n, n + h, axis=dim), dim
    )
    low = _ghost_values(
        lower, low_mirror, low_distance, axis, location, grid, time, states
    )
    high = _ghost_values(
        upper, high_mirror, high_distance, axis, location, grid, time, states
    )
    interior = jax.lax.slice_in_dim(array, h, h + n, axis=dim)
    array = jnp.concatenate([low, interior, high], axis=dim)
  return array


def fill_halo_regions(
    states: ScalarFieldMap,
    grid: GridParametrization,
    boundary_conditions: BoundaryConditionDict,
    time: float | jax.Array = 0.0,
) -> dict[str, ScalarField]:
  """Fills the halos of all fields in `states`.

  All fields are filled from the same snapshot of `states`.

  Args:
    states: The prognostic fields keyed by name.
    grid: The grid parametrization object.
    boundary_conditions: The regularized boundary-condition table.
    time: The current simulation time.

  Returns:
    A new mapping with the halos of every field filled.
  """
  return {
      name: fill_halo_region(
          value,
          common.field_location(name),
          grid,
          boundary_conditions.get(name),
          time,
          states,
      )
      for name, value in states.items()
  }
