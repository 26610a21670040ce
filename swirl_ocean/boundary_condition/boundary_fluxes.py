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

"""Contributions of the boundary fluxes to the tendencies.

The closures set the diffusive fluxes across bounded walls to zero. The flux
across a wall is instead prescribed by the boundary condition of the field,
and added to the tendency of the cell next to the wall:

  lower wall:  G[h] += F / Δ,
  upper wall:  G[h + n - 1] -= F / Δ,

where F is positive along the axis. Gradient and value conditions are turned
into fluxes with the diffusivity of the closure on the wall:

  gradient g:  F = -κ g,
  value v:     F = -κ (c[h] - v) / (Δ / 2) on the lower wall, and
               F = -κ (v - c[h + n - 1]) / (Δ / 2) on the upper wall.

Periodic axes and the wall-normal velocity receive no contribution.
"""

from typing import Any, TypeAlias

import jax
import jax.numpy as jnp
from swirl_ocean.boundary_condition import boundary_conditions as bc_lib
from swirl_ocean.equations import common
from swirl_ocean.numerics import interpolation
from swirl_ocean.physics.turbulence import closures
from swirl_ocean.utility import common_ops
from swirl_ocean.utility import get_kernel_fn
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

BCType: TypeAlias = bc_lib.BCType
BoundaryCondition: TypeAlias = bc_lib.BoundaryCondition
FieldLocation: TypeAlias = grid_parametrization.FieldLocation
FloatOrField: TypeAlias = types.FloatOrField
GridParametrization: TypeAlias = grid_parametrization.GridParametrization
Location: TypeAlias = grid_parametrization.Location
PlaneField: TypeAlias = types.PlaneField
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap
SideType: TypeAlias = bc_lib.SideType

AXES = grid_parametrization.AXES


def _boundary_plane(
    value: FloatOrField,
    axis: str,
    side: SideType,
    grid: GridParametrization,
) -> FloatOrField:
  """The plane of `value` in the cells next to the wall, if it is a field."""
  if jnp.ndim(value) < 3:
    return value
  return common_ops.get_face(value, axis, int(side), 0, grid)


def boundary_flux(
    bc: BoundaryCondition,
    side: SideType,
    field: ScalarField,
    kappa: FloatOrField,
    axis: str,
    location: FieldLocation,
    grid: GridParametrization,
    time: float | jax.Array,
    states: ScalarFieldMap,
) -> PlaneField | None:
  """Converts a boundary condition to the flux across the wall.

  Args:
    bc: The boundary condition on the wall.
    side: The side of the wall along `axis`.
    field: The field the condition applies to.
    kappa: The diffusivity of the field on the wall, a scalar or a field at
      the location of `field`.
    axis: The axis normal to the wall.
    location: The staggered location of `field`.
    grid: The grid parametrization object.
    time: The current simulation time.
    states: The prognostic fields with their halos filled.

  Returns:
    The flux across the wall, positive along `axis`, or `None` if the
    condition prescribes no flux.

  Raises:
    NotImplementedError: If the condition has no flux equivalent.
  """
  if bc.bc_type in (BCType.PERIODIC, BCType.NO_PENETRATION) or bc.is_no_flux:
    return None

  value = bc.evaluate(grid, location, axis, time, states)
  if bc.bc_type == BCType.FLUX:
    return value

  kappa = _boundary_plane(kappa, axis, side, grid)
  if bc.bc_type == BCType.GRADIENT:
    return -kappa * value
  if bc.bc_type == BCType.VALUE:
    c = common_ops.get_face(field, axis, int(side), 0, grid)
    half_spacing = 0.5 * grid.spacing(axis)
    if side == SideType.LOWER:
      return -kappa * (c - value) / half_spacing
    return -kappa * (value - c) / half_spacing

  raise NotImplementedError(
      f'{bc.bc_type} boundary conditions have no flux equivalent.'
  )


def add_boundary_flux(
    tendency: ScalarField,
    flux: PlaneField,
    axis: str,
    side: SideType,
    grid: GridParametrization,
) -> ScalarField:
  """Adds the divergence of a wall flux to the cells next to the wall."""
  dim = grid.get_axis_index(axis)
  h = grid.halo(axis)
  if side == SideType.LOWER:
    return tendency.at[common_ops.plane_index(dim, h)].add(
        flux / grid.spacing(axis)
    )
  return tendency.at[common_ops.plane_index(dim, h + grid.n(axis) - 1)].add(
      -flux / grid.spacing(axis)
  )


def _diffusivity_at(
    kappa: FloatOrField,
    location: FieldLocation,
    kernel_op: get_kernel_fn.ApplyKernelOp,
) -> FloatOrField:
  """Interpolates a diffusivity field from cell centers to `location`."""
  if jnp.ndim(kappa) < 3:
    return kappa
  return interpolation.interpolate(
      kappa, common.TRACER_LOCATION, location, kernel_op
  )


def apply_boundary_fluxes(
    name: str,
    tendency: ScalarField,
    grid: GridParametrization,
    field_bcs: bc_lib.FieldBoundaryConditions,
    closure: closures.Closure,
    diffusivities: Any,
    kernel_op: get_kernel_fn.ApplyKernelOp,
    states: ScalarFieldMap,
    time: float | jax.Array,
) -> ScalarField:
  """Adds the boundary fluxes of the field `name` to its tendency.

  Args:
    name: The name of the field.
    tendency: The interior tendency of the field.
    grid: The grid parametrization object.
    field_bcs: The regularized boundary conditions of the field.
    closure: The turbulence closure, or a tuple of closures.
    diffusivities: The diffusivities of the closure, with their halos filled.
    kernel_op: Kernel operation library.
    states: The prognostic fields with their halos filled.
    time: The current simulation time.

  Returns:
    The tendency with the boundary fluxes added. It is `tendency` itself if
    no boundary prescribes a flux.
  """
  location = common.field_location(name)
  field = states[name]
  updated = False
  for axis in AXES:
    dim = grid.get_axis_index(axis)
    if grid.is_periodic(axis) or location[dim] == Location.FACE:
      continue
    kappa = None
    for side in (SideType.LOWER, SideType.UPPER):
      bc = field_bcs.get(axis, side)
      if bc.bc_type in (BCType.VALUE, BCType.GRADIENT) and kappa is None:
        kappa = _diffusivity_at(
            closures.boundary_diffusivity(closure, name, axis, diffusivities),
            location,
            kernel_op,
        )
      flux = boundary_flux(
          bc, side, field, kappa, axis, location, grid, time, states
      )
      if flux is None:
        continue
      tendency = add_boundary_flux(tendency, flux, axis, side, grid)
      updated = True

  if not updated:
    return tendency
  return common_ops.keep_interior(tendency, location, grid)
