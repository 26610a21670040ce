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

"""Operations on a turbulence closure or a tuple of closures.

A tuple of closures acts as the sum of its members. Each member computes its
own diffusivities, so `calculate_diffusivities` returns a tuple with one
`DiffusivityFields` per member, and every tendency contribution is the sum of
the contributions of the members.
"""

from typing import Any, Sequence, TypeAlias

import jax
import jax.numpy as jnp
from swirl_ocean.boundary_condition import boundary_conditions
from swirl_ocean.equations import common
from swirl_ocean.numerics import derivatives
from swirl_ocean.physics.turbulence import closure_base
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

DiffusivityFields: TypeAlias = closure_base.DiffusivityFields
FloatOrField: TypeAlias = types.FloatOrField
GridParametrization: TypeAlias = grid_parametrization.GridParametrization
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap
TurbulenceClosure: TypeAlias = closure_base.TurbulenceClosure

Closure: TypeAlias = TurbulenceClosure | tuple[TurbulenceClosure, ...]
Diffusivities: TypeAlias = DiffusivityFields | tuple[DiffusivityFields, ...]


def _members(
    closure: Closure, diffusivities: Diffusivities | None = None
) -> list[tuple[TurbulenceClosure, DiffusivityFields]]:
  """Pairs each member of `closure` with its diffusivities."""
  if not isinstance(closure, tuple):
    return [(closure, diffusivities or DiffusivityFields())]
  if diffusivities is None:
    diffusivities = (DiffusivityFields(),) * len(closure)
  if len(diffusivities) != len(closure):
    raise ValueError(
        f'{len(closure)} closures need as many diffusivities, but got'
        f' {len(diffusivities)}.'
    )
  return list(zip(closure, diffusivities))


def _sum(terms: Sequence[Any]) -> Any:
  """Sums the terms that are not `None`, or returns `None` if all are."""
  result = None
  for term in terms:
    if term is None:
      continue
    result = term if result is None else result + term
  return result


def with_tracers(closure: Closure, tracers: Sequence[str]) -> Closure:
  """Rebuilds every member of `closure` for the tracers `tracers`."""
  if isinstance(closure, tuple):
    return tuple(c.with_tracers(tracers) for c in closure)
  return closure.with_tracers(tracers)


def required_halo_width(closure: Closure) -> int:
  """The largest halo width required by a member of `closure`."""
  return max(
      (c.required_halo_width for c, _ in _members(closure)), default=1
  )


def calculate_diffusivities(
    closure: Closure,
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
    buoyancy: Any = None,
) -> Diffusivities:
  """Computes the diffusivities of `closure`, one entry per tuple member."""
  if isinstance(closure, tuple):
    return tuple(
        c.calculate_diffusivities(deriv_lib, states, buoyancy)
        for c in closure
    )
  return closure.calculate_diffusivities(deriv_lib, states, buoyancy)


def fill_diffusivity_halos(
    diffusivities: Diffusivities, grid: GridParametrization
) -> Diffusivities:
  """Fills the halos of the eddy viscosity and diffusivities.

  Periodic axes are filled periodically, and bounded axes with zero gradient.

  Args:
    diffusivities: The output of `calculate_diffusivities`.
    grid: The grid parametrization object.

  Returns:
    The diffusivities with their halos filled.
  """

  def fill(value: ScalarField | None) -> ScalarField | None:
    if value is None:
      return None
    return boundary_conditions.fill_halo_region(
        value, common.TRACER_LOCATION, grid
    )

  def fill_fields(k: DiffusivityFields) -> DiffusivityFields:
    return DiffusivityFields(
        viscosity=fill(k.viscosity),
        diffusivities=None
        if k.diffusivities is None
        else {name: fill(v) for name, v in k.diffusivities.items()},
    )

  if isinstance(diffusivities, tuple) and not isinstance(
      diffusivities, DiffusivityFields
  ):
    return tuple(fill_fields(k) for k in diffusivities)
  return fill_fields(diffusivities)


def stress_divergence(
    closure: Closure,
    dim: str,
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
    diffusivities: Diffusivities,
) -> ScalarField | None:
  """Computes ∂ⱼ(2ν Σᵢⱼ) of the velocity component along `dim`."""
  return _sum([
      c.stress_divergence(dim, deriv_lib, states, k)
      for c, k in _members(closure, diffusivities)
  ])


def stress_divergence_x(
    closure: Closure,
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
    diffusivities: Diffusivities,
) -> ScalarField | None:
  """The closure term of the u tendency, at the u faces."""
  return stress_divergence(closure, 'x', deriv_lib, states, diffusivities)


def stress_divergence_y(
    closure: Closure,
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
    diffusivities: Diffusivities,
) -> ScalarField | None:
  """The closure term of the v tendency, at the v faces."""
  return stress_divergence(closure, 'y', deriv_lib, states, diffusivities)


def stress_divergence_z(
    closure: Closure,
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
    diffusivities: Diffusivities,
) -> ScalarField | None:
  """The closure term of the w tendency, at the w faces."""
  return stress_divergence(closure, 'z', deriv_lib, states, diffusivities)


def tracer_flux_divergence(
    closure: Closure,
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
    tracer_name: str,
    diffusivities: Diffusivities,
) -> ScalarField | None:
  """Computes ∇·(κ∇c) of the tracer `tracer_name`."""
  return _sum([
      c.tracer_flux_divergence(deriv_lib, states, tracer_name, k)
      for c, k in _members(closure, diffusivities)
  ])


def boundary_diffusivity(
    closure: Closure,
    field_name: str,
    axis: str,
    diffusivities: Diffusivities,
) -> FloatOrField:
  """The diffusivity of `field_name` across boundaries normal to `axis`."""
  return _sum([
      c.boundary_diffusivity(field_name, axis, k)
      for c, k in _members(closure, diffusivities)
  ])


def cell_diffusion_timescale(
    closure: Closure,
    diffusivities: Diffusivities,
    grid: GridParametrization,
) -> jax.Array:
  """The smallest diffusion time scale over the members of `closure`.

  The time scale of an empty tuple of closures is infinite.
  """
  timescales = [
      c.diffusion_timescale(grid, k)
      for c, k in _members(closure, diffusivities)
  ]
  if not timescales:
    return jnp.asarray(jnp.inf, dtype=grid.dtype)
  return jnp.min(jnp.asarray(timescales))
