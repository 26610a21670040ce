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

"""The two-dimensional Leith closure of horizontal enstrophy cascades.

The eddy viscosity is

  νₑ = (C Δᶠ)³ √(|∇ₕζ|² + |∇ₕ∂z w|²),

where ζ = ∂x v - ∂y u is the vertical vorticity and Δᶠ = √(Δx Δy). Momentum
and tracers are mixed along the horizontal axes only; tracers diffuse with
κₑ = C_Redi νₑ.

Reference:
Leith, C. E. 1968. "Diffusion approximation for two-dimensional turbulence."
The Physics of Fluids 11 (3): 671-672.
"""

import dataclasses
from typing import Any, TypeAlias

import jax
import jax.numpy as jnp
from swirl_ocean.equations import common
from swirl_ocean.numerics import derivatives
from swirl_ocean.numerics import interpolation
from swirl_ocean.physics.turbulence import closure_base
from swirl_ocean.physics.turbulence import closure_operators
from swirl_ocean.physics.turbulence import eddy_viscosity
from swirl_ocean.utility import types

DiffusivityFields: TypeAlias = closure_base.DiffusivityFields
FloatOrField: TypeAlias = types.FloatOrField
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap

_HORIZONTAL_AXES = ('x', 'y')


def vertical_vorticity(
    deriv_lib: derivatives.Derivatives, states: ScalarFieldMap
) -> ScalarField:
  """Computes ζ = ∂x v - ∂y u on the (x, y) faces."""
  return deriv_lib.deriv_node_to_face(
      states[common.KEY_V], 'x'
  ) - deriv_lib.deriv_node_to_face(states[common.KEY_U], 'y')


def horizontal_vorticity_gradient_squared(
    deriv_lib: derivatives.Derivatives, states: ScalarFieldMap
) -> ScalarField:
  """Computes |∇ₕζ|² at cell centers."""
  kernel_op = deriv_lib.kernel_op
  zeta = vertical_vorticity(deriv_lib, states)
  dzeta_dx = interpolation.centered_face_to_node(
      deriv_lib.deriv_face_to_node(zeta, 'x'), 'y', kernel_op
  )
  dzeta_dy = interpolation.centered_face_to_node(
      deriv_lib.deriv_face_to_node(zeta, 'y'), 'x', kernel_op
  )
  return dzeta_dx**2 + dzeta_dy**2


def horizontal_divergence_gradient_squared(
    deriv_lib: derivatives.Derivatives, states: ScalarFieldMap
) -> ScalarField:
  """Computes |∇ₕ∂z w|² at cell centers."""
  dw_dz = deriv_lib.deriv_face_to_node(states[common.KEY_W], 'z')
  return sum(
      deriv_lib.deriv_centered(dw_dz, axis) ** 2 for axis in _HORIZONTAL_AXES
  )


@dataclasses.dataclass(frozen=True)
class TwoDimensionalLeith(closure_base.TurbulenceClosure):
  """The two-dimensional Leith closure.

  Attributes:
    c: The Leith coefficient C.
    c_redi: The ratio of the tracer diffusivity to the eddy viscosity.
  """

  c: float = 0.3
  c_redi: float = 1.0

  def calculate_diffusivities(
      self,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      buoyancy: Any = None,
  ) -> DiffusivityFields:
    del buoyancy
    grid = deriv_lib.grid_params
    delta = jnp.sqrt(grid.dx * grid.dy)
    nu_e = (self.c * delta) ** 3 * jnp.sqrt(
        horizontal_vorticity_gradient_squared(deriv_lib, states)
        + horizontal_divergence_gradient_squared(deriv_lib, states)
    )
    return DiffusivityFields(
        viscosity=nu_e,
        diffusivities={
            t: self.c_redi * nu_e
            for t in eddy_viscosity.tracer_names(states)
        },
    )

  def stress_divergence(
      self,
      dim: str,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      diffusivities: DiffusivityFields,
  ) -> ScalarField | None:
    nu_e = diffusivities.viscosity
    if nu_e is None:
      return None
    if dim == 'z':
      return closure_operators.velocity_diffusion(
          deriv_lib, states, dim, (nu_e, nu_e), _HORIZONTAL_AXES
      )
    return closure_operators.viscous_stress_divergence(
        deriv_lib, states, dim, nu_e, _HORIZONTAL_AXES
    )

  def tracer_flux_divergence(
      self,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      tracer_name: str,
      diffusivities: DiffusivityFields,
  ) -> ScalarField | None:
    if diffusivities.diffusivities is None:
      return None
    kappa_e = diffusivities.diffusivities[tracer_name]
    return closure_operators.flux_form_laplacian(
        deriv_lib,
        states[tracer_name],
        common.TRACER_LOCATION,
        (kappa_e, kappa_e),
        _HORIZONTAL_AXES,
    )

  def boundary_diffusivity(
      self,
      field_name: str,
      axis: str,
      diffusivities: DiffusivityFields,
  ) -> FloatOrField:
    if axis not in _HORIZONTAL_AXES:
      return 0.0
    if common.is_velocity(field_name):
      values = diffusivities.viscosity
    else:
      values = (diffusivities.diffusivities or {}).get(field_name)
    return 0.0 if values is None else values

  def diffusion_timescale(self, grid, diffusivities) -> jax.Array:
    nu_e = closure_operators.max_or_zero(diffusivities.viscosity)
    return closure_operators.timescale(
        min(grid.dx, grid.dy), nu_e * max(1.0, self.c_redi)
    )
