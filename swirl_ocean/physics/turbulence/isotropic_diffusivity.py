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

"""Closures with constant, isotropic coefficients."""

import dataclasses
from typing import Sequence, TypeAlias

import jax
import jax.numpy as jnp
from swirl_ocean.equations import common
from swirl_ocean.numerics import derivatives
from swirl_ocean.physics import constants
from swirl_ocean.physics.turbulence import closure_base
from swirl_ocean.physics.turbulence import closure_operators
from swirl_ocean.utility import types

DiffusivityFields: TypeAlias = closure_base.DiffusivityFields
FloatOrField: TypeAlias = types.FloatOrField
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap
TracerParameter: TypeAlias = closure_base.TracerParameter


@dataclasses.dataclass(frozen=True)
class NoClosure(closure_base.TurbulenceClosure):
  """No subgrid fluxes of momentum or tracers."""

  def stress_divergence(
      self,
      dim: str,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      diffusivities: DiffusivityFields,
  ) -> None:
    del dim, deriv_lib, states, diffusivities
    return None

  def tracer_flux_divergence(
      self,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      tracer_name: str,
      diffusivities: DiffusivityFields,
  ) -> None:
    del deriv_lib, states, tracer_name, diffusivities
    return None

  def boundary_diffusivity(
      self,
      field_name: str,
      axis: str,
      diffusivities: DiffusivityFields,
  ) -> float:
    del field_name, axis, diffusivities
    return 0.0

  def diffusion_timescale(self, grid, diffusivities) -> jax.Array:
    del grid, diffusivities
    return jnp.asarray(jnp.inf)


@dataclasses.dataclass(frozen=True)
class IsotropicDiffusivity(closure_base.TurbulenceClosure):
  """Constant isotropic viscosity and tracer diffusivities.

  The momentum and tracer tendencies are ν∇²u and κ∇²c, computed in flux form.

  Attributes:
    nu: The kinematic viscosity, in m²/s.
    kappa: The diffusivity of the tracers, in m²/s, either one value for all
      tracers or one per tracer.
  """

  nu: float = constants.NU_0
  kappa: TracerParameter = constants.KAPPA_0

  def with_tracers(self, tracers: Sequence[str]) -> 'IsotropicDiffusivity':
    return dataclasses.replace(
        self,
        kappa=closure_base.expand_tracer_parameter(
            self.kappa, tracers, 'kappa', type(self).__name__
        ),
    )

  def stress_divergence(
      self,
      dim: str,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      diffusivities: DiffusivityFields,
  ) -> ScalarField:
    del diffusivities
    return closure_operators.velocity_diffusion(
        deriv_lib, states, dim, (self.nu,) * 3
    )

  def tracer_flux_divergence(
      self,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      tracer_name: str,
      diffusivities: DiffusivityFields,
  ) -> ScalarField:
    del diffusivities
    kappa = closure_base.tracer_parameter(self.kappa, tracer_name)
    return closure_operators.flux_form_laplacian(
        deriv_lib, states[tracer_name], common.TRACER_LOCATION, (kappa,) * 3
    )

  def boundary_diffusivity(
      self,
      field_name: str,
      axis: str,
      diffusivities: DiffusivityFields,
  ) -> FloatOrField:
    del axis, diffusivities
    if common.is_velocity(field_name):
      return self.nu
    return closure_base.tracer_parameter(self.kappa, field_name)

  def diffusion_timescale(self, grid, diffusivities) -> jax.Array:
    del diffusivities
    kappas = closure_base.parameter_values(self.kappa)
    return closure_operators.timescale(
        grid.min_spacing, jnp.max(jnp.asarray([self.nu] + kappas))
    )
