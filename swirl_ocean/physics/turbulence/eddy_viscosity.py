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

"""The base class of closures with an isotropic eddy viscosity.

The subgrid stress is 2(ν + νₑ)Σᵢⱼ and the subgrid flux of a tracer is
(κ + κₑ)∇c, where ν and κ are molecular and νₑ and κₑ are computed from the
resolved flow by `calculate_diffusivities`.
"""

import dataclasses
from typing import Sequence, TypeAlias

from absl import logging
import jax
import jax.numpy as jnp
from swirl_ocean.equations import common
from swirl_ocean.numerics import derivatives
from swirl_ocean.physics.turbulence import closure_base
from swirl_ocean.physics.turbulence import closure_operators
from swirl_ocean.utility import types

DiffusivityFields: TypeAlias = closure_base.DiffusivityFields
FloatOrField: TypeAlias = types.FloatOrField
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap


def tracer_names(states: ScalarFieldMap) -> list[str]:
  """The names of the tracers in `states`."""
  return [name for name in states if not common.is_velocity(name)]


class EddyViscosityClosure(closure_base.TurbulenceClosure):
  """Operations shared by closures with an eddy viscosity and diffusivity.

  Subclasses are dataclasses with a molecular viscosity `nu` and molecular
  diffusivities `kappa`. The names of all per-tracer parameters are listed in
  `TRACER_PARAMETERS`.
  """

  TRACER_PARAMETERS = ('kappa',)

  def with_tracers(self, tracers: Sequence[str]):
    if not tracers:
      logging.warning(
          '%s has per-tracer parameters %s, but the model has no tracers.',
          type(self).__name__,
          self.TRACER_PARAMETERS,
      )
    return dataclasses.replace(
        self,
        **{
            name: closure_base.expand_tracer_parameter(
                getattr(self, name), tracers, name, type(self).__name__
            )
            for name in self.TRACER_PARAMETERS
        },
    )

  def total_viscosity(
      self, diffusivities: DiffusivityFields
  ) -> FloatOrField:
    return closure_operators.add_diffusivities(
        self.nu, diffusivities.viscosity
    )

  def total_diffusivity(
      self, tracer_name: str, diffusivities: DiffusivityFields
  ) -> FloatOrField:
    eddy = (
        None
        if diffusivities.diffusivities is None
        else diffusivities.diffusivities.get(tracer_name)
    )
    return closure_operators.add_diffusivities(
        closure_base.tracer_parameter(self.kappa, tracer_name), eddy
    )

  def stress_divergence(
      self,
      dim: str,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      diffusivities: DiffusivityFields,
  ) -> ScalarField:
    return closure_operators.viscous_stress_divergence(
        deriv_lib, states, dim, self.total_viscosity(diffusivities)
    )

  def tracer_flux_divergence(
      self,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      tracer_name: str,
      diffusivities: DiffusivityFields,
  ) -> ScalarField:
    kappa = self.total_diffusivity(tracer_name, diffusivities)
    return closure_operators.flux_form_laplacian(
        deriv_lib, states[tracer_name], common.TRACER_LOCATION, (kappa,) * 3
    )

  def boundary_diffusivity(
      self,
      field_name: str,
      axis: str,
      diffusivities: DiffusivityFields,
  ) -> FloatOrField:
    del axis
    if common.is_velocity(field_name):
      return self.total_viscosity(diffusivities)
    return self.total_diffusivity(field_name, diffusivities)

  def diffusion_timescale(self, grid, diffusivities) -> jax.Array:
    nu = self.nu + closure_operators.max_or_zero(diffusivities.viscosity)
    eddy = diffusivities.diffusivities or {}
    kappa = max(
        closure_base.parameter_values(self.kappa), default=0.0
    ) + jnp.max(
        jnp.asarray(
            [closure_operators.max_or_zero(k) for k in eddy.values()] + [0.0]
        )
    )
    return closure_operators.timescale(
        grid.min_spacing, jnp.maximum(nu, kappa)
    )
