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

"""Smagorinsky-type eddy viscosity closures with a stratification correction.

The eddy viscosity is

  νₑ = ς ℓ² √(2ΣᵢⱼΣᵢⱼ),

where ℓ is the mixing length and ς = √(1 - min(1, Cb N² / ΣᵢⱼΣᵢⱼ)) reduces the
mixing in stably stratified regions. N² = max(0, ∂z b) is the squared buoyancy
frequency. The eddy diffusivity of each tracer is νₑ / Pr.

Reference:
Lilly, D. K. 1962. "On the numerical simulation of buoyant convection." Tellus
14 (2): 148-172.
"""

import dataclasses
from typing import Any, Callable, TypeAlias

from absl import logging
import jax
import jax.numpy as jnp
from swirl_ocean.numerics import derivatives
from swirl_ocean.physics import buoyancy as buoyancy_lib
from swirl_ocean.physics import constants
from swirl_ocean.physics.turbulence import closure_base
from swirl_ocean.physics.turbulence import closure_operators
from swirl_ocean.physics.turbulence import eddy_viscosity
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

DiffusivityFields: TypeAlias = closure_base.DiffusivityFields
FloatOrField: TypeAlias = types.FloatOrField
GridParametrization: TypeAlias = grid_parametrization.GridParametrization
Location: TypeAlias = grid_parametrization.Location
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap
TracerParameter: TypeAlias = closure_base.TracerParameter

# The Smagorinsky constant proposed by Lilly for isotropic turbulence.
_C_LILLY = 0.16


def filter_width(grid: GridParametrization) -> float:
  """The filter width Δᶠ = (Δx Δy Δz)^(1/3)."""
  dx, dy, dz = grid.grid_spacings
  return (dx * dy * dz) ** (1.0 / 3.0)


def stability_correction(
    n2: ScalarField | None,
    sigma2: ScalarField,
    cb: float,
) -> ScalarField:
  """Computes ς = √(1 - min(1, Cb N²₊ / ΣᵢⱼΣᵢⱼ)).

  Args:
    n2: The squared buoyancy frequency at cell centers, or `None` without
      buoyancy.
    sigma2: ΣᵢⱼΣᵢⱼ at cell centers.
    cb: The buoyancy coefficient Cb.

  Returns:
    The stability correction, 1 without buoyancy and 0 where the flow is at
    rest.
  """
  if n2 is None:
    return jnp.where(sigma2 > 0.0, 1.0, 0.0)
  ratio = closure_operators.safe_divide(cb * jnp.maximum(n2, 0.0), sigma2)
  return jnp.where(
      sigma2 > 0.0, jnp.sqrt(1.0 - jnp.minimum(1.0, ratio)), 0.0
  )


def _eddy_diffusivities(
    pr: TracerParameter, nu_e: ScalarField, states: ScalarFieldMap
) -> dict[str, ScalarField]:
  """The eddy diffusivity νₑ / Pr of every tracer in `states`."""
  return {
      t: nu_e / closure_base.tracer_parameter(pr, t)
      for t in eddy_viscosity.tracer_names(states)
  }


@dataclasses.dataclass(frozen=True)
class SmagorinskyLilly(eddy_viscosity.EddyViscosityClosure):
  """The Smagorinsky-Lilly closure.

  νₑ = ς (C Δᶠ)² √(2ΣᵢⱼΣᵢⱼ) with Δᶠ = (Δx Δy Δz)^(1/3).

  Attributes:
    c: The Smagorinsky coefficient C.
    cb: The buoyancy coefficient Cb of the stability correction.
    pr: The turbulent Prandtl number of each tracer.
    nu: The molecular viscosity, in m²/s.
    kappa: The molecular diffusivity of each tracer, in m²/s.
  """

  TRACER_PARAMETERS = ('pr', 'kappa')

  c: float = _C_LILLY
  cb: float = 1.0
  pr: TracerParameter = 1.0
  nu: float = constants.NU_0
  kappa: TracerParameter = constants.KAPPA_0

  def calculate_diffusivities(
      self,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      buoyancy: Any = None,
  ) -> DiffusivityFields:
    sigma2 = closure_operators.strain_rate_squared(deriv_lib, states)
    n2 = buoyancy_lib.buoyancy_frequency_squared(buoyancy, deriv_lib, states)
    length = self.c * filter_width(deriv_lib.grid_params)
    nu_e = (
        stability_correction(n2, sigma2, self.cb)
        * length**2
        * jnp.sqrt(2.0 * sigma2)
    )
    return DiffusivityFields(
        viscosity=nu_e,
        diffusivities=_eddy_diffusivities(self.pr, nu_e, states),
    )


ConstantSmagorinsky = SmagorinskyLilly


@dataclasses.dataclass(frozen=True)
class BlasiusSmagorinsky(eddy_viscosity.EddyViscosityClosure):
  """A Smagorinsky closure with a prescribed mixing length.

  νₑ = ς ℓ² √(2ΣᵢⱼΣᵢⱼ) with ς = √(1 - min(1, N² / ΣᵢⱼΣᵢⱼ)).

  Attributes:
    pr: The turbulent Prandtl number of each tracer.
    nu: The molecular viscosity, in m²/s.
    kappa: The molecular diffusivity of each tracer, in m²/s.
    mixing_length: The mixing length ℓ, in m, either a constant or a function
      of the depth z. Defaults to 0.16 Δᶠ.
  """

  TRACER_PARAMETERS = ('pr', 'kappa')

  pr: TracerParameter = 1.0
  nu: float = constants.NU_0
  kappa: TracerParameter = constants.KAPPA_0
  mixing_length: float | Callable[[jax.Array], jax.Array] | None = None

  def _mixing_length(self, grid: GridParametrization) -> FloatOrField:
    if self.mixing_length is None:
      return _C_LILLY * filter_width(grid)
    if callable(self.mixing_length):
      return self.mixing_length(
          grid.broadcastable_coordinates('z', Location.CENTER)
      )
    return self.mixing_length

  def calculate_diffusivities(
      self,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      buoyancy: Any = None,
  ) -> DiffusivityFields:
    if buoyancy is None:
      logging.log_first_n(
          logging.WARNING,
          'BlasiusSmagorinsky without buoyancy has no stability correction.',
          1,
      )
    sigma2 = closure_operators.strain_rate_squared(deriv_lib, states)
    n2 = buoyancy_lib.buoyancy_frequency_squared(buoyancy, deriv_lib, states)
    length = self._mixing_length(deriv_lib.grid_params)
    nu_e = (
        stability_correction(n2, sigma2, 1.0)
        * length**2
        * jnp.sqrt(2.0 * sigma2)
    )
    return DiffusivityFields(
        viscosity=nu_e,
        diffusivities=_eddy_diffusivities(self.pr, nu_e, states),
    )
