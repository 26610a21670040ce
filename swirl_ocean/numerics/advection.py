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

"""Library of the advection scheme in the tendency kernels.

Advection is computed in flux form, ∇·(u φ), with second-order centered
interpolation of both the advecting velocity and the advected quantity to the
faces of the control volume of φ. For the momentum component u_i, the flux
along axis j lives at the location of u_i moved to the opposite staggered
location along j, e.g. for u:

  ∇·(u u) = ∂xᶠ(ℑxᶜu ℑxᶜu) + ∂yᶜ(ℑxᶠv ℑyᶠu) + ∂zᶜ(ℑxᶠw ℑzᶠu).

The normal velocity vanishes on the walls of bounded axes, so no advective
flux crosses them.
"""

import dataclasses
from typing import TypeAlias

from swirl_ocean.equations import common
from swirl_ocean.numerics import calculus
from swirl_ocean.numerics import derivatives
from swirl_ocean.numerics import interpolation
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

FieldLocation: TypeAlias = grid_parametrization.FieldLocation
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap

AXES = grid_parametrization.AXES


def _advective_flux(
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
    phi: ScalarField,
    location: FieldLocation,
    axis: str,
) -> tuple[ScalarField, FieldLocation]:
  """Computes the flux of `phi` along `axis` through its control volume.

  Args:
    deriv_lib: An instance of the derivatives library.
    states: The prognostic fields with their halos filled.
    phi: The advected quantity.
    location: The location of `phi`.
    axis: The direction of the flux.

  Returns:
    A tuple of the flux and its staggered location.
  """
  kernel_op = deriv_lib.kernel_op
  flux_location = grid_parametrization.flip_location(location, axis)
  velocity_key = common.VELOCITY_KEY_BY_AXIS[axis]
  velocity = interpolation.interpolate(
      states[velocity_key],
      common.VELOCITY_LOCATIONS[velocity_key],
      flux_location,
      kernel_op,
  )
  phi = interpolation.interpolate(phi, location, flux_location, kernel_op)
  return velocity * phi, flux_location


@dataclasses.dataclass(frozen=True)
class CenteredSecondOrder:
  """Second-order centered advection in flux form."""

  def div_uu(
      self,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      name: str,
  ) -> ScalarField:
    """Computes ∇·(u u_i) for the velocity component `name`."""
    return self._flux_divergence(
        deriv_lib, states, states[name], common.field_location(name)
    )

  def div_uc(
      self,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      name: str,
  ) -> ScalarField:
    """Computes ∇·(u c) for the tracer `name`."""
    return self._flux_divergence(
        deriv_lib, states, states[name], common.TRACER_LOCATION
    )

  def _flux_divergence(
      self,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      phi: ScalarField,
      location: FieldLocation,
  ) -> ScalarField:
    fluxes, locations = zip(*[
        _advective_flux(deriv_lib, states, phi, location, axis)
        for axis in AXES
    ])
    return calculus.divergence(deriv_lib, fluxes, locations)


AdvectionScheme: TypeAlias = CenteredSecondOrder


def advection_term(
    advection: AdvectionScheme | None,
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
    name: str,
) -> ScalarField | None:
  """The advection term -∇·(u φ) of the field `name`, `None` if disabled."""
  if advection is None:
    return None
  if common.is_velocity(name):
    return -advection.div_uu(deriv_lib, states, name)
  return -advection.div_uc(deriv_lib, states, name)
