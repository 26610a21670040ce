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

"""The interior tendencies of the velocity and the tracers.

The tendency of a field is the sum of the advection, Coriolis, turbulent
diffusion, pressure, surface wave and forcing terms, each evaluated at the
staggered location of the field. Every field has its own kernel, and all
kernels read the same state.

The fluxes across bounded walls are not included here. They are added by
`boundary_fluxes.apply_boundary_fluxes` after the interior tendencies are
computed.
"""

from typing import Any, Sequence, TypeAlias

import jax
import jax.numpy as jnp
from swirl_ocean.base import parameters as parameters_lib
from swirl_ocean.equations import common
from swirl_ocean.numerics import advection as advection_lib
from swirl_ocean.numerics import derivatives
from swirl_ocean.physics import coriolis as coriolis_lib
from swirl_ocean.physics import surface_waves as surface_waves_lib
from swirl_ocean.physics.turbulence import closures
from swirl_ocean.utility import common_ops
from swirl_ocean.utility import types

ModelParameters: TypeAlias = parameters_lib.ModelParameters
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap

_CORIOLIS_FNS = {
    'x': coriolis_lib.x_f_cross_u,
    'y': coriolis_lib.y_f_cross_u,
}
_STRESS_DIVERGENCE_FNS = {
    'x': closures.stress_divergence_x,
    'y': closures.stress_divergence_y,
    'z': closures.stress_divergence_z,
}
_STOKES_FNS = {
    'x': surface_waves_lib.x_curl_stokes_cross_u,
    'y': surface_waves_lib.y_curl_stokes_cross_u,
    'z': surface_waves_lib.z_curl_stokes_cross_u,
}


def _sum_terms(
    terms: Sequence[ScalarField | None], params: ModelParameters
) -> ScalarField:
  """Sums the enabled terms, or returns zeros if none is enabled."""
  total = jnp.zeros(params.grid.shape, dtype=params.grid.dtype)
  for term in terms:
    if term is not None:
      total = total + term
  return total


def _forcing_term(
    params: ModelParameters,
    name: str,
    time: float | jax.Array,
    states: ScalarFieldMap,
) -> ScalarField | None:
  forcing = params.forcing.get(name)
  if forcing is None:
    return None
  return forcing.evaluate(params.grid, name, time, states)


def pressure_term(
    params: ModelParameters,
    deriv_lib: derivatives.Derivatives,
    dim: str,
    pressure: ScalarField,
) -> ScalarField | None:
  """The term of the hydrostatic pressure anomaly in the momentum equation.

  Args:
    params: The model parameters.
    deriv_lib: An instance of the derivatives library.
    dim: The dimension of the velocity component.
    pressure: The hydrostatic pressure anomaly at cell centers.

  Returns:
    -∂x pHY′ and -∂y pHY′ for u and v if the anomaly is removed from the
    pressure, or ∂z pHY′ (the buoyancy at the w faces) for w otherwise.
    `None` for the components without a pressure term.
  """
  if params.buoyancy is None:
    return None
  if params.hydrostatic_pressure_anomaly:
    if dim == 'z':
      return None
    return -deriv_lib.deriv_node_to_face(pressure, dim)
  if dim != 'z':
    return None
  return deriv_lib.deriv_node_to_face(pressure, 'z')


def velocity_tendency(
    dim: str,
    params: ModelParameters,
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
    diffusivities: Any,
    pressure: ScalarField,
    time: float | jax.Array,
) -> ScalarField:
  """Computes the interior tendency of the velocity component along `dim`.

  Args:
    dim: The dimension of the velocity component, one of 'x', 'y', 'z'.
    params: The model parameters.
    deriv_lib: An instance of the derivatives library.
    states: The prognostic fields with their halos filled.
    diffusivities: The diffusivities of the closure, with their halos filled.
    pressure: The hydrostatic pressure anomaly at cell centers.
    time: The current simulation time.

  Returns:
    The tendency at the location of the velocity component. It is zero in the
    halos, and on the walls if `dim` is bounded.
  """
  name = common.VELOCITY_KEY_BY_AXIS[dim]
  grid = params.grid
  kernel_op = deriv_lib.kernel_op

  terms = [
      advection_lib.advection_term(params.advection, deriv_lib, states, name),
      _STRESS_DIVERGENCE_FNS[dim](
          params.closure, deriv_lib, states, diffusivities
      ),
      pressure_term(params, deriv_lib, dim, pressure),
      _forcing_term(params, name, time, states),
  ]
  if params.coriolis is not None and dim in _CORIOLIS_FNS:
    terms.append(
        -_CORIOLIS_FNS[dim](params.coriolis, kernel_op, grid, states)
    )
  if params.surface_waves is not None:
    terms.append(
        _STOKES_FNS[dim](params.surface_waves, kernel_op, grid, time, states)
    )

  return common_ops.keep_interior(
      _sum_terms(terms, params), common.field_location(name), grid
  )


def tracer_tendency(
    name: str,
    params: ModelParameters,
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
    diffusivities: Any,
    time: float | jax.Array,
) -> ScalarField:
  """Computes the interior tendency of the tracer `name`.

  Args:
    name: The name of the tracer.
    params: The model parameters.
    deriv_lib: An instance of the derivatives library.
    states: The prognostic fields with their halos filled.
    diffusivities: The diffusivities of the closure, with their halos filled.
    time: The current simulation time.

  Returns:
    The tendency at cell centers, zero in the halos.
  """
  terms = [
      advection_lib.advection_term(params.advection, deriv_lib, states, name),
      closures.tracer_flux_divergence(
          params.closure, deriv_lib, states, name, diffusivities
      ),
      _forcing_term(params, name, time, states),
  ]
  return common_ops.keep_interior(
      _sum_terms(terms, params), common.TRACER_LOCATION, params.grid
  )
