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

"""Integration of the hydrostatic pressure anomaly.

The hydrostatic pressure anomaly pHY′ balances the buoyancy perturbation,
∂z pHY′ = b, and vanishes at the surface z = 0. It is integrated from the top
of each column downward, with the buoyancy interpolated to the z faces:

  pHY′[N - 1] = -ℑz(b)[N] Δz,
  pHY′[k] = pHY′[k + 1] - ℑz(b)[k + 1] Δz,

where k indexes the interior cells from the bottom. The integration is
sequential along z and vectorized over the horizontal plane.
"""

from typing import Any, TypeAlias

import jax
import jax.numpy as jnp
from swirl_ocean.boundary_condition import boundary_conditions
from swirl_ocean.equations import common
from swirl_ocean.numerics import derivatives
from swirl_ocean.numerics import interpolation
from swirl_ocean.physics import buoyancy as buoyancy_lib
from swirl_ocean.utility import get_kernel_fn
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

GridParametrization: TypeAlias = grid_parametrization.GridParametrization
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap

_Z_DIM = 2


def integrate_hydrostatic_pressure(
    b: ScalarField,
    grid: GridParametrization,
    kernel_op: get_kernel_fn.ApplyKernelOp,
) -> ScalarField:
  """Integrates pHY′ from the buoyancy `b`.

  Args:
    b: The buoyancy perturbation at cell centers, with its halos filled.
    grid: The grid parametrization object.
    kernel_op: Kernel operation library.

  Returns:
    The hydrostatic pressure anomaly at cell centers, with its halos filled
    periodically on periodic axes and with zero gradient on bounded axes.
  """
  h = grid.halo('z')
  n = grid.n('z')
  b_face = interpolation.centered_node_to_face(b, 'z', kernel_op)
  # Cell k receives the contribution of the face above it.
  contributions = (
      jax.lax.slice_in_dim(b_face, h + 1, h + n + 1, axis=_Z_DIM) * grid.dz
  )
  contributions = jnp.moveaxis(contributions, _Z_DIM, 0)

  def step(p_above: jax.Array, contribution: jax.Array):
    p = p_above - contribution
    return p, p

  _, p = jax.lax.scan(
      step, jnp.zeros_like(contributions[0]), contributions, reverse=True
  )
  p = jnp.moveaxis(p, 0, _Z_DIM)
  paddings = [(0, 0)] * 3
  paddings[_Z_DIM] = (h, h)
  p = jnp.pad(p, paddings)
  return boundary_conditions.fill_halo_region(
      p, common.TRACER_LOCATION, grid
  )


def update_hydrostatic_pressure(
    buoyancy: Any,
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
) -> ScalarField:
  """Computes pHY′ from the current state.

  Args:
    buoyancy: The buoyancy model, or `None` if buoyancy is disabled.
    deriv_lib: An instance of the derivatives library.
    states: The prognostic fields with their halos filled.

  Returns:
    The hydrostatic pressure anomaly, which is zero without buoyancy.
  """
  grid = deriv_lib.grid_params
  b = buoyancy_lib.buoyancy_perturbation(buoyancy, states)
  if b is None:
    return jnp.zeros(grid.shape, dtype=grid.dtype)
  return integrate_hydrostatic_pressure(b, grid, deriv_lib.kernel_op)
