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

"""Forcing of the momentum equations by a horizontally uniform Stokes drift.

The Stokes drift (uˢ, vˢ) of surface waves is specified through its vertical
shear and its time derivative, all functions of depth and time `f(z, t)`:

  Gu += w ∂z uˢ + ∂t uˢ,
  Gv += w ∂z vˢ + ∂t vˢ,
  Gw += -(u ∂z uˢ + v ∂z vˢ) + ∂t wˢ.
"""

import dataclasses
from typing import Callable, TypeAlias

import jax
import jax.numpy as jnp
from swirl_ocean.equations import common
from swirl_ocean.numerics import interpolation
from swirl_ocean.utility import get_kernel_fn
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

GridParametrization: TypeAlias = grid_parametrization.GridParametrization
Location: TypeAlias = grid_parametrization.Location
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap

DepthTimeFn: TypeAlias = Callable[[jax.Array, float | jax.Array], jax.Array]


def _zero(z: jax.Array, t: float | jax.Array) -> jax.Array:
  del t
  return jnp.zeros_like(z)


@dataclasses.dataclass(frozen=True)
class UniformStokesDrift:
  """The vertical shear and time derivatives of the Stokes drift.

  Attributes:
    dz_us: ∂z uˢ as a function of (z, t).
    dz_vs: ∂z vˢ as a function of (z, t).
    dt_us: ∂t uˢ as a function of (z, t).
    dt_vs: ∂t vˢ as a function of (z, t).
    dt_ws: ∂t wˢ as a function of (z, t).
  """

  dz_us: DepthTimeFn = _zero
  dz_vs: DepthTimeFn = _zero
  dt_us: DepthTimeFn = _zero
  dt_vs: DepthTimeFn = _zero
  dt_ws: DepthTimeFn = _zero


def x_curl_stokes_cross_u(
    waves: UniformStokesDrift,
    kernel_op: get_kernel_fn.ApplyKernelOp,
    grid: GridParametrization,
    time: float | jax.Array,
    states: ScalarFieldMap,
) -> ScalarField:
  """The Stokes drift forcing of u, w ∂z uˢ + ∂t uˢ, at the location of u."""
  z = grid.broadcastable_coordinates('z', Location.CENTER)
  w = interpolation.interpolate(
      states[common.KEY_W], common.W_LOCATION, common.U_LOCATION, kernel_op
  )
  return w * waves.dz_us(z, time) + waves.dt_us(z, time)


def y_curl_stokes_cross_u(
    waves: UniformStokesDrift,
    kernel_op: get_kernel_fn.ApplyKernelOp,
    grid: GridParametrization,
    time: float | jax.Array,
    states: ScalarFieldMap,
) -> ScalarField:
  """The Stokes drift forcing of v, w ∂z vˢ + ∂t vˢ, at the location of v."""
  z = grid.broadcastable_coordinates('z', Location.CENTER)
  w = interpolation.interpolate(
      states[common.KEY_W], common.W_LOCATION, common.V_LOCATION, kernel_op
  )
  return w * waves.dz_vs(z, time) + waves.dt_vs(z, time)


def z_curl_stokes_cross_u(
    waves: UniformStokesDrift,
    kernel_op: get_kernel_fn.ApplyKernelOp,
    grid: GridParametrization,
    time: float | jax.Array,
    states: ScalarFieldMap,
) -> ScalarField:
  """The Stokes drift forcing of w at the location of w.

  Args:
    waves: The Stokes drift.
    kernel_op: Kernel operation library.
    grid: The grid parametrization object.
    time: The current simulation time.
    states: The prognostic fields with their halos filled.

  Returns:
    -(u ∂z uˢ + v ∂z vˢ) + ∂t wˢ on the z faces.
  """
  z = grid.broadcastable_coordinates('z', Location.FACE)
  u = interpolation.interpolate(
      states[common.KEY_U], common.U_LOCATION, common.W_LOCATION, kernel_op
  )
  v = interpolation.interpolate(
      states[common.KEY_V], common.V_LOCATION, common.W_LOCATION, kernel_op
  )
  return (
      -(u * waves.dz_us(z, time) + v * waves.dz_vs(z, time))
      + waves.dt_ws(z, time)
  )
