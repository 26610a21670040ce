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

"""Coriolis acceleration on the f-plane and the beta-plane.

The Coriolis term enters the momentum equations as -f ẑ × u, whose components
are computed at the locations of the velocity components they force. The
vertical component of the rotation vector is the only one retained, so w is
never forced.
"""

import dataclasses
import math
from typing import TypeAlias

import jax
from swirl_ocean.equations import common
from swirl_ocean.numerics import interpolation
from swirl_ocean.physics import constants
from swirl_ocean.utility import get_kernel_fn
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

GridParametrization: TypeAlias = grid_parametrization.GridParametrization
Location: TypeAlias = grid_parametrization.Location
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap


@dataclasses.dataclass(frozen=True)
class FPlane:
  """A constant Coriolis parameter f, in 1/s."""

  f: float = 0.0

  @classmethod
  def from_rotation(
      cls,
      rotation_rate: float = constants.OMEGA_EARTH,
      latitude: float = 45.0,
  ) -> 'FPlane':
    """Creates the f-plane tangent to a rotating sphere at `latitude`."""
    return cls(f=2.0 * rotation_rate * math.sin(math.radians(latitude)))

  def parameter(self, y: jax.Array) -> jax.Array | float:
    del y
    return self.f


@dataclasses.dataclass(frozen=True)
class BetaPlane:
  """A Coriolis parameter that varies linearly with y: f = f0 + β y."""

  f0: float = 0.0
  beta: float = 0.0

  @classmethod
  def from_rotation(
      cls,
      rotation_rate: float = constants.OMEGA_EARTH,
      latitude: float = 45.0,
      radius: float = constants.R_EARTH,
  ) -> 'BetaPlane':
    """Creates the beta-plane tangent to a rotating sphere at `latitude`.

    Args:
      rotation_rate: The angular velocity of the sphere, in rad/s.
      latitude: The latitude of the tangent point, in degrees.
      radius: The radius of the sphere, in m.

    Returns:
      The beta-plane with f0 = 2Ω sin(φ) and β = 2Ω cos(φ) / R.
    """
    phi = math.radians(latitude)
    return cls(
        f0=2.0 * rotation_rate * math.sin(phi),
        beta=2.0 * rotation_rate * math.cos(phi) / radius,
    )

  def parameter(self, y: jax.Array) -> jax.Array:
    return self.f0 + self.beta * y


CoriolisModel: TypeAlias = FPlane | BetaPlane


def x_f_cross_u(
    coriolis: CoriolisModel,
    kernel_op: get_kernel_fn.ApplyKernelOp,
    grid: GridParametrization,
    states: ScalarFieldMap,
) -> ScalarField:
  """The x component of f ẑ × u, -f v, at the location of u."""
  y = grid.broadcastable_coordinates('y', Location.CENTER)
  v = interpolation.interpolate(
      states[common.KEY_V], common.V_LOCATION, common.U_LOCATION, kernel_op
  )
  return -coriolis.parameter(y) * v


def y_f_cross_u(
    coriolis: CoriolisModel,
    kernel_op: get_kernel_fn.ApplyKernelOp,
    grid: GridParametrization,
    states: ScalarFieldMap,
) -> ScalarField:
  """The y component of f ẑ × u, f u, at the location of v."""
  y = grid.broadcastable_coordinates('y', Location.FACE)
  u = interpolation.interpolate(
      states[common.KEY_U], common.U_LOCATION, common.V_LOCATION, kernel_op
  )
  return coriolis.parameter(y) * u
