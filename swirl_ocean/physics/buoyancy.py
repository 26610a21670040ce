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

"""Buoyancy models.

A buoyancy model maps the tracers to the buoyancy perturbation b, in units of
m/s², which is located at cell centers. Gravity points in the -z direction.
"""

import dataclasses
from typing import Sequence, TypeAlias

from swirl_ocean.equations import common
from swirl_ocean.numerics import derivatives
from swirl_ocean.numerics import interpolation
from swirl_ocean.physics import constants
from swirl_ocean.utility import types

ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap
VectorField: TypeAlias = types.VectorField


@dataclasses.dataclass(frozen=True)
class BuoyancyTracer:
  """Buoyancy is itself a tracer named 'b'."""

  @property
  def required_tracers(self) -> tuple[str, ...]:
    return (common.KEY_B,)

  def buoyancy(self, states: ScalarFieldMap) -> ScalarField:
    return states[common.KEY_B]


@dataclasses.dataclass(frozen=True)
class LinearEquationOfState:
  """A linear equation of state of seawater.

  Attributes:
    thermal_expansion: The thermal expansion coefficient α, in 1/K.
    haline_contraction: The haline contraction coefficient β, in 1/psu.
  """

  thermal_expansion: float = constants.ALPHA_LINEAR
  haline_contraction: float = constants.BETA_LINEAR


@dataclasses.dataclass(frozen=True)
class SeawaterBuoyancy:
  """Buoyancy of seawater from temperature 'T' and salinity 'S'.

  b = g (α T - β S).

  Attributes:
    gravitational_acceleration: The gravitational acceleration g, in m/s².
    equation_of_state: The equation of state relating T and S to density.
  """

  gravitational_acceleration: float = constants.G_EARTH
  equation_of_state: LinearEquationOfState = dataclasses.field(
      default_factory=LinearEquationOfState
  )

  @property
  def required_tracers(self) -> tuple[str, ...]:
    return (common.KEY_T, common.KEY_S)

  def buoyancy(self, states: ScalarFieldMap) -> ScalarField:
    eos = self.equation_of_state
    return self.gravitational_acceleration * (
        eos.thermal_expansion * states[common.KEY_T]
        - eos.haline_contraction * states[common.KEY_S]
    )


BuoyancyModel: TypeAlias = BuoyancyTracer | SeawaterBuoyancy


def validate_buoyancy_tracers(
    buoyancy: BuoyancyModel | None, tracers: Sequence[str]
) -> None:
  """Checks that the tracers required by `buoyancy` are declared.

  Args:
    buoyancy: The buoyancy model, or `None` if buoyancy is disabled.
    tracers: The names of the declared tracers.

  Raises:
    ValueError: If a tracer required by the buoyancy model is missing.
  """
  if buoyancy is None:
    return
  missing = [t for t in buoyancy.required_tracers if t not in tracers]
  if missing:
    raise ValueError(
        f'{type(buoyancy).__name__} requires tracers {missing}, which are not'
        f' in the declared tracers {tuple(tracers)}.'
    )


def buoyancy_perturbation(
    buoyancy: BuoyancyModel | None, states: ScalarFieldMap
) -> ScalarField | None:
  """Returns the buoyancy field, or `None` if buoyancy is disabled."""
  if buoyancy is None:
    return None
  return buoyancy.buoyancy(states)


def buoyancy_frequency_squared(
    buoyancy: BuoyancyModel | None,
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
) -> ScalarField | None:
  """Computes N² = ∂b/∂z at cell centers.

  The vertical gradient is computed on the z faces, where it is compact, and
  interpolated back to the cell centers.

  Args:
    buoyancy: The buoyancy model, or `None` if buoyancy is disabled.
    deriv_lib: An instance of the derivatives library.
    states: The prognostic fields with their halos filled.

  Returns:
    The squared buoyancy frequency at cell centers, or `None` without a
    buoyancy model. It is negative where the column is unstably stratified.
  """
  b = buoyancy_perturbation(buoyancy, states)
  if b is None:
    return None
  return interpolation.centered_face_to_node(
      deriv_lib.deriv_node_to_face(b, 'z'), 'z', deriv_lib.kernel_op
  )


def buoyancy_gradient_ccc(
    buoyancy: BuoyancyModel | None,
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
) -> VectorField | None:
  """Computes the gradient of the buoyancy at cell centers."""
  b = buoyancy_perturbation(buoyancy, states)
  if b is None:
    return None
  return tuple(deriv_lib.deriv_centered(b, axis) for axis in ('x', 'y', 'z'))
