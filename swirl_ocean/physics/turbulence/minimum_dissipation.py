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

"""Anisotropic minimum dissipation (AMD) closures.

With the velocity gradient Gᵢⱼ = ∂ⱼuᵢ and directional weights wₖ, the eddy
viscosity and the eddy diffusivity of a tracer c are

  νₑ = max(0, -C (r - Cb ζ) / q),  κₑ = max(0, -Cκ ϑ / σ),

with

  q = ∂ⱼuᵢ ∂ⱼuᵢ,         r = wₖ ∂ₖuᵢ ∂ₖuⱼ Σᵢⱼ,  ζ = wₖ ∂ₖw ∂ₖb,
  σ = ∂ₗc ∂ₗc,           ϑ = wₖ ∂ₖuᵢ ∂ₖc ∂ᵢc.

Both are zero where the denominators vanish, and negative values are clipped.
The Verstappen variant uses the isotropic weight wₖ = δ² with
δ² = 3 / (Δx⁻² + Δy⁻² + Δz⁻²), while the Rozema variant uses wₖ = Δₖ².

References:
Rozema, W., Bae, H. J., Moin, P., and Verstappen, R. 2015. "Minimum-
dissipation models for large-eddy simulation." Physics of Fluids 27 (8):
085107.
Abkar, M., Bae, H. J., and Moin, P. 2016. "Minimum-dissipation scalar
transport model for large-eddy simulation of turbulent flows." Physical
Review Fluids 1 (4): 041701.
"""

import dataclasses
from typing import Any, Sequence, TypeAlias

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
GridParametrization: TypeAlias = grid_parametrization.GridParametrization
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap
TensorField: TypeAlias = types.TensorField
TracerParameter: TypeAlias = closure_base.TracerParameter
VectorField: TypeAlias = types.VectorField

# Index of the vertical velocity in the velocity gradient tensor.
_W_INDEX = 2


def amd_viscosity(
    grad_u: TensorField,
    grad_b: VectorField | None,
    weights: Sequence[float],
    c: float,
    cb: float | None,
) -> ScalarField:
  """Computes the AMD eddy viscosity.

  Args:
    grad_u: The velocity gradient tensor, G[i][j] = ∂ⱼuᵢ.
    grad_b: The buoyancy gradient, or `None` without buoyancy.
    weights: The directional weights wₖ.
    c: The Poincaré coefficient C.
    cb: The buoyancy coefficient, or `None` to ignore buoyancy.

  Returns:
    The non-negative eddy viscosity.
  """
  q = sum(grad_u[i][j] ** 2 for i in range(3) for j in range(3))
  sigma = closure_operators.strain_rate_from_gradients(grad_u)
  r = sum(
      weights[k] * grad_u[i][k] * grad_u[j][k] * sigma[i][j]
      for i in range(3)
      for j in range(3)
      for k in range(3)
  )
  if cb is not None and grad_b is not None:
    zeta = sum(
        weights[k] * grad_u[_W_INDEX][k] * grad_b[k] for k in range(3)
    )
    r = r - cb * zeta
  return jnp.maximum(0.0, -c * closure_operators.safe_divide(r, q))


def amd_diffusivity(
    grad_u: TensorField,
    grad_c: VectorField,
    weights: Sequence[float],
    c: float,
) -> ScalarField:
  """Computes the AMD eddy diffusivity of a tracer.

  Args:
    grad_u: The velocity gradient tensor, G[i][j] = ∂ⱼuᵢ.
    grad_c: The gradient of the tracer.
    weights: The directional weights wₖ.
    c: The Poincaré coefficient Cκ.

  Returns:
    The non-negative eddy diffusivity.
  """
  sigma = sum(g**2 for g in grad_c)
  theta = sum(
      weights[k] * grad_u[i][k] * grad_c[k] * grad_c[i]
      for i in range(3)
      for k in range(3)
  )
  return jnp.maximum(0.0, -c * closure_operators.safe_divide(theta, sigma))


def verstappen_weights(grid: GridParametrization) -> tuple[float, ...]:
  """The isotropic weight δ² = 3 / (Δx⁻² + Δy⁻² + Δz⁻²) along each axis."""
  delta2 = 3.0 / sum(h**-2 for h in grid.grid_spacings)
  return (delta2,) * 3


def rozema_weights(grid: GridParametrization) -> tuple[float, ...]:
  """The directional weights Δₖ²."""
  return tuple(h**2 for h in grid.grid_spacings)


class _AnisotropicMinimumDissipation(eddy_viscosity.EddyViscosityClosure):
  """AMD closures parameterized by their weights and coefficients."""

  def _weights(self, grid: GridParametrization) -> tuple[float, ...]:
    raise NotImplementedError('Calling an abstract method.')

  def _viscosity_coefficients(self) -> tuple[float, float | None]:
    raise NotImplementedError('Calling an abstract method.')

  def _tracer_coefficient(self, tracer_name: str) -> float:
    raise NotImplementedError('Calling an abstract method.')

  def calculate_diffusivities(
      self,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      buoyancy: Any = None,
  ) -> DiffusivityFields:
    weights = self._weights(deriv_lib.grid_params)
    grad_u = closure_operators.velocity_gradients(deriv_lib, states)
    grad_b = buoyancy_lib.buoyancy_gradient_ccc(buoyancy, deriv_lib, states)
    c, cb = self._viscosity_coefficients()
    nu_e = amd_viscosity(grad_u, grad_b, weights, c, cb)
    kappa_e = {
        t: amd_diffusivity(
            grad_u,
            closure_operators.tracer_gradients(deriv_lib, states[t]),
            weights,
            self._tracer_coefficient(t),
        )
        for t in eddy_viscosity.tracer_names(states)
    }
    return DiffusivityFields(viscosity=nu_e, diffusivities=kappa_e)


@dataclasses.dataclass(frozen=True)
class VerstappenAnisotropicMinimumDissipation(_AnisotropicMinimumDissipation):
  """The AMD closure of Verstappen with a buoyancy correction.

  Attributes:
    cnu: The Poincaré coefficient of the eddy viscosity.
    ckappa: The Poincaré coefficient of each tracer's eddy diffusivity.
    cb: The buoyancy coefficient, or `None` to ignore buoyancy.
    nu: The molecular viscosity, in m²/s.
    kappa: The molecular diffusivity of each tracer, in m²/s.
  """

  TRACER_PARAMETERS = ('ckappa', 'kappa')

  cnu: float = 1.0 / 12.0
  ckappa: TracerParameter = 1.0 / 12.0
  cb: float | None = None
  nu: float = constants.NU_0
  kappa: TracerParameter = constants.KAPPA_0

  def _weights(self, grid: GridParametrization) -> tuple[float, ...]:
    return verstappen_weights(grid)

  def _viscosity_coefficients(self) -> tuple[float, float | None]:
    return self.cnu, self.cb

  def _tracer_coefficient(self, tracer_name: str) -> float:
    return closure_base.tracer_parameter(self.ckappa, tracer_name)


VerstappenAMD = VerstappenAnisotropicMinimumDissipation
AnisotropicMinimumDissipation = VerstappenAnisotropicMinimumDissipation


@dataclasses.dataclass(frozen=True)
class RozemaAnisotropicMinimumDissipation(_AnisotropicMinimumDissipation):
  """The AMD closure of Rozema et al. with directional filter widths.

  Attributes:
    c: The Poincaré coefficient of the eddy viscosity and diffusivities.
    nu: The molecular viscosity, in m²/s.
    kappa: The molecular diffusivity of each tracer, in m²/s.
  """

  c: float = 0.33
  nu: float = constants.NU_0
  kappa: TracerParameter = constants.KAPPA_0

  def _weights(self, grid: GridParametrization) -> tuple[float, ...]:
    return rozema_weights(grid)

  def _viscosity_coefficients(self) -> tuple[float, float | None]:
    return self.c, None

  def _tracer_coefficient(self, tracer_name: str) -> float:
    del tracer_name
    return self.c


RozemaAMD = RozemaAnisotropicMinimumDissipation
