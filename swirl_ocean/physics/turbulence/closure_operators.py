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

"""Operators shared by the turbulence closures.

The velocity gradient tensor is G[i][j] = ∂ⱼuᵢ, and the strain rate tensor is
Σᵢⱼ = (∂ⱼuᵢ + ∂ᵢuⱼ) / 2. The diagonal of Σ is compact at cell centers, while
Σᵢⱼ with i != j is compact at the location that is on faces along both i and j.
"""

from typing import Sequence, TypeAlias

import jax
import jax.numpy as jnp
from swirl_ocean.equations import common
from swirl_ocean.numerics import calculus
from swirl_ocean.numerics import derivatives
from swirl_ocean.numerics import interpolation
from swirl_ocean.utility import common_ops
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

FieldLocation: TypeAlias = grid_parametrization.FieldLocation
FloatOrField: TypeAlias = types.FloatOrField
Location: TypeAlias = grid_parametrization.Location
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap
TensorField: TypeAlias = types.TensorField
VectorField: TypeAlias = types.VectorField

AXES = grid_parametrization.AXES
_CCC = common.TRACER_LOCATION


def _velocity(states: ScalarFieldMap, dim: str) -> ScalarField:
  return states[common.VELOCITY_KEY_BY_AXIS[dim]]


def _velocity_location(dim: str) -> FieldLocation:
  return common.VELOCITY_LOCATIONS[common.VELOCITY_KEY_BY_AXIS[dim]]


def velocity_gradients(
    deriv_lib: derivatives.Derivatives, states: ScalarFieldMap
) -> TensorField:
  """Computes the velocity gradient tensor G[i][j] = ∂ⱼuᵢ at cell centers.

  Args:
    deriv_lib: An instance of the derivatives library.
    states: The prognostic fields with their halos filled.

  Returns:
    A 3 x 3 nested tuple of fields at cell centers.
  """
  kernel_op = deriv_lib.kernel_op
  grad_u = []
  for dim_i in AXES:
    u_i = _velocity(states, dim_i)
    row = []
    for dim_j in AXES:
      if dim_i == dim_j:
        row.append(deriv_lib.deriv_face_to_node(u_i, dim_i))
        continue
      du_face = deriv_lib.deriv_node_to_face(u_i, dim_j)
      du_face = interpolation.centered_face_to_node(du_face, dim_i, kernel_op)
      row.append(
          interpolation.centered_face_to_node(du_face, dim_j, kernel_op)
      )
    grad_u.append(tuple(row))
  return tuple(grad_u)


def strain_rate_from_gradients(grad_u: TensorField) -> TensorField:
  """Computes Σᵢⱼ = (Gᵢⱼ + Gⱼᵢ) / 2 from a velocity gradient tensor."""
  return tuple(
      tuple(0.5 * (grad_u[i][j] + grad_u[j][i]) for j in range(3))
      for i in range(3)
  )


def offdiagonal_strain(
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
    dim_i: str,
    dim_j: str,
) -> ScalarField:
  """Computes Σᵢⱼ, i != j, on faces along both `dim_i` and `dim_j`."""
  return 0.5 * (
      deriv_lib.deriv_node_to_face(_velocity(states, dim_i), dim_j)
      + deriv_lib.deriv_node_to_face(_velocity(states, dim_j), dim_i)
  )


def _edge_location(dim_i: str, dim_j: str) -> FieldLocation:
  return grid_parametrization.flip_location(
      grid_parametrization.flip_location(_CCC, dim_i), dim_j
  )


def strain_rate_squared(
    deriv_lib: derivatives.Derivatives, states: ScalarFieldMap
) -> ScalarField:
  """Computes ΣᵢⱼΣᵢⱼ at cell centers.

  The off-diagonal components are squared where they are compact and the
  squares are interpolated to cell centers.

  Args:
    deriv_lib: An instance of the derivatives library.
    states: The prognostic fields with their halos filled.

  Returns:
    Σ₁₁² + Σ₂₂² + Σ₃₃² + 2ℑ(Σ₁₂²) + 2ℑ(Σ₁₃²) + 2ℑ(Σ₂₃²) at cell centers.
  """
  kernel_op = deriv_lib.kernel_op
  result = sum(
      deriv_lib.deriv_face_to_node(_velocity(states, dim), dim) ** 2
      for dim in AXES
  )
  for dim_i, dim_j in (('x', 'y'), ('x', 'z'), ('y', 'z')):
    sigma_ij = offdiagonal_strain(deriv_lib, states, dim_i, dim_j)
    result += 2.0 * interpolation.interpolate(
        sigma_ij**2, _edge_location(dim_i, dim_j), _CCC, kernel_op
    )
  return result


def tracer_gradients(
    deriv_lib: derivatives.Derivatives, c: ScalarField
) -> VectorField:
  """Computes the gradient of a tracer at cell centers."""
  return calculus.grad(deriv_lib, c)


def add_diffusivities(
    molecular: FloatOrField, eddy: ScalarField | None
) -> FloatOrField:
  """Adds an eddy diffusivity, when present, to a molecular one."""
  if eddy is None:
    return molecular
  return molecular + eddy


def _at_location(
    kappa: FloatOrField,
    location: FieldLocation,
    kernel_op,
) -> FloatOrField:
  """Interpolates a diffusivity at cell centers to `location`."""
  if isinstance(kappa, jax.Array) and kappa.ndim == 3:
    return interpolation.interpolate(kappa, _CCC, location, kernel_op)
  return kappa


def diffusive_flux(
    deriv_lib: derivatives.Derivatives,
    f: ScalarField,
    location: FieldLocation,
    axis: str,
    kappa: FloatOrField,
) -> tuple[ScalarField, FieldLocation]:
  """Computes κ ∂f along `axis` on the opposite staggered location of `f`.

  Args:
    deriv_lib: An instance of the derivatives library.
    f: The diffused field.
    location: The location of `f`.
    axis: The direction of the flux.
    kappa: The diffusivity, either a scalar or a field at cell centers.

  Returns:
    A tuple of the flux and its location. Fluxes on the walls of a bounded
    `axis` are zero.
  """
  flux_location = grid_parametrization.flip_location(location, axis)
  i = AXES.index(axis)
  flux = _at_location(
      kappa, flux_location, deriv_lib.kernel_op
  ) * calculus.staggered_deriv(deriv_lib, f, location[i], axis)
  if flux_location[i] == Location.FACE:
    flux = common_ops.mask_wall_fluxes(flux, axis, deriv_lib.grid_params)
  return flux, flux_location


def flux_form_diffusion(
    deriv_lib: derivatives.Derivatives,
    f: ScalarField,
    location: FieldLocation,
    axis: str,
    kappa: FloatOrField,
) -> ScalarField:
  """Computes ∂(κ ∂f) along `axis` at the location of `f`."""
  flux, flux_location = diffusive_flux(deriv_lib, f, location, axis, kappa)
  return calculus.staggered_deriv(
      deriv_lib, flux, flux_location[AXES.index(axis)], axis
  )


def flux_form_laplacian(
    deriv_lib: derivatives.Derivatives,
    f: ScalarField,
    location: FieldLocation,
    kappas: Sequence[FloatOrField],
    axes: Sequence[str] = AXES,
) -> ScalarField:
  """Computes Σₐ ∂ₐ(κₐ ∂ₐf) over `axes` with one diffusivity per axis."""
  return sum(
      flux_form_diffusion(deriv_lib, f, location, axis, kappa)
      for axis, kappa in zip(axes, kappas)
  )


def flux_form_biharmonic(
    deriv_lib: derivatives.Derivatives,
    f: ScalarField,
    location: FieldLocation,
    axis: str,
    nu: float,
) -> ScalarField:
  """Computes -ν ∂⁴f along `axis` as the divergence of the flux ν ∂³f.

  The stencil reaches two cells into the halos.

  Args:
    deriv_lib: An instance of the derivatives library.
    f: The diffused field.
    location: The location of `f`.
    axis: The axis of the derivative.
    nu: The hyperdiffusivity.

  Returns:
    The biharmonic diffusion term at the location of `f`.
  """
  flux, flux_location = diffusive_flux(
      deriv_lib, deriv_lib.deriv_2(f, axis), location, axis, nu
  )
  return -calculus.staggered_deriv(
      deriv_lib, flux, flux_location[AXES.index(axis)], axis
  )


def viscous_stress_divergence(
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
    dim: str,
    nu: FloatOrField,
    axes: Sequence[str] = AXES,
) -> ScalarField:
  """Computes Σⱼ ∂ⱼ(2ν Σᵢⱼ) for the velocity component along `dim`.

  E.g. for u:
    ∂xᶠ(2ν Σ₁₁) + ∂yᶜ(2ν^{ffc} Σ₁₂) + ∂zᶜ(2ν^{fcf} Σ₁₃).

  Args:
    deriv_lib: An instance of the derivatives library.
    states: The prognostic fields with their halos filled.
    dim: The axis of the velocity component.
    nu: The total viscosity, either a scalar or a field at cell centers.
    axes: The axes j included in the sum.

  Returns:
    The stress divergence at the location of the velocity component.
  """
  kernel_op = deriv_lib.kernel_op
  grid = deriv_lib.grid_params
  result = None
  for dim_j in axes:
    if dim_j == dim:
      sigma = deriv_lib.deriv_face_to_node(_velocity(states, dim), dim)
      flux = 2.0 * nu * sigma
      term = deriv_lib.deriv_node_to_face(flux, dim)
    else:
      location = _edge_location(dim, dim_j)
      sigma = offdiagonal_strain(deriv_lib, states, dim, dim_j)
      flux = 2.0 * _at_location(nu, location, kernel_op) * sigma
      flux = common_ops.mask_wall_fluxes(flux, dim_j, grid)
      term = deriv_lib.deriv_face_to_node(flux, dim_j)
    result = term if result is None else result + term
  return result


def velocity_diffusion(
    deriv_lib: derivatives.Derivatives,
    states: ScalarFieldMap,
    dim: str,
    kappas: Sequence[FloatOrField],
    axes: Sequence[str] = AXES,
) -> ScalarField:
  """Computes Σₐ ∂ₐ(νₐ ∂ₐuᵢ) for the velocity component along `dim`."""
  return flux_form_laplacian(
      deriv_lib, _velocity(states, dim), _velocity_location(dim), kappas, axes
  )


def safe_divide(
    numerator: jax.Array, denominator: jax.Array
) -> jax.Array:
  """Divides where the denominator is positive, and returns 0 elsewhere."""
  positive = denominator > 0.0
  return jnp.where(
      positive, numerator / jnp.where(positive, denominator, 1.0), 0.0
  )


def max_or_zero(value: FloatOrField | None) -> jax.Array:
  """The maximum of a diffusivity, or 0 if it does not exist."""
  if value is None:
    return jnp.asarray(0.0)
  return jnp.max(jnp.asarray(value))


def timescale(spacing: float, diffusivity: jax.Array, power: int = 2):
  """The time scale Δᵖ / κ, which is infinite where κ is 0."""
  diffusivity = jnp.asarray(diffusivity)
  return jnp.where(
      diffusivity > 0.0,
      spacing**power / jnp.where(diffusivity > 0.0, diffusivity, 1.0),
      jnp.inf,
  )
