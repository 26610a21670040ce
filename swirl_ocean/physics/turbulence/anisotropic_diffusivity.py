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

"""Closures with constant coefficients that differ between axes."""

import dataclasses
from typing import Sequence, TypeAlias

import jax
import jax.numpy as jnp
from swirl_ocean.equations import common
from swirl_ocean.numerics import derivatives
from swirl_ocean.physics import constants
from swirl_ocean.physics.turbulence import closure_base
from swirl_ocean.physics.turbulence import closure_operators
from swirl_ocean.utility import types

DiffusivityFields: TypeAlias = closure_base.DiffusivityFields
FloatOrField: TypeAlias = types.FloatOrField
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap
TracerParameter: TypeAlias = closure_base.TracerParameter

AXES = ('x', 'y', 'z')


class _PerAxisCoefficients:
  """Accessors of coefficients named `nu{axis}` and `kappa{axis}`."""

  def viscosities(self) -> tuple[float, float, float]:
    return tuple(getattr(self, f'nu{axis}') for axis in AXES)

  def tracer_diffusivities(
      self, tracer_name: str
  ) -> tuple[float, float, float]:
    return tuple(
        closure_base.tracer_parameter(
            getattr(self, f'kappa{axis}'), tracer_name
        )
        for axis in AXES
    )

  def _expand_kappas(self, tracers: Sequence[str]):
    return dataclasses.replace(
        self,
        **{
            f'kappa{axis}': closure_base.expand_tracer_parameter(
                getattr(self, f'kappa{axis}'),
                tracers,
                f'kappa{axis}',
                type(self).__name__,
            )
            for axis in AXES
        },
    )

  def boundary_diffusivity(
      self,
      field_name: str,
      axis: str,
      diffusivities: DiffusivityFields,
  ) -> FloatOrField:
    del diffusivities
    if common.is_velocity(field_name):
      return getattr(self, f'nu{axis}')
    return closure_base.tracer_parameter(
        getattr(self, f'kappa{axis}'), field_name
    )

  def _max_per_axis(self) -> list[jax.Array]:
    """The largest coefficient along each axis."""
    return [
        jnp.max(
            jnp.asarray(
                [getattr(self, f'nu{axis}')]
                + closure_base.parameter_values(getattr(self, f'kappa{axis}'))
            )
        )
        for axis in AXES
    ]


@dataclasses.dataclass(frozen=True)
class AnisotropicDiffusivity(
    _PerAxisCoefficients, closure_base.TurbulenceClosure
):
  """Constant viscosity and diffusivities with a different value per axis.

  The tendencies are (νx ∂x² + νy ∂y² + νz ∂z²) u and the equivalent with the
  tracer diffusivities.
  """

  nux: float = constants.NU_0
  nuy: float = constants.NU_0
  nuz: float = constants.NU_0
  kappax: TracerParameter = constants.KAPPA_0
  kappay: TracerParameter = constants.KAPPA_0
  kappaz: TracerParameter = constants.KAPPA_0

  def with_tracers(self, tracers: Sequence[str]) -> 'AnisotropicDiffusivity':
    return self._expand_kappas(tracers)

  def stress_divergence(
      self,
      dim: str,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      diffusivities: DiffusivityFields,
  ) -> ScalarField:
    del diffusivities
    return closure_operators.velocity_diffusion(
        deriv_lib, states, dim, self.viscosities()
    )

  def tracer_flux_divergence(
      self,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      tracer_name: str,
      diffusivities: DiffusivityFields,
  ) -> ScalarField:
    del diffusivities
    return closure_operators.flux_form_laplacian(
        deriv_lib,
        states[tracer_name],
        common.TRACER_LOCATION,
        self.tracer_diffusivities(tracer_name),
    )

  def diffusion_timescale(self, grid, diffusivities) -> jax.Array:
    del diffusivities
    return jnp.min(
        jnp.asarray([
            closure_operators.timescale(grid.spacing(axis), kappa)
            for axis, kappa in zip(AXES, self._max_per_axis())
        ])
    )


@dataclasses.dataclass(frozen=True)
class AnisotropicBiharmonicDiffusivity(
    _PerAxisCoefficients, closure_base.TurbulenceClosure
):
  """Constant hyperviscosity and hyperdiffusivities per axis.

  The tendencies are -(νx ∂x⁴ + νy ∂y⁴ + νz ∂z⁴) u and the equivalent with the
  tracer hyperdiffusivities. The coefficients are in m⁴/s.
  """

  nux: float = 0.0
  nuy: float = 0.0
  nuz: float = 0.0
  kappax: TracerParameter = 0.0
  kappay: TracerParameter = 0.0
  kappaz: TracerParameter = 0.0

  @property
  def required_halo_width(self) -> int:
    return 2

  def with_tracers(
      self, tracers: Sequence[str]
  ) -> 'AnisotropicBiharmonicDiffusivity':
    return self._expand_kappas(tracers)

  def _biharmonic(
      self,
      deriv_lib: derivatives.Derivatives,
      f: ScalarField,
      location,
      coefficients: Sequence[float],
  ) -> ScalarField:
    return sum(
        closure_operators.flux_form_biharmonic(
            deriv_lib, f, location, axis, coefficient
        )
        for axis, coefficient in zip(AXES, coefficients)
    )

  def stress_divergence(
      self,
      dim: str,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      diffusivities: DiffusivityFields,
  ) -> ScalarField:
    del diffusivities
    name = common.VELOCITY_KEY_BY_AXIS[dim]
    return self._biharmonic(
        deriv_lib,
        states[name],
        common.field_location(name),
        self.viscosities(),
    )

  def tracer_flux_divergence(
      self,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      tracer_name: str,
      diffusivities: DiffusivityFields,
  ) -> ScalarField:
    del diffusivities
    return self._biharmonic(
        deriv_lib,
        states[tracer_name],
        common.TRACER_LOCATION,
        self.tracer_diffusivities(tracer_name),
    )

  def boundary_diffusivity(
      self,
      field_name: str,
      axis: str,
      diffusivities: DiffusivityFields,
  ) -> float:
    # Value and gradient conditions have no biharmonic flux equivalent.
    del field_name, axis, diffusivities
    return 0.0

  def diffusion_timescale(self, grid, diffusivities) -> jax.Array:
    del diffusivities
    return jnp.min(
        jnp.asarray([
            closure_operators.timescale(grid.spacing(axis), kappa, power=4)
            for axis, kappa in zip(AXES, self._max_per_axis())
        ])
    )
