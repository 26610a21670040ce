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

"""The interface of turbulence closures.

A turbulence closure models the subgrid fluxes of momentum and tracers. Every
closure provides the same set of operations:

  * `calculate_diffusivities`: computes the eddy viscosity and diffusivities,
    collectively `K`, from the current state. Closures with constant
    coefficients return an empty `DiffusivityFields`.
  * `stress_divergence`: the divergence of the subgrid stress, ∂ⱼ(2ν Σᵢⱼ),
    for one velocity component, at the location of that component.
  * `tracer_flux_divergence`: the divergence of the subgrid tracer flux,
    ∇·(κ∇c), at cell centers.
  * `boundary_diffusivity`: the viscosity or diffusivity that converts a value
    or gradient boundary condition into a flux.
  * `diffusion_timescale`: the time-step limit of explicit diffusion.

All operations are pure functions of the grid, the closure parameters, the
state and `K`. Subgrid fluxes across the walls of bounded axes are zero; the
boundary conditions supply them instead.
"""

import abc
from typing import Any, Mapping, NamedTuple, Sequence, TypeAlias

import jax
from swirl_ocean.numerics import derivatives
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

FloatOrField: TypeAlias = types.FloatOrField
GridParametrization: TypeAlias = grid_parametrization.GridParametrization
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap


class DiffusivityFields(NamedTuple):
  """The eddy viscosity and eddy diffusivities of a closure, at cell centers.

  Attributes:
    viscosity: The eddy viscosity, or `None` if the closure has none.
    diffusivities: The eddy diffusivity of each tracer, or `None` if the
      closure has none.
  """

  viscosity: ScalarField | None = None
  diffusivities: dict[str, ScalarField] | None = None


TracerParameter: TypeAlias = float | Mapping[str, float]


def expand_tracer_parameter(
    value: TracerParameter,
    tracers: Sequence[str],
    parameter_name: str,
    closure_name: str,
) -> dict[str, float]:
  """Expands a per-tracer parameter into a mapping with one entry per tracer.

  Args:
    value: A scalar applied to every tracer, or a mapping from tracer name to
      value.
    tracers: The names of the tracers of the model.
    parameter_name: The name of the parameter, used in error messages.
    closure_name: The name of the closure, used in error messages.

  Returns:
    A mapping from each tracer name to its parameter value.

  Raises:
    ValueError: If `value` is a mapping whose keys are not exactly `tracers`.
  """
  if isinstance(value, Mapping):
    if set(value) != set(tracers):
      raise ValueError(
          f'`{parameter_name}` of {closure_name} must be specified for tracers'
          f' {tuple(tracers)} exactly, but got {tuple(value)}.'
      )
    return {t: value[t] for t in tracers}
  return {t: value for t in tracers}


def tracer_parameter(
    value: TracerParameter, tracer_name: str
) -> Any:
  """Looks up the parameter of one tracer."""
  if isinstance(value, Mapping):
    if tracer_name not in value:
      raise ValueError(
          f'No parameter is specified for tracer {tracer_name}. Available'
          f' tracers are {tuple(value)}.'
      )
    return value[tracer_name]
  return value


def parameter_values(value: TracerParameter) -> list[float]:
  """The values of a per-tracer parameter for all tracers."""
  if isinstance(value, Mapping):
    return list(value.values())
  return [value]


class TurbulenceClosure(abc.ABC):
  """The base class of all turbulence closures."""

  @property
  def required_halo_width(self) -> int:
    """The number of halo layers the closure stencils reach into."""
    return 1

  def with_tracers(self, tracers: Sequence[str]) -> 'TurbulenceClosure':
    """Rebuilds the closure for the tracers `tracers`.

    Per-tracer parameters given as scalars are expanded to one entry per
    tracer.

    Args:
      tracers: The names of the tracers of the model.

    Returns:
      A closure with per-tracer parameters for exactly `tracers`.

    Raises:
      ValueError: If a per-tracer parameter names a different set of tracers.
    """
    del tracers
    return self

  def calculate_diffusivities(
      self,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      buoyancy: Any = None,
  ) -> DiffusivityFields:
    """Computes the eddy viscosity and diffusivities from the current state.

    Args:
      deriv_lib: An instance of the derivatives library.
      states: The prognostic fields with their halos filled.
      buoyancy: The buoyancy model, or `None` if buoyancy is disabled.

    Returns:
      The eddy viscosity and diffusivities at cell centers. Values in the
      halos are not meaningful until the halos are filled.
    """
    del deriv_lib, states, buoyancy
    return DiffusivityFields()

  @abc.abstractmethod
  def stress_divergence(
      self,
      dim: str,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      diffusivities: DiffusivityFields,
  ) -> ScalarField | None:
    """Computes ∂ⱼ(2ν Σᵢⱼ) for the velocity component along `dim`.

    Args:
      dim: The axis of the velocity component, one of 'x', 'y', and 'z'.
      deriv_lib: An instance of the derivatives library.
      states: The prognostic fields with their halos filled.
      diffusivities: The output of `calculate_diffusivities` with its halos
        filled.

    Returns:
      The stress divergence at the location of the velocity component, or
      `None` if the closure does not act on momentum.
    """
    raise NotImplementedError('Calling an abstract method.')

  @abc.abstractmethod
  def tracer_flux_divergence(
      self,
      deriv_lib: derivatives.Derivatives,
      states: ScalarFieldMap,
      tracer_name: str,
      diffusivities: DiffusivityFields,
  ) -> ScalarField | None:
    """Computes ∇·(κ∇c) for the tracer `tracer_name` at cell centers."""
    raise NotImplementedError('Calling an abstract method.')

  @abc.abstractmethod
  def boundary_diffusivity(
      self,
      field_name: str,
      axis: str,
      diffusivities: DiffusivityFields,
  ) -> FloatOrField:
    """The diffusivity of `field_name` across boundaries normal to `axis`.

    Args:
      field_name: The name of a velocity component or a tracer.
      axis: The axis normal to the boundary.
      diffusivities: The output of `calculate_diffusivities`.

    Returns:
      A scalar, or a field at cell centers.
    """
    raise NotImplementedError('Calling an abstract method.')

  @abc.abstractmethod
  def diffusion_timescale(
      self,
      grid: GridParametrization,
      diffusivities: DiffusivityFields,
  ) -> jax.Array:
    """The smallest time scale of explicit diffusion over a grid cell."""
    raise NotImplementedError('Calling an abstract method.')
