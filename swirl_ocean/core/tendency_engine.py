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

"""The evaluation of the tendencies of one time step.

A tendency evaluation runs in phases:

  fill_halo_regions → store_tendencies → calculate_diffusivities →
  update_hydrostatic_pressure → interior_tendencies → boundary_tendencies.

Each phase launches one jitted kernel per output, and a barrier waits for all
of them before the next phase starts. The interior kernels therefore read the
diffusivities and the hydrostatic pressure of the current state, and G⁻ holds
the tendencies of the previous evaluation.
"""

import functools
from typing import Any, NamedTuple, TypeAlias

from absl import logging
import jax
import jax.numpy as jnp
from swirl_ocean.base import clock as clock_lib
from swirl_ocean.base import parameters as parameters_lib
from swirl_ocean.boundary_condition import boundary_conditions as bc_lib
from swirl_ocean.boundary_condition import boundary_fluxes
from swirl_ocean.equations import common
from swirl_ocean.equations import hydrostatic_pressure
from swirl_ocean.equations import tendencies as tendencies_lib
from swirl_ocean.equations import tendency_fields
from swirl_ocean.numerics import derivatives
from swirl_ocean.physics.turbulence import closures
from swirl_ocean.utility import get_kernel_fn
from swirl_ocean.utility import phases
from swirl_ocean.utility import types

ModelParameters: TypeAlias = parameters_lib.ModelParameters
MutableScalarFieldMap: TypeAlias = types.MutableScalarFieldMap
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap


class TendencyStep(NamedTuple):
  """The outputs of one tendency evaluation.

  Attributes:
    tendencies: The tendencies G of the current state.
    previous_tendencies: G⁻, a copy of the tendencies passed in.
    states: The prognostic fields with their halos filled.
    diffusivities: The diffusivities of the closure.
    pressure: The hydrostatic pressure anomaly.
  """

  tendencies: MutableScalarFieldMap
  previous_tendencies: MutableScalarFieldMap
  states: MutableScalarFieldMap
  diffusivities: Any
  pressure: ScalarField


class TendencyEngine:
  """Computes the tendencies of the velocity and the tracers."""

  def __init__(self, params: ModelParameters):
    """Builds the kernels of all phases.

    Args:
      params: The validated model parameters.
    """
    self._params = params
    self._grid = params.grid
    self._kernel_op = get_kernel_fn.ApplyKernelSliceOp(self._grid)
    self._deriv_lib = derivatives.Derivatives(self._kernel_op, self._grid)
    self._device = phases.get_device(params.architecture)
    self.barrier = phases.Barrier()

    self._fill_halos = jax.jit(
        functools.partial(
            bc_lib.fill_halo_regions,
            grid=self._grid,
            boundary_conditions=params.boundary_conditions,
        )
    )

    def diffusivities_fn(states: ScalarFieldMap) -> closures.Diffusivities:
      diffusivities = closures.calculate_diffusivities(
          params.closure, self._deriv_lib, states, params.buoyancy
      )
      return closures.fill_diffusivity_halos(diffusivities, self._grid)

    self._diffusivities = jax.jit(diffusivities_fn)
    self._pressure = jax.jit(
        functools.partial(
            hydrostatic_pressure.update_hydrostatic_pressure,
            params.buoyancy,
            self._deriv_lib,
        )
    )

    self._interior_kernels = {}
    for dim, name in common.VELOCITY_KEY_BY_AXIS.items():
      self._interior_kernels[name] = jax.jit(
          functools.partial(
              tendencies_lib.velocity_tendency, dim, params, self._deriv_lib
          )
      )
    for name in params.tracers:

      def tracer_kernel(states, diffusivities, pressure, time, name=name):
        del pressure
        return tendencies_lib.tracer_tendency(
            name, params, self._deriv_lib, states, diffusivities, time
        )

      self._interior_kernels[name] = jax.jit(tracer_kernel)

    self._boundary_kernels = {}
    for name in params.field_names:

      def boundary_kernel(tendencies, states, diffusivities, time, name=name):
        return boundary_fluxes.apply_boundary_fluxes(
            name,
            tendencies[name],
            self._grid,
            params.boundary_conditions[name],
            params.closure,
            diffusivities,
            self._kernel_op,
            states,
            time,
        )

      self._boundary_kernels[name] = jax.jit(boundary_kernel)

    logging.info(
        'Tendency engine built on %s for the grid %s', self._device, self._grid
    )

  @property
  def params(self) -> ModelParameters:
    return self._params

  def initialize_tendencies(self) -> MutableScalarFieldMap:
    """Returns zero tendencies for all prognostic fields."""
    return jax.device_put(
        tendency_fields.initialize_tendencies(
            self._grid, self._params.field_names
        ),
        self._device,
    )

  def store_tendencies(
      self, tendencies: ScalarFieldMap
  ) -> MutableScalarFieldMap:
    """Copies G into a new G⁻ and waits for the copies to complete."""
    return self.barrier.wait(
        'store_tendencies', tendency_fields.store_tendencies(tendencies)
    )

  def fill_halo_regions(
      self, states: ScalarFieldMap, time: float = 0.0
  ) -> MutableScalarFieldMap:
    """Fills the halos of all prognostic fields."""
    return self.barrier.wait(
        'fill_halo_regions', self._fill_halos(states, time=time)
    )

  def calculate_diffusivities(
      self, states: ScalarFieldMap
  ) -> closures.Diffusivities:
    """Computes the diffusivities of the closure with their halos filled."""
    return self.barrier.wait(
        'calculate_diffusivities', self._diffusivities(states)
    )

  def update_hydrostatic_pressure(self, states: ScalarFieldMap) -> ScalarField:
    """Integrates the hydrostatic pressure anomaly of the current state."""
    return self.barrier.wait(
        'update_hydrostatic_pressure', self._pressure(states)
    )

  def calculate_interior_tendency_contributions(
      self,
      states: ScalarFieldMap,
      diffusivities: closures.Diffusivities,
      pressure: ScalarField,
      time: float = 0.0,
  ) -> MutableScalarFieldMap:
    """Launches the interior kernel of every field and waits for them all."""
    return self.barrier.wait(
        'interior_tendencies',
        phases.launch(
            self._interior_kernels, states, diffusivities, pressure, time
        ),
    )

  def calculate_boundary_tendency_contributions(
      self,
      tendencies: ScalarFieldMap,
      states: ScalarFieldMap,
      diffusivities: closures.Diffusivities,
      time: float = 0.0,
  ) -> MutableScalarFieldMap:
    """Adds the boundary fluxes to the tendency of every field."""
    return self.barrier.wait(
        'boundary_tendencies',
        phases.launch(
            self._boundary_kernels, tendencies, states, diffusivities, time
        ),
    )

  def _validate_fields(self, fields: ScalarFieldMap, kind: str) -> None:
    """Checks that `fields` holds every prognostic field on the grid."""
    expected = set(self._params.field_names)
    if set(fields) != expected:
      raise ValueError(
          f'The {kind} must contain exactly the fields {sorted(expected)},'
          f' but got {sorted(fields)}.'
      )
    for name, value in fields.items():
      if tuple(jnp.shape(value)) != self._grid.shape:
        raise ValueError(
            f'The shape of `{name}` in the {kind} is {jnp.shape(value)}, but'
            f' the grid of its location has shape {self._grid.shape}.'
        )

  def _log_non_finite(self, tendencies: ScalarFieldMap) -> None:
    for name, value in tendencies.items():
      count = int(jnp.sum(~jnp.isfinite(value)))
      if count:
        logging.warning(
            'The tendency of %s has %d non-finite values.', name, count
        )

  def calculate_tendencies(
      self,
      states: ScalarFieldMap,
      tendencies: ScalarFieldMap,
      clock: clock_lib.Clock,
  ) -> TendencyStep:
    """Evaluates the tendencies of all prognostic fields.

    Args:
      states: The prognostic fields keyed by name, halos included.
      tendencies: The tendencies of the previous evaluation, which become G⁻.
      clock: The simulation clock.

    Returns:
      The new tendencies, G⁻, and the intermediate fields of the evaluation.

    Raises:
      ValueError: If a field is missing or has the wrong shape.
    """
    self._validate_fields(states, 'states')
    self._validate_fields(tendencies, 'tendencies')
    self.barrier.reset()
    time = clock.time

    states = jax.device_put(dict(states), self._device)
    states = self.fill_halo_regions(states, time)
    previous = self.store_tendencies(tendencies)
    diffusivities = self.calculate_diffusivities(states)
    pressure = self.update_hydrostatic_pressure(states)
    new_tendencies = self.calculate_interior_tendency_contributions(
        states, diffusivities, pressure, time
    )
    new_tendencies = self.calculate_boundary_tendency_contributions(
        new_tendencies, states, diffusivities, time
    )

    if self._params.debug:
      self._log_non_finite(new_tendencies)

    return TendencyStep(
        tendencies=new_tendencies,
        previous_tendencies=previous,
        states=states,
        diffusivities=diffusivities,
        pressure=pressure,
    )

  def cell_diffusion_timescale(
      self, diffusivities: closures.Diffusivities
  ) -> jax.Array:
    """The smallest diffusion time scale of the closure over a grid cell."""
    return closures.cell_diffusion_timescale(
        self._params.closure, diffusivities, self._grid
    )
