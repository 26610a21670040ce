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

"""A library for the parameters of the tendency computation.

`ModelParameters` collects the grid, the tracers, and the physics of the
model. It is created with `ModelParameters.create`, which validates the
configuration as a whole and fails with a `ValueError` before any kernel runs.

Turbulence closures can also be described by plain dictionaries, e.g.

  {'type': 'SmagorinskyLilly', 'c': 0.16, 'pr': {'T': 1.0, 'S': 1.0}}

and a list of such dictionaries describes a tuple of closures.
"""

import dataclasses
from typing import Any, Mapping, Sequence, TypeAlias

from absl import flags
from absl import logging
from swirl_ocean.boundary_condition import boundary_conditions as bc_lib
from swirl_ocean.equations import common
from swirl_ocean.equations import forcing as forcing_lib
from swirl_ocean.numerics import advection as advection_lib
from swirl_ocean.physics import buoyancy as buoyancy_lib
from swirl_ocean.physics import coriolis as coriolis_lib
from swirl_ocean.physics import surface_waves as surface_waves_lib
from swirl_ocean.physics.turbulence import anisotropic_diffusivity
from swirl_ocean.physics.turbulence import closure_base
from swirl_ocean.physics.turbulence import closures
from swirl_ocean.physics.turbulence import isotropic_diffusivity
from swirl_ocean.physics.turbulence import leith
from swirl_ocean.physics.turbulence import minimum_dissipation
from swirl_ocean.physics.turbulence import smagorinsky
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import phases

Closure: TypeAlias = closures.Closure
GridParametrization: TypeAlias = grid_parametrization.GridParametrization

_TENDENCY_DEBUG = flags.DEFINE_bool(
    'tendency_debug',
    False,
    'If True, the number of non-finite values in the tendencies is logged'
    ' after every evaluation.',
    allow_override=True,
)
_ARCHITECTURE = flags.DEFINE_enum(
    'architecture',
    'cpu',
    [a.value for a in phases.Architecture],
    'The backend on which the tendency kernels run.',
    allow_override=True,
)

FLAGS = flags.FLAGS

_CLOSURE_TYPES = {
    cls.__name__: cls
    for cls in (
        isotropic_diffusivity.NoClosure,
        isotropic_diffusivity.IsotropicDiffusivity,
        anisotropic_diffusivity.AnisotropicDiffusivity,
        anisotropic_diffusivity.AnisotropicBiharmonicDiffusivity,
        smagorinsky.SmagorinskyLilly,
        smagorinsky.BlasiusSmagorinsky,
        leith.TwoDimensionalLeith,
        minimum_dissipation.VerstappenAnisotropicMinimumDissipation,
        minimum_dissipation.RozemaAnisotropicMinimumDissipation,
    )
}
_CLOSURE_ALIASES = {
    'ConstantSmagorinsky': 'SmagorinskyLilly',
    'AnisotropicMinimumDissipation': 'VerstappenAnisotropicMinimumDissipation',
    'VerstappenAMD': 'VerstappenAnisotropicMinimumDissipation',
    'RozemaAMD': 'RozemaAnisotropicMinimumDissipation',
}


def _flag_value(flag: flags.FlagHolder) -> Any:
  """The value of `flag`, or its default if the flags are not parsed."""
  return flag.value if FLAGS.is_parsed() else flag.default


def _single_closure_from_config(
    config: Mapping[str, Any],
) -> closure_base.TurbulenceClosure:
  """Creates one closure from its dictionary description."""
  config = dict(config)
  if 'type' not in config:
    raise ValueError(f'The closure config {config} has no `type`.')
  closure_type = config.pop('type')
  closure_type = _CLOSURE_ALIASES.get(closure_type, closure_type)
  if closure_type not in _CLOSURE_TYPES:
    raise ValueError(
        f'Unknown closure type {closure_type}. Valid types are'
        f' {sorted(_CLOSURE_TYPES) + sorted(_CLOSURE_ALIASES)}.'
    )
  cls = _CLOSURE_TYPES[closure_type]
  valid_fields = {f.name for f in dataclasses.fields(cls)}
  unknown = sorted(set(config) - valid_fields)
  if unknown:
    raise ValueError(
        f'Unknown parameters {unknown} for {closure_type}. Valid parameters'
        f' are {sorted(valid_fields)}.'
    )
  return cls(**config)


def closure_from_config(
    config: Mapping[str, Any] | Sequence[Mapping[str, Any]] | None,
) -> Closure:
  """Creates a closure from its dictionary description.

  Args:
    config: A dictionary with the closure `type` and its parameters, or a list
      of such dictionaries for a tuple of closures. `None` means no closure.

  Returns:
    The closure, or a tuple of closures.

  Raises:
    ValueError: If a closure type or one of its parameters is unknown.
  """
  if config is None:
    return isotropic_diffusivity.NoClosure()
  if isinstance(config, Mapping):
    return _single_closure_from_config(config)
  if not config:
    raise ValueError('A tuple of closures needs at least one closure.')
  return tuple(_single_closure_from_config(c) for c in config)


def _single_closure_to_config(
    closure: closure_base.TurbulenceClosure,
) -> dict[str, Any]:
  """Describes one closure as a dictionary."""
  config = {'type': type(closure).__name__}
  for field in dataclasses.fields(closure):
    value = getattr(closure, field.name)
    if callable(value):
      raise ValueError(
          f'Parameter `{field.name}` of {type(closure).__name__} is a'
          ' function, which cannot be saved in a closure config.'
      )
    config[field.name] = dict(value) if isinstance(value, Mapping) else value
  return config


def closure_to_config(
    closure: Closure,
) -> dict[str, Any] | list[dict[str, Any]]:
  """Describes a closure as a dictionary that `closure_from_config` accepts.

  Args:
    closure: A closure or a tuple of closures.

  Returns:
    A dictionary, or a list of dictionaries for a tuple of closures.

  Raises:
    ValueError: If a parameter of the closure is a function.
  """
  if isinstance(closure, tuple):
    return [_single_closure_to_config(c) for c in closure]
  return _single_closure_to_config(closure)


def _validate_tracers(tracers: Sequence[str]) -> tuple[str, ...]:
  """Checks that tracer names are unique and distinct from the velocity."""
  tracers = tuple(tracers)
  duplicates = sorted({t for t in tracers if tracers.count(t) > 1})
  if duplicates:
    raise ValueError(f'Tracers {duplicates} are declared more than once.')
  conflicts = [t for t in tracers if common.is_velocity(t)]
  if conflicts:
    raise ValueError(
        f'Tracers {conflicts} conflict with the velocity components'
        f' {common.KEYS_VELOCITY}.'
    )
  return tracers


def _validate_halo_width(closure: Closure, grid: GridParametrization) -> None:
  """Checks that the halos of the grid cover the reach of the closure."""
  required = closures.required_halo_width(closure)
  for axis in grid_parametrization.AXES:
    if grid.halo(axis) < required:
      raise ValueError(
          f'The closure {closure} requires a halo width of at least'
          f' {required}, but the halo width in {axis} is {grid.halo(axis)}.'
      )


def _closure_from_argument(closure: Any) -> Closure:
  """Normalizes the `closure` argument of `ModelParameters.create`."""
  if closure is None or isinstance(closure, Mapping):
    return closure_from_config(closure)
  if isinstance(closure, closure_base.TurbulenceClosure):
    return closure
  if isinstance(closure, Sequence) and not isinstance(closure, str):
    if closure and all(
        isinstance(c, closure_base.TurbulenceClosure) for c in closure
    ):
      return tuple(closure)
    if all(isinstance(c, Mapping) for c in closure):
      return closure_from_config(closure)
  raise ValueError(
      f'Invalid closure {closure!r}. Expected a closure, a sequence of'
      ' closures, a closure config or a sequence of closure configs.'
  )


@dataclasses.dataclass(frozen=True)
class ModelParameters:
  """The parameters of the tendency computation.

  Attributes:
    grid: The grid parametrization object.
    tracers: The names of the tracers.
    closure: The turbulence closure, or a tuple of closures.
    advection: The advection scheme, or `None` to disable advection.
    coriolis: The Coriolis model, or `None` to disable rotation.
    buoyancy: The buoyancy model, or `None` to disable buoyancy.
    surface_waves: The Stokes drift, or `None` to disable surface waves.
    forcing: The forcing of each forced field.
    boundary_conditions: The boundary conditions of every field.
    hydrostatic_pressure_anomaly: If True, the hydrostatic pressure anomaly is
      removed from the pressure and forces u and v through its horizontal
      gradient, and w receives no buoyancy term. Otherwise w is forced by the
      vertical gradient of the hydrostatic pressure anomaly, which equals the
      buoyancy at the w faces.
    architecture: The backend on which the kernels run.
    debug: If True, non-finite tendencies are counted and logged.
  """

  grid: GridParametrization
  tracers: tuple[str, ...] = ()
  closure: Closure = dataclasses.field(
      default_factory=isotropic_diffusivity.NoClosure
  )
  advection: advection_lib.AdvectionScheme | None = dataclasses.field(
      default_factory=advection_lib.CenteredSecondOrder
  )
  coriolis: coriolis_lib.CoriolisModel | None = None
  buoyancy: buoyancy_lib.BuoyancyModel | None = None
  surface_waves: surface_waves_lib.UniformStokesDrift | None = None
  forcing: dict[str, forcing_lib.Forcing] = dataclasses.field(
      default_factory=dict
  )
  boundary_conditions: dict[str, bc_lib.FieldBoundaryConditions] = (
      dataclasses.field(default_factory=dict)
  )
  hydrostatic_pressure_anomaly: bool = False
  architecture: phases.Architecture = phases.Architecture.CPU
  debug: bool = False

  @classmethod
  def create(
      cls,
      grid: GridParametrization,
      tracers: Sequence[str] = (),
      closure: Closure | Mapping[str, Any] | Sequence[Any] | None = None,
      advection: advection_lib.AdvectionScheme | None = (
          advection_lib.CenteredSecondOrder()
      ),
      coriolis: coriolis_lib.CoriolisModel | None = None,
      buoyancy: buoyancy_lib.BuoyancyModel | None = None,
      surface_waves: surface_waves_lib.UniformStokesDrift | None = None,
      forcing: forcing_lib.ForcingDict | None = None,
      boundary_conditions: bc_lib.BoundaryConditionDict | None = None,
      hydrostatic_pressure_anomaly: bool = False,
      architecture: phases.Architecture | str | None = None,
      debug: bool | None = None,
  ) -> 'ModelParameters':
    """Validates a model configuration and creates its parameters.

    Args:
      grid: The grid parametrization object.
      tracers: The names of the tracers.
      closure: A closure, a tuple of closures, their dictionary description,
        or `None` for no closure.
      advection: The advection scheme, or `None` to disable advection.
      coriolis: The Coriolis model, or `None` to disable rotation.
      buoyancy: The buoyancy model, or `None` to disable buoyancy.
      surface_waves: The Stokes drift, or `None` to disable surface waves.
      forcing: The forcing functions keyed by field name.
      boundary_conditions: The boundary conditions keyed by field name.
      hydrostatic_pressure_anomaly: See the attribute of the same name.
      architecture: The backend. Defaults to the `--architecture` flag.
      debug: Whether to check the tendencies for non-finite values. Defaults
        to the `--tendency_debug` flag.

    Returns:
      The validated parameters.

    Raises:
      ValueError: If the configuration is inconsistent.
    """
    tracers = _validate_tracers(tracers)
    names = common.field_names(tracers)

    closure = _closure_from_argument(closure)
    closure = closures.with_tracers(closure, tracers)
    _validate_halo_width(closure, grid)

    buoyancy_lib.validate_buoyancy_tracers(buoyancy, tracers)
    boundary_conditions = bc_lib.regularize_boundary_conditions(
        grid, names, boundary_conditions
    )
    forcing = forcing_lib.regularize_forcing(names, forcing)

    if architecture is None:
      architecture = _flag_value(_ARCHITECTURE)
    architecture = phases.Architecture(architecture)
    if debug is None:
      debug = _flag_value(_TENDENCY_DEBUG)

    logging.info('Tracers: %r.', tracers)
    logging.info('Turbulence closure: %r.', closure)
    logging.info(
        'Advection: %r, Coriolis: %r, buoyancy: %r, surface waves: %r.',
        advection,
        coriolis,
        buoyancy,
        surface_waves,
    )
    if hydrostatic_pressure_anomaly and buoyancy is None:
      logging.warning(
          'The hydrostatic pressure anomaly has no effect without buoyancy.'
      )

    return cls(
        grid=grid,
        tracers=tracers,
        closure=closure,
        advection=advection,
        coriolis=coriolis,
        buoyancy=buoyancy,
        surface_waves=surface_waves,
        forcing=forcing,
        boundary_conditions=boundary_conditions,
        hydrostatic_pressure_anomaly=hydrostatic_pressure_anomaly,
        architecture=architecture,
        debug=debug,
    )

  @property
  def field_names(self) -> tuple[str, ...]:
    """The names of all prognostic fields."""
    return common.field_names(self.tracers)
