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

"""User-defined forcing terms of the prognostic equations.

A forcing is added to the tendency of one field. It is either a function of
the coordinates of the field and time, `f(x, y, z, t)`, or, in discrete form,
a function of the grid, time and all prognostic fields, `f(grid, t, states)`.
In both cases optional parameters can be passed as the last argument.
"""

import dataclasses
from typing import Any, Callable, Mapping, Sequence, TypeAlias

from absl import logging
import jax
import jax.numpy as jnp
from swirl_ocean.equations import common
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

GridParametrization: TypeAlias = grid_parametrization.GridParametrization
ScalarField: TypeAlias = types.ScalarField
ScalarFieldMap: TypeAlias = types.ScalarFieldMap


@dataclasses.dataclass(frozen=True)
class Forcing:
  """A forcing function of one field.

  Attributes:
    func: The forcing function.
    discrete_form: Whether `func` takes `(grid, t, states)` instead of the
      coordinates of the field.
    parameters: Optional parameters passed as the last argument of `func`.
  """

  func: Callable[..., Any]
  discrete_form: bool = False
  parameters: Any = None

  def evaluate(
      self,
      grid: GridParametrization,
      name: str,
      time: float | jax.Array,
      states: ScalarFieldMap,
  ) -> ScalarField:
    """Evaluates the forcing of the field `name` on the full grid.

    Args:
      grid: The grid parametrization object.
      name: The name of the forced field.
      time: The current simulation time.
      states: The prognostic fields with their halos filled.

    Returns:
      The forcing, broadcast to the shape of the field.
    """
    extra_args = () if self.parameters is None else (self.parameters,)
    if self.discrete_form:
      value = self.func(grid, time, states, *extra_args)
    else:
      x, y, z = grid.meshgrid(common.field_location(name))
      value = self.func(x, y, z, time, *extra_args)
    return jnp.broadcast_to(jnp.asarray(value, dtype=grid.dtype), grid.shape)


ForcingDict: TypeAlias = Mapping[str, Forcing | Callable[..., Any]]


def regularize_forcing(
    names: Sequence[str], forcing: ForcingDict | None = None
) -> dict[str, Forcing]:
  """Validates the forcing table and wraps bare functions into `Forcing`.

  Args:
    names: The names of all prognostic fields.
    forcing: The forcing functions keyed by field name.

  Returns:
    A mapping from field name to `Forcing`, for the forced fields only.

  Raises:
    ValueError: If a forcing is given for a field that does not exist.
    TypeError: If a forcing is neither a `Forcing` nor callable.
  """
  regularized = {}
  for name, value in (forcing or {}).items():
    if name not in names:
      raise ValueError(
          f'Forcing is specified for nonexistent field {name}. Valid fields'
          f' are {tuple(names)}.'
      )
    if isinstance(value, Forcing):
      regularized[name] = value
    elif callable(value):
      regularized[name] = Forcing(value)
    else:
      raise TypeError(
          f'Forcing of {name} must be a `Forcing` or a callable, but got'
          f' {type(value)}.'
      )
    logging.info('Forcing of %s: %r.', name, regularized[name])
  return regularized
