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

"""Vector calculus operations on the staggered grid."""

from typing import Sequence, TypeAlias

from swirl_ocean.numerics import derivatives
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

FieldLocation: TypeAlias = grid_parametrization.FieldLocation
Location: TypeAlias = grid_parametrization.Location
ScalarField: TypeAlias = types.ScalarField
VectorField: TypeAlias = types.VectorField

AXES = grid_parametrization.AXES


def grad(
    deriv_lib: derivatives.Derivatives, f: ScalarField
) -> VectorField:
  """Computes the gradient of `f` at its own location with centered stencils.

  Args:
    deriv_lib: An instance of the derivatives library.
    f: A 3D field.

  Returns:
    The derivatives of `f` along x, y, and z.
  """
  return tuple(deriv_lib.deriv_centered(f, axis) for axis in AXES)


def staggered_deriv(
    deriv_lib: derivatives.Derivatives,
    f: ScalarField,
    location: Location,
    axis: str,
) -> ScalarField:
  """Differentiates `f` along `axis` to the opposite staggered location.

  Args:
    deriv_lib: An instance of the derivatives library.
    f: A 3D field.
    location: The location of `f` along `axis`.
    axis: The axis of the derivative.

  Returns:
    The derivative of `f`, located on faces along `axis` if `f` is located at
    nodes, and at nodes if `f` is located on faces.
  """
  if location == Location.CENTER:
    return deriv_lib.deriv_node_to_face(f, axis)
  return deriv_lib.deriv_face_to_node(f, axis)


def divergence(
    deriv_lib: derivatives.Derivatives,
    fluxes: Sequence[ScalarField | None],
    locations: Sequence[FieldLocation],
) -> ScalarField | None:
  """Computes the divergence of a staggered flux vector.

  Args:
    deriv_lib: An instance of the derivatives library.
    fluxes: The x, y, and z components of the flux. A `None` component is
      skipped.
    locations: The location of each component of the flux.

  Returns:
    ∂x F_x + ∂y F_y + ∂z F_z, or `None` if all components are `None`.
  """
  result = None
  for axis, flux, location in zip(AXES, fluxes, locations):
    if flux is None:
      continue
    term = staggered_deriv(
        deriv_lib, flux, location[AXES.index(axis)], axis
    )
    result = term if result is None else result + term
  return result
