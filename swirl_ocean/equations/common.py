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

"""Common keys and staggered locations of the prognostic variables."""

from typing import Sequence, TypeAlias

from swirl_ocean.utility import grid_parametrization

FieldLocation: TypeAlias = grid_parametrization.FieldLocation

_C = grid_parametrization.Location.CENTER
_F = grid_parametrization.Location.FACE

KEY_U = 'u'
KEY_V = 'v'
KEY_W = 'w'
KEYS_VELOCITY = (KEY_U, KEY_V, KEY_W)

# Tracers used by the buoyancy models.
KEY_B = 'b'
KEY_T = 'T'
KEY_S = 'S'

U_LOCATION: FieldLocation = (_F, _C, _C)
V_LOCATION: FieldLocation = (_C, _F, _C)
W_LOCATION: FieldLocation = (_C, _C, _F)
TRACER_LOCATION: FieldLocation = (_C, _C, _C)

VELOCITY_LOCATIONS = {
    KEY_U: U_LOCATION,
    KEY_V: V_LOCATION,
    KEY_W: W_LOCATION,
}

# The velocity component along each axis.
VELOCITY_KEY_BY_AXIS = {'x': KEY_U, 'y': KEY_V, 'z': KEY_W}


def field_location(name: str) -> FieldLocation:
  """Returns the staggered location of the field `name`."""
  return VELOCITY_LOCATIONS.get(name, TRACER_LOCATION)


def is_velocity(name: str) -> bool:
  return name in KEYS_VELOCITY


def field_names(tracers: Sequence[str]) -> tuple[str, ...]:
  """The names of all prognostic fields: velocity components then tracers."""
  return KEYS_VELOCITY + tuple(tracers)
