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

"""Commonly used types in the tendency engine."""

from typing import Callable, Mapping, MutableMapping, TypeAlias

import jax

# A 3D field including its halo cells, in x-y-z order.
ScalarField: TypeAlias = jax.Array
ScalarFieldMap: TypeAlias = Mapping[str, jax.Array]
MutableScalarFieldMap: TypeAlias = MutableMapping[str, jax.Array]
# A full flow state: velocity components and tracers keyed by name.
FlowFieldMap: TypeAlias = ScalarFieldMap

# A 2D field on a boundary plane, including the halos of the tangential axes.
PlaneField: TypeAlias = jax.Array

VectorField: TypeAlias = tuple[ScalarField, ScalarField, ScalarField]
TensorField: TypeAlias = tuple[VectorField, VectorField, VectorField]

# A scalar quantity that is either a constant or a field.
FloatOrField: TypeAlias = float | jax.Array

# A user supplied function of space and time, e.g. f(x, y, z, t).
SpaceTimeFn: TypeAlias = Callable[..., FloatOrField]
