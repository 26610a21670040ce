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

"""The tendencies G and their copy G⁻ from the previous evaluation."""

from typing import Sequence, TypeAlias

import jax.numpy as jnp
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import types

GridParametrization: TypeAlias = grid_parametrization.GridParametrization
MutableScalarFieldMap: TypeAlias = types.MutableScalarFieldMap
ScalarFieldMap: TypeAlias = types.ScalarFieldMap


def initialize_tendencies(
    grid: GridParametrization, field_names: Sequence[str]
) -> MutableScalarFieldMap:
  """Returns zero tendencies for the fields `field_names`."""
  return {
      name: jnp.zeros(grid.shape, dtype=grid.dtype) for name in field_names
  }


def store_tendencies(tendencies: ScalarFieldMap) -> MutableScalarFieldMap:
  """Copies every tendency into a new buffer.

  The copies do not share memory with `tendencies`, so the returned G⁻ is not
  affected when the buffers of G are donated or replaced.

  Args:
    tendencies: The tendencies G keyed by field name.

  Returns:
    G⁻, a new mapping with a copy of each tendency.
  """
  return {name: jnp.copy(value) for name, value in tendencies.items()}
