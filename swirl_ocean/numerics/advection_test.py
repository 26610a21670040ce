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

"""Tests for advection."""

from absl.testing import absltest
from absl.testing import parameterized
import jax
import jax.numpy as jnp
import numpy as np
from swirl_ocean.numerics import advection
from swirl_ocean.numerics import derivatives
from swirl_ocean.utility import get_kernel_fn
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import test_util

jax.config.update('jax_enable_x64', True)

Location = grid_parametrization.Location


class AdvectionTest(parameterized.TestCase):

  def setUp(self):
    super().setUp()
    self.grid = test_util.make_grid(
        size=(8, 8, 4), length=(1.0, 1.0, 1.0),
        topology=('periodic', 'periodic', 'periodic'),
    )
    self.deriv_lib = derivatives.Derivatives(
        get_kernel_fn.ApplyKernelSliceOp(self.grid), self.grid
    )

  def _coordinates(self, axis, location=Location.CENTER):
    return jnp.broadcast_to(
        self.grid.broadcastable_coordinates(axis, location), self.grid.shape
    )

  @parameterized.parameters(('x', 'u'), ('y', 'v'), ('z', 'w'))
  def testUniformFlowAdvectsTracerWithCenteredDifference(self, axis, velocity):
    """With a constant velocity U, -∇·(u c) = -U δc / (2 Δ)."""
    states = test_util.zero_states(self.grid, ('c',))
    states[velocity] = jnp.full(self.grid.shape, 0.7)
    states['c'] = jnp.sin(2.0 * np.pi * self._coordinates(axis))

    term = advection.advection_term(
        advection.CenteredSecondOrder(), self.deriv_lib, states, 'c'
    )
    expected = -0.7 * self.deriv_lib.deriv_centered(states['c'], axis)

    np.testing.assert_allclose(
        test_util.interior(term, self.grid),
        test_util.interior(expected, self.grid),
        atol=1e-12,
    )

  def testMomentumAdvectionVanishesForUniformFlow(self):
    states = test_util.zero_states(self.grid)
    states['u'] = jnp.full(self.grid.shape, 1.5)
    states['v'] = jnp.full(self.grid.shape, -0.5)

    for name in ('u', 'v', 'w'):
      term = advection.advection_term(
          advection.CenteredSecondOrder(), self.deriv_lib, states, name
      )
      np.testing.assert_allclose(
          test_util.interior(term, self.grid), 0.0, atol=1e-12
      )

  def testMomentumAdvectionOfShearFlow(self):
    """u = sin(2πy) advected by a constant v gives -v ∂y u."""
    states = test_util.zero_states(self.grid)
    states['u'] = jnp.sin(2.0 * np.pi * self._coordinates('y'))
    states['v'] = jnp.full(self.grid.shape, 2.0)

    term = advection.advection_term(
        advection.CenteredSecondOrder(), self.deriv_lib, states, 'u'
    )
    expected = -2.0 * self.deriv_lib.deriv_centered(states['u'], 'y')

    np.testing.assert_allclose(
        test_util.interior(term, self.grid),
        test_util.interior(expected, self.grid),
        atol=1e-12,
    )

  def testDisabledAdvectionReturnsNone(self):
    states = test_util.zero_states(self.grid, ('c',))
    self.assertIsNone(
        advection.advection_term(None, self.deriv_lib, states, 'c')
    )


if __name__ == '__main__':
  absltest.main()
