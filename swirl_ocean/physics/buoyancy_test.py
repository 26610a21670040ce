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

"""Tests for buoyancy."""

from absl.testing import absltest
from absl.testing import parameterized
import jax
import jax.numpy as jnp
import numpy as np
from swirl_ocean.numerics import derivatives
from swirl_ocean.physics import buoyancy
from swirl_ocean.physics import constants
from swirl_ocean.utility import get_kernel_fn
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import test_util

jax.config.update('jax_enable_x64', True)

Location = grid_parametrization.Location


class BuoyancyTest(parameterized.TestCase):

  def setUp(self):
    super().setUp()
    self.grid = test_util.make_grid(size=(4, 4, 6), length=(1.0, 1.0, 3.0))
    self.deriv_lib = derivatives.Derivatives(
        get_kernel_fn.ApplyKernelSliceOp(self.grid), self.grid
    )
    self.z = jnp.broadcast_to(
        self.grid.broadcastable_coordinates('z', Location.CENTER),
        self.grid.shape,
    )

  def testBuoyancyTracerIsTheTracerItself(self):
    states = test_util.random_states(self.grid, ('b',))

    np.testing.assert_array_equal(
        buoyancy.buoyancy_perturbation(buoyancy.BuoyancyTracer(), states),
        states['b'],
    )
    self.assertIsNone(buoyancy.buoyancy_perturbation(None, states))

  def testSeawaterBuoyancyFollowsTheLinearEquationOfState(self):
    states = {'T': jnp.full((2, 2, 2), 10.0), 'S': jnp.full((2, 2, 2), 35.0)}
    model = buoyancy.SeawaterBuoyancy(
        gravitational_acceleration=10.0,
        equation_of_state=buoyancy.LinearEquationOfState(
            thermal_expansion=2e-4, haline_contraction=8e-4
        ),
    )

    np.testing.assert_allclose(
        model.buoyancy(states), 10.0 * (2e-4 * 10.0 - 8e-4 * 35.0)
    )
    self.assertEqual(
        buoyancy.SeawaterBuoyancy().gravitational_acceleration,
        constants.G_EARTH,
    )

  @parameterized.named_parameters(
      ('BuoyancyTracer', buoyancy.BuoyancyTracer(), ('T',), ('b',)),
      ('Seawater', buoyancy.SeawaterBuoyancy(), ('T',), ('T', 'S')),
  )
  def testValidateRejectsMissingTracers(self, model, missing, present):
    with self.assertRaisesRegex(ValueError, 'requires tracers'):
      buoyancy.validate_buoyancy_tracers(model, missing)
    buoyancy.validate_buoyancy_tracers(model, present)
    buoyancy.validate_buoyancy_tracers(None, ())

  def testBuoyancyFrequencyOfLinearStratification(self):
    states = {'b': 1e-4 * self.z}

    n2 = buoyancy.buoyancy_frequency_squared(
        buoyancy.BuoyancyTracer(), self.deriv_lib, states
    )
    grad_b = buoyancy.buoyancy_gradient_ccc(
        buoyancy.BuoyancyTracer(), self.deriv_lib, states
    )

    np.testing.assert_allclose(
        test_util.interior(n2, self.grid), 1e-4, rtol=1e-10
    )
    np.testing.assert_allclose(
        test_util.interior(grad_b[2], self.grid), 1e-4, rtol=1e-10
    )
    np.testing.assert_allclose(
        test_util.interior(grad_b[0], self.grid), 0.0, atol=1e-14
    )
    self.assertIsNone(
        buoyancy.buoyancy_frequency_squared(None, self.deriv_lib, states)
    )


if __name__ == '__main__':
  absltest.main()
