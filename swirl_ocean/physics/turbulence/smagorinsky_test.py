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

"""Tests for smagorinsky."""

from absl.testing import absltest
from absl.testing import parameterized
import jax
import jax.numpy as jnp
import numpy as np
from swirl_ocean.numerics import derivatives
from swirl_ocean.physics import buoyancy as buoyancy_lib
from swirl_ocean.physics.turbulence import smagorinsky
from swirl_ocean.utility import get_kernel_fn
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import test_util

jax.config.update('jax_enable_x64', True)

Location = grid_parametrization.Location

_SHEAR = 2.0


class SmagorinskyTest(parameterized.TestCase):

  def setUp(self):
    super().setUp()
    self.grid = test_util.make_grid(size=(4, 4, 8), length=(1.0, 2.0, 4.0))
    self.deriv_lib = derivatives.Derivatives(
        get_kernel_fn.ApplyKernelSliceOp(self.grid), self.grid
    )
    self.z = jnp.broadcast_to(
        self.grid.broadcastable_coordinates('z', Location.CENTER),
        self.grid.shape,
    )

  def _shear_flow(self, n2=0.0):
    """u = S z, with buoyancy b = N² z."""
    states = test_util.zero_states(self.grid, ('b',))
    states['u'] = _SHEAR * self.z
    states['b'] = n2 * self.z
    return states

  def testFilterWidthIsTheGeometricMeanOfTheSpacings(self):
    self.assertAlmostEqual(
        smagorinsky.filter_width(self.grid), (0.25 * 0.5 * 0.5) ** (1 / 3)
    )

  def testStabilityCorrection(self):
    sigma2 = jnp.asarray([0.0, 2.0, 2.0, 2.0, 2.0])
    n2 = jnp.asarray([1.0, -1.0, 1.0, 2.0, 4.0])

    np.testing.assert_allclose(
        smagorinsky.stability_correction(n2, sigma2, 1.0),
        [0.0, 1.0, np.sqrt(0.5), 0.0, 0.0],
    )
    np.testing.assert_array_equal(
        smagorinsky.stability_correction(None, sigma2, 1.0),
        [0.0, 1.0, 1.0, 1.0, 1.0],
    )

  def testEddyViscosityOfUniformShear(self):
    closure = smagorinsky.SmagorinskyLilly(pr={'b': 0.5}).with_tracers(('b',))

    k = closure.calculate_diffusivities(self.deriv_lib, self._shear_flow())

    length = 0.16 * smagorinsky.filter_width(self.grid)
    np.testing.assert_allclose(
        test_util.interior(k.viscosity, self.grid),
        length**2 * _SHEAR,
        rtol=1e-10,
    )
    np.testing.assert_allclose(
        k.diffusivities['b'], 2.0 * k.viscosity, rtol=1e-12
    )

  @parameterized.parameters((0.5, np.sqrt(0.75)), (1.0, np.sqrt(0.5)),
                            (2.0, 0.0), (-1.0, 1.0))
  def testStratificationDampsTheEddyViscosity(self, n2, correction):
    """ΣᵢⱼΣᵢⱼ = S² / 2, so ς = √(1 - min(1, 2 N² / S²))."""
    k = smagorinsky.SmagorinskyLilly().calculate_diffusivities(
        self.deriv_lib,
        self._shear_flow(n2),
        buoyancy_lib.BuoyancyTracer(),
    )

    length = 0.16 * smagorinsky.filter_width(self.grid)
    np.testing.assert_allclose(
        test_util.interior(k.viscosity, self.grid),
        correction * length**2 * _SHEAR,
        rtol=1e-10,
        atol=1e-14,
    )

  def testBlasiusSmagorinskyUsesTheMixingLength(self):
    constant = smagorinsky.BlasiusSmagorinsky(mixing_length=0.3)
    varying = smagorinsky.BlasiusSmagorinsky(mixing_length=lambda z: -0.1 * z)
    states = self._shear_flow()

    k_constant = constant.calculate_diffusivities(self.deriv_lib, states)
    k_varying = varying.calculate_diffusivities(self.deriv_lib, states)

    np.testing.assert_allclose(
        test_util.interior(k_constant.viscosity, self.grid),
        0.09 * _SHEAR,
        rtol=1e-10,
    )
    np.testing.assert_allclose(
        test_util.interior(k_varying.viscosity, self.grid),
        test_util.interior((0.1 * self.z) ** 2 * _SHEAR, self.grid),
        rtol=1e-10,
    )

  def testConstantSmagorinskyIsSmagorinskyLilly(self):
    self.assertIs(smagorinsky.ConstantSmagorinsky, smagorinsky.SmagorinskyLilly)


if __name__ == '__main__':
  absltest.main()
