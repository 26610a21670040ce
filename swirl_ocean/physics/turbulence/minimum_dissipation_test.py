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

"""Tests for minimum_dissipation."""

from absl.testing import absltest
from absl.testing import parameterized
import jax
import jax.numpy as jnp
import numpy as np
from swirl_ocean.physics.turbulence import minimum_dissipation
from swirl_ocean.utility import test_util

jax.config.update('jax_enable_x64', True)

_SHAPE = (4, 4, 4)


def _diagonal_gradient(a, b, c):
  """A velocity gradient tensor diag(a, b, c) of constant fields."""
  values = ((a, 0.0, 0.0), (0.0, b, 0.0), (0.0, 0.0, c))
  return tuple(
      tuple(jnp.full(_SHAPE, g) for g in row) for row in values
  )


def _vector(x, y, z):
  return tuple(jnp.full(_SHAPE, g) for g in (x, y, z))


class MinimumDissipationTest(parameterized.TestCase):

  @parameterized.parameters(0, 1, 2)
  def testEddyCoefficientsAreNonNegative(self, seed):
    rng = np.random.default_rng(seed)
    grad_u = tuple(
        tuple(jnp.asarray(rng.normal(size=_SHAPE)) for _ in range(3))
        for _ in range(3)
    )
    grad_c = tuple(jnp.asarray(rng.normal(size=_SHAPE)) for _ in range(3))

    nu_e = minimum_dissipation.amd_viscosity(
        grad_u, grad_c, (0.1, 0.2, 0.3), 1.0 / 12.0, 1.0
    )
    kappa_e = minimum_dissipation.amd_diffusivity(
        grad_u, grad_c, (0.1, 0.2, 0.3), 1.0 / 12.0
    )

    self.assertGreaterEqual(float(jnp.min(nu_e)), 0.0)
    self.assertGreaterEqual(float(jnp.min(kappa_e)), 0.0)
    self.assertGreater(float(jnp.max(nu_e)), 0.0)

  def testVanishingGradientsGiveZero(self):
    grad_u = _diagonal_gradient(0.0, 0.0, 0.0)
    zero = _vector(0.0, 0.0, 0.0)

    np.testing.assert_array_equal(
        minimum_dissipation.amd_viscosity(grad_u, zero, (1.0,) * 3, 1.0, 1.0),
        0.0,
    )
    np.testing.assert_array_equal(
        minimum_dissipation.amd_diffusivity(
            _diagonal_gradient(1.0, 1.0, -2.0), zero, (1.0,) * 3, 1.0
        ),
        0.0,
    )

  @parameterized.parameters((1.0, 0.5), (2.0, 1.0), (-1.0, 0.0))
  def testAxisymmetricStrain(self, a, expected):
    """With G = diag(a, a, -2a) and unit weights, νₑ = C max(a, 0)."""
    nu_e = minimum_dissipation.amd_viscosity(
        _diagonal_gradient(a, a, -2.0 * a), None, (1.0,) * 3, 0.5, None
    )

    np.testing.assert_allclose(nu_e, expected, rtol=1e-12)

  def testStableStratificationReducesTheViscosity(self):
    grad_u = _diagonal_gradient(1.0, 1.0, -2.0)
    grad_b = _vector(0.0, 0.0, 1.0)

    nu_e = minimum_dissipation.amd_viscosity(
        grad_u, grad_b, (1.0,) * 3, 1.0, 1.0
    )

    np.testing.assert_allclose(nu_e, 4.0 / 6.0, rtol=1e-12)

  @parameterized.parameters((-1.0, 0.25), (1.0, 0.0))
  def testTracerDiffusivityOfAxisymmetricStrain(self, a, expected):
    """With ∇c along x, κₑ = C max(-a, 0)."""
    kappa_e = minimum_dissipation.amd_diffusivity(
        _diagonal_gradient(a, a, -2.0 * a),
        _vector(3.0, 0.0, 0.0),
        (1.0,) * 3,
        0.25,
    )

    np.testing.assert_allclose(kappa_e, expected, rtol=1e-12)

  def testWeights(self):
    grid = test_util.make_grid(size=(4, 2, 8), length=(1.0, 1.0, 1.0))

    np.testing.assert_allclose(
        minimum_dissipation.verstappen_weights(grid),
        (3.0 / (16.0 + 4.0 + 64.0),) * 3,
    )
    np.testing.assert_allclose(
        minimum_dissipation.rozema_weights(grid),
        (1.0 / 16.0, 1.0 / 4.0, 1.0 / 64.0),
    )

  def testAliases(self):
    self.assertIs(
        minimum_dissipation.AnisotropicMinimumDissipation,
        minimum_dissipation.VerstappenAnisotropicMinimumDissipation,
    )
    self.assertIs(
        minimum_dissipation.RozemaAMD,
        minimum_dissipation.RozemaAnisotropicMinimumDissipation,
    )


if __name__ == '__main__':
  absltest.main()
