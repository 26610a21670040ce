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

"""Tests for tendencies, tendency_fields and forcing."""

from absl.testing import absltest
from absl.testing import parameterized
import jax
import jax.numpy as jnp
import numpy as np
from swirl_ocean.base import parameters
from swirl_ocean.boundary_condition import boundary_conditions
from swirl_ocean.equations import forcing
from swirl_ocean.equations import hydrostatic_pressure
from swirl_ocean.equations import tendencies
from swirl_ocean.equations import tendency_fields
from swirl_ocean.numerics import derivatives
from swirl_ocean.physics import buoyancy
from swirl_ocean.physics import coriolis
from swirl_ocean.physics import surface_waves
from swirl_ocean.physics.turbulence import closures
from swirl_ocean.utility import get_kernel_fn
from swirl_ocean.utility import grid_parametrization
from swirl_ocean.utility import test_util

jax.config.update('jax_enable_x64', True)

Location = grid_parametrization.Location

_H = 1
_N = 4


class TendenciesTest(parameterized.TestCase):

  def setUp(self):
    super().setUp()
    self.grid = test_util.make_grid(
        size=(_N, _N, _N), length=(1.0, 1.0, 2.0)
    )
    self.deriv_lib = derivatives.Derivatives(
        get_kernel_fn.ApplyKernelSliceOp(self.grid), self.grid
    )

  def _coordinates(self, axis, location=Location.CENTER):
    return jnp.broadcast_to(
        self.grid.broadcastable_coordinates(axis, location), self.grid.shape
    )

  def _evaluate(self, params, states, time=0.0):
    """Computes the interior tendencies of all fields."""
    states = boundary_conditions.fill_halo_regions(
        states, self.grid, params.boundary_conditions, time
    )
    k = closures.calculate_diffusivities(
        params.closure, self.deriv_lib, states, params.buoyancy
    )
    p = hydrostatic_pressure.update_hydrostatic_pressure(
        params.buoyancy, self.deriv_lib, states
    )
    result = {
        name: tendencies.velocity_tendency(
            dim, params, self.deriv_lib, states, k, p, time
        )
        for dim, name in zip(('x', 'y', 'z'), ('u', 'v', 'w'))
    }
    for name in params.tracers:
      result[name] = tendencies.tracer_tendency(
          name, params, self.deriv_lib, states, k, time
      )
    return result

  def testFluidAtRestHasNoTendency(self):
    params = parameters.ModelParameters.create(
        self.grid,
        tracers=('b',),
        closure={'type': 'SmagorinskyLilly'},
        coriolis=coriolis.FPlane(f=1e-4),
        buoyancy=buoyancy.BuoyancyTracer(),
    )

    result = self._evaluate(params, test_util.zero_states(self.grid, ('b',)))

    for name, value in result.items():
      np.testing.assert_array_equal(value, 0.0, err_msg=name)

  def testCoriolisForcesTheHorizontalVelocity(self):
    params = parameters.ModelParameters.create(
        self.grid, coriolis=coriolis.FPlane(f=1e-4)
    )
    states = test_util.zero_states(self.grid)
    states['v'] = jnp.full(self.grid.shape, 0.5)

    result = self._evaluate(params, states)

    interior = np.s_[_H:_H + _N, _H:_H + _N, _H:_H + _N]
    np.testing.assert_allclose(result['u'][interior], 5e-5, rtol=1e-12)
    np.testing.assert_allclose(result['v'][interior], 0.0, atol=1e-15)
    np.testing.assert_array_equal(result['u'][0], 0.0)
    np.testing.assert_array_equal(result['u'][..., 0], 0.0)

  def testBuoyancyForcesTheVerticalVelocityWithoutAnomaly(self):
    params = parameters.ModelParameters.create(
        self.grid, tracers=('b',), buoyancy=buoyancy.BuoyancyTracer()
    )
    states = test_util.zero_states(self.grid, ('b',))
    states['b'] = jnp.sin(2.0 * np.pi * self._coordinates('x'))

    result = self._evaluate(params, states)

    np.testing.assert_allclose(
        result['w'][_H:_H + _N, _H:_H + _N, _H + 1:_H + _N],
        states['b'][_H:_H + _N, _H:_H + _N, _H + 1:_H + _N],
        rtol=1e-12,
        atol=1e-14,
    )
    np.testing.assert_array_equal(result['w'][..., _H], 0.0)
    np.testing.assert_array_equal(result['u'], 0.0)
    np.testing.assert_array_equal(result['v'], 0.0)

  def testPressureGradientForcesTheHorizontalVelocityWithAnomaly(self):
    params = parameters.ModelParameters.create(
        self.grid,
        tracers=('b',),
        buoyancy=buoyancy.BuoyancyTracer(),
        hydrostatic_pressure_anomaly=True,
    )
    states = test_util.zero_states(self.grid, ('b',))
    states['b'] = jnp.sin(2.0 * np.pi * self._coordinates('x'))

    result = self._evaluate(params, states)

    # pHY′ = b z⁻ where z⁻ is the lower face of the cell.
    dx = self.grid.dx
    x_f = self._coordinates('x', Location.FACE)
    z_f = self._coordinates('z', Location.FACE)
    expected = (
        -z_f * 2.0 * jnp.cos(2.0 * np.pi * x_f) * np.sin(np.pi * dx) / dx
    )
    np.testing.assert_allclose(
        test_util.interior(result['u'], self.grid),
        test_util.interior(expected, self.grid),
        rtol=1e-10,
        atol=1e-12,
    )
    np.testing.assert_allclose(
        test_util.interior(result['v'], self.grid), 0.0, atol=1e-12
    )
    np.testing.assert_array_equal(result['w'], 0.0)

  def testForcingAndStokesDriftAreAdded(self):
    params = parameters.ModelParameters.create(
        self.grid,
        tracers=('T',),
        surface_waves=surface_waves.UniformStokesDrift(
            dt_us=lambda z, t: 1e-3 * jnp.ones_like(z)
        ),
        forcing={
            'T': lambda x, y, z, t: t * z,
            'v': forcing.Forcing(
                lambda grid, t, states, c: c * jnp.ones(grid.shape),
                discrete_form=True,
                parameters=-2.0,
            ),
        },
    )

    result = self._evaluate(
        params, test_util.zero_states(self.grid, ('T',)), time=3.0
    )

    np.testing.assert_allclose(
        test_util.interior(result['u'], self.grid), 1e-3, rtol=1e-12
    )
    np.testing.assert_allclose(
        test_util.interior(result['v'], self.grid), -2.0, rtol=1e-12
    )
    np.testing.assert_allclose(
        test_util.interior(result['T'], self.grid),
        test_util.interior(3.0 * self._coordinates('z'), self.grid),
        rtol=1e-12,
    )
    np.testing.assert_array_equal(result['T'][..., 0], 0.0)

  def testDisabledAdvectionLeavesOnlyDiffusion(self):
    params = parameters.ModelParameters.create(
        self.grid,
        tracers=('T',),
        advection=None,
        closure={'type': 'IsotropicDiffusivity', 'nu': 0.0, 'kappa': 0.1},
    )
    states = test_util.zero_states(self.grid, ('T',))
    states['u'] = jnp.ones(self.grid.shape)
    states['T'] = jnp.sin(2.0 * np.pi * self._coordinates('y'))

    result = self._evaluate(params, states)

    dy = self.grid.dy
    rate = 4.0 * 0.1 * np.sin(np.pi * dy) ** 2 / dy**2
    np.testing.assert_allclose(
        test_util.interior(result['T'], self.grid),
        test_util.interior(-rate * states['T'], self.grid),
        atol=1e-12,
    )
    np.testing.assert_array_equal(result['u'], 0.0)


class TendencyFieldsTest(absltest.TestCase):

  def testInitializeAndStoreTendencies(self):
    grid = test_util.make_grid(size=(2, 3, 4))
    g = tendency_fields.initialize_tendencies(grid, ('u', 'v', 'w', 'T'))

    self.assertSameElements(g.keys(), ('u', 'v', 'w', 'T'))
    for value in g.values():
      self.assertEqual(value.shape, grid.shape)
      np.testing.assert_array_equal(value, 0.0)

    g['T'] = g['T'] + 1.0
    stored = tendency_fields.store_tendencies(g)
    self.assertIsNot(stored, g)
    self.assertIsNot(stored['T'], g['T'])
    np.testing.assert_array_equal(stored['T'], g['T'])


class ForcingTest(absltest.TestCase):

  def setUp(self):
    super().setUp()
    self.grid = test_util.make_grid(size=(2, 3, 4))

  def testContinuousForcingIsEvaluatedAtTheFieldLocation(self):
    value = forcing.Forcing(
        lambda x, y, z, t, p: p * x + t, parameters=2.0
    ).evaluate(self.grid, 'u', 1.0, {})

    x_f = self.grid.broadcastable_coordinates('x', Location.FACE)
    self.assertEqual(value.shape, self.grid.shape)
    np.testing.assert_allclose(
        value, jnp.broadcast_to(2.0 * x_f + 1.0, self.grid.shape), rtol=1e-12
    )

  def testRegularizeWrapsFunctions(self):
    func = lambda x, y, z, t: 0.0
    table = forcing.regularize_forcing(('u', 'T'), {'T': func})

    self.assertEqual(table, {'T': forcing.Forcing(func)})

  def testRegularizeRejectsUnknownFieldsAndValues(self):
    with self.assertRaisesRegex(ValueError, 'nonexistent field'):
      forcing.regularize_forcing(('u',), {'S': lambda x, y, z, t: 0.0})
    with self.assertRaises(TypeError):
      forcing.regularize_forcing(('u',), {'u': 1.0})


if __name__ == '__main__':
  absltest.main()
