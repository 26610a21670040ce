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

"""Tests for boundary_conditions."""

from absl.testing import absltest
from absl.testing import parameterized
import jax
import jax.numpy as jnp
import numpy as np
from swirl_ocean.boundary_condition import boundary_conditions as bc_lib
from swirl_ocean.equations import common
from swirl_ocean.utility import test_util

jax.config.update('jax_enable_x64', True)

BCType = bc_lib.BCType
FieldBoundaryConditions = bc_lib.FieldBoundaryConditions
SideType = bc_lib.SideType

_NAMES = ('u', 'v', 'w', 'T')


class BoundaryConditionsTest(parameterized.TestCase):

  def setUp(self):
    super().setUp()
    self.grid = test_util.make_grid(size=(4, 4, 4), length=(1.0, 1.0, 2.0))
    self.field = jnp.asarray(
        np.random.default_rng(7).normal(size=self.grid.shape)
    )

  def testRegularizeFillsInDefaultsFromTheTopology(self):
    table = bc_lib.regularize_boundary_conditions(self.grid, _NAMES)

    self.assertSameElements(table.keys(), _NAMES)
    self.assertEqual(
        table['u'].get('x', SideType.LOWER).bc_type, BCType.PERIODIC
    )
    self.assertTrue(table['T'].get('z', SideType.UPPER).is_no_flux)
    self.assertTrue(table['u'].get('z', SideType.LOWER).is_no_flux)
    self.assertEqual(
        table['w'].get('z', SideType.UPPER).bc_type,
        BCType.NO_PENETRATION,
    )

  def testRegularizeKeepsUserConditions(self):
    top = bc_lib.flux_bc(1e-4)
    table = bc_lib.regularize_boundary_conditions(
        self.grid,
        _NAMES,
        {'T': FieldBoundaryConditions(z=(bc_lib.no_flux_bc(), top))},
    )

    self.assertIs(table['T'].get('z', SideType.UPPER), top)
    self.assertEqual(
        table['T'].get('y', SideType.UPPER).bc_type, BCType.PERIODIC
    )

  @parameterized.named_parameters(
      ('NonexistentField', {'S': FieldBoundaryConditions()}),
      ('NonPeriodicOnPeriodicAxis', {
          'T': FieldBoundaryConditions(
              x=(bc_lib.value_bc(1.0), bc_lib.periodic_bc()))
      }),
      ('WallNormalVelocityWithValue', {
          'w': FieldBoundaryConditions(
              z=(bc_lib.no_penetration_bc(), bc_lib.value_bc(0.0)))
      }),
      ('TangentialVelocityWithNoPenetration', {
          'u': FieldBoundaryConditions(
              z=(bc_lib.no_penetration_bc(), bc_lib.no_flux_bc()))
      }),
      ('PeriodicOnBoundedAxis', {
          'T': FieldBoundaryConditions(
              z=(bc_lib.periodic_bc(), bc_lib.periodic_bc()))
      }),
  )
  def testRegularizeRejectsInconsistentConditions(self, bcs):
    with self.assertRaises(ValueError):
      bc_lib.regularize_boundary_conditions(self.grid, _NAMES, bcs)

  def testRegularizeRejectsWrongTypes(self):
    with self.assertRaises(TypeError):
      bc_lib.regularize_boundary_conditions(
          self.grid, _NAMES, {'T': (bc_lib.no_flux_bc(),) * 2}
      )

  def testPeriodicHalosCopyTheOppositeInterior(self):
    filled = bc_lib.fill_halo_region(
        self.field, common.TRACER_LOCATION, self.grid
    )

    np.testing.assert_array_equal(filled[0], filled[4])
    np.testing.assert_array_equal(filled[5], filled[1])
    np.testing.assert_array_equal(filled[:, 0], filled[:, 4])
    np.testing.assert_array_equal(filled[:, 5], filled[:, 1])

  def testNoFluxHalosMirrorTheInterior(self):
    filled = bc_lib.fill_halo_region(
        self.field, common.TRACER_LOCATION, self.grid
    )

    np.testing.assert_array_equal(filled[..., 0], filled[..., 1])
    np.testing.assert_array_equal(filled[..., 5], filled[..., 4])
    np.testing.assert_array_equal(
        filled[1:5, 1:5, 1:5], self.field[1:5, 1:5, 1:5]
    )

  def testValueAndGradientHalosMatchTheCondition(self):
    bcs = FieldBoundaryConditions(
        x=(bc_lib.periodic_bc(),) * 2,
        y=(bc_lib.periodic_bc(),) * 2,
        z=(bc_lib.value_bc(3.0), bc_lib.gradient_bc(-2.0)),
    )

    filled = bc_lib.fill_halo_region(
        self.field, common.TRACER_LOCATION, self.grid, bcs
    )

    np.testing.assert_allclose(
        0.5 * (filled[..., 0] + filled[..., 1]), 3.0, rtol=1e-12
    )
    np.testing.assert_allclose(
        (filled[..., 5] - filled[..., 4]) / self.grid.dz, -2.0, rtol=1e-12
    )

  def testWallNormalVelocityVanishesOnWallsWithOddHalos(self):
    filled = bc_lib.fill_halo_region(self.field, common.W_LOCATION, self.grid)

    np.testing.assert_array_equal(filled[..., 1], 0.0)
    np.testing.assert_array_equal(filled[..., 5], 0.0)
    np.testing.assert_array_equal(filled[..., 0], -filled[..., 2])
    np.testing.assert_array_equal(
        filled[1:5, 1:5, 2:5], self.field[1:5, 1:5, 2:5]
    )

  def testFunctionConditionsAreEvaluatedOnTheBoundaryPlane(self):
    continuous = bc_lib.flux_bc(lambda x, y, t, p: p * x + y + t, parameters=2)
    discrete = bc_lib.flux_bc(
        lambda grid, t, states: states['T'][:, :, 1] * t, discrete_form=True
    )

    value = continuous.evaluate(
        self.grid, common.TRACER_LOCATION, 'z', 1.0, None
    )
    discrete_value = discrete.evaluate(
        self.grid, common.TRACER_LOCATION, 'z', 2.0, {'T': self.field}
    )

    x = self.grid.node_coordinates('x', bc_lib.Location.CENTER)
    y = self.grid.node_coordinates('y', bc_lib.Location.CENTER)
    self.assertEqual(value.shape, self.grid.plane_shape('z'))
    np.testing.assert_allclose(
        value, 2.0 * x[:, np.newaxis] + y[np.newaxis, :] + 1.0, rtol=1e-12
    )
    np.testing.assert_allclose(discrete_value, 2.0 * self.field[:, :, 1])

  def testConstantConditionIsBroadcastToThePlane(self):
    value = bc_lib.value_bc(1.5).evaluate(
        self.grid, common.TRACER_LOCATION, 'z', 0.0
    )

    self.assertEqual(value.shape, (6, 6))
    np.testing.assert_array_equal(value, 1.5)

  def testFillHaloRegionsFillsEveryField(self):
    table = bc_lib.regularize_boundary_conditions(self.grid, _NAMES)
    states = {name: self.field for name in _NAMES}

    filled = bc_lib.fill_halo_regions(states, self.grid, table)

    self.assertSameElements(filled.keys(), _NAMES)
    np.testing.assert_array_equal(filled['w'][..., 1], 0.0)
    np.testing.assert_array_equal(filled['T'][..., 0], filled['T'][..., 1])
    np.testing.assert_array_equal(filled['u'][0], filled['u'][4])


if __name__ == '__main__':
  absltest.main()
