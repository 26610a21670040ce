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

"""Tests for grid_parametrization."""

from absl.testing import absltest
from absl.testing import parameterized
import jax
import jax.numpy as jnp
import numpy as np
from swirl_ocean.utility import grid_parametrization

jax.config.update('jax_enable_x64', True)

GridParametrization = grid_parametrization.GridParametrization
Location = grid_parametrization.Location
Topology = grid_parametrization.Topology


class GridParametrizationTest(parameterized.TestCase):

  def setUp(self):
    super().setUp()
    self.grid = GridParametrization(
        size=(4, 5, 6),
        length=(1.0, 2.0, 3.0),
        halo_width=2,
        dtype=jnp.float64,
    )

  def testShapeIncludesTheHalos(self):
    self.assertEqual(self.grid.shape, (8, 9, 10))
    self.assertEqual(self.grid.size, (4, 5, 6))
    self.assertEqual(self.grid.halo_width, (2, 2, 2))
    self.assertEqual(self.grid.plane_shape('y'), (8, 10))

  def testSpacingsAreLengthOverSize(self):
    np.testing.assert_allclose(self.grid.grid_spacings, (0.25, 0.4, 0.5))
    self.assertAlmostEqual(self.grid.min_spacing, 0.25)
    self.assertAlmostEqual(self.grid.dz, 0.5)

  def testDefaultTopologyIsBoundedInZ(self):
    self.assertTrue(self.grid.is_periodic('x'))
    self.assertTrue(self.grid.is_periodic('y'))
    self.assertTrue(self.grid.is_bounded('z'))
    self.assertEqual(self.grid.topology('z'), Topology.BOUNDED)

  def testZCoordinatesSpanTheDepthBelowTheSurface(self):
    """The first interior face in z is the bottom, face h + n the surface."""
    z_c = self.grid.node_coordinates('z', Location.CENTER)
    z_f = self.grid.node_coordinates('z', Location.FACE)

    self.assertLen(z_c, 10)
    self.assertAlmostEqual(float(z_f[2]), -3.0)
    self.assertAlmostEqual(float(z_f[8]), 0.0)
    self.assertAlmostEqual(float(z_c[2]), -2.75)
    self.assertAlmostEqual(float(z_c[7]), -0.25)

  def testHorizontalCoordinatesStartAtZero(self):
    x_c = self.grid.node_coordinates('x', Location.CENTER)
    np.testing.assert_allclose(
        x_c, [-0.375, -0.125, 0.125, 0.375, 0.625, 0.875, 1.125, 1.375]
    )

  def testMeshgridBroadcastsToTheFieldShape(self):
    x, y, z = self.grid.meshgrid(
        (Location.FACE, Location.CENTER, Location.CENTER)
    )
    self.assertEqual(x.shape, (8, 1, 1))
    self.assertEqual(y.shape, (1, 9, 1))
    self.assertEqual(z.shape, (1, 1, 10))
    self.assertEqual(
        jnp.broadcast_shapes(x.shape, y.shape, z.shape), (8, 9, 10)
    )

  def testFlipLocationTogglesOneAxis(self):
    location = (Location.CENTER, Location.CENTER, Location.FACE)
    self.assertEqual(
        grid_parametrization.flip_location(location, 'x'),
        (Location.FACE, Location.CENTER, Location.FACE),
    )
    self.assertEqual(
        grid_parametrization.flip_location(location, 'z'),
        (Location.CENTER, Location.CENTER, Location.CENTER),
    )

  @parameterized.named_parameters(
      ('NonPositiveSize', dict(size=(4, 0, 4), length=1.0)),
      ('NonPositiveLength', dict(size=4, length=(1.0, -1.0, 1.0))),
      ('TooFewCellsForTheHalo', dict(size=(4, 4, 1), length=1.0, halo_width=2)),
      ('WrongNumberOfEntries', dict(size=(4, 4), length=1.0)),
  )
  def testInvalidGridRaisesValueError(self, kwargs):
    with self.assertRaises(ValueError):
      GridParametrization(**kwargs)

  def testInvalidAxisRaisesValueError(self):
    with self.assertRaisesRegex(ValueError, '`axis` must be one of'):
      self.grid.get_axis_index('t')


if __name__ == '__main__':
  absltest.main()
