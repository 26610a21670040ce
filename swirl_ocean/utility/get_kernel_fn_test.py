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

"""Tests for get_kernel_fn."""

from absl.testing import absltest
from absl.testing import parameterized
import jax
import jax.numpy as jnp
import numpy as np
from swirl_ocean.utility import get_kernel_fn
from swirl_ocean.utility import test_util

jax.config.update('jax_enable_x64', True)

# Indices along the stencil axis where no stencil reaches past the array.
_INNER = np.arange(2, 6)


class GetKernelFnTest(parameterized.TestCase):

  def setUp(self):
    super().setUp()
    self.grid = test_util.make_grid(size=(4, 4, 4), halo_width=2)
    self.kernel_op = get_kernel_fn.ApplyKernelSliceOp(self.grid)

  def _polynomial(self, axis, power):
    i = jnp.arange(self.grid.shape[0], dtype=jnp.float64) ** power
    shape = [1, 1, 1]
    shape[self.grid.get_axis_index(axis)] = -1
    return jnp.broadcast_to(i.reshape(shape), self.grid.shape)

  @parameterized.product(
      (
          dict(name='ks', expected=lambda i: (i - 1) ** 2 + i**2),
          dict(name='ks+', expected=lambda i: i**2 + (i + 1) ** 2),
          dict(name='kD', expected=lambda i: 4 * i),
          dict(name='kd', expected=lambda i: 2 * i - 1),
          dict(name='kd+', expected=lambda i: 2 * i + 1),
          dict(name='kdd', expected=lambda i: 2 + 0 * i),
      ),
      axis=('x', 'y', 'z'),
  )
  def testStencilsOnAQuadratic(self, name, expected, axis):
    result = self.kernel_op.apply_kernel_op(
        self._polynomial(axis, 2), name, axis
    )

    result = np.moveaxis(
        np.asarray(result), self.grid.get_axis_index(axis), 0
    )
    np.testing.assert_allclose(
        result[_INNER],
        np.broadcast_to(
            expected(_INNER.astype(float))[:, np.newaxis, np.newaxis],
            result[_INNER].shape,
        ),
    )

  def testUnknownStencilRaisesValueError(self):
    with self.assertRaisesRegex(ValueError, 'Unknown stencil'):
      self.kernel_op.apply_kernel_op(
          jnp.zeros(self.grid.shape), 'kx', 'x'
      )


if __name__ == '__main__':
  absltest.main()
