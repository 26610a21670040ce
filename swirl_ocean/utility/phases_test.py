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

"""Tests for phases."""

from absl.testing import absltest
import jax
import jax.numpy as jnp
import numpy as np
from swirl_ocean.utility import phases

jax.config.update('jax_enable_x64', True)


class PhasesTest(absltest.TestCase):

  def testLaunchCallsEveryKernelWithTheSameArguments(self):
    kernels = {
        'sum': jax.jit(lambda a, b: a + b),
        'product': jax.jit(lambda a, b: a * b),
    }

    outputs = phases.launch(kernels, jnp.asarray(2.0), jnp.asarray(3.0))

    self.assertSameElements(outputs.keys(), ('sum', 'product'))
    np.testing.assert_allclose(outputs['sum'], 5.0)
    np.testing.assert_allclose(outputs['product'], 6.0)

  def testBarrierRecordsCompletedPhases(self):
    barrier = phases.Barrier()
    outputs = {'a': jnp.ones(3), 'b': None}

    returned = barrier.wait('first', outputs)
    barrier.wait('second', jnp.zeros(2))

    self.assertIs(returned['b'], None)
    np.testing.assert_array_equal(returned['a'], 1.0)
    self.assertEqual(barrier.completed_phases, ['first', 'second'])
    barrier.reset()
    self.assertEqual(barrier.completed_phases, [])

  def testCpuDevice(self):
    self.assertEqual(
        phases.get_device(phases.Architecture.CPU).platform, 'cpu'
    )


if __name__ == '__main__':
  absltest.main()
