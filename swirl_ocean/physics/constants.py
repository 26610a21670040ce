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

"""A library of commonly used physical constants."""

# The molecular kinematic viscosity of seawater, in units of m²/s.
NU_0 = 1.05e-6

# The molecular thermal diffusivity of seawater, in units of m²/s.
KAPPA_0 = 1.46e-7

# The standard gravitational acceleration, in units of m/s².
G_EARTH = 9.80665

# The rotation rate of the Earth, in units of rad/s.
OMEGA_EARTH = 7.292115e-5

# The mean radius of the Earth, in units of m.
R_EARTH = 6371.0e3

# The thermal expansion coefficient of the linear equation of state, in 1/K.
ALPHA_LINEAR = 1.67e-4

# The haline contraction coefficient of the linear equation of state, in
# 1/psu.
BETA_LINEAR = 7.80e-4
