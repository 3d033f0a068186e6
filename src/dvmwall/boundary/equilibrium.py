"""
Equilibrium (Maxwellian) Shapes

The wall closure only needs the equilibrium distribution per unit
density, evaluated on the discrete velocities at the wall temperature.
It is injected as a pure function

    equilibrium(xi, T) -> ndarray (n_vel,) or (n_vel, n_components)

so solvers with reduced distributions (e.g. a mass and an energy
population) can supply their own. make_maxwellian() builds the standard
one.
"""

import math

import numpy as np
from numba import njit


@njit
def maxwellian_shape(xi, T, R, dim):
    """
    Unit-density Maxwellian at rest (Numba-compiled).

    f(xi) = (2 pi R T)^(-dim/2) exp(-|xi|^2 / (2 R T))

    Args:
        xi: Discrete velocities, shape (n_vel, 3) [m/s]
        T: Temperature [K]
        R: Specific gas constant [J/(kg·K)]
        dim: Velocity-space dimension

    Returns:
        shape: shape (n_vel,)
    """
    n_vel = xi.shape[0]
    two_RT = 2.0 * R * T
    norm = (math.pi * two_RT) ** (-0.5 * dim)

    shape = np.empty(n_vel, dtype=np.float64)
    for i in range(n_vel):
        c2 = xi[i, 0]**2 + xi[i, 1]**2 + xi[i, 2]**2
        shape[i] = norm * math.exp(-c2 / two_RT)

    return shape


def make_maxwellian(R, dim=3):
    """
    Build the injected equilibrium function for a single-species gas.

    Args:
        R: Specific gas constant [J/(kg·K)]
        dim: Velocity-space dimension (1, 2 or 3)

    Returns:
        Callable equilibrium(xi, T) -> ndarray (n_vel,)
    """
    if dim not in (1, 2, 3):
        raise ValueError(f"Velocity-space dimension must be 1, 2 or 3, got {dim}")
    R = float(R)

    def equilibrium(xi, T):
        return maxwellian_shape(xi, float(T), R, dim)

    equilibrium.__name__ = f"maxwellian_R{R:.4g}_{dim}d"
    return equilibrium


def evaluate_shape(equilibrium, xi, T, n_components):
    """
    Call an injected equilibrium function and normalise its output.

    Args:
        equilibrium: Callable (xi, T) -> (n_vel,) or (n_vel, n_components)
        xi: Discrete velocities, shape (n_vel, 3)
        T: Temperature [K]
        n_components: Components expected per direction

    Returns:
        shape: ndarray (n_vel, n_components)

    Raises:
        ValueError: If the returned array does not fit the catalog
    """
    values = np.asarray(equilibrium(xi, T), dtype=np.float64)
    n_vel = xi.shape[0]

    if values.ndim == 1:
        values = values[:, np.newaxis]
    if values.shape != (n_vel, n_components):
        raise ValueError(
            f"Equilibrium function returned shape {values.shape}, "
            f"expected ({n_vel}, {n_components})"
        )

    return values
