"""
Physical Constants, Gas Properties and Numerical Defaults

All units in SI unless otherwise noted.
"""

import numpy as np

# ==================== FUNDAMENTAL CONSTANTS ====================

kB = 1.380649e-23  # Boltzmann constant [J/K]
AMU = 1.66053906660e-27  # Atomic mass unit [kg]

# ==================== GAS DATABASE ====================

class GasData:
    """
    Properties of a neutral gas species.

    Attributes:
        mass: Molecular mass [kg]
    """

    def __init__(self, mass):
        self.mass = mass

    @property
    def R(self):
        """Specific gas constant kB/m [J/(kg·K)]."""
        return kB / self.mass


GASES = {
    'Ar': GasData(mass=39.948 * AMU),
    'He': GasData(mass=4.0026 * AMU),
    'N2': GasData(mass=28.014 * AMU),
    'O2': GasData(mass=32.0 * AMU),
    'O': GasData(mass=16.0 * AMU),
}

# ==================== NUMERICAL DEFAULTS ====================

# Below this magnitude the equilibrium emitted flux per unit density is
# treated as zero and the wall density closure fails.
DEFAULT_FLUX_FLOOR = 1e-300

# Initial wall density used to normalise the incoming populations before
# the first evaluation.
DEFAULT_RHO_WALL = 1.0

# Reference conditions for non-dimensional velocity catalogs
T_REF = 300.0  # [K]


# ==================== UTILITY FUNCTIONS ====================

def gas_constant(gas):
    """
    Specific gas constant of a species.

    Args:
        gas: Species name (key of GASES) or molecular mass [kg]

    Returns:
        R: kB / m [J/(kg·K)]

    Raises:
        ValueError: If the species is unknown
    """
    if isinstance(gas, str):
        if gas not in GASES:
            raise ValueError(f"Unknown gas: {gas}. Use: {list(GASES.keys())}")
        return GASES[gas].R
    return kB / gas


def thermal_velocity(T, R):
    """
    Most probable thermal speed sqrt(2RT).

    Args:
        T: Temperature [K]
        R: Specific gas constant [J/(kg·K)]

    Returns:
        v_th: Thermal velocity [m/s]
    """
    return np.sqrt(2.0 * R * T)


# ==================== CONSTANTS SUMMARY ====================

if __name__ == "__main__":
    print("=" * 60)
    print("DVMWall Gas Properties")
    print("=" * 60)

    print(f"\n  Boltzmann constant: kB = {kB:.6e} J/K")
    print(f"  Atomic mass unit:   AMU = {AMU:.6e} kg")

    print("\nGas Database:")
    for name, data in GASES.items():
        print(f"  {name:3s}: m = {data.mass/AMU:6.2f} AMU, "
              f"R = {data.R:8.2f} J/(kg K), "
              f"v_th(300 K) = {thermal_velocity(T_REF, data.R):7.1f} m/s")
    print("=" * 60)
