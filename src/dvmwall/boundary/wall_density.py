"""
Wall Density Closure

A diffuse wall neither stores nor emits net mass, so the emitted
equilibrium flux must cancel the incoming flux exactly:

    rho_wall * E(T_wall) + F_in = 0   =>   rho_wall = -F_in / E(T_wall)

where F_in > 0 is the mass flux into the wall and E < 0 is the flux of
the equilibrium shape (unit density) over the emitted directions.
"""

import numpy as np

from ..constants import DEFAULT_FLUX_FLOOR
from ..errors import DegenerateWallFlux


def solve_wall_density(incoming_flux, equilibrium_flux_per_density, wall_temperature,
                       flux_floor=DEFAULT_FLUX_FLOOR):
    """
    Wall number density that zeroes the net mass flux of one face.

    Args:
        incoming_flux: Mass flux into the wall (positive)
        equilibrium_flux_per_density: Emitted flux of the unit-density
            equilibrium shape (negative)
        wall_temperature: Wall temperature [K]
        flux_floor: Smallest admissible |equilibrium_flux_per_density|

    Returns:
        rho_wall: Enforced wall density

    Raises:
        DegenerateWallFlux: If |equilibrium flux| < flux_floor or the
            wall temperature is not positive
    """
    if not wall_temperature > 0.0:
        raise DegenerateWallFlux(
            f"wall temperature {wall_temperature} K is not positive"
        )
    if not abs(equilibrium_flux_per_density) >= flux_floor:
        raise DegenerateWallFlux(
            f"equilibrium emitted flux {equilibrium_flux_per_density:.3e} "
            f"is below the floor {flux_floor:.3e}"
        )

    return -incoming_flux / equilibrium_flux_per_density


def check_wall_temperature(wall_temperature, active, patch=None):
    """
    Reject non-positive wall temperatures on active faces.

    Raises:
        DegenerateWallFlux: Naming the offending faces, step "equilibrium shape"
    """
    wall_temperature = np.asarray(wall_temperature, dtype=np.float64)
    cold = np.asarray(active, dtype=np.bool_) & ~(wall_temperature > 0.0)
    if np.any(cold):
        faces = np.flatnonzero(cold)
        raise DegenerateWallFlux(
            f"wall temperature {wall_temperature[faces[0]]} K is not positive",
            patch=patch, faces=faces, step="equilibrium shape",
        )


def solve_patch_wall_density(incoming_flux, equilibrium_flux_per_density, wall_temperature,
                             active, flux_floor=DEFAULT_FLUX_FLOOR, patch=None,
                             check_temperature=True):
    """
    Vectorised closure for all active faces of a patch.

    Args:
        incoming_flux: shape (n_faces,)
        equilibrium_flux_per_density: shape (n_faces,)
        wall_temperature: shape (n_faces,) [K]
        active: Faces to solve, shape (n_faces,); others return 0
        flux_floor: Smallest admissible |equilibrium flux|
        patch: Patch name for diagnostics
        check_temperature: Reject non-positive wall temperatures; callers
            that already ran check_wall_temperature() pass False

    Returns:
        rho_wall: shape (n_faces,)

    Raises:
        DegenerateWallFlux: Naming every failing face of the patch
    """
    incoming_flux = np.asarray(incoming_flux, dtype=np.float64)
    eq = np.asarray(equilibrium_flux_per_density, dtype=np.float64)
    wall_temperature = np.asarray(wall_temperature, dtype=np.float64)
    active = np.asarray(active, dtype=np.bool_)

    if check_temperature:
        check_wall_temperature(wall_temperature, active, patch)

    flat = active & ~(np.abs(eq) >= flux_floor)
    if np.any(flat):
        faces = np.flatnonzero(flat)
        raise DegenerateWallFlux(
            f"equilibrium emitted flux {eq[faces[0]]:.3e} "
            f"is below the floor {flux_floor:.3e}",
            patch=patch, faces=faces,
        )

    rho_wall = np.zeros_like(incoming_flux)
    rho_wall[active] = -incoming_flux[active] / eq[active]
    return rho_wall
