"""
DVMWall: Kinetic Wall Boundary Conditions for Discrete-Velocity Gas Solvers

Diffuse (Maxwell) wall closure with zero net mass flux, direction
classification, flux moments and the patch-field mapping protocol used
when the mesh topology changes.

Authors: AeriSat Systems CTO Office
Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "AeriSat Systems"

from .constants import kB, GASES, gas_constant
from .errors import DVMWallError, IndexOutOfRange, DegenerateWallFlux, MappingIndexError
from .velocity import VelocitySpace, gauss_hermite, uniform
from .mesh import BoundaryPatch
from .boundary.equilibrium import make_maxwellian

__all__ = [
    "kB",
    "GASES",
    "gas_constant",
    "DVMWallError",
    "IndexOutOfRange",
    "DegenerateWallFlux",
    "MappingIndexError",
    "VelocitySpace",
    "gauss_hermite",
    "uniform",
    "BoundaryPatch",
    "make_maxwellian",
]
