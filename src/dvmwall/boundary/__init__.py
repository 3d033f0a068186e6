"""
Wall Boundary-Condition Module

Direction classification, flux moments, the wall density closure and
the patch fields built on them.
"""

from .classifier import classify, classify_face, classify_patch
from .moments import integrate, flux_moment, patch_flux_moment
from .wall_density import solve_wall_density, solve_patch_wall_density
from .equilibrium import make_maxwellian, maxwellian_shape
from .mapper import PatchMapper
from .patch_field import PatchField
from .maxwell import MaxwellBoundaryField
from .specular import SpecularBoundaryField
from .fixed_gradient import FixedGradientBoundaryField
from .selector import new_patch_field, PATCH_FIELD_TYPES

__all__ = [
    # Classification
    "classify",
    "classify_face",
    "classify_patch",
    # Moments
    "integrate",
    "flux_moment",
    "patch_flux_moment",
    # Closure
    "solve_wall_density",
    "solve_patch_wall_density",
    # Equilibrium
    "make_maxwellian",
    "maxwellian_shape",
    # Patch fields
    "PatchMapper",
    "PatchField",
    "MaxwellBoundaryField",
    "SpecularBoundaryField",
    "FixedGradientBoundaryField",
    "new_patch_field",
    "PATCH_FIELD_TYPES",
]
