"""
Boundary-Condition Selection

The set of patch-field variants is closed; a configuration type tag
picks one at patch-construction time.
"""

from ..config import PatchConfig
from .fixed_gradient import FixedGradientBoundaryField
from .maxwell import MaxwellBoundaryField
from .specular import SpecularBoundaryField

PATCH_FIELD_TYPES = {
    "maxwell": MaxwellBoundaryField,
    "calculatedMaxwell": MaxwellBoundaryField,
    "specular": SpecularBoundaryField,
    "fixedGradient": FixedGradientBoundaryField,
}


def new_patch_field(config, patch, velocity_space, equilibrium=None, n_components=None):
    """
    Construct the patch field named by a configuration entry.

    Args:
        config: PatchConfig or plain dict with a 'type' key
        patch: BoundaryPatch
        velocity_space: VelocitySpace
        equilibrium: Optional injected equilibrium(xi, T) function
        n_components: Components per direction (None = scalar)

    Returns:
        PatchField instance

    Raises:
        ValueError: If the type tag is unknown
    """
    if isinstance(config, dict):
        config = PatchConfig.from_dict(config)

    if config.type not in PATCH_FIELD_TYPES:
        raise ValueError(
            f"Unknown boundary condition: {config.type}. "
            f"Use: {list(PATCH_FIELD_TYPES.keys())}"
        )

    cls = PATCH_FIELD_TYPES[config.type]
    return cls.from_config(config, patch, velocity_space,
                           equilibrium=equilibrium, n_components=n_components)
