"""
Boundary-Condition Configuration

Dataclass schema for per-patch boundary-condition parameters, loadable
from YAML or constructed programmatically:

    patches:
      lowerWall:
        type: maxwell
        T_wall: 300.0
        rho_wall: 1.0
        gas: N2
        dim: 3
"""

from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

from .constants import DEFAULT_FLUX_FLOOR, DEFAULT_RHO_WALL, gas_constant


@dataclass
class PatchConfig:
    """Parameters of one boundary patch."""

    type: str
    T_wall: Optional[float] = None         # Wall temperature [K]
    rho_wall: float = DEFAULT_RHO_WALL     # Initial wall density estimate
    flux_floor: float = DEFAULT_FLUX_FLOOR  # DegenerateWallFlux threshold
    gradient: Union[float, List[float]] = 0.0
    mass_component: int = 0

    # Default Maxwellian when no equilibrium function is injected
    gas: Optional[str] = None              # Species name, see constants.GASES
    R: Optional[float] = None              # Specific gas constant [J/(kg K)]
    dim: int = 3                           # Velocity-space dimension

    mirror_tolerance: float = 1e-9         # specular only
    new_face_fill: str = "average"         # average | zero

    def default_equilibrium(self):
        """Maxwellian built from gas / R, or None if neither is set."""
        from .boundary.equilibrium import make_maxwellian

        if self.R is not None:
            return make_maxwellian(self.R, self.dim)
        if self.gas is not None:
            return make_maxwellian(gas_constant(self.gas), self.dim)
        return None

    @classmethod
    def from_dict(cls, data: dict) -> "PatchConfig":
        if "type" not in data:
            raise ValueError(f"Patch entry without 'type': {data}")
        return _dict_to_dataclass(cls, data)

    def to_dict(self) -> dict:
        """Non-default entries only, 'type' first."""
        defaults = {f.name: f.default for f in fields(self)}
        out = {"type": self.type}
        for key, value in asdict(self).items():
            if key != "type" and value != defaults[key]:
                out[key] = value
        return out


@dataclass
class BoundaryConfig:
    """All boundary patches of a case, keyed by patch name."""

    patches: Dict[str, PatchConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "BoundaryConfig":
        entries = data.get("patches", data) if data else {}
        return cls(patches={
            name: PatchConfig.from_dict(entry) for name, entry in entries.items()
        })

    def to_dict(self) -> dict:
        return {"patches": {name: p.to_dict() for name, p in self.patches.items()}}


# ==================== YAML I/O ====================

def _coerce_type(value, field_type):
    """Coerce YAML scalars (e.g. "1e-12", "uniform 0") to the field type."""
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("uniform "):
            text = text[len("uniform "):].strip()
        numeric = field_type in (float, Optional[float], Union[float, List[float]])
        if numeric:
            try:
                return float(text)
            except ValueError:
                return value
        if field_type == int:
            try:
                return int(text)
            except ValueError:
                return value
    if field_type in (float, Optional[float]) and isinstance(value, int) \
            and not isinstance(value, bool):
        return float(value)
    return value


def _dict_to_dataclass(cls, data: dict):
    """Convert a dictionary to a dataclass instance, ignoring unknown keys."""
    field_types = {f.name: f.type for f in fields(cls)}
    kwargs = {}

    for key, value in data.items():
        if key not in field_types:
            continue  # Skip unknown fields
        kwargs[key] = _coerce_type(value, field_types[key])

    return cls(**kwargs)


def load_yaml(path: Union[str, Path]) -> BoundaryConfig:
    """
    Load boundary-condition configuration from a YAML file.

    Args:
        path: Path to YAML configuration file

    Returns:
        BoundaryConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If a patch entry has no type
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    return BoundaryConfig.from_dict(data)


def dump_yaml(config: Union[BoundaryConfig, dict], path: Union[str, Path]) -> None:
    """
    Write configuration (or a dict of patch write() outputs) to YAML.

    Args:
        config: BoundaryConfig, or {patch name: entries}
        path: Output file
    """
    data = config.to_dict() if isinstance(config, BoundaryConfig) else {"patches": config}
    with open(path, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
