"""
Exception types raised by the wall boundary-condition subsystem.

All of them are fatal for the solver iteration that triggers them; none
is retried locally.
"""


class DVMWallError(Exception):
    """Base class for boundary-condition errors."""


class IndexOutOfRange(DVMWallError, IndexError):
    """A discrete-velocity index outside [0, size())."""


class MappingIndexError(DVMWallError, IndexError):
    """A mapping or reverse-mapping address that references no face."""


class DegenerateWallFlux(DVMWallError, ArithmeticError):
    """
    The equilibrium emitted flux per unit density is numerically zero.

    Attributes:
        patch: Name of the boundary patch (None for single-face calls)
        faces: Indices of the offending faces
        step: Closure step that failed
    """

    def __init__(self, message, patch=None, faces=(), step="wall density closure"):
        self.patch = patch
        self.faces = tuple(int(f) for f in faces)
        self.step = step

        where = f"patch '{patch}'" if patch is not None else "wall"
        if self.faces:
            shown = ", ".join(str(f) for f in self.faces[:10])
            if len(self.faces) > 10:
                shown += f", ... ({len(self.faces)} faces)"
            where += f" faces [{shown}]"

        super().__init__(f"{step} failed on {where}: {message}")
