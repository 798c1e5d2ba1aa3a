from dataclasses import dataclass, field, replace
from typing import Any, Tuple

BACKENDS = ("native", "svgo")

DEFAULT_MAX_PASSES = 10


@dataclass(frozen=True)
class OptimizeOptions:
    """One optimization request (everything except the markup itself).

    ``plugins`` holds extra descriptors appended after the built-in tiers.
    """

    aggressive: bool = False
    multipass: bool = True
    max_passes: int = DEFAULT_MAX_PASSES
    preserve_viewbox: bool = True
    remove_dimensions: bool = True
    plugins: Tuple[Any, ...] = field(default_factory=tuple)
    backend: str = "native"

    def __post_init__(self):
        object.__setattr__(self, "plugins", tuple(self.plugins))
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend {self.backend!r}, expected one of {BACKENDS}")
        if self.max_passes < 1:
            raise ValueError("max_passes must be >= 1")

    @property
    def mode(self) -> str:
        return "aggressive" if self.aggressive else "safe"

    def with_overrides(self, **overrides) -> "OptimizeOptions":
        return replace(self, **overrides) if overrides else self


__all__ = ["OptimizeOptions", "BACKENDS", "DEFAULT_MAX_PASSES"]
