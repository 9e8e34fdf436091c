"""Architecture models: declared layers and the violations found against them."""

from dataclasses import dataclass, field
from enum import Enum


class ViolationSeverity(Enum):
    """How strongly a finding should be surfaced."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class LayerDefinition:
    """A named architectural tier.

    ``patterns`` are globs over repository-relative paths, tried in order.
    ``allowed_dependencies`` names the layers this one may import from;
    names that match no configured layer are logged, never rejected.
    """

    name: str
    patterns: tuple[str, ...] = ()
    allowed_dependencies: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class Violation:
    """An import edge that crosses layers in a disallowed direction.

    Never created for same-layer edges or for endpoints without a layer.
    """

    source_file: str
    target_file: str
    source_layer: str
    target_layer: str
    import_statement: str
    message: str
    severity: ViolationSeverity = ViolationSeverity.ERROR
