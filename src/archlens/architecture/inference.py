"""Layer inference from directory naming conventions.

Used when no layers are configured. Directory prefixes up to three segments
deep are matched against a keyword table; each canonical layer that matches
at least one directory gets a ``<dir>/**`` pattern per matching directory.
"""

from collections.abc import Iterable, Sequence

from ..logging_config import get_logger
from .models import LayerDefinition

logger = get_logger(__name__)

MAX_INFERENCE_DEPTH = 3

# Canonical layers, in match order
LAYER_KEYWORDS: dict[str, tuple[str, ...]] = {
    "presentation": ("ui", "views", "pages", "components", "presentation", "frontend", "web"),
    "application": ("application", "services", "use-cases", "usecases", "handlers", "controllers"),
    "domain": ("domain", "entities", "models", "core", "business"),
    "infrastructure": ("infrastructure", "repositories", "adapters", "db", "database", "external", "clients"),
}

DEFAULT_ALLOWED_DEPENDENCIES: dict[str, frozenset[str]] = {
    "presentation": frozenset({"application", "domain"}),
    "application": frozenset({"domain"}),
    "domain": frozenset(),
    "infrastructure": frozenset({"domain", "application"}),
}


def _directory_prefixes(paths: Iterable[str]) -> list[str]:
    dirs: set[str] = set()
    for path in paths:
        parts = path.split("/")
        for i in range(min(len(parts) - 1, MAX_INFERENCE_DEPTH)):
            dirs.add("/".join(parts[: i + 1]))
    return sorted(dirs)


def infer_layers(paths: Iterable[str]) -> tuple[LayerDefinition, ...]:
    """Infer canonical layers from directory names.

    Matching is a case-insensitive substring test, so ``src/UserServices``
    counts as an application directory.
    """
    dirs = _directory_prefixes(paths)
    layers: list[LayerDefinition] = []

    for name, keywords in LAYER_KEYWORDS.items():
        matching = [d for d in dirs if any(kw in d.lower() for kw in keywords)]
        if not matching:
            continue
        layers.append(
            LayerDefinition(
                name=name,
                patterns=tuple(f"{d}/**" for d in matching),
                allowed_dependencies=DEFAULT_ALLOWED_DEPENDENCIES[name],
            )
        )

    logger.debug("Inferred %d layers from %d directories", len(layers), len(dirs))
    return tuple(layers)


def resolve_layers(
    configured: Sequence[LayerDefinition] | None,
    paths: Iterable[str],
) -> tuple[LayerDefinition, ...]:
    """Configured layers when there are any, otherwise inferred ones.

    Unknown allowed-dependency names are reported when a LayerResolver is
    built from the result.
    """
    if configured:
        return tuple(configured)
    return infer_layers(paths)
