"""Lexical import extraction and resolution.

Turns already-loaded source text into ``ParsedFile`` records for the graph
builder. Nothing here parses an AST: import statements are found with
per-language regexes and resolved against the set of known repository paths.

Resolution order for a specifier:
  1. Python relative imports (``.models``, ``..pkg.mod``)
  2. Go module paths (``example.com/app/internal/x``)
  3. Relative paths (``./util``, ``../lib/x``) with extension probing
  4. Path aliases (``@app/*`` -> ``src/app/*``)
  5. Workspace packages (``@org/core`` -> ``packages/core/src/index.ts``)
  6. ``@/`` -> ``src/`` when no aliases are configured
  7. Python absolute module paths (``pkg.mod`` -> ``pkg/mod.py``)

Anything unresolved is kept verbatim as an external dependency.
"""

from __future__ import annotations

import posixpath
import re
from collections.abc import Mapping
from typing import Optional

from ..exceptions import InputContractError
from ..graph.models import ParsedFile
from ..logging_config import get_logger

logger = get_logger(__name__)

_EXTENSION_TO_LANGUAGE: dict[str, str] = {
    ".py": "python",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".mts": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".go": "go",
    ".java": "java",
}

_JS_IMPORT_PATTERNS = [
    r"^\s*(?:import|export)\s[^;]*?\bfrom\s+['\"]([^'\"]+)['\"]",
    r"^\s*import\s+['\"]([^'\"]+)['\"]",
    r"\brequire\(\s*['\"]([^'\"]+)['\"]\s*\)",
    r"\bimport\(\s*['\"]([^'\"]+)['\"]\s*\)",
]

_IMPORT_PATTERNS: dict[str, list[str]] = {
    "python": [
        r"^\s*import\s+([\w.]+)",
        r"^\s*from\s+(\.+[\w.]*|[\w.]+)\s+import\b",
    ],
    "typescript": _JS_IMPORT_PATTERNS,
    "javascript": _JS_IMPORT_PATTERNS,
    "go": [r'^\s*import\s+"([^"]+)"', r'^\s*import\s+[\w.]+\s+"([^"]+)"'],
    "java": [r"^\s*import\s+(?:static\s+)?([\w.]+?)(?:\.\*)?\s*;"],
}

_GO_IMPORT_BLOCK = re.compile(r"^\s*import\s*\(([^)]*)\)", re.MULTILINE)
_GO_QUOTED = re.compile(r'"([^"]+)"')

_ABSTRACT_TYPE_PATTERNS: dict[str, list[str]] = {
    "python": [r"^\s*class\s+\w+\s*\([^)]*\b(?:ABC|Protocol)\b"],
    "typescript": [r"^\s*(?:export\s+)?interface\s+\w+", r"^\s*(?:export\s+)?abstract\s+class\s+\w+"],
    "java": [r"^\s*(?:public\s+)?interface\s+\w+", r"^\s*(?:public\s+)?abstract\s+class\s+\w+"],
    "go": [r"^\s*type\s+\w+\s+interface\b"],
}

_CONCRETE_TYPE_PATTERNS: dict[str, list[str]] = {
    "python": [r"^\s*class\s+\w+(?![^:]*\b(?:ABC|Protocol)\b)"],
    "typescript": [
        r"^\s*(?:export\s+)?(?:default\s+)?class\s+\w+",
        r"^\s*(?:export\s+)?type\s+\w+\s*=",
    ],
    "javascript": [r"^\s*(?:export\s+)?(?:default\s+)?class\s+\w+"],
    "java": [r"^\s*(?:public\s+)?(?:final\s+)?class\s+\w+"],
    "go": [r"^\s*type\s+\w+\s+struct\b"],
}

_PROBE_SUFFIXES = (
    "",
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    ".py",
    ".go",
    "/index.ts",
    "/index.tsx",
    "/index.js",
    "/index.jsx",
)


def detect_language(path: str) -> Optional[str]:
    """Language name from the file extension, or None when unknown."""
    _, ext = posixpath.splitext(path)
    return _EXTENSION_TO_LANGUAGE.get(ext.lower())


def extract_imports(content: str, language: Optional[str]) -> list[str]:
    """Return import specifiers in order of first appearance, deduplicated."""
    if not language or language not in _IMPORT_PATTERNS:
        return []

    found: list[tuple[int, str]] = []
    for pattern in _IMPORT_PATTERNS[language]:
        for match in re.finditer(pattern, content, re.MULTILINE):
            found.append((match.start(1), match.group(1)))

    if language == "go":
        for block in _GO_IMPORT_BLOCK.finditer(content):
            for quoted in _GO_QUOTED.finditer(block.group(1)):
                found.append((block.start(1) + quoted.start(1), quoted.group(1)))

    specifiers: list[str] = []
    for _, spec in sorted(found):
        if spec not in specifiers:
            specifiers.append(spec)
    return specifiers


def count_declared_types(content: str, language: Optional[str]) -> tuple[int, int]:
    """Return ``(abstract, concrete)`` type declaration counts."""
    if not language:
        return 0, 0

    def _count(patterns: dict[str, list[str]]) -> int:
        return sum(
            len(re.findall(p, content, re.MULTILINE)) for p in patterns.get(language, [])
        )

    return _count(_ABSTRACT_TYPE_PATTERNS), _count(_CONCRETE_TYPE_PATTERNS)


def resolve_import(
    from_file: str,
    specifier: str,
    known_paths: set[str] | frozenset[str],
    language: Optional[str] = None,
    path_aliases: Optional[Mapping[str, list[str]]] = None,
    workspace_packages: Optional[Mapping[str, str]] = None,
    go_module: Optional[str] = None,
) -> Optional[str]:
    """Resolve an import specifier to a known repository path.

    Args:
        from_file: Path of the importing file
        specifier: Raw specifier as written in the import statement
        known_paths: Every repository path in the analysis
        language: Language of the importing file
        path_aliases: tsconfig-style aliases, e.g. ``{"@app/*": ["src/app/*"]}``
        workspace_packages: Package name -> package directory
        go_module: Module path declared in go.mod

    Returns:
        The resolved path, or None for external/unresolvable specifiers.
    """
    spec = specifier.strip()
    if not spec:
        return None

    if language == "python" and spec.startswith("."):
        return _resolve_python_relative(from_file, spec, known_paths)

    if language == "go" and "/" in spec and not spec.startswith("."):
        return _resolve_go(spec, known_paths, go_module)

    if spec.startswith(".") or spec.startswith("/"):
        base = posixpath.dirname(from_file)
        joined = posixpath.normpath(posixpath.join(base, spec.lstrip("/") if spec.startswith("/") else spec))
        return _probe(joined, known_paths)

    if path_aliases:
        resolved = _resolve_alias(spec, path_aliases, known_paths)
        if resolved:
            return resolved

    if workspace_packages:
        resolved = _resolve_workspace(spec, workspace_packages, known_paths)
        if resolved:
            return resolved

    if not path_aliases and spec.startswith("@/"):
        return _probe("src/" + spec[2:], known_paths)

    if language in ("python", "java"):
        return _resolve_dotted(spec, known_paths, ".py" if language == "python" else ".java")

    return None


def parse_sources(
    sources: Mapping[str, Optional[str]],
    path_aliases: Optional[Mapping[str, list[str]]] = None,
    workspace_packages: Optional[Mapping[str, str]] = None,
    go_module: Optional[str] = None,
) -> list[ParsedFile]:
    """Build ParsedFile records from already-loaded source text.

    A ``None`` text means the caller could not read the file: it still
    becomes a node, just without imports.

    Raises:
        InputContractError: If ``sources`` is None.
    """
    if sources is None:
        raise InputContractError("sources", "expected a mapping of path to text, got None")

    known = frozenset(sources)
    parsed: list[ParsedFile] = []

    for path in sorted(sources):
        text = sources[path]
        language = detect_language(path)
        if text is None:
            logger.debug("No source text for %s; recording it without imports", path)
            parsed.append(ParsedFile(path=path, language=language))
            continue

        targets: list[str] = []
        for spec in extract_imports(text, language):
            resolved = resolve_import(
                path, spec, known, language, path_aliases, workspace_packages, go_module
            )
            target = resolved if resolved is not None else spec
            if target not in targets:
                targets.append(target)

        abstract, concrete = count_declared_types(text, language)
        parsed.append(
            ParsedFile(
                path=path,
                imports=tuple(targets),
                language=language,
                export_count=len(re.findall(r"^\s*export\s", text, re.MULTILINE)),
                decorator_count=len(re.findall(r"^\s*@\w+", text, re.MULTILINE)),
                abstract_types=abstract,
                concrete_types=concrete,
            )
        )

    return parsed


# ── Resolution helpers ─────────────────────────────────────────────


def _probe(base: str, known_paths: set[str] | frozenset[str]) -> Optional[str]:
    for suffix in _PROBE_SUFFIXES:
        candidate = base + suffix
        if candidate in known_paths:
            return candidate
    return None


def _resolve_python_relative(
    from_file: str, spec: str, known_paths: set[str] | frozenset[str]
) -> Optional[str]:
    """Resolve ``.``, ``..pkg``, ``.module.sub`` relative to the importing file."""
    dots = len(spec) - len(spec.lstrip("."))
    remainder = spec[dots:]

    directory = posixpath.dirname(from_file)
    for _ in range(dots - 1):
        directory = posixpath.dirname(directory)

    if not remainder:
        candidates = [posixpath.join(directory, "__init__.py")]
    else:
        module_path = posixpath.join(directory, remainder.replace(".", "/"))
        candidates = [module_path + ".py", posixpath.join(module_path, "__init__.py")]

    for candidate in candidates:
        candidate = posixpath.normpath(candidate)
        if candidate in known_paths:
            return candidate
    return None


def _resolve_go(
    spec: str, known_paths: set[str] | frozenset[str], go_module: Optional[str]
) -> Optional[str]:
    """Map a Go package import to the first file of that package directory."""
    ordered = sorted(known_paths)

    if go_module and spec.startswith(go_module + "/"):
        package_dir = spec[len(go_module) + 1:]
        for path in ordered:
            if posixpath.dirname(path) == package_dir:
                return path

    segments = spec.split("/")
    for i in range(len(segments)):
        suffix = "/".join(segments[i:])
        for path in ordered:
            directory = posixpath.dirname(path)
            if directory == suffix or directory.endswith("/" + suffix):
                return path
    return None


def _resolve_alias(
    spec: str,
    path_aliases: Mapping[str, list[str]],
    known_paths: set[str] | frozenset[str],
) -> Optional[str]:
    for pattern, mappings in path_aliases.items():
        if pattern.endswith("/*"):
            prefix = pattern[:-1]
            if not spec.startswith(prefix):
                continue
            remainder = spec[len(prefix):]
            for mapping in mappings:
                base = mapping[:-1] if mapping.endswith("*") else mapping
                resolved = _probe(posixpath.normpath(base + remainder), known_paths)
                if resolved:
                    return resolved
        elif spec == pattern:
            for mapping in mappings:
                resolved = _probe(posixpath.normpath(mapping), known_paths)
                if resolved:
                    return resolved
    return None


def _resolve_workspace(
    spec: str,
    workspace_packages: Mapping[str, str],
    known_paths: set[str] | frozenset[str],
) -> Optional[str]:
    for name, directory in workspace_packages.items():
        if spec != name and not spec.startswith(name + "/"):
            continue
        subpath = spec[len(name) + 1:] if spec != name else ""
        for base in (posixpath.join(directory, "src"), directory):
            target = posixpath.join(base, subpath) if subpath else posixpath.join(base, "index")
            resolved = _probe(posixpath.normpath(target), known_paths)
            if resolved:
                return resolved
    return None


def _resolve_dotted(
    spec: str, known_paths: set[str] | frozenset[str], extension: str
) -> Optional[str]:
    """Resolve ``pkg.mod`` style module paths, also under a ``src/`` root."""
    as_path = spec.replace(".", "/")
    for root in ("", "src/"):
        for candidate in (root + as_path + extension, root + as_path + "/__init__.py"):
            if candidate in known_paths:
                return candidate
    return None
