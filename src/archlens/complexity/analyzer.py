"""Lexical cyclomatic and cognitive complexity.

Sources are treated as text: comments and literals are stripped, then
decision points are counted with regexes and nesting is tracked by brace
balance. Results are approximate by nature.
"""

import posixpath
import re
from typing import Optional

from .models import (
    MODULE_BLOCK_NAME,
    ExtractionMode,
    FileComplexity,
    FunctionComplexity,
    FunctionExtraction,
)
from .stripper import strip_comments_and_strings

# Longest body scanned for the closing brace of one function
MAX_FUNCTION_SCAN_LINES = 500

_HASH_COMMENT_EXTENSIONS = frozenset({".py", ".rb", ".sh", ".yml", ".yaml", ".toml"})

# ``if (`` also covers ``else if (``, so an else-if counts once.
# ``for x of/in y`` only counts without a parenthesis; ``for (`` covers the rest.
_DECISION_POINT_PATTERNS = [
    re.compile(r"\bif\s*\("),
    re.compile(r"\bfor\s*\("),
    re.compile(r"\bfor\s+(?![\s(])[^\n]*?\b(?:of|in)\b"),
    re.compile(r"\bwhile\s*\("),
    re.compile(r"\bdo\s*\{"),
    re.compile(r"\bswitch\s*\("),
    re.compile(r"\bcatch\s*\("),
    re.compile(r"&&"),
    re.compile(r"\|\|"),
    re.compile(r"\?\?"),
]

# A lone ``?``: not part of ``??``, ``?.`` or an optional ``?:`` annotation
_TERNARY = re.compile(r"(?<!\?)\?(?![?.:])")

_NESTING_PATTERNS = [
    re.compile(r"\bif\s*\("),
    re.compile(r"\bfor\s*\("),
    re.compile(r"\bwhile\s*\("),
    re.compile(r"\bswitch\s*\("),
    re.compile(r"\bcatch\s*\("),
]

_ELSE = re.compile(r"\belse\b")
_LOGICAL = re.compile(r"&&|\|\||\?\?")

_FUNCTION_PATTERNS = [
    re.compile(r"(?:export\s+)?(?:async\s+)?\bfunction\b\s*\*?\s*(\w+)"),
    re.compile(
        r"(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?(?:\([^)]*\)|[a-zA-Z_]\w*)\s*(?::\s*[^=]+)?=>"
    ),
    re.compile(r"(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?function"),
    re.compile(r"^\s+(?:async\s+)?(\w+)\s*\([^)]*\)\s*(?::\s*\w[^{]*)?\s*\{"),
    re.compile(r"^\s+(?:public|private|protected|static|async)\s+(?:async\s+)?(\w+)\s*\("),
]

# Control keywords that the method pattern would otherwise take for names
_NOT_FUNCTION_NAMES = frozenset({"if", "for", "while", "switch", "catch", "with", "return", "function", "else"})

_DECLARATION_START = re.compile(r"^(?:export\s+)?(?:const|let|var|function|class)\s")


def _uses_hash_comments(file_path: Optional[str]) -> bool:
    if not file_path:
        return False
    return posixpath.splitext(file_path)[1].lower() in _HASH_COMMENT_EXTENSIONS


def count_decision_points(code: str) -> int:
    """Decision-point tokens in already-stripped code."""
    count = sum(len(p.findall(code)) for p in _DECISION_POINT_PATTERNS)
    return count + len(_TERNARY.findall(code))


def cyclomatic_complexity(source: str, hash_comments: bool = False) -> int:
    """1 + decision points, after stripping comments and literals."""
    return 1 + count_decision_points(strip_comments_and_strings(source, hash_comments))


def cognitive_complexity(source: str, hash_comments: bool = False) -> int:
    """Nesting-weighted complexity.

    Walks the stripped source line by line. A nesting construct adds
    ``1 + nesting``; ``else`` and logical operators add 1 each only on lines
    without a nesting construct; each ternary adds 1. Nesting follows the
    brace balance of each line and never drops below zero.
    """
    cleaned = strip_comments_and_strings(source, hash_comments)
    score = 0
    nesting = 0

    for line in cleaned.split("\n"):
        stripped = line.strip()

        structures = sum(len(p.findall(stripped)) for p in _NESTING_PATTERNS)
        score += structures * (1 + nesting)

        if not structures:
            if _ELSE.search(stripped):
                score += 1
            score += len(_LOGICAL.findall(stripped))

        score += len(_TERNARY.findall(stripped))

        nesting = max(nesting + stripped.count("{") - stripped.count("}"), 0)

    return score


def calculate_function_complexity(
    source: str,
    file_path: str,
    function_name: str,
    line_start: int,
    line_end: int,
) -> FunctionComplexity:
    hash_comments = _uses_hash_comments(file_path)
    return FunctionComplexity(
        file_path=file_path,
        function_name=function_name,
        line_start=line_start,
        line_end=line_end,
        cyclomatic=cyclomatic_complexity(source, hash_comments),
        cognitive=cognitive_complexity(source, hash_comments),
    )


def _match_function_name(line: str) -> Optional[str]:
    for pattern in _FUNCTION_PATTERNS:
        match = pattern.search(line)
        if match and match.group(1):
            name = match.group(1)
            if name in _NOT_FUNCTION_NAMES:
                return None
            return name
    return None


def _starts_new_block(raw_line: str) -> bool:
    return not raw_line.strip() or bool(_DECLARATION_START.match(raw_line))


def _find_body_end(stripped_lines: list[str], raw_lines: list[str], start: int) -> int:
    """Index of the last line of the function starting at ``start``."""
    depth = 0
    found_open = False

    for j in range(start, len(stripped_lines)):
        # No opening brace before the next block: a brace-less arrow body
        if not found_open and j > start and _starts_new_block(raw_lines[j]):
            break
        for ch in stripped_lines[j]:
            if ch == "{":
                depth += 1
                found_open = True
            elif ch == "}":
                depth -= 1
        if found_open and depth <= 0:
            return j
        if j - start > MAX_FUNCTION_SCAN_LINES:
            return j

    if found_open:
        return len(stripped_lines) - 1

    # Brace-less arrow body: up to the next blank line or declaration
    end = start
    for j in range(start + 1, len(raw_lines)):
        if _starts_new_block(raw_lines[j]):
            break
        end = j
    return end


def extract_functions(source: str, file_path: str) -> FunctionExtraction:
    """Split a file into scored function blocks.

    Nested functions are scored on their own and again as part of their
    parent. When no function is found the file is scored as a single
    ``<module>`` block and the result is marked ``WHOLE_FILE``.
    """
    raw_lines = source.split("\n")
    stripped_lines = strip_comments_and_strings(source, _uses_hash_comments(file_path)).split("\n")
    functions: list[FunctionComplexity] = []

    for i, line in enumerate(stripped_lines):
        name = _match_function_name(line)
        if name is None:
            continue

        end = _find_body_end(stripped_lines, raw_lines, i)
        body = "\n".join(raw_lines[i : end + 1])
        functions.append(calculate_function_complexity(body, file_path, name, i + 1, end + 1))

    if functions:
        return FunctionExtraction(mode=ExtractionMode.FUNCTIONS, functions=tuple(functions))

    whole = calculate_function_complexity(source, file_path, MODULE_BLOCK_NAME, 1, len(raw_lines))
    return FunctionExtraction(mode=ExtractionMode.WHOLE_FILE, functions=(whole,))


def calculate_file_complexity(source: str, file_path: str) -> FileComplexity:
    """Per-function scores plus averages (2 dp) and maxima for one file."""
    extraction = extract_functions(source, file_path)
    functions = extraction.functions

    cyclomatic = [f.cyclomatic for f in functions]
    cognitive = [f.cognitive for f in functions]

    return FileComplexity(
        file_path=file_path,
        functions=functions,
        avg_cyclomatic=round(sum(cyclomatic) / len(functions), 2),
        avg_cognitive=round(sum(cognitive) / len(functions), 2),
        max_cyclomatic=max(cyclomatic),
        max_cognitive=max(cognitive),
        extraction=extraction.mode,
    )
