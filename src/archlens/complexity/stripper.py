"""Comment and string-literal stripping.

Removes everything a decision-point regex could falsely match in, while
keeping every newline so line numbers stay aligned with the input.
"""

_QUOTES = ("'", '"', "`")


def strip_comments_and_strings(source: str, hash_comments: bool = False) -> str:
    """Strip comments and quoted literals in one pass.

    Args:
        source: Raw source text
        hash_comments: Treat ``#`` as the line comment instead of ``//`` and
            ``/* */`` (Python, shell, YAML), so ``a // b`` stays code

    Returns:
        The code with comment and literal bodies removed. Newlines inside
        removed regions are kept; a backslash inside a literal always
        consumes the next character, so escaped quotes never end it.
    """
    out: list[str] = []
    i = 0
    n = len(source)

    while i < n:
        ch = source[i]
        nxt = source[i + 1] if i + 1 < n else ""

        if (hash_comments and ch == "#") or (not hash_comments and ch == "/" and nxt == "/"):
            while i < n and source[i] != "\n":
                i += 1
            continue

        if not hash_comments and ch == "/" and nxt == "*":
            i += 2
            while i < n and not (source[i] == "*" and i + 1 < n and source[i + 1] == "/"):
                if source[i] == "\n":
                    out.append("\n")
                i += 1
            i += 2
            continue

        if ch in _QUOTES:
            i += 1
            while i < n and source[i] != ch:
                if source[i] == "\\":
                    i += 1
                    if i < n and source[i] == "\n":
                        out.append("\n")
                elif source[i] == "\n":
                    out.append("\n")
                i += 1
            i += 1
            continue

        out.append(ch)
        i += 1

    return "".join(out)
