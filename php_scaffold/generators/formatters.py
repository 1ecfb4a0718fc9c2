"""Output normalization for rendered files."""

import re

_BLANK_RUNS = re.compile(r"\n{3,}")
_BLANK_BEFORE_CLOSE = re.compile(r"\n\n(\s*})")


def format_generated_code(code: str, php: bool = True) -> str:
    """
    Normalize whitespace left behind by template control blocks.

    Strips trailing spaces, collapses runs of blank lines to one and ends
    the file with exactly one newline. For PHP, a blank line directly
    before a closing brace is dropped as well.
    """
    lines = [line.rstrip() for line in code.splitlines()]
    text = "\n".join(lines).strip("\n")
    text = _BLANK_RUNS.sub("\n\n", text)
    if php:
        text = _BLANK_BEFORE_CLOSE.sub(r"\n\1", text)
    return text + "\n"
