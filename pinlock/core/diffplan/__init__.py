"""Compilation of lock-file commit diffs into change plans."""

from pinlock.core.diffplan.compiler import (
    classify_line,
    compile_plan,
    parse_diff,
    read_diff_lines,
)

__all__ = ["classify_line", "compile_plan", "parse_diff", "read_diff_lines"]
