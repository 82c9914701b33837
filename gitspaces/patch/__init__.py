"""Patch module for parsing and synthesizing unified diffs.

Main components:
- Types: DiffHunk, PatchFile (diff text structure), RawHunk (tracked region)
- Parser: parse_unified_diff(), parse_hunks() - diff text to objects
- Synthesizer: synthesize_patch() - hunks back to `git apply` input

Example usage:
    >>> from gitspaces.patch import parse_hunks
    >>> diff_text = '''
    ... --- a/file.py
    ... +++ b/file.py
    ... @@ -1,3 +1,4 @@
    ...  line1
    ... -line2
    ... +new_line
    ... +another_line
    ...  line3
    ... '''
    >>> regions = parse_hunks(diff_text, "/repo/file.py")
    >>> regions[0].start_line, regions[0].end_line
    (1, 5)
"""

from gitspaces.patch.parser import parse_hunks, parse_unified_diff, removed_text
from gitspaces.patch.synthesizer import synthesize_patch
from gitspaces.patch.types import DiffHunk, PatchableHunk, PatchFile, RawHunk

__all__ = [
    # Types
    "DiffHunk",
    "PatchFile",
    "PatchableHunk",
    "RawHunk",
    # Parser
    "parse_unified_diff",
    "parse_hunks",
    "removed_text",
    # Synthesizer
    "synthesize_patch",
]
