"""Parser for unified diff format.

parse_unified_diff() turns diff text into PatchFile/DiffHunk objects that
mirror the text. parse_hunks() goes one step further and derives the
line-addressed regions (RawHunk) that the reconciler tracks.
"""

import re

from gitspaces.patch.types import DiffHunk, PatchFile, RawHunk

# Pattern for hunk header: @@ -old_start[,old_count] +new_start[,new_count] @@ [context]
HUNK_HEADER_RE = re.compile(
    r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$"
)

# Pattern for file header in standard unified diff format
UNIFIED_OLD_RE = re.compile(r"^--- (.+?)(?:\t.*)?$")
UNIFIED_NEW_RE = re.compile(r"^\+\+\+ (.+?)(?:\t.*)?$")

# Pattern for git extended diff format
GIT_DIFF_RE = re.compile(r"^diff --git a/(.+) b/(.+)$")

NO_NEWLINE_MARKER = "\\ No newline at end of file"

DEV_NULL = "/dev/null"


def _split_lines(text: str) -> list[str]:
    """Split diff text on LF only.

    A CR before the LF belongs to the line body (CRLF files), and other
    characters str.splitlines() treats as breaks (form feed, vertical tab,
    U+2028 ...) are ordinary line content in a diff.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _strip_path_prefix(path: str) -> str:
    """Strip a/ or b/ prefix from path if present."""
    if path.startswith("a/") or path.startswith("b/"):
        return path[2:]
    return path


def _parse_hunk_header(line: str) -> DiffHunk | None:
    """Parse a hunk header line into a DiffHunk, or None if malformed."""
    match = HUNK_HEADER_RE.match(line)
    if not match:
        return None

    # Count defaults to 1 if omitted (e.g., @@ -1 +1,2 @@)
    return DiffHunk(
        old_start=int(match.group(1)),
        old_count=int(match.group(2)) if match.group(2) else 1,
        new_start=int(match.group(3)),
        new_count=int(match.group(4)) if match.group(4) else 1,
        lines=[],
        context=match.group(5).strip(),
    )


def _is_file_header(lines: list[str], idx: int) -> bool:
    """True if lines[idx] starts the next file section."""
    line = lines[idx]
    if line.startswith("diff --git"):
        return True
    return line.startswith("---") and idx + 1 < len(lines) and lines[idx + 1].startswith("+++")


def _parse_hunk_body(lines: list[str], idx: int, hunk: DiffHunk) -> int:
    """Accumulate hunk content lines starting at idx.

    Stops at the next hunk header, the next file header, or end of input.

    Returns:
        Index of the first line not consumed.
    """
    n = len(lines)
    while idx < n:
        line = lines[idx]

        if line.startswith("@@") or _is_file_header(lines, idx):
            break

        if line.startswith(NO_NEWLINE_MARKER):
            # Refers to the line just before it
            if hunk.lines:
                prefix = hunk.lines[-1][0]
                if prefix in (" ", "-"):
                    hunk.old_missing_newline = True
                if prefix in (" ", "+"):
                    hunk.new_missing_newline = True
            idx += 1
            continue

        if line and line[0] in " -+":
            hunk.lines.append((line[0], line[1:]))
        elif line == "":
            # Blank context line whose leading space was lost
            hunk.lines.append((" ", ""))

        idx += 1

    return idx


def _parse_hunks(lines: list[str], idx: int, patch_file: PatchFile) -> int:
    """Parse every hunk of one file section into patch_file.hunks."""
    n = len(lines)
    while idx < n:
        line = lines[idx]

        if _is_file_header(lines, idx):
            break

        if line.startswith("@@"):
            hunk = _parse_hunk_header(line)
            if hunk is None:
                # Malformed hunk header, skip this line
                idx += 1
                continue
            idx = _parse_hunk_body(lines, idx + 1, hunk)
            patch_file.hunks.append(hunk)
        else:
            idx += 1

    return idx


def _parse_single_file(lines: list[str], start_idx: int) -> tuple[PatchFile | None, int]:
    """Parse a single file's diff starting at given index.

    Returns:
        Tuple of (PatchFile or None, next_index)
    """
    idx = start_idx
    n = len(lines)

    if idx >= n:
        return None, idx

    old_path = ""
    new_path = ""
    is_new_file = False
    is_deleted = False

    # Git extended format: diff --git a/path b/path
    if lines[idx].startswith("diff --git"):
        match = GIT_DIFF_RE.match(lines[idx])
        if match:
            old_path = match.group(1)
            new_path = match.group(2)
        idx += 1

        # Skip git metadata lines (index, mode, etc.) until we hit --- or @@
        while idx < n:
            line = lines[idx]
            if line.startswith("---") or line.startswith("@@") or line.startswith("diff --git"):
                break
            if line.startswith("new file mode"):
                is_new_file = True
            elif line.startswith("deleted file mode"):
                is_deleted = True
            idx += 1

    if idx < n and lines[idx].startswith("---"):
        match = UNIFIED_OLD_RE.match(lines[idx])
        if match:
            old_path = _strip_path_prefix(match.group(1))
        idx += 1

    if idx < n and lines[idx].startswith("+++"):
        match = UNIFIED_NEW_RE.match(lines[idx])
        if match:
            new_path = _strip_path_prefix(match.group(1))
        idx += 1

    if not old_path and not new_path:
        return None, start_idx + 1

    is_new_file = is_new_file or old_path == DEV_NULL
    is_deleted = is_deleted or new_path == DEV_NULL

    # Normalize /dev/null paths
    if old_path == DEV_NULL:
        old_path = new_path
    if new_path == DEV_NULL:
        new_path = old_path

    patch_file = PatchFile(
        old_path=old_path,
        new_path=new_path,
        hunks=[],
        is_new_file=is_new_file,
        is_deleted=is_deleted,
    )

    idx = _parse_hunks(lines, idx, patch_file)
    return patch_file, idx


def parse_unified_diff(text: str) -> list[PatchFile]:
    """Parse unified diff text into structured PatchFile objects.

    Handles:
    - Standard unified diff format (--- a/path, +++ b/path, @@ ... @@)
    - Git extended format (diff --git a/path b/path) including mode lines
    - Context lines (space prefix), removals (-), additions (+)
    - '\\ No newline at end of file' marker
    - Files with /dev/null paths (new files, deletions)

    Args:
        text: Unified diff text to parse

    Returns:
        List of PatchFile objects, one per file in the diff. Empty if the
        text holds no file sections.
    """
    if not text or not text.strip():
        return []

    lines = _split_lines(text)
    result: list[PatchFile] = []
    idx = 0

    while idx < len(lines):
        line = lines[idx]
        if not line or not (line.startswith("diff --git") or line.startswith("---")):
            idx += 1
            continue

        patch_file, idx = _parse_single_file(lines, idx)
        if patch_file is not None:
            if patch_file.hunks or patch_file.is_new_file or patch_file.is_deleted:
                result.append(patch_file)

    return result


def _diff_hunks(text: str) -> list[DiffHunk]:
    """All hunks in the text, with or without file headers."""
    lines = _split_lines(text)
    if any(_is_file_header(lines, i) for i in range(len(lines))):
        return [hunk for pf in parse_unified_diff(text) for hunk in pf.hunks]

    # Bare hunks (no file header), as some callers strip the header
    bare = PatchFile(old_path="", new_path="")
    _parse_hunks(lines, 0, bare)
    return bare.hunks


def region_from_hunk(hunk: DiffHunk, file_path: str) -> RawHunk | None:
    """Derive the tracked region of one diff hunk.

    Context lines feed both sides and advance the line counter, added lines
    feed the post-change side and advance the counter, removed lines feed
    only the pre-change side. A region without post-change lines is dropped.
    """
    current_line = hunk.new_start
    content: list[str] = []
    original: list[str] = []

    for prefix, text in hunk.lines:
        if prefix == " ":
            content.append(text)
            original.append(text)
            current_line += 1
        elif prefix == "+":
            content.append(text)
            current_line += 1
        elif prefix == "-":
            original.append(text)

    if not content:
        return None

    return RawHunk(
        file_path=file_path,
        start_line=hunk.new_start,
        end_line=current_line,
        content="\n".join(content),
        original_content="\n".join(original),
        missing_newline=hunk.new_missing_newline,
        original_missing_newline=hunk.old_missing_newline,
    )


def parse_hunks(diff_text: str, file_path: str) -> list[RawHunk]:
    """Parse one file's unified diff into ordered tracked regions.

    Deterministic for identical input: reconciliation relies on stable
    (file_path, start_line) pairs across calls.

    Args:
        diff_text: Unified diff text for a single file.
        file_path: Absolute path recorded on every region.

    Returns:
        Regions in diff order.

    Example:
        >>> diff_text = '''\\
        ... --- a/f.py
        ... +++ b/f.py
        ... @@ -1,2 +1,2 @@
        ...  keep
        ... -old
        ... +new
        ... '''
        >>> [(h.start_line, h.end_line, h.content) for h in parse_hunks(diff_text, "/r/f.py")]
        [(1, 3, 'keep\\nnew')]
    """
    regions: list[RawHunk] = []
    for hunk in _diff_hunks(diff_text):
        region = region_from_hunk(hunk, file_path)
        if region is not None:
            regions.append(region)
    return regions


def removed_text(diff_text: str) -> str | None:
    """Recover the full prior content of a deleted file from its diff.

    Returns:
        The removed lines as file text, or None if the diff holds none.
    """
    hunks = _diff_hunks(diff_text)
    removed = [text for hunk in hunks for prefix, text in hunk.lines if prefix == "-"]
    if not removed:
        return None
    missing_newline = bool(hunks) and hunks[-1].old_missing_newline
    return "\n".join(removed) + ("" if missing_newline else "\n")
