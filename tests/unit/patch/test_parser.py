"""Unit tests for gitspaces.patch.parser module."""

from gitspaces.patch import parse_hunks, parse_unified_diff, removed_text
from gitspaces.patch.types import RawHunk


class TestParseUnifiedDiff:
    """Tests for parse_unified_diff function."""

    def test_parse_simple_hunk(self) -> None:
        """Test parsing a single hunk with add/remove."""
        diff_text = """\
--- a/file.py
+++ b/file.py
@@ -1,4 +1,4 @@
 line1
-old line
+new line
 line3
 line4
"""
        files = parse_unified_diff(diff_text)

        assert len(files) == 1
        pf = files[0]
        assert pf.old_path == "file.py"
        assert pf.new_path == "file.py"
        assert len(pf.hunks) == 1

        hunk = pf.hunks[0]
        assert (hunk.old_start, hunk.old_count) == (1, 4)
        assert (hunk.new_start, hunk.new_count) == (1, 4)
        assert hunk.lines == [
            (" ", "line1"),
            ("-", "old line"),
            ("+", "new line"),
            (" ", "line3"),
            (" ", "line4"),
        ]
        assert hunk.compute_counts() == (4, 4)

    def test_parse_git_format_with_context(self) -> None:
        """Test parsing git extended format with 'diff --git a/...' header."""
        diff_text = """\
diff --git a/src/module.py b/src/module.py
index abc1234..def5678 100644
--- a/src/module.py
+++ b/src/module.py
@@ -5,3 +5,4 @@ def function():
     pass
+    # new comment
     return None
"""
        files = parse_unified_diff(diff_text)

        assert len(files) == 1
        assert files[0].path == "src/module.py"
        assert files[0].hunks[0].context == "def function():"

    def test_parse_new_file(self) -> None:
        diff_text = """\
diff --git a/new.txt b/new.txt
new file mode 100644
index 0000000..3b18e51
--- /dev/null
+++ b/new.txt
@@ -0,0 +1,2 @@
+hello
+world
"""
        files = parse_unified_diff(diff_text)

        assert len(files) == 1
        assert files[0].is_new_file
        assert files[0].path == "new.txt"

    def test_parse_deleted_file(self) -> None:
        diff_text = """\
diff --git a/gone.txt b/gone.txt
deleted file mode 100644
index 3b18e51..0000000
--- a/gone.txt
+++ /dev/null
@@ -1,2 +0,0 @@
-first
-second
"""
        files = parse_unified_diff(diff_text)

        assert files[0].is_deleted
        assert files[0].path == "gone.txt"

    def test_no_newline_marker(self) -> None:
        diff_text = """\
--- a/f.txt
+++ b/f.txt
@@ -1 +1 @@
-old
\\ No newline at end of file
+new
\\ No newline at end of file
"""
        hunk = parse_unified_diff(diff_text)[0].hunks[0]

        assert hunk.lines == [("-", "old"), ("+", "new")]
        assert hunk.old_missing_newline
        assert hunk.new_missing_newline

    def test_multiple_files(self) -> None:
        diff_text = """\
diff --git a/a.txt b/a.txt
--- a/a.txt
+++ b/a.txt
@@ -1 +1 @@
-a
+A
diff --git a/b.txt b/b.txt
--- a/b.txt
+++ b/b.txt
@@ -1 +1 @@
-b
+B
"""
        files = parse_unified_diff(diff_text)

        assert [f.path for f in files] == ["a.txt", "b.txt"]

    def test_empty_input(self) -> None:
        assert parse_unified_diff("") == []
        assert parse_unified_diff("   \n") == []


class TestParseHunks:
    """Tests for deriving tracked regions from a diff."""

    def test_region_bounds_and_content(self) -> None:
        """Context and added lines advance the counter, removed lines do not."""
        diff_text = """\
--- a/file.go
+++ b/file.go
@@ -8,5 +8,6 @@
 a
 b
-old
+new1
+new2
 c
 d
"""
        regions = parse_hunks(diff_text, "/repo/file.go")

        assert regions == [
            RawHunk(
                file_path="/repo/file.go",
                start_line=8,
                end_line=14,
                content="a\nb\nnew1\nnew2\nc\nd",
                original_content="a\nb\nold\nc\nd",
            )
        ]

    def test_one_region_per_header(self) -> None:
        diff_text = """\
--- a/f.py
+++ b/f.py
@@ -1,3 +1,4 @@
 line1
+added at top
 line2
 line3
@@ -10,3 +11,2 @@
 line10
-removed
 line11
"""
        regions = parse_hunks(diff_text, "/r/f.py")

        assert [(r.start_line, r.end_line) for r in regions] == [(1, 5), (11, 13)]
        assert regions[1].content == "line10\nline11"
        assert regions[1].original_content == "line10\nremoved\nline11"

    def test_region_without_content_is_dropped(self) -> None:
        """A pure removal with no context leaves nothing to anchor."""
        diff_text = """\
--- a/f.py
+++ b/f.py
@@ -3 +2,0 @@
-gone
"""
        assert parse_hunks(diff_text, "/r/f.py") == []

    def test_new_file_region(self) -> None:
        diff_text = """\
diff --git a/new.txt b/new.txt
new file mode 100644
--- /dev/null
+++ b/new.txt
@@ -0,0 +1,2 @@
+hello
+world
"""
        (region,) = parse_hunks(diff_text, "/r/new.txt")

        assert (region.start_line, region.end_line) == (1, 3)
        assert region.content == "hello\nworld"
        assert region.original_content == ""

    def test_bare_hunks_without_file_header(self) -> None:
        regions = parse_hunks("@@ -1,1 +1,1 @@\n-a\n+b\n", "/r/x")

        assert [(r.start_line, r.end_line, r.content) for r in regions] == [(1, 2, "b")]

    def test_deterministic(self) -> None:
        diff_text = "--- a/x\n+++ b/x\n@@ -2,2 +2,2 @@\n k\n-o\n+n\n"

        assert parse_hunks(diff_text, "/r/x") == parse_hunks(diff_text, "/r/x")

    def test_missing_final_newline_flags(self) -> None:
        diff_text = (
            "--- a/nonl.txt\n+++ b/nonl.txt\n"
            "@@ -1,3 +1,3 @@\n a\n b\n-c\n\\ No newline at end of file\n"
            "+C\n\\ No newline at end of file\n"
        )

        (region,) = parse_hunks(diff_text, "/r/nonl.txt")

        assert region.content == "a\nb\nC"
        assert region.missing_newline
        assert region.original_missing_newline

    def test_newline_added_at_eof(self) -> None:
        diff_text = "@@ -1 +1 @@\n-c\n\\ No newline at end of file\n+c\n"

        (region,) = parse_hunks(diff_text, "/r/x")

        assert region.original_missing_newline
        assert not region.missing_newline

    def test_crlf_lines_keep_carriage_return(self) -> None:
        diff_text = "@@ -1,2 +1,2 @@\n a\r\n-b\r\n+B\r\n"

        (region,) = parse_hunks(diff_text, "/r/w.txt")

        assert region.content == "a\r\nB\r"
        assert region.original_content == "a\r\nb\r"
        assert region.end_line == 3

    def test_form_feed_is_line_content(self) -> None:
        diff_text = "@@ -1 +1 @@\n-x\fy\n+x\fY\n"

        (region,) = parse_hunks(diff_text, "/r/f.txt")

        assert region.content == "x\fY"
        assert region.original_content == "x\fy"
        assert region.end_line == 2

    def test_empty_diff(self) -> None:
        assert parse_hunks("", "/r/x") == []


class TestRemovedText:
    """Tests for recovering a deleted file's content."""

    def test_recovers_content_with_trailing_newline(self) -> None:
        diff_text = """\
diff --git a/gone.txt b/gone.txt
deleted file mode 100644
--- a/gone.txt
+++ /dev/null
@@ -1,2 +0,0 @@
-first
-second
"""
        assert removed_text(diff_text) == "first\nsecond\n"

    def test_missing_final_newline_is_preserved(self) -> None:
        diff_text = """\
--- a/gone.txt
+++ /dev/null
@@ -1,2 +0,0 @@
-first
-second
\\ No newline at end of file
"""
        assert removed_text(diff_text) == "first\nsecond"

    def test_nothing_removed(self) -> None:
        assert removed_text("") is None
        assert removed_text("--- a/x\n+++ b/x\n@@ -0,0 +1 @@\n+added\n") is None
