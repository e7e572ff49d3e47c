"""Line diffs between the remote article body and the composed document"""

import difflib


def diff_summary(old: str, new: str) -> dict[str, int]:
    """Added and deleted line counts between two texts."""
    matcher = difflib.SequenceMatcher(None, old.splitlines(), new.splitlines())
    added = deleted = 0

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag in ("replace", "delete"):
            deleted += i2 - i1
        if tag in ("replace", "insert"):
            added += j2 - j1

    return {"added": added, "deleted": deleted}


def unified_diff(
    old: str,
    new: str,
    from_label: str = "remote",
    to_label: str = "local",
    context: int = 3,
    ) -> list[str]:
    """Return unified diff lines comparing old to new. Empty list if identical.

    Every returned line ends with a newline, including the last one when the
    inputs do not.
    """
    old_lines = old.splitlines(keepends=True)
    new_lines = new.splitlines(keepends=True)
    return [
        line if line.endswith("\n") else line + "\n"
        for line in difflib.unified_diff(old_lines, new_lines, fromfile=from_label, tofile=to_label, n=context)
    ]
