"""Path resolution shared by every filesystem-facing tool."""

import os


def resolve_path(path: str, cwd: str) -> str:
    """Resolve a tool-supplied path against the working directory.

    Resolution is purely syntactic; no existence check is performed.

    Args:
        path: Path as given by the model (may be empty, ``.``, ``~/...``,
            absolute or relative)
        cwd: Working directory used for relative paths

    Returns:
        Absolute path string
    """
    raw = str(path or "").strip()
    if not raw or raw == ".":
        return cwd
    if raw.startswith("~"):
        return os.path.expanduser(raw)
    if raw.startswith("/"):
        return raw
    return os.path.join(cwd, raw)
