import os, tempfile
from pathlib import Path


def atomic_write_bytes(path: Path, data: bytes):
    """Write bytes to a temp file beside *path*, then rename it into place."""
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def atomic_write_text(path: Path, content: str, encoding: str = "utf-8"):
    atomic_write_bytes(path, content.encode(encoding))
