import enum


class FileType(str, enum.Enum):
    html = "html"
    css = "css"
    js = "js"

    @property
    def extension(self) -> str:
        return self.value

    @classmethod
    def from_extension(cls, ext: str) -> "FileType | None":
        """Map a file extension (with or without the dot) to a project file type."""
        return _EXTENSION_TYPES.get(ext.lower().lstrip("."))


_EXTENSION_TYPES = {
    "html": FileType.html,
    "htm": FileType.html,
    "css": FileType.css,
    "js": FileType.js,
}


class ServerState(str, enum.Enum):
    stopped = "stopped"
    starting = "starting"
    running = "running"
