from datetime import datetime, timezone
from uuid import uuid4
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from localify.models.enums import FileType


def gen_id():
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _Manifest(BaseModel):
    # project.json uses camelCase keys; python code uses snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileVersion(_Manifest):
    """Snapshot of a file's content taken just before an edit replaced it."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=gen_id)
    content: str
    created_at: datetime = Field(default_factory=utcnow)
    comment: str | None = None


class ProjectFile(_Manifest):
    id: str = Field(default_factory=gen_id, frozen=True)
    name: str
    type: FileType
    content: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    # most recent first
    versions: list[FileVersion] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _plain_name(cls, v: str) -> str:
        if not v or v in (".", "..") or "/" in v or "\\" in v:
            raise ValueError(f"invalid file name {v!r}")
        return v

    @property
    def filename(self) -> str:
        return f"{self.name}.{self.type.extension}"


class Project(_Manifest):
    id: str = Field(default_factory=gen_id, frozen=True)
    name: str
    files: list[ProjectFile] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def get_file(self, file_id: str) -> ProjectFile | None:
        return next((f for f in self.files if f.id == file_id), None)

    def touch(self):
        self.updated_at = max(utcnow(), self.updated_at)

    def add_file(self, file: ProjectFile):
        self.files.append(file)
        self.touch()

    def update_file(
        self,
        file_id: str,
        content: str,
        version_comment: str | None = None,
        previous_content: str | None = None,
    ):
        """Replace a file's content, pushing the old content onto its history.

        ``previous_content`` overrides what gets snapshotted, for callers that
        know the last saved content better than the in-memory file does.
        Unknown ids are ignored.
        """
        f = self.get_file(file_id)
        if f is None:
            return
        snapshot = f.content if previous_content is None else previous_content
        f.versions.insert(0, FileVersion(content=snapshot, comment=version_comment))
        f.content = content
        f.updated_at = max(utcnow(), f.updated_at)
        self.touch()

    def delete_file(self, file_id: str):
        self.files = [f for f in self.files if f.id != file_id]
        self.touch()
