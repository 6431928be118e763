import os, shutil, logging
from pathlib import Path
from typing import Iterable
from pydantic import ValidationError
from localify.models.enums import FileType
from localify.models.project import FileVersion, Project, ProjectFile, utcnow
from localify.services.fs import atomic_write_text
from localify.services.templates import DEFAULT_FILES, default_template

log = logging.getLogger("localify.store")

MANIFEST_NAME = "project.json"
FIRST_PROJECT_NAME = "My First Project"
RECOVERED_PROJECT_NAME = "Recovered Project"


def seed_default_files(project: Project):
    for name, file_type in DEFAULT_FILES:
        project.add_file(
            ProjectFile(name=name, type=file_type, content=default_template(file_type))
        )


class ProjectStore:
    """Projects persisted under one root directory, one subdirectory per project.

    Each project directory holds ``project.json`` (the full manifest including
    version history) and one flat ``{name}.{ext}`` artifact per file carrying
    just its current content. The artifacts are derived from the manifest and
    are rewritten on every save; ``load_projects`` repairs any that are missing.

    Save and load paths absorb I/O and decode errors: they are logged and
    reported through return values, never raised.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self._ensure_root()

    def _ensure_root(self):
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError:
            log.exception("could not create projects directory %s", self.root)

    def project_dir(self, project_id: str) -> Path:
        return self.root / project_id

    def manifest_path(self, project_id: str) -> Path:
        return self.project_dir(project_id) / MANIFEST_NAME

    def artifact_path(self, project_id: str, file: ProjectFile) -> Path:
        return self.project_dir(project_id) / file.filename

    # -- projects -------------------------------------------------------------

    def create_project(self, name: str) -> Project:
        project = Project(name=name)
        seed_default_files(project)
        self.save_project(project)
        return project

    def save_project(self, project: Project) -> bool:
        pdir = self.project_dir(project.id)
        try:
            pdir.mkdir(parents=True, exist_ok=True)
            atomic_write_text(
                self.manifest_path(project.id),
                project.model_dump_json(by_alias=True, exclude_none=True, indent=2),
            )
            for f in project.files:
                atomic_write_text(self.artifact_path(project.id, f), f.content)
            os.utime(pdir)
        except OSError:
            log.exception("failed to save project %s", project.id)
            return False
        return True

    def load_project(self, project_id: str) -> Project | None:
        try:
            raw = self.manifest_path(project_id).read_text(encoding="utf-8")
            return Project.model_validate_json(raw)
        except (OSError, ValueError):
            # ValidationError and UnicodeDecodeError are both ValueErrors
            return None

    def load_projects(self) -> list[Project]:
        self._ensure_root()
        try:
            dirs = sorted(
                p
                for p in self.root.iterdir()
                if p.is_dir() and not p.name.startswith(".")
            )
        except OSError:
            log.exception("failed to list projects in %s", self.root)
            dirs = []

        if not dirs:
            log.info("no projects found, creating %r", FIRST_PROJECT_NAME)
            return [self.create_project(FIRST_PROJECT_NAME)]

        return [self._load_or_recover(d) for d in dirs]

    def _load_or_recover(self, pdir: Path) -> Project:
        manifest = pdir / MANIFEST_NAME
        try:
            project = Project.model_validate_json(manifest.read_text(encoding="utf-8"))
        except FileNotFoundError:
            log.warning("missing %s in %s, recovering", MANIFEST_NAME, pdir.name)
            return self._recover(pdir.name)
        except (OSError, ValueError) as e:
            log.warning("failed to decode project %s (%s), recovering", pdir.name, e)
            return self._recover(pdir.name)

        if project.id != pdir.name:
            # the directory name is what preview URLs and later saves resolve to
            log.warning(
                "manifest id %s does not match directory %s, rebinding",
                project.id,
                pdir.name,
            )
            project = project.model_copy(update={"id": pdir.name})
            self.save_project(project)
        self._repair_artifacts(pdir, project)
        return project

    def _recover(self, project_id: str) -> Project:
        project = Project(id=project_id, name=RECOVERED_PROJECT_NAME)
        seed_default_files(project)
        self.save_project(project)
        return project

    def _repair_artifacts(self, pdir: Path, project: Project):
        for f in project.files:
            path = pdir / f.filename
            if path.exists():
                continue
            content = f.content or default_template(f.type)
            try:
                atomic_write_text(path, content)
                log.info("recreated missing artifact %s/%s", pdir.name, f.filename)
            except OSError:
                log.exception("could not recreate %s/%s", pdir.name, f.filename)

    def delete_project(self, project: Project) -> bool:
        try:
            shutil.rmtree(self.project_dir(project.id))
        except FileNotFoundError:
            pass
        except OSError:
            log.exception("failed to delete project %s", project.id)
            return False
        return True

    # -- files ----------------------------------------------------------------
    # These mutate the given project in place and persist it.

    def add_file(self, file: ProjectFile, project: Project) -> Project:
        project.add_file(file)
        self.save_project(project)
        return project

    def update_file(
        self,
        file: ProjectFile,
        project: Project,
        version_comment: str | None = None,
    ) -> Project:
        # snapshot the last saved content; *file* may be the project's own
        # entry, already edited in place
        project.update_file(
            file.id,
            file.content,
            version_comment,
            previous_content=self._saved_content(project.id, file.id),
        )
        self.save_project(project)
        return project

    def _saved_content(self, project_id: str, file_id: str) -> str | None:
        saved = self.load_project(project_id)
        f = saved.get_file(file_id) if saved else None
        return f.content if f else None

    def delete_file(self, file: ProjectFile, project: Project) -> bool:
        path = self.artifact_path(project.id, file)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            # keep the file listed so the manifest still describes what is on disk
            log.exception("failed to remove %s from project %s", path.name, project.id)
            return False
        project.delete_file(file.id)
        return self.save_project(project)

    def import_files(self, paths: Iterable[Path], project: Project) -> list[ProjectFile]:
        added = []
        for path in map(Path, paths):
            try:
                file_type = FileType(path.suffix.lower().lstrip("."))
            except ValueError:
                log.info("skipping import of unsupported file %s", path.name)
                continue
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                log.warning("skipping unreadable import %s", path, exc_info=True)
                continue
            try:
                f = ProjectFile(name=path.stem, type=file_type, content=content)
            except ValidationError:
                log.info("skipping import with invalid name %s", path.name)
                continue
            project.add_file(f)
            added.append(f)
        if added:
            self.save_project(project)
        return added

    # -- version history ------------------------------------------------------

    def get_file_versions(
        self, file_id: str, project_id: str
    ) -> list[FileVersion] | None:
        project = self.load_project(project_id)
        if project is None:
            return None
        f = project.get_file(file_id)
        return list(f.versions) if f else None

    def restore_file_version(
        self, file_id: str, version_id: str, project_id: str
    ) -> bool:
        # The content being replaced is not snapshotted, so a restore cannot
        # itself be undone through the version history.
        project = self.load_project(project_id)
        if project is None:
            return False
        f = project.get_file(file_id)
        if f is None:
            return False
        version = next((v for v in f.versions if v.id == version_id), None)
        if version is None:
            return False
        f.content = version.content
        f.updated_at = max(utcnow(), f.updated_at)
        project.touch()
        return self.save_project(project)
