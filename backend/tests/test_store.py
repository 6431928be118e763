"""
ProjectStore against a real temporary Projects directory.
"""

import json
import pytest
from localify.models.enums import FileType
from localify.models.project import ProjectFile
from localify.services.store import FIRST_PROJECT_NAME, RECOVERED_PROJECT_NAME
from localify.services.templates import default_template

DEFAULT_FILENAMES = {"index.html", "styles.css", "script.js"}


def _filenames(project):
    return {f.filename for f in project.files}


def test_create_project_seeds_and_persists_defaults(store):
    p = store.create_project("Site")
    pdir = store.project_dir(p.id)

    assert _filenames(p) == DEFAULT_FILENAMES
    assert (pdir / "project.json").is_file()
    for f in p.files:
        assert (pdir / f.filename).read_text() == default_template(f.type)
    assert 'href="styles.css"' in default_template(FileType.html)
    assert 'src="script.js"' in default_template(FileType.html)

    manifest = json.loads((pdir / "project.json").read_text())
    assert manifest["id"] == p.id
    assert manifest["name"] == "Site"
    assert len(manifest["files"]) == 3


def test_save_leaves_no_temp_files(store):
    p = store.create_project("Site")
    store.save_project(p)
    leftovers = [x.name for x in store.project_dir(p.id).iterdir() if x.name.endswith(".tmp")]
    assert leftovers == []


def test_load_projects_on_empty_root_creates_first_project(store):
    projects = store.load_projects()
    assert len(projects) == 1
    p = projects[0]
    assert p.name == FIRST_PROJECT_NAME
    assert _filenames(p) == DEFAULT_FILENAMES

    loaded = store.load_project(p.id)
    assert loaded is not None
    assert loaded.name == FIRST_PROJECT_NAME


def test_load_projects_ignores_stray_files_and_hidden_dirs(store):
    (store.root / ".DS_Store").write_text("x")
    (store.root / ".cache").mkdir()
    p = store.create_project("Only")
    assert [x.id for x in store.load_projects()] == [p.id]


@pytest.mark.parametrize("manifest", [None, "{not json", '{"id": "x"}', b"\xff\xfe"])
def test_load_projects_recovers_broken_project(store, manifest):
    pdir = store.root / "broken-project"
    pdir.mkdir()
    if isinstance(manifest, bytes):
        (pdir / "project.json").write_bytes(manifest)
    elif manifest is not None:
        (pdir / "project.json").write_text(manifest)

    projects = store.load_projects()
    assert len(projects) == 1
    recovered = projects[0]
    assert recovered.id == "broken-project"
    assert recovered.name == RECOVERED_PROJECT_NAME
    assert _filenames(recovered) == DEFAULT_FILENAMES

    again = store.load_project("broken-project")
    assert again is not None
    assert again.id == "broken-project"
    assert _filenames(again) == DEFAULT_FILENAMES
    assert (pdir / "styles.css").is_file()


def test_one_broken_project_does_not_hide_the_others(store):
    good = store.create_project("Good")
    (store.root / "bad").mkdir()
    (store.root / "bad" / "project.json").write_text("garbage")
    ids = {p.id for p in store.load_projects()}
    assert ids == {good.id, "bad"}


def test_load_projects_recreates_missing_artifacts(store):
    p = store.create_project("Site")
    css = next(f for f in p.files if f.type is FileType.css)
    store.update_file(css.model_copy(update={"content": "body{}"}), p)
    blank = ProjectFile(name="blank", type=FileType.js, content="")
    store.add_file(blank, p)

    pdir = store.project_dir(p.id)
    (pdir / "styles.css").unlink()
    (pdir / "blank.js").unlink()

    store.load_projects()
    assert (pdir / "styles.css").read_text() == "body{}"
    assert (pdir / "blank.js").read_text() == default_template(FileType.js)


def test_load_project_returns_none_when_absent_or_unreadable(store):
    assert store.load_project("nope") is None
    (store.root / "bad").mkdir()
    (store.root / "bad" / "project.json").write_text("[]")
    assert store.load_project("bad") is None


def test_add_and_update_file_persist(store):
    p = store.create_project("Site")
    about = ProjectFile(name="about", type=FileType.html, content="<p>hi</p>")
    store.add_file(about, p)
    assert (store.project_dir(p.id) / "about.html").read_text() == "<p>hi</p>"

    store.update_file(
        about.model_copy(update={"content": "<p>bye</p>"}), p, version_comment="tone"
    )
    loaded = store.load_project(p.id)
    f = loaded.get_file(about.id)
    assert f.content == "<p>bye</p>"
    assert [(v.content, v.comment) for v in f.versions] == [("<p>hi</p>", "tone")]
    assert (store.project_dir(p.id) / "about.html").read_text() == "<p>bye</p>"


def test_delete_file_removes_artifact_and_manifest_entry(store):
    p = store.create_project("Site")
    js = next(f for f in p.files if f.type is FileType.js)

    assert store.delete_file(js, p) is True
    assert not (store.project_dir(p.id) / "script.js").exists()
    loaded = store.load_project(p.id)
    assert js.id not in {f.id for f in loaded.files}
    assert len(loaded.files) == 2


def test_delete_file_keeps_state_when_artifact_cannot_be_removed(store):
    p = store.create_project("Site")
    js = next(f for f in p.files if f.type is FileType.js)
    artifact = store.project_dir(p.id) / "script.js"
    artifact.unlink()
    artifact.mkdir()  # unlink() on a directory fails

    assert store.delete_file(js, p) is False
    assert p.get_file(js.id) is not None
    assert store.load_project(p.id).get_file(js.id) is not None


def test_delete_project(store):
    p = store.create_project("Gone")
    assert store.delete_project(p) is True
    assert not store.project_dir(p.id).exists()
    assert store.delete_project(p) is True


def test_version_history_and_restore(store):
    p = store.create_project("Site")
    html = next(f for f in p.files if f.type is FileType.html)
    seeded = html.content
    for text in ("one", "two"):
        store.update_file(html.model_copy(update={"content": text}), p)

    versions = store.get_file_versions(html.id, p.id)
    assert [v.content for v in versions] == ["one", seeded]

    before = store.load_project(p.id)
    target = versions[1]
    assert store.restore_file_version(html.id, target.id, p.id) is True

    after = store.load_project(p.id)
    f = after.get_file(html.id)
    assert f.content == seeded
    assert f.updated_at >= before.get_file(html.id).updated_at
    assert after.updated_at >= before.updated_at
    # restoring does not add a history entry
    assert len(f.versions) == 2
    assert (store.project_dir(p.id) / "index.html").read_text() == seeded


def test_restore_with_unknown_ids_changes_nothing(store):
    p = store.create_project("Site")
    html = next(f for f in p.files if f.type is FileType.html)
    store.update_file(html.model_copy(update={"content": "edited"}), p)
    vid = store.get_file_versions(html.id, p.id)[0].id
    manifest = store.manifest_path(p.id)
    snapshot = manifest.read_text()

    assert store.restore_file_version(html.id, vid, "no-such-project") is False
    assert store.restore_file_version("no-such-file", vid, p.id) is False
    assert store.restore_file_version(html.id, "no-such-version", p.id) is False
    assert manifest.read_text() == snapshot


def test_get_file_versions_unknown(store):
    p = store.create_project("Site")
    assert store.get_file_versions("x", p.id) is None
    assert store.get_file_versions("x", "missing") is None


def test_import_files_skips_unsupported_and_unreadable(store, tmp_path):
    src = tmp_path / "import"
    src.mkdir()
    (src / "extra.css").write_text("h2{}")
    (src / "Widget.JS").write_text("let a = 1;")
    (src / "notes.txt").write_text("nope")
    (src / "binary.html").write_bytes(b"\xff\xfe\x00")

    p = store.create_project("Site")
    added = store.import_files(
        [src / "extra.css", src / "Widget.JS", src / "notes.txt", src / "binary.html", src / "missing.js"],
        p,
    )

    assert [(f.name, f.type) for f in added] == [("extra", FileType.css), ("Widget", FileType.js)]
    loaded = store.load_project(p.id)
    assert {"extra.css", "Widget.js"} <= _filenames(loaded)
    assert (store.project_dir(p.id) / "Widget.js").read_text() == "let a = 1;"


def test_update_file_snapshots_saved_content_when_edited_in_place(store):
    p = store.create_project("Site")
    html = next(f for f in p.files if f.type is FileType.html)
    seeded = html.content

    html.content = "edited"
    store.update_file(html, p, version_comment="in place")
    html.content = "edited again"
    store.update_file(html, p)

    versions = store.get_file_versions(html.id, p.id)
    assert [v.content for v in versions] == ["edited", seeded]
    assert versions[1].comment == "in place"
    assert store.load_project(p.id).get_file(html.id).content == "edited again"


def test_load_projects_rebinds_mismatched_manifest_id(store):
    p = store.create_project("Moved")
    moved = store.root / "renamed-dir"
    store.project_dir(p.id).rename(moved)

    projects = store.load_projects()
    assert [x.id for x in projects] == ["renamed-dir"]
    assert projects[0].name == "Moved"
    assert json.loads((moved / "project.json").read_text())["id"] == "renamed-dir"
    assert not store.project_dir(p.id).exists()

    store.save_project(projects[0])
    assert [d.name for d in store.root.iterdir()] == ["renamed-dir"]
