"""Tests for writing artifacts to disk."""

import os

import pytest

from crudgen.codegen.core.errors import (
    ArtifactWriteError,
    RollbackIncompleteError,
    TemplateError,
)
from crudgen.codegen.core.generator import (
    ArtifactKind,
    GeneratedArtifact,
    GenerationResult,
)
from crudgen.writer import STAGING_PREFIX, check_targets, materialize


@pytest.fixture
def result():
    return GenerationResult(artifacts=[
        GeneratedArtifact(ArtifactKind.MODEL, "internal/domain/tag/model.go", "package tag\n"),
        GeneratedArtifact(ArtifactKind.SERVICE, "internal/domain/tag/service.go", "package tag\n"),
        GeneratedArtifact(ArtifactKind.DOCUMENTATION, "README_tag.md", "# Tag\n"),
    ])


def fail_on_call(monkeypatch, *call_numbers):
    """Make the given os.replace calls (1-based) raise."""
    real_replace = os.replace
    calls = {"count": 0}

    def flaky_replace(src, dst):
        calls["count"] += 1
        if calls["count"] in call_numbers:
            raise OSError("disk full")
        return real_replace(src, dst)

    monkeypatch.setattr(os, "replace", flaky_replace)


def tree(root):
    return sorted(
        os.path.relpath(os.path.join(dirpath, name), root)
        for dirpath, dirnames, filenames in os.walk(root)
        for name in dirnames + filenames
    )


class TestMaterialize:
    """Tests for successful and refused writes."""

    def test_writes_all_files(self, result, tmp_path):
        written = materialize(result, tmp_path)

        assert written == [tmp_path / a.path for a in result.artifacts]
        for artifact in result.artifacts:
            assert (tmp_path / artifact.path).read_text(encoding="utf-8") == artifact.content

    def test_no_staging_left_behind(self, result, tmp_path):
        materialize(result, tmp_path)

        assert not [p for p in tmp_path.iterdir() if p.name.startswith(STAGING_PREFIX)]

    def test_creates_output_directory(self, result, tmp_path):
        out_dir = tmp_path / "new" / "project"

        materialize(result, out_dir)

        assert (out_dir / "README_tag.md").exists()

    def test_refuses_to_overwrite(self, result, tmp_path):
        existing = tmp_path / "README_tag.md"
        existing.write_text("mine\n", encoding="utf-8")

        with pytest.raises(ArtifactWriteError, match="Refusing to overwrite"):
            materialize(result, tmp_path)

        assert existing.read_text(encoding="utf-8") == "mine\n"
        assert tree(tmp_path) == ["README_tag.md"]

    def test_force_overwrites(self, result, tmp_path):
        existing = tmp_path / "README_tag.md"
        existing.write_text("mine\n", encoding="utf-8")

        materialize(result, tmp_path, force=True)

        assert existing.read_text(encoding="utf-8") == "# Tag\n"

    def test_failed_result(self, tmp_path):
        failed = GenerationResult.error("boom", TemplateError("boom"))

        with pytest.raises(ArtifactWriteError, match="failed generation result"):
            materialize(failed, tmp_path)

        assert tree(tmp_path) == []

    @pytest.mark.parametrize("path", ["../escape.go", "/etc/passwd", "a/../../b.go"])
    def test_rejects_paths_outside_output(self, tmp_path, path):
        bad = GenerationResult(artifacts=[GeneratedArtifact(ArtifactKind.MODEL, path, "x")])

        with pytest.raises(ArtifactWriteError, match="outside the output directory"):
            materialize(bad, tmp_path / "out")

        assert not (tmp_path / "out").exists()


class TestRollback:
    """A failed move leaves the output directory as it was."""

    def test_new_files_removed(self, result, tmp_path, monkeypatch):
        fail_on_call(monkeypatch, 3)

        with pytest.raises(ArtifactWriteError, match="rolled back"):
            materialize(result, tmp_path)

        assert tree(tmp_path) == []

    def test_overwritten_file_restored(self, result, tmp_path, monkeypatch):
        model = tmp_path / "internal" / "domain" / "tag" / "model.go"
        model.parent.mkdir(parents=True)
        model.write_text("old\n", encoding="utf-8")

        # backup of model.go, model.go into place, then service.go fails
        fail_on_call(monkeypatch, 3)

        with pytest.raises(ArtifactWriteError):
            materialize(result, tmp_path, force=True)

        assert model.read_text(encoding="utf-8") == "old\n"
        assert tree(tmp_path) == [
            "internal",
            os.path.join("internal", "domain"),
            os.path.join("internal", "domain", "tag"),
            os.path.join("internal", "domain", "tag", "model.go"),
        ]

    def test_failed_restore_keeps_backups(self, result, tmp_path, monkeypatch):
        model = tmp_path / "internal" / "domain" / "tag" / "model.go"
        model.parent.mkdir(parents=True)
        model.write_text("old\n", encoding="utf-8")

        # service.go fails to move, then restoring model.go fails too
        fail_on_call(monkeypatch, 3, 4)

        with pytest.raises(RollbackIncompleteError) as exc_info:
            materialize(result, tmp_path, force=True)

        staging = exc_info.value.staging_dir
        assert str(staging) in str(exc_info.value)
        assert str(model) in str(exc_info.value)
        assert staging.name.startswith(STAGING_PREFIX)
        assert (staging / "backup" / "0").read_text(encoding="utf-8") == "old\n"

    def test_failed_move_of_overwritten_file_restores_it(self, result, tmp_path,
                                                          monkeypatch):
        model = tmp_path / "internal" / "domain" / "tag" / "model.go"
        model.parent.mkdir(parents=True)
        model.write_text("old\n", encoding="utf-8")

        # backup of model.go succeeds, moving the new model.go in fails
        fail_on_call(monkeypatch, 2)

        with pytest.raises(ArtifactWriteError, match="rolled back"):
            materialize(result, tmp_path, force=True)

        assert model.read_text(encoding="utf-8") == "old\n"
        assert not any(p.name.startswith(STAGING_PREFIX) for p in tmp_path.iterdir())


class TestCheckTargets:
    """Tests for reporting files that would be overwritten."""

    def test_none_existing(self, result, tmp_path):
        assert check_targets(result, tmp_path) == []

    def test_existing(self, result, tmp_path):
        (tmp_path / "README_tag.md").write_text("x", encoding="utf-8")

        assert check_targets(result, tmp_path) == [tmp_path / "README_tag.md"]
