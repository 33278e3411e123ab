# SPDX-License-Identifier: MIT
"""Tests for the artifact file handle."""

from __future__ import annotations

from pathlib import Path

import pytest

from dist_integrity import ArtifactError, ArtifactFile, rewinding


class TestArtifactFileOpen:
    """Tests for ArtifactFile.open."""

    def test_open_regular_file(self, artifact_path: Path) -> None:
        with ArtifactFile.open(artifact_path) as artifact:
            assert artifact.name == "app"
            assert artifact.size == artifact_path.stat().st_size
            assert not artifact.closed
        assert artifact.closed

    def test_directory_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ArtifactError, match="is a directory \\(must be a file\\)"):
            ArtifactFile.open(tmp_path)

    def test_missing_file(self, tmp_path: Path) -> None:
        missing = tmp_path / "missing"
        with pytest.raises(ArtifactError, match="is not readable \\(no such file or directory\\)"):
            ArtifactFile.open(missing)

    def test_home_expansion(self, artifact_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(artifact_path.parent))
        with ArtifactFile.open("~/app") as artifact:
            assert artifact.path == artifact_path

    def test_unexpandable_user(self) -> None:
        with pytest.raises(ArtifactError, match="is not expandable"):
            ArtifactFile.open("~no-such-user-for-dist-tests/app")

    def test_closed_on_error(self, artifact_path: Path) -> None:
        """Test that the handle is released when the pipeline body raises."""
        with pytest.raises(RuntimeError):
            with ArtifactFile.open(artifact_path) as artifact:
                raise RuntimeError("boom")
        assert artifact.closed


class TestRewound:
    """Tests for scoped stream access."""

    def test_each_pass_sees_full_content(self, artifact_path: Path) -> None:
        content = artifact_path.read_bytes()
        with ArtifactFile.open(artifact_path) as artifact:
            for _ in range(3):
                with artifact.rewound() as stream:
                    assert stream.read() == content

    def test_reset_after_failure(self, artifact_path: Path) -> None:
        with ArtifactFile.open(artifact_path) as artifact:
            with pytest.raises(ValueError):
                with artifact.rewound() as stream:
                    stream.read(10)
                    raise ValueError("failed mid-read")
            assert artifact.stream.tell() == 0

    def test_rewinding_seeks_before_yield(self, artifact_path: Path) -> None:
        with ArtifactFile.open(artifact_path) as artifact:
            artifact.stream.seek(7)
            with rewinding(artifact.stream) as stream:
                assert stream.tell() == 0
