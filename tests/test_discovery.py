"""Tests for file discovery."""

import os

import pytest

from antimoji.config import Profile
from antimoji.discovery import DiscoveryError, discover_files, should_include


@pytest.fixture
def project(tmp_path):
    for rel in [
        "README.md",
        "src/app.py",
        "src/app.min.js",
        "src/gen/model.generated.py",
        "node_modules/pkg/index.js",
        "vendor/lib.go",
        "build/out.txt",
        "docs/guide.md",
    ]:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("x", encoding="utf-8")
    return tmp_path


def _rel(root, files):
    return sorted(os.path.relpath(f, root).replace(os.sep, "/") for f in files)


# ── Walking ──────────────────────────────────────────────────────────

def test_recursive_walk_applies_ignore_lists(project):
    files = discover_files([str(project)], Profile())
    assert _rel(project, files) == ["README.md", "docs/guide.md", "src/app.py"]


def test_include_glob(project):
    files = discover_files([str(project)], Profile(), include="*.md")
    assert _rel(project, files) == ["README.md", "docs/guide.md"]


def test_exclude_glob(project):
    files = discover_files([str(project)], Profile(), exclude="docs/*")
    assert _rel(project, files) == ["README.md", "src/app.py"]


def test_profile_include_patterns(project):
    files = discover_files([str(project)], Profile(include_patterns=["*.py"]))
    assert _rel(project, files) == ["src/app.py"]


def test_directory_requires_recursion(project):
    with pytest.raises(DiscoveryError):
        discover_files([str(project)], Profile(recursive=False))


def test_recursive_flag_overrides_profile(project):
    files = discover_files([str(project / "docs")], Profile(recursive=False), recursive=True)
    assert _rel(project, files) == ["docs/guide.md"]


def test_explicit_file_and_missing_path(project):
    missing = str(project / "nope.txt")
    files = discover_files([str(project / "README.md"), missing], Profile())
    assert files == [str(project / "README.md"), missing]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="needs symlinks")
def test_symlinks_skipped_by_default(project):
    os.symlink(project / "README.md", project / "link.md")
    assert "link.md" not in _rel(project, discover_files([str(project)], Profile()))
    followed = discover_files([str(project)], Profile(follow_symlinks=True))
    assert "link.md" in _rel(project, followed)


# ── Rules ────────────────────────────────────────────────────────────

def test_should_include_rules():
    profile = Profile()
    assert should_include("src/app.py", profile)
    assert not should_include("node_modules/x/y.js", profile)
    assert not should_include("lib/jquery.min.js", profile)
    assert not should_include("model.generated.ts", profile)
    assert not should_include("a/b/model.generated.ts", profile)


def test_exclude_wins_over_include():
    profile = Profile(include_patterns=["*.js"])
    assert should_include("app.js", profile)
    assert not should_include("app.min.js", profile)
