"""Pytest configuration for factorio-profiles tests."""

import os
from collections.abc import Sequence
from pathlib import Path

import pytest
from factorio_profiles.lifecycle import ProfileController
from factorio_profiles.links import SymlinkCreator
from factorio_profiles.models import ResourceKind
from factorio_profiles.prompts import Choice
from factorio_profiles.record_store import InMemoryRecordStore

requires_symlinks = pytest.mark.skipif(os.name == "nt", reason="creating symlinks needs privilege on Windows")


class ScriptedChooser:
    """Chooser that answers from a fixed script and records every prompt."""

    def __init__(self, choices: Sequence[int] = (), texts: Sequence[str] = ()):
        self.choices = list(choices)
        self.texts = list(texts)
        self.prompts: list[str] = []

    def present_choice(self, prompt: str, options: Sequence[Choice]) -> int:
        self.prompts.append(prompt)
        return self.choices.pop(0)

    def ask_text(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.texts.pop(0)


class RecordingLinkCreator(SymlinkCreator):
    """Real symlinks, with a log of every call."""

    def __init__(self):
        self.calls: list[tuple[Path, Path, ResourceKind]] = []

    def create_link(self, link_path: Path, target_path: Path, kind: ResourceKind) -> None:
        self.calls.append((link_path, target_path, kind))
        super().create_link(link_path, target_path, kind)


@pytest.fixture
def profiles_root(tmp_path):
    root = tmp_path / "profiles"
    root.mkdir()
    return root


@pytest.fixture
def global_dir(profiles_root):
    """Global profile with real content for every shareable resource."""
    path = profiles_root / "global"
    for name in ("config", "mods", "saves", "scenarios"):
        (path / name).mkdir(parents=True)
    (path / "blueprint-storage.dat").write_bytes(b"global blueprints")
    return path


@pytest.fixture
def store(profiles_root):
    return InMemoryRecordStore(default_save_path=str(profiles_root))


@pytest.fixture
def link_creator():
    return RecordingLinkCreator()


@pytest.fixture
def controller(store, global_dir, link_creator):
    return ProfileController(store, global_dir, link_creator=link_creator)
