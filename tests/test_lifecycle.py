"""Tests for profile create, rename, move, settings update and destroy."""

import os
from pathlib import Path

import pytest
from conftest import requires_symlinks
from factorio_profiles.errors import NameInUseError
from factorio_profiles.errors import ProfileIOError
from factorio_profiles.errors import ProfileValidationError
from factorio_profiles.errors import TargetExistsError
from factorio_profiles.lifecycle import expand_path
from factorio_profiles.lifecycle import sanitize_folder_name
from factorio_profiles.links import is_link
from factorio_profiles.links import item_exists
from factorio_profiles.models import Profile
from factorio_profiles.models import ShareSettings


def snapshot(root: Path) -> set[tuple[str, bool]]:
    """Relative paths under root, flagged when they are links."""
    entries = set()
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            full = Path(dirpath) / name
            entries.add((str(full.relative_to(root)), is_link(full)))
    return entries


class TestSanitizeFolderName:
    def test_strips_illegal_characters(self):
        assert sanitize_folder_name('a/b\\c<d>e:f?g|h*i"j') == "abcdefghij"

    def test_keeps_spaces_and_unicode(self):
        assert sanitize_folder_name("Space Age ✓") == "Space Age ✓"


class TestExpandPath:
    def test_expands_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert expand_path("~/profiles") == tmp_path / "profiles"

    def test_expands_percent_variables(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FACTORIO_TEST_ROOT", str(tmp_path))
        assert expand_path("%FACTORIO_TEST_ROOT%/profiles") == tmp_path / "profiles"

    def test_unknown_percent_variable_is_kept(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("FACTORIO_UNSET_VAR", raising=False)
        assert expand_path("%FACTORIO_UNSET_VAR%") == tmp_path / "%FACTORIO_UNSET_VAR%"

    def test_relative_path_becomes_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert expand_path("profiles").is_absolute()


@requires_symlinks
class TestCreate:
    def test_vanilla_profile_has_no_links(self, controller, store, profiles_root):
        profile = controller.create("vanilla")

        assert profile.path == profiles_root / "vanilla"
        assert profile.path.is_dir()
        assert list(profile.path.iterdir()) == []
        assert store.get_names() == ["vanilla"]

    def test_modded_profile_links_selected_resources(self, controller, global_dir):
        settings = ShareSettings(share_config=True, share_saves=True)

        profile = controller.create("modded", settings=settings)

        assert is_link(profile.path / "config")
        assert is_link(profile.path / "saves")
        assert not item_exists(profile.path / "mods")
        assert not item_exists(profile.path / "scenarios")
        assert not item_exists(profile.path / "blueprint-storage.dat")
        assert os.readlink(profile.path / "config") == str(global_dir / "config")

    def test_blueprint_only_profile_links_just_the_file(self, controller, link_creator):
        profile = controller.create("bp", settings=ShareSettings(share_blueprints=True))

        assert [p.name for p in profile.path.iterdir()] == ["blueprint-storage.dat"]
        assert is_link(profile.blueprint_file)
        assert len(link_creator.calls) == 1

    def test_uses_module_default_settings(self, controller, store):
        store.update_default_sharing_settings(ShareSettings(share_mods=True))

        profile = controller.create("defaults")

        assert profile.settings.share_mods is True
        assert is_link(profile.path / "mods")

    def test_explicit_path_is_used_as_is(self, controller, tmp_path):
        target = tmp_path / "elsewhere" / "my-profile"

        profile = controller.create("custom", path=target)

        assert profile.path == target
        assert target.is_dir()

    def test_folder_name_is_sanitized(self, controller, profiles_root):
        profile = controller.create("Space: Age?")

        assert profile.name == "Space: Age?"
        assert profile.path == profiles_root / "Space Age"

    def test_record_is_a_copy(self, controller, store):
        settings = ShareSettings()
        profile = controller.create("vanilla", settings=settings)

        settings.share_mods = True
        profile.settings.share_saves = True

        stored = store.get_profile("vanilla")
        assert stored.settings == ShareSettings()

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_name_is_rejected(self, controller, store, name):
        with pytest.raises(ProfileValidationError):
            controller.create(name)
        assert store.get_names() == []

    def test_name_of_only_illegal_characters_is_rejected(self, controller):
        with pytest.raises(ProfileValidationError):
            controller.create("???")

    def test_global_path_is_reserved(self, controller, global_dir, store):
        with pytest.raises(ProfileValidationError):
            controller.create("sneaky", path=global_dir)
        assert store.get_names() == []

    def test_taken_name_is_rejected_case_insensitively(self, controller, store):
        controller.create("Vanilla")

        with pytest.raises(NameInUseError):
            controller.create("VANILLA", path=store.get_default_path() + "/other")

    def test_existing_folder_is_rejected(self, controller, profiles_root, store):
        (profiles_root / "taken").mkdir()

        with pytest.raises(TargetExistsError) as exc_info:
            controller.create("taken")

        assert exc_info.value.path == profiles_root / "taken"
        assert store.get_names() == []

    def test_create_then_destroy_restores_state(self, controller, store, profiles_root, global_dir):
        before = snapshot(profiles_root)

        profile = controller.create("temp", settings=ShareSettings(share_mods=True, share_blueprints=True))
        controller.destroy(profile)

        assert snapshot(profiles_root) == before
        assert store.get_profiles() == []


@requires_symlinks
class TestRename:
    def test_moves_folder_and_record(self, controller, store, profiles_root):
        profile = controller.create("old", settings=ShareSettings(share_mods=True))

        controller.rename(profile, "new")

        assert not item_exists(profiles_root / "old")
        assert is_link(profiles_root / "new" / "mods")
        assert store.get_names() == ["new"]
        assert store.get_profile("new").path == profiles_root / "new"
        assert profile.name == "new"
        assert profile.path == profiles_root / "new"

    def test_existing_target_leaves_everything_intact(self, controller, store, profiles_root):
        profile = controller.create("old")
        (profiles_root / "new").mkdir()

        with pytest.raises(TargetExistsError):
            controller.rename(profile, "new")

        assert (profiles_root / "old").is_dir()
        assert store.get_names() == ["old"]
        assert profile.name == "old"

    def test_failed_move_leaves_record_intact(self, controller, store, profiles_root, monkeypatch):
        profile = controller.create("old")

        def fail(self, target):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(Path, "rename", fail)

        with pytest.raises(ProfileIOError) as exc_info:
            controller.rename(profile, "new")

        assert exc_info.value.detail == "Permission denied"
        assert store.get_profile("old").path == profiles_root / "old"
        assert store.get_profile("new") is None
        assert profile.name == "old"

    def test_taken_name_is_rejected(self, controller, store):
        first = controller.create("first")
        controller.create("second")

        with pytest.raises(NameInUseError):
            controller.rename(first, "Second")

        assert sorted(store.get_names()) == ["first", "second"]

    def test_same_folder_name_only_updates_record(self, controller, store, profiles_root):
        profile = controller.create("Space Age")

        controller.rename(profile, "Space: Age")

        assert (profiles_root / "Space Age").is_dir()
        assert store.get_names() == ["Space: Age"]

    def test_active_pointer_follows_rename(self, controller, store):
        profile = controller.create("old")
        store.set_active_profile_name("old")

        controller.rename(profile, "new")

        assert store.get_active_profile_name() == "new"

    def test_inactive_rename_keeps_pointer(self, controller, store):
        profile = controller.create("old")
        controller.create("other")
        store.set_active_profile_name("other")

        controller.rename(profile, "new")

        assert store.get_active_profile_name() == "other"


@requires_symlinks
class TestMove:
    def test_moves_folder_with_links(self, controller, store, tmp_path, global_dir):
        profile = controller.create("modded", settings=ShareSettings(share_mods=True))
        target = tmp_path / "moved" / "modded"

        controller.move(profile, target)

        assert not item_exists(tmp_path / "profiles" / "modded")
        assert is_link(target / "mods")
        assert os.readlink(target / "mods") == str(global_dir / "mods")
        assert store.get_profile("modded").path == target
        assert profile.path == target

    def test_occupied_target_is_rejected(self, controller, store, tmp_path):
        profile = controller.create("modded")
        occupied = tmp_path / "occupied"
        occupied.mkdir()

        with pytest.raises(TargetExistsError):
            controller.move(profile, occupied)

        assert profile.path.is_dir()
        assert store.get_profile("modded").path == profile.path

    def test_global_path_is_reserved(self, controller, global_dir):
        profile = controller.create("modded")

        with pytest.raises(ProfileValidationError):
            controller.move(profile, global_dir)

    def test_cannot_move_into_global_resource(self, controller, global_dir):
        (global_dir / "mods" / "shared.zip").write_text("mod")
        profile = controller.create("modded")

        with pytest.raises(ProfileValidationError):
            controller.move(profile, global_dir / "mods" / "modded")

        assert profile.path.is_dir()
        assert (global_dir / "mods" / "shared.zip").read_text() == "mod"

    def test_cannot_move_into_another_profile(self, controller, store):
        profile = controller.create("modded")
        other = controller.create("vanilla")

        with pytest.raises(ProfileValidationError):
            controller.move(profile, other.path / "nested")

        assert store.get_profile("modded").path == profile.path


class TestCheckProfileLocation:
    def test_free_location_is_expanded(self, controller, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert controller.check_profile_location("games/modded") == tmp_path / "games" / "modded"

    @pytest.mark.parametrize("relative", ["global", "global/saves", "."])
    def test_overlapping_global_is_rejected(self, controller, profiles_root, relative):
        """The global folder itself, anything inside it, and any folder containing it."""
        with pytest.raises(ProfileValidationError, match="reserved for the global profile"):
            controller.check_profile_location(profiles_root / relative)

    def test_existing_profile_folders_are_rejected(self, controller, store, tmp_path):
        store.add_profile(Profile(name="elsewhere", path=tmp_path / "games" / "elsewhere"))

        with pytest.raises(ProfileValidationError, match="elsewhere"):
            controller.check_profile_location(tmp_path / "games" / "elsewhere")
        with pytest.raises(ProfileValidationError):
            controller.check_profile_location(tmp_path / "games")

    def test_create_rejects_folder_inside_global(self, controller, global_dir, store):
        with pytest.raises(ProfileValidationError):
            controller.create("nested", path=global_dir / "nested")

        assert not (global_dir / "nested").exists()
        assert store.get_names() == []


@requires_symlinks
class TestUpdateSharingSettings:
    def test_applies_and_persists(self, controller, store):
        profile = controller.create("modded")

        changes = controller.update_sharing_settings(profile, ShareSettings(share_saves=True))

        assert [(c.action, c.path.name) for c in changes] == [("linked", "saves")]
        assert store.get_profile("modded").settings.share_saves is True
        assert profile.settings.share_saves is True

    def test_turning_off_removes_link(self, controller, store, global_dir):
        profile = controller.create("modded", settings=ShareSettings(share_saves=True))

        controller.update_sharing_settings(profile, ShareSettings())

        assert not item_exists(profile.path / "saves")
        assert (global_dir / "saves").is_dir()
        assert store.get_profile("modded").settings == ShareSettings()


@requires_symlinks
class TestDestroy:
    def test_removes_folder_and_record(self, controller, store, global_dir):
        (global_dir / "mods" / "shared.zip").write_text("mod")
        profile = controller.create("modded", settings=ShareSettings(share_mods=True))

        controller.destroy(profile)

        assert not item_exists(profile.path)
        assert store.get_profile("modded") is None
        assert (global_dir / "mods" / "shared.zip").read_text() == "mod"
        assert (global_dir / "blueprint-storage.dat").read_bytes() == b"global blueprints"

    def test_missing_folder_still_removes_record(self, controller, store):
        profile = controller.create("gone")
        os.rmdir(profile.path)

        controller.destroy(profile)

        assert store.get_profile("gone") is None

    def test_clears_active_pointer(self, controller, store):
        profile = controller.create("active")
        store.set_active_profile_name("ACTIVE")

        controller.destroy(profile)

        assert store.get_active_profile_name() is None

    def test_keeps_pointer_to_other_profile(self, controller, store):
        profile = controller.create("doomed")
        controller.create("keeper")
        store.set_active_profile_name("keeper")

        controller.destroy(profile)

        assert store.get_active_profile_name() == "keeper"
