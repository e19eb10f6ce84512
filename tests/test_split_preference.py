"""Tests for the default split preference and its local storage."""

import json
from decimal import Decimal

from app.services.split_preference import (
    DEFAULT_SPLIT_STORAGE_KEY,
    DefaultSplitPreference,
    LocalPreferenceStorage,
)


def test_missing_file_reads_as_unset(tmp_path):
    preference = DefaultSplitPreference(LocalPreferenceStorage(tmp_path / "none.json"))

    assert preference.load() is None
    assert preference.initial_split_ratio() == Decimal("0.85")


def test_save_persists_decimal_string_under_fixed_key(tmp_path):
    path = tmp_path / "prefs" / "preferences.json"
    preference = DefaultSplitPreference(LocalPreferenceStorage(path))

    preference.save(Decimal("0.9"))

    assert json.loads(path.read_text()) == {DEFAULT_SPLIT_STORAGE_KEY: "0.9"}
    assert preference.load() == Decimal("0.9")
    assert preference.initial_split_ratio() == Decimal("0.9")


def test_save_clamps_ratio(preference):
    assert preference.save("0.99") == Decimal("0.95")
    assert preference.load() == Decimal("0.95")


def test_value_is_shared_across_store_instances(tmp_path):
    path = tmp_path / "preferences.json"
    DefaultSplitPreference(LocalPreferenceStorage(path)).save("0.925")

    assert DefaultSplitPreference(LocalPreferenceStorage(path)).load() == Decimal("0.925")


def test_unparsable_stored_value_is_ignored(tmp_path):
    storage = LocalPreferenceStorage(tmp_path / "preferences.json")
    storage.set_item(DEFAULT_SPLIT_STORAGE_KEY, "eighty-five")

    assert DefaultSplitPreference(storage).load() is None


def test_out_of_range_stored_value_is_clamped_on_read(tmp_path):
    storage = LocalPreferenceStorage(tmp_path / "preferences.json")
    storage.set_item(DEFAULT_SPLIT_STORAGE_KEY, "0.3")

    assert DefaultSplitPreference(storage).load() == Decimal("0.50")


def test_corrupt_file_reads_as_empty(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text("{not json")

    preference = DefaultSplitPreference(LocalPreferenceStorage(path))
    assert preference.load() is None

    preference.save("0.8")
    assert preference.load() == Decimal("0.8")


def test_clear_removes_only_the_split_key(tmp_path):
    storage = LocalPreferenceStorage(tmp_path / "preferences.json")
    storage.set_item("showpro.activeTab", "fees")
    preference = DefaultSplitPreference(storage)
    preference.save("0.9")

    preference.clear()

    assert preference.load() is None
    assert storage.get_item("showpro.activeTab") == "fees"


def test_remove_missing_key_does_not_create_file(tmp_path):
    path = tmp_path / "preferences.json"
    LocalPreferenceStorage(path).remove_item(DEFAULT_SPLIT_STORAGE_KEY)

    assert not path.exists()
