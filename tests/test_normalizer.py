"""
Unit tests for canonical key normalization.
The key is shared by clustering and scoring, so these cases pin both paths.
"""
import pytest

from arcdupe.core.normalizer import normalize_key


class TestNormalizeKey:
    """Extension, separator, version and noise handling."""

    @pytest.mark.parametrize("filename, expected", [
        ("Report_v2.zip", "report"),
        ("Report_v3", "report"),
        ("Dragon Bust (1).rar", "dragon bust"),
        ("knight-v1.2-presupported.7z", "knight"),
        ("Castle_Gate_version 4.zip", "castle gate"),
        ("[Patreon] Orc Warrior rev2.zip", "orc warrior"),
        ("model.part1.rar", "model"),
        ("set.zip.001", "set"),
        ("Ship+Hull-FINAL copy.7z", "ship hull"),
    ])
    def test_known_names(self, filename, expected):
        assert normalize_key(filename) == expected

    def test_is_case_insensitive(self):
        assert normalize_key("DRAGON.ZIP") == normalize_key("dragon.zip")

    def test_is_idempotent(self):
        """Normalizing a key again never changes it."""
        names = ["Report_v2.zip", "Dragon Bust (1).rar", "a.b.c_v3 final.zip", "version 2 x.7z"]
        for name in names:
            key = normalize_key(name)
            assert normalize_key(key) == key

    def test_numeric_names_collapse_to_empty_key(self):
        """Purely numeric names all land in the "" bucket."""
        assert normalize_key("2024_0001.zip") == ""
        assert normalize_key("12345.rar") == ""
        assert normalize_key("") == ""
