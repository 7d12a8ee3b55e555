"""Tests for configuration models."""

import json

import pytest
from pydantic import ValidationError

from goldenshot.models.config import ComparisonOptions, GoldenConfig


class TestComparisonOptions:
    """Tests for ComparisonOptions model."""

    def test_default_values(self):
        options = ComparisonOptions()
        assert options.strict is False
        assert options.tolerance == 2.5

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ValidationError):
            ComparisonOptions(tolerance=-1)

    def test_merge_none_keeps_defaults(self):
        merged = ComparisonOptions().merged(None)
        assert merged == ComparisonOptions()

    def test_merge_dict_overrides_field_by_field(self):
        merged = ComparisonOptions().merged({"strict": True})
        assert merged.strict is True
        assert merged.tolerance == 2.5

    def test_merge_options_only_uses_explicit_fields(self):
        base = ComparisonOptions(tolerance=5)
        merged = base.merged(ComparisonOptions(strict=True))
        assert merged.strict is True
        assert merged.tolerance == 5

    def test_merge_does_not_mutate_base(self):
        base = ComparisonOptions()
        base.merged({"tolerance": 0})
        assert base.tolerance == 2.5

    def test_merge_rejects_unknown_option(self):
        with pytest.raises(ValueError, match="ignoreCaret"):
            ComparisonOptions().merged({"ignoreCaret": True})

    def test_merge_validates_values(self):
        with pytest.raises(ValidationError):
            ComparisonOptions().merged({"tolerance": -3})


class TestGoldenConfig:
    """Tests for GoldenConfig model."""

    def test_default_values(self):
        config = GoldenConfig()
        assert config.update_goldens is False
        assert config.output_folder is None
        assert config.highlight_color == "#ff00ff"
        assert config.options == ComparisonOptions()

    @pytest.mark.parametrize("value", ["1", "true"])
    def test_from_env_truthy(self, value):
        assert GoldenConfig.from_env({"UPDATE_GOLDENS": value}).update_goldens is True

    @pytest.mark.parametrize("value", ["TRUE", "True", "yes", "0", "false", "", " 1"])
    def test_from_env_strict_match(self, value):
        assert GoldenConfig.from_env({"UPDATE_GOLDENS": value}).update_goldens is False

    def test_from_env_unset(self):
        assert GoldenConfig.from_env({}).update_goldens is False

    def test_from_env_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("UPDATE_GOLDENS", "1")
        assert GoldenConfig.from_env().update_goldens is True
        monkeypatch.delenv("UPDATE_GOLDENS")
        assert GoldenConfig.from_env().update_goldens is False

    def test_from_env_keeps_base_settings(self):
        base = GoldenConfig(output_folder="diffs", highlight_color="#00ff00")
        config = GoldenConfig.from_env({"UPDATE_GOLDENS": "true"}, base=base)
        assert config.update_goldens is True
        assert config.output_folder == "diffs"
        assert config.highlight_color == "#00ff00"
        assert base.update_goldens is False

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "goldens.json"
        config = GoldenConfig(
            output_folder="out",
            options=ComparisonOptions(strict=True, tolerance=0),
        )
        config.save(path)

        data = json.loads(path.read_text())
        assert data["options"] == {"strict": True, "tolerance": 0}

        loaded = GoldenConfig.load(path, environ={})
        assert loaded == config

    def test_update_flag_not_saved(self, tmp_path):
        path = tmp_path / "goldens.json"
        GoldenConfig(update_goldens=True).save(path)
        assert "update_goldens" not in json.loads(path.read_text())

    def test_load_takes_update_flag_from_env(self, tmp_path):
        path = tmp_path / "goldens.json"
        path.write_text(json.dumps({"update_goldens": True, "output_folder": "out"}))

        assert GoldenConfig.load(path, environ={}).update_goldens is False
        loaded = GoldenConfig.load(path, environ={"UPDATE_GOLDENS": "1"})
        assert loaded.update_goldens is True
        assert loaded.output_folder == "out"

    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_output_folder_means_none(self, value):
        assert GoldenConfig(output_folder=value).output_folder is None

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            GoldenConfig.load(tmp_path / "missing.json")
