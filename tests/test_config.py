from __future__ import annotations

from pathlib import Path

import pytest

from create_next2d_app.config import (
    CONFIG_ENV_VAR,
    DEFAULT_TEMPLATE,
    load_settings,
    merge_overlay,
    resolve_config_path,
    validate_settings_document,
)
from create_next2d_app.errors import ConfigError


def test_packaged_defaults_load_and_validate() -> None:
    settings = load_settings()
    assert settings.template == DEFAULT_TEMPLATE
    assert settings.package_manager.command == "npm"
    assert settings.package_manager.minimum_version == "6.0.0"
    assert "--save" not in settings.package_manager.install_flags
    assert "@next2d/framework" in settings.dependencies
    assert "webpack" in settings.dev_dependencies
    assert set(settings.reserved_names) == {"next2d", "next2d-player", "next2d-framework"}
    assert settings.reset_dependencies is True
    assert settings.manifest["version"] == "0.0.1"
    assert settings.manifest["private"] is True
    assert settings.manifest["scripts"]["start"] == "webpack serve"
    assert "node_modules" in settings.gitignore
    assert settings.next_steps[0].command == "npm start"


def test_overlay_replaces_lists_and_merges_sections(tmp_path: Path) -> None:
    overlay = tmp_path / "settings.yaml"
    overlay.write_text(
        "\n".join(
            [
                "template: my-template@2.0.0",
                "dependencies: [left-pad]",
                "package_manager:",
                "  command: pnpm",
                "manifest:",
                "  version: 1.0.0",
                "",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(overlay)

    assert settings.template == "my-template@2.0.0"
    assert settings.dependencies == ("left-pad",)
    assert settings.package_manager.command == "pnpm"
    # Untouched keys of merged sections survive.
    assert settings.package_manager.minimum_version == "6.0.0"
    assert settings.manifest["version"] == "1.0.0"
    assert settings.manifest["main"] == "src/index.js"


def test_invalid_overlay_reports_json_paths(tmp_path: Path) -> None:
    overlay = tmp_path / "settings.yaml"
    overlay.write_text("reset_dependencies: maybe\ndependencies: [1]\n", encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_settings(overlay)

    msg = str(excinfo.value)
    assert "$.reset_dependencies" in msg
    assert "$.dependencies[0]" in msg


def test_unparsable_yaml_raises_config_error(tmp_path: Path) -> None:
    overlay = tmp_path / "settings.yaml"
    overlay.write_text("dependencies: [unterminated\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse YAML"):
        load_settings(overlay)


def test_non_mapping_yaml_raises_config_error(tmp_path: Path) -> None:
    overlay = tmp_path / "settings.yaml"
    overlay.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Expected a YAML mapping"):
        load_settings(overlay)


def test_missing_overlay_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Config file not found"):
        load_settings(tmp_path / "nope.yaml")


def test_unknown_keys_are_rejected() -> None:
    problems = validate_settings_document({"surprise": True})
    assert any("surprise" in p for p in problems)


def test_merge_overlay_only_merges_known_sections() -> None:
    base = {"package_manager": {"command": "npm", "minimum_version": "6.0.0"}, "gitignore": ["a", "b"]}
    merged = merge_overlay(base, {"package_manager": {"command": "yarn"}, "gitignore": ["c"]})
    assert merged["package_manager"] == {"command": "yarn", "minimum_version": "6.0.0"}
    assert merged["gitignore"] == ["c"]


def test_resolve_config_path_prefers_explicit_over_env(tmp_path: Path) -> None:
    env = {CONFIG_ENV_VAR: str(tmp_path / "env.yaml")}
    assert resolve_config_path(str(tmp_path / "cli.yaml"), env) == tmp_path / "cli.yaml"
    assert resolve_config_path(None, env) == tmp_path / "env.yaml"
    assert resolve_config_path(None, {}) is None
