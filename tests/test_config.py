import logging

import pytest
from railscop_cli.config import LintConfig, detect_rails_version
from railscop_linter.engine import DEFAULT_TARGET_RAILS_VERSION
from railscop_linter.registry import RuleRegistry

GEMFILE_LOCK = """\
GEM
  remote: https://rubygems.org/
  specs:
    actionpack (7.1.3)
    rails (7.1.3)
      actionpack (= 7.1.3)
    railties (7.1.3)

DEPENDENCIES
  rails (~> 7.1)
"""


def rule_ids(rules):
    return sorted(rule.rule_id for rule in rules)


def test_defaults_without_config_file(tmp_path):
    config = LintConfig(tmp_path / ".railscop.toml")

    assert config.select == ["Rails"]
    assert config.ignore == []
    assert config.target_rails_version() == DEFAULT_TARGET_RAILS_VERSION
    assert rule_ids(config.apply_to_registry(RuleRegistry())) == [
        "Rails/ActiveJobInitialize",
        "Rails/EnumSyntax",
    ]


def test_railscop_toml(tmp_path):
    path = tmp_path / ".railscop.toml"
    path.write_text(
        """
[tool.railscop]
target-rails-version = 7.1
ignore = ["Rails/ActiveJob"]
""",
        encoding="utf-8",
    )
    config = LintConfig(path)

    assert config.target_rails_version() == 7.1
    assert rule_ids(config.apply_to_registry(RuleRegistry())) == ["Rails/EnumSyntax"]


def test_pyproject_fallback(tmp_path):
    (tmp_path / "pyproject.toml").write_text(
        """
[tool.railscop]
select = ["Rails/EnumSyntax"]
""",
        encoding="utf-8",
    )
    config = LintConfig(tmp_path / ".railscop.toml")

    assert rule_ids(config.apply_to_registry(RuleRegistry())) == ["Rails/EnumSyntax"]


def test_rule_table_disables_rule(tmp_path):
    path = tmp_path / ".railscop.toml"
    path.write_text(
        """
[tool.railscop.rules."Rails/EnumSyntax"]
enabled = false
""",
        encoding="utf-8",
    )
    config = LintConfig(path)

    assert rule_ids(config.apply_to_registry(RuleRegistry())) == ["Rails/ActiveJobInitialize"]


def test_rule_table_options_reach_the_rule(tmp_path):
    path = tmp_path / ".railscop.toml"
    path.write_text(
        """
[tool.railscop.rules."Rails/ActiveJobInitialize"]
base-class = "::Jobs::BaseJob"
""",
        encoding="utf-8",
    )
    registry = RuleRegistry()
    LintConfig(path).apply_to_registry(registry)

    assert registry.get_rule("Rails/ActiveJobInitialize").base_class == "Jobs::BaseJob"


def test_invalid_toml_falls_back_to_defaults(tmp_path, caplog):
    path = tmp_path / ".railscop.toml"
    path.write_text("[tool.railscop\nselect = ", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="railscop_cli.config"):
        config = LintConfig(path)

    assert config.select == ["Rails"]
    assert "using defaults" in caplog.text


def test_invalid_settings_fall_back_to_defaults(tmp_path, caplog):
    path = tmp_path / ".railscop.toml"
    path.write_text('[tool.railscop]\ntarget-rails-version = "seven"\n', encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="railscop_cli.config"):
        config = LintConfig(path)

    assert config.settings.target_rails_version is None
    assert "invalid [tool.railscop]" in caplog.text


def test_target_version_from_gemfile_lock(tmp_path):
    (tmp_path / "Gemfile.lock").write_text(GEMFILE_LOCK, encoding="utf-8")

    assert LintConfig(tmp_path / ".railscop.toml").target_rails_version() == 7.1


def test_configured_version_wins_over_gemfile_lock(tmp_path):
    (tmp_path / "Gemfile.lock").write_text(GEMFILE_LOCK, encoding="utf-8")
    path = tmp_path / ".railscop.toml"
    path.write_text("[tool.railscop]\ntarget-rails-version = 6.1\n", encoding="utf-8")

    assert LintConfig(path).target_rails_version() == 6.1


@pytest.mark.parametrize(
    "lock, expected",
    [
        (GEMFILE_LOCK, 7.1),
        ("GEM\n  specs:\n    railties (6.0.4)\n", 6.0),
        ("GEM\n  specs:\n    rack (3.0.0)\n", None),
    ],
)
def test_detect_rails_version(tmp_path, lock, expected):
    (tmp_path / "Gemfile.lock").write_text(lock, encoding="utf-8")

    assert detect_rails_version(tmp_path) == expected


def test_detect_rails_version_without_lock_file(tmp_path):
    assert detect_rails_version(tmp_path) is None
