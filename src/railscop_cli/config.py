import logging
import re
import tomllib
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from railscop_linter.engine import DEFAULT_TARGET_RAILS_VERSION
from railscop_linter.registry import RuleRegistry
from railscop_linter.rules.base import BaseRule

log = logging.getLogger(__name__)

RAILS_LOCK_RE = re.compile(r"^\s{4}(?:rails|railties) \((\d+)\.(\d+)", re.MULTILINE)


class RuleSettings(BaseModel):
    """Per-rule table; unknown keys are passed to the rule as options"""

    model_config = ConfigDict(extra="allow")

    enabled: bool = True

    def options(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class RailscopSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    select: list[str] = Field(default_factory=lambda: ["Rails"])
    ignore: list[str] = Field(default_factory=list)
    target_rails_version: Optional[float] = Field(default=None, alias="target-rails-version")
    rules: dict[str, RuleSettings] = Field(default_factory=dict)


class LintConfig:
    """Handles loading and validation of .railscop.toml configuration"""

    def __init__(self, config_path: Path | None = None):
        self.settings = RailscopSettings()
        self.root = Path.cwd()

        if config_path is not None:
            config_path = self._resolve(config_path)
            self.root = config_path.parent
            if config_path.exists():
                self._load_from_file(config_path)

    @staticmethod
    def _resolve(config_path: Path) -> Path:
        # Fall back to [tool.railscop] in a sibling pyproject.toml
        if not config_path.exists() and config_path.name == ".railscop.toml":
            pyproject = config_path.parent / "pyproject.toml"
            if pyproject.exists():
                return pyproject
        return config_path

    def _load_from_file(self, path: Path):
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            log.warning("could not read %s, using defaults: %s", path, e)
            return

        lint_data = data.get("tool", {}).get("railscop", {})
        try:
            self.settings = RailscopSettings.model_validate(lint_data)
        except ValidationError as e:
            log.warning("invalid [tool.railscop] in %s, using defaults: %s", path, e)

    @property
    def select(self) -> list[str]:
        return self.settings.select

    @property
    def ignore(self) -> list[str]:
        return self.settings.ignore

    def target_rails_version(self) -> float:
        """Configured version, else the one locked in Gemfile.lock, else the default."""
        if self.settings.target_rails_version is not None:
            return self.settings.target_rails_version
        detected = detect_rails_version(self.root)
        if detected is not None:
            log.debug("detected Rails %s from Gemfile.lock", detected)
            return detected
        return DEFAULT_TARGET_RAILS_VERSION

    def apply_to_registry(self, registry: RuleRegistry) -> list[BaseRule]:
        """Return list of enabled, configured rules based on this config"""
        enabled = []
        for rule in registry.get_enabled_rules(select=self.select, ignore=self.ignore):
            rule_settings = self.settings.rules.get(rule.rule_id)
            if rule_settings is not None:
                if not rule_settings.enabled:
                    continue
                rule.configure(rule_settings.options())
            enabled.append(rule)
        return enabled


def detect_rails_version(root: Path) -> float | None:
    lock_file = root / "Gemfile.lock"
    if not lock_file.is_file():
        return None
    m = RAILS_LOCK_RE.search(lock_file.read_text(encoding="utf-8"))
    if m is None:
        return None
    return float(f"{m.group(1)}.{m.group(2)}")
