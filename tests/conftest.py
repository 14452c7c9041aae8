import textwrap

import pytest
from railscop_linter.autofix import AutoFixEngine
from railscop_linter.engine import LinterEngine
from railscop_linter.rules import ActiveJobInitializeRule, EnumSyntaxRule
from railscop_tree_sitter import RubyParser


@pytest.fixture
def parser():
    return RubyParser()


@pytest.fixture
def parse(parser):
    def _parse(code):
        return parser.parse_string(textwrap.dedent(code))

    return _parse


@pytest.fixture
def lint():
    """Lint a snippet with the given rules at Rails 7.1."""

    def _lint(code, *rules, target_rails_version=7.1):
        engine = LinterEngine(list(rules) or None, target_rails_version=target_rails_version)
        return engine.analyze_string(textwrap.dedent(code)).offenses

    return _lint


@pytest.fixture
def autocorrect():
    def _autocorrect(code, target_rails_version=7.1):
        engine = LinterEngine([EnumSyntaxRule(), ActiveJobInitializeRule()], target_rails_version=target_rails_version)
        return AutoFixEngine(engine).fix_string(textwrap.dedent(code))

    return _autocorrect
