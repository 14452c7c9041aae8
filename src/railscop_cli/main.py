import logging
from pathlib import Path
from typing import Optional

import typer
from railscop_linter.autofix import AutoFixEngine
from railscop_linter.engine import LinterEngine
from railscop_linter.errors import PatternSyntaxError
from railscop_linter.models import Offense, Severity
from railscop_linter.pattern import compile_pattern
from railscop_linter.registry import RuleRegistry
from railscop_tree_sitter import Node, RubyParser, SyntaxTree, dump_tree

from .config import LintConfig
from .converters import offense_to_lint_issue

app = typer.Typer(help="railscop - Rails style checks for Ruby source")


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _expand(files: list[Path]) -> list[Path]:
    expanded = []
    for path in files:
        if path.is_dir():
            expanded.extend(sorted(path.glob("**/*.rb")))
        else:
            expanded.append(path)
    return expanded


def _parse_severity(value: str) -> Severity:
    try:
        return Severity[value.upper()]
    except KeyError:
        raise typer.BadParameter(f"expected one of {', '.join(s.name for s in Severity)}") from None


@app.command()
def lint(
    files: list[Path] = typer.Argument(None, help="Files or directories to lint"),
    config_file: Path = typer.Option(Path(".railscop.toml"), "--config", help="Path to config file"),
    severity: str = typer.Option("STYLE", help="Minimum severity to show"),
    target_rails_version: Optional[float] = typer.Option(None, help="Rails version the code targets"),
    fix: bool = typer.Option(False, help="Automatically fix issues"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
):
    """Run linter on Ruby files"""
    _configure_logging(verbose)
    min_severity = _parse_severity(severity)

    config = LintConfig(config_file)
    rules = config.apply_to_registry(RuleRegistry())
    target = target_rails_version if target_rails_version is not None else config.target_rails_version()
    engine = LinterEngine(rules, target_rails_version=target)
    autofix = AutoFixEngine(engine)

    paths = _expand(files or [])
    if not paths:
        typer.echo("Error: Provide files or directories to lint")
        raise typer.Exit(code=2)

    all_offenses: list[Offense] = []
    corrected = 0
    failed = False
    for file_path in paths:
        try:
            if fix:
                result = autofix.fix_file(file_path)
                if result.modified:
                    typer.echo(f"  Fixed {result.corrected} issue(s) in {file_path.name}")
                corrected += result.corrected
                offenses, parse_errors = result.offenses, result.parse_errors
            else:
                result = engine.analyze_file(file_path)
                offenses, parse_errors = result.offenses, result.parse_errors
        except (OSError, UnicodeDecodeError) as e:
            typer.echo(f"Error: cannot read {file_path}: {e}")
            failed = True
            continue

        for error in parse_errors:
            typer.echo(f"SYNTAX: {file_path}:{error}")
        all_offenses.extend(offenses)

    issues = [offense_to_lint_issue(o) for o in all_offenses]
    reported_count = 0
    for offense, issue in sorted(zip(all_offenses, issues), key=lambda x: (x[1].file_path, x[1].line_number, x[1].column)):
        if offense.severity.rank < min_severity.rank:
            continue
        marker = " [Correctable]" if issue.auto_fixable else ""
        typer.echo(
            f"{issue.severity}: {issue.file_path}:{issue.line_number}:{issue.column} [{issue.rule_id}]{marker} - {issue.message}"
        )
        reported_count += 1

    summary = f"\nTotal issues found: {len(issues)} ({reported_count} reported)"
    if fix:
        summary += f", {corrected} corrected"
    typer.echo(summary)

    if failed:
        raise typer.Exit(code=2)
    if reported_count > 0:
        raise typer.Exit(code=1)


@app.command()
def rules(
    config_file: Path = typer.Option(Path(".railscop.toml"), "--config", help="Path to config file"),
):
    """List available rules"""
    registry = RuleRegistry()
    enabled = {rule.rule_id for rule in LintConfig(config_file).apply_to_registry(registry)}
    for rule in registry.get_all_rules():
        state = "enabled" if rule.rule_id in enabled else "disabled"
        fixable = "autocorrect" if rule.auto_fixable else "manual"
        typer.echo(f"{rule.rule_id:<28} {rule.severity.value.upper():<8} {fixable:<12} {state:<9} {rule.description}")


@app.command()
def dump(
    file_path: Path = typer.Argument(..., help="Ruby file to parse"),
):
    """Print the parsed node tree"""
    try:
        result = RubyParser().parse_file(file_path)
    except (OSError, UnicodeDecodeError) as e:
        typer.echo(f"Error: cannot read {file_path}: {e}")
        raise typer.Exit(code=2)
    typer.echo(dump_tree(result.tree))
    for error in result.errors:
        typer.echo(f"SYNTAX: {file_path}:{error}")


@app.command()
def match(
    pattern: str = typer.Argument(..., help="Node pattern, e.g. '(send nil :enum ...)'"),
    files: list[Path] = typer.Argument(..., help="Files or directories to search"),
):
    """Find nodes matching a node pattern"""
    try:
        node_pattern = compile_pattern(pattern)
    except PatternSyntaxError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=2)

    parser = RubyParser()
    found = 0
    failed = False
    for file_path in _expand(files):
        try:
            tree = parser.parse_file(file_path).tree
        except (OSError, UnicodeDecodeError) as e:
            typer.echo(f"Error: cannot read {file_path}: {e}")
            failed = True
            continue
        for node, result in node_pattern.find_all(tree):
            found += 1
            text = tree.source_of(node)
            first_line = text.splitlines()[0] if text else ""
            typer.echo(f"{file_path}:{node.range.line}:{node.range.column + 1}: {first_line}")
            for index, capture in enumerate(result):
                typer.echo(f"    ${index}: {_render_capture(tree, capture)}")

    typer.echo(f"\n{found} match(es)")
    if failed:
        raise typer.Exit(code=2)


def _render_capture(tree: SyntaxTree, capture) -> str:
    if capture is None:
        return "nil"
    if isinstance(capture, tuple):
        return "[" + ", ".join(_render_capture(tree, item) for item in capture) + "]"
    if isinstance(capture, Node):
        return tree.source_of(capture)
    return repr(capture)


if __name__ == "__main__":
    app()
