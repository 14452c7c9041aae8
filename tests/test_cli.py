import pytest
from typer.testing import CliRunner

from railscop_cli.main import app

runner = CliRunner()

JOB = """\
class MyJob < ApplicationJob
  def initialize
  end
end
"""


@pytest.fixture(autouse=True)
def project_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_cli_lint_help():
    result = runner.invoke(app, ["lint", "--help"])
    assert result.exit_code == 0
    assert "Run linter on Ruby files" in result.stdout


def test_cli_lint_reports_offenses(tmp_path):
    file_path = tmp_path / "post.rb"
    file_path.write_text("enum status: [:active]\n")

    result = runner.invoke(app, ["lint", str(file_path), "--target-rails-version", "7.1"])

    assert result.exit_code == 1
    assert (
        f"WARNING: {file_path}:1:14 [Rails/EnumSyntax] [Correctable] - Enum defined with keyword arguments"
        in result.stdout
    )
    assert "Total issues found: 1 (1 reported)" in result.stdout


def test_cli_lint_clean_file(tmp_path):
    file_path = tmp_path / "post.rb"
    file_path.write_text("enum :status, [:active]\n")

    result = runner.invoke(app, ["lint", str(file_path), "--target-rails-version", "7.1"])

    assert result.exit_code == 0
    assert "Total issues found: 0 (0 reported)" in result.stdout


def test_cli_lint_default_target_skips_enum_rule(tmp_path):
    file_path = tmp_path / "post.rb"
    file_path.write_text("enum status: [:active]\n")

    result = runner.invoke(app, ["lint", str(file_path)])

    assert result.exit_code == 0


def test_cli_lint_reads_target_from_gemfile_lock(tmp_path):
    (tmp_path / "Gemfile.lock").write_text("GEM\n  specs:\n    rails (7.2.0)\n")
    file_path = tmp_path / "post.rb"
    file_path.write_text("enum status: [:active]\n")

    result = runner.invoke(app, ["lint", str(file_path)])

    assert result.exit_code == 1
    assert "Rails/EnumSyntax" in result.stdout


def test_cli_lint_directory(tmp_path):
    jobs = tmp_path / "app" / "jobs"
    jobs.mkdir(parents=True)
    (jobs / "my_job.rb").write_text(JOB)
    (jobs / "notes.txt").write_text("def initialize; end\n")

    result = runner.invoke(app, ["lint", str(tmp_path / "app")])

    assert result.exit_code == 1
    assert f"{jobs / 'my_job.rb'}:2:3 [Rails/ActiveJobInitialize] - Avoid using `initialize`" in result.stdout
    assert "notes.txt" not in result.stdout


def test_cli_lint_fix(tmp_path):
    file_path = tmp_path / "post.rb"
    file_path.write_text("enum status: {active: 0, archived: 1}, _prefix: true\n")

    result = runner.invoke(app, ["lint", str(file_path), "--fix", "--target-rails-version", "7.1"])

    assert result.exit_code == 0
    assert "Fixed 1 issue(s) in post.rb" in result.stdout
    assert "1 corrected" in result.stdout
    assert file_path.read_text() == "enum :status, {active: 0, archived: 1}, prefix: true\n"


def test_cli_lint_severity_filter(tmp_path):
    file_path = tmp_path / "my_job.rb"
    file_path.write_text(JOB)

    result = runner.invoke(app, ["lint", str(file_path), "--severity", "ERROR"])

    assert result.exit_code == 0
    assert "Total issues found: 1 (0 reported)" in result.stdout


def test_cli_lint_config_disables_rule(tmp_path):
    (tmp_path / ".railscop.toml").write_text('[tool.railscop]\nignore = ["Rails/ActiveJobInitialize"]\n')
    file_path = tmp_path / "my_job.rb"
    file_path.write_text(JOB)

    result = runner.invoke(app, ["lint", str(file_path)])

    assert result.exit_code == 0


def test_cli_lint_syntax_error(tmp_path):
    file_path = tmp_path / "broken.rb"
    file_path.write_text("class Foo <\n")

    result = runner.invoke(app, ["lint", str(file_path)])

    assert f"SYNTAX: {file_path}:" in result.stdout


def test_cli_lint_without_files():
    result = runner.invoke(app, ["lint"])

    assert result.exit_code == 2
    assert "Provide files or directories" in result.stdout


def test_cli_lint_missing_file(tmp_path):
    result = runner.invoke(app, ["lint", str(tmp_path / "missing.rb")])

    assert result.exit_code == 2
    assert "cannot read" in result.stdout


def test_cli_rules():
    result = runner.invoke(app, ["rules"])

    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert any(line.startswith("Rails/ActiveJobInitialize") and "manual" in line for line in lines)
    assert any(line.startswith("Rails/EnumSyntax") and "autocorrect" in line for line in lines)


def test_cli_rules_shows_disabled(tmp_path):
    (tmp_path / ".railscop.toml").write_text('[tool.railscop.rules."Rails/EnumSyntax"]\nenabled = false\n')

    result = runner.invoke(app, ["rules"])

    enum_line = next(line for line in result.stdout.splitlines() if line.startswith("Rails/EnumSyntax"))
    assert "disabled" in enum_line


def test_cli_dump(tmp_path):
    file_path = tmp_path / "post.rb"
    file_path.write_text("enum :status, [:active]\n")

    result = runner.invoke(app, ["dump", str(file_path)])

    assert result.exit_code == 0
    assert result.stdout.startswith("program")
    assert "sym 'status'" in result.stdout


def test_cli_match(tmp_path):
    file_path = tmp_path / "post.rb"
    file_path.write_text("enum status: [:active]\nenum :role, [:admin]\n")

    result = runner.invoke(app, ["match", "(send nil :enum (hash $...))", str(file_path)])

    assert result.exit_code == 0
    assert f"{file_path}:1:1: enum status: [:active]" in result.stdout
    assert "    $0: [status: [:active]]" in result.stdout
    assert "1 match(es)" in result.stdout


def test_cli_match_bad_pattern(tmp_path):
    file_path = tmp_path / "post.rb"
    file_path.write_text("enum :role, [:admin]\n")

    result = runner.invoke(app, ["match", "(send nil :enum", str(file_path)])

    assert result.exit_code == 2
    assert "Error:" in result.stdout


def test_cli_dump_missing_file(tmp_path):
    result = runner.invoke(app, ["dump", str(tmp_path / "missing.rb")])

    assert result.exit_code == 2
    assert "cannot read" in result.stdout


def test_cli_dump_non_utf8_file(tmp_path):
    file_path = tmp_path / "latin1.rb"
    file_path.write_bytes(b'x = "caf\xe9"\n')

    result = runner.invoke(app, ["dump", str(file_path)])

    assert result.exit_code == 2
    assert "cannot read" in result.stdout


def test_cli_match_skips_unreadable_file(tmp_path):
    file_path = tmp_path / "post.rb"
    file_path.write_text("enum status: [:active]\n")

    result = runner.invoke(app, ["match", "(send nil :enum ...)", str(tmp_path / "missing.rb"), str(file_path)])

    assert result.exit_code == 2
    assert "cannot read" in result.stdout
    assert "1 match(es)" in result.stdout
