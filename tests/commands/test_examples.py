"""Tests for the --examples flag on CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from realmctl.cli import cli

pytestmark = pytest.mark.usefixtures("_isolated_config")

# (CLI args, expected keywords in output)
EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["list", "--examples"], ["realmctl list /team/web/", "--quiet"]),
    (["get", "--examples"], ["realmctl get /team/web/", "--json"]),
    (["view", "--examples"], ["realmctl view /"]),
    (["create", "--examples"], ["realmctl create /team/ web", '"a/b"']),
    (["delete", "--examples"], ["realmctl delete /team/web/beta", "a%2Fb"]),
    (["browse", "--examples"], ["realmctl browse", "--address"]),
]


@pytest.mark.parametrize(
    "args,expected_keywords",
    EXAMPLES_COMMANDS,
    ids=[args[0] for args, _ in EXAMPLES_COMMANDS],
)
def test_examples_flag(
    cli_runner: CliRunner, args: list[str], expected_keywords: list[str]
) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    for kw in expected_keywords:
        assert kw in result.output, f"Expected '{kw}' in examples output for {args}"


@pytest.mark.parametrize("name", ["list", "get", "view", "create", "delete", "browse"])
def test_examples_in_help(cli_runner: CliRunner, name: str) -> None:
    result = cli_runner.invoke(cli, [name, "--help"])
    assert result.exit_code == 0
    assert "--examples" in result.output


class TestExamplesEagerExit:
    """--examples exits before argument validation and before any request."""

    def test_skips_required_args(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["create", "--examples"])
        assert result.exit_code == 0
        assert "Examples for" in result.output

    def test_skips_network(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--address", "http://127.0.0.1:9", "get", "--examples"])
        assert result.exit_code == 0
