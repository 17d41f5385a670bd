import json

from typer.testing import CliRunner

from eth_sdk.cli.main import app

runner = CliRunner()


def test_methods_lists_operations_and_subscriptions():
    result = runner.invoke(app, ["methods"])
    assert result.exit_code == 0
    assert "getBalance" in result.output and "eth_getBalance" in result.output
    assert "subscribe:newHeads" in result.output


def test_call_rejects_non_json_arguments():
    result = runner.invoke(app, ["--rpc", "http://127.0.0.1:1", "call", "getBalance", "not-json", "null"])
    assert result.exit_code != 0


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.output.startswith("eth-sdk ")
