"""Tests for the command-line interface."""

import json
import sys

from coffee_scan import cli
from coffee_scan.exceptions import AuthenticationError
from coffee_scan.schema import CoffeeExtraction, VisionExtractionResult


def _run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["coffee-scan", *args])
    return cli.main()


def _result() -> VisionExtractionResult:
    return VisionExtractionResult(
        raw_response="{}",
        structured_data=CoffeeExtraction(
            roaster="Verve Coffee Roasters",
            product_name="Streetlevel",
            origin="Blend",
            flavor_notes=["cherry", "cocoa"],
        ),
        confidence=0.75,
    )


def test_cli_prints_json(monkeypatch, mocker, capsys):
    extract = mocker.patch.object(
        cli, "extract_with_metadata", return_value=(_result(), {"processing_method": "vision"})
    )

    code = _run(monkeypatch, "bag.jpg", "--json", "--provider", "openai", "--depth", "basic")

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["extraction"]["productName"] == "Streetlevel"
    assert payload["confidence"] == 0.75
    assert payload["processingMethod"] == "vision"
    assert extract.call_args.kwargs["provider"] == "openai"
    assert extract.call_args.kwargs["depth"] == "basic"


def test_cli_prints_formatted(monkeypatch, mocker, capsys):
    mocker.patch.object(cli, "extract_with_metadata", return_value=(_result(), {}))

    assert _run(monkeypatch, "bag.jpg") == 0

    out = capsys.readouterr().out
    assert "Verve Coffee Roasters" in out
    assert "cherry, cocoa" in out
    assert "75%" in out


def test_cli_reports_errors(monkeypatch, mocker, capsys):
    mocker.patch.object(cli, "extract_with_metadata", side_effect=AuthenticationError("No API key provided"))

    assert _run(monkeypatch, "bag.jpg") == 1
    assert "No API key provided" in capsys.readouterr().err


def test_cli_unknown_provider(monkeypatch, mocker):
    mocker.patch.object(cli, "extract_with_metadata", side_effect=ValueError("Unsupported provider: x"))

    assert _run(monkeypatch, "bag.jpg", "--provider", "x") == 2
