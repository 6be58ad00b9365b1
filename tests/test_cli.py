from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from parley.cli import app

runner = CliRunner()


def _write(tmp_path: Path, name: str, data: object) -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_convert_prints_native_response(tmp_path: Path) -> None:
    template = _write(tmp_path, "template.json", {"message": "Hello", "quickReplies": ["a", "b", "c"]})

    result = runner.invoke(app, ["convert", str(template), "--max-quick-replies", "2"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "fulfillment_messages": [
            {"message": {"text": {"text": ["Hello"]}}},
            {"message": {"quick_replies": {"quick_replies": ["a", "b"]}}},
        ]
    }


def test_convert_without_sanitization_keeps_everything(tmp_path: Path) -> None:
    template = _write(tmp_path, "template.json", [{"message": "x" * 30}, {"message": "y"}])

    result = runner.invoke(app, ["convert", str(template), "--text-max-length", "5", "--no-sanitize"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["fulfillment_messages"][0]["message"]["text"]["text"] == ["x" * 30 + " y"]


def test_convert_rejects_invalid_template(tmp_path: Path) -> None:
    template = _write(tmp_path, "template.json", {"card": {"subtitle": "missing title"}})

    result = runner.invoke(app, ["convert", str(template)])

    assert result.exit_code == 2


def test_parse_prints_output_template(tmp_path: Path) -> None:
    response = _write(
        tmp_path,
        "response.json",
        {"fulfillment_messages": [{"message": {"quick_replies": {"quick_replies": ["yes"]}}}]},
    )

    result = runner.invoke(app, ["parse", str(response)])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"quickReplies": ["yes"]}


def test_detect_prints_first_matching_platform(tmp_path: Path) -> None:
    request = _write(tmp_path, "request.json", {"version": "4", "type": "kiosk", "request": {"type": "TEXT"}})

    result = runner.invoke(app, ["detect", str(request), "--platform", "Web=web", "--platform", "Kiosk=kiosk"])

    assert result.exit_code == 0
    assert result.stdout.strip() == "Kiosk"


def test_detect_exits_nonzero_without_match(tmp_path: Path) -> None:
    request = _write(tmp_path, "request.json", {"version": "4", "type": "other", "request": {"type": "TEXT"}})

    result = runner.invoke(app, ["detect", str(request), "--platform", "Web=web"])

    assert result.exit_code == 1


def test_detect_rejects_malformed_platform_option(tmp_path: Path) -> None:
    request = _write(tmp_path, "request.json", {})

    result = runner.invoke(app, ["detect", str(request), "--platform", "nope"])

    assert result.exit_code != 0
