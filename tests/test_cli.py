from __future__ import annotations

import io
import json
import tempfile
from pathlib import Path

import pytest

from cartsmash.cli import main, render_table
from cartsmash.parsing import parse_grocery_list


def test_reads_stdin_and_prints_json():
    stdout = io.StringIO()
    code = main([], stdin=io.StringIO("Shopping List:\n2 lbs chicken breast\n3 bananas\n"), stdout=stdout)
    assert code == 0
    payload = json.loads(stdout.getvalue())
    assert [item["itemName"] for item in payload] == ["chicken breast", "bananas"]
    assert payload[0]["unit"] == "lbs"


def test_empty_result_exits_nonzero():
    stdout = io.StringIO()
    code = main([], stdin=io.StringIO("Grocery list:\n"), stdout=stdout)
    assert code == 1
    assert json.loads(stdout.getvalue()) == []


def test_reads_file_with_custom_categories_and_table_output():
    with tempfile.TemporaryDirectory() as tmp:
        list_path = Path(tmp) / "list.txt"
        list_path.write_text("2 bottles orange juice; 1 bag frozen peas", encoding="utf-8")
        categories_path = Path(tmp) / "categories.json"
        categories_path.write_text(json.dumps({"beverages": ["juice"], "frozen": ["frozen"]}), encoding="utf-8")

        stdout = io.StringIO()
        code = main(
            [str(list_path), "--split-separators", "--categories", str(categories_path), "--format", "table"],
            stdout=stdout,
        )

    assert code == 0
    lines = stdout.getvalue().splitlines()
    assert lines[0].split() == ["QTY", "UNIT", "ITEM", "CATEGORY"]
    assert lines[1].split() == ["2", "bottles", "orange", "juice", "beverages"]
    assert lines[2].split() == ["1", "bag", "frozen", "peas", "frozen"]


def test_bad_category_file_is_usage_error():
    with tempfile.TemporaryDirectory() as tmp:
        categories_path = Path(tmp) / "categories.json"
        categories_path.write_text(json.dumps({"snacks": ["chips"]}), encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            main(["--categories", str(categories_path)], stdin=io.StringIO("chips"), stdout=io.StringIO())
    assert excinfo.value.code == 2


def test_render_table_handles_missing_quantity():
    rendered = render_table(parse_grocery_list("milk"))
    assert rendered.splitlines()[1].split() == ["milk", "dairy"]
