"""Tests for the pantry-watch command line."""

import json
from datetime import date, timedelta

import pytest

from pantry_watch.cli import main


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "pantry.toml"
    path.write_text(
        f'[database]\npath = "{(tmp_path / "pantry.db").as_posix()}"\n\n'
        "[notify]\nlocal = false\nemail = false\n"
    )
    return str(path)


def _run(config_path, *args):
    main(["--config", config_path, *args])


def test_no_command_exits(config_path):
    with pytest.raises(SystemExit):
        main([])


def test_add_and_list_json(config_path, capsys):
    today = date.today()
    _run(config_path, "add", "Milk", (today + timedelta(days=2)).isoformat(), "-q", "2")
    _run(config_path, "add", "Rice", (today + timedelta(days=60)).isoformat())
    capsys.readouterr()

    _run(config_path, "list", "--json")
    data = json.loads(capsys.readouterr().out)
    assert [d["name"] for d in data] == ["Milk", "Rice"]
    assert data[0]["status"] == "expiring_soon"
    assert data[0]["quantity"] == 2.0
    assert data[1]["status"] == "active"
    assert data[1]["storage_location"] == "unspecified"


def test_check_reports_new_alerts(config_path, capsys):
    today = date.today()
    _run(config_path, "add", "Yogurt", (today - timedelta(days=1)).isoformat())
    capsys.readouterr()

    _run(config_path, "check", "--json")
    data = json.loads(capsys.readouterr().out)
    assert len(data) == 1
    assert data[0]["type"] == "danger"
    assert data[0]["message"] == "Yogurt has expired"


def test_update_and_remove(config_path, capsys):
    _run(config_path, "add", "Milk", "2030-01-01")
    item_id = capsys.readouterr().out.strip()

    _run(config_path, "update", item_id, "--name", "Oat milk")
    _run(config_path, "list", "--json")
    out = capsys.readouterr().out
    assert json.loads(out[out.index("["):])[0]["name"] == "Oat milk"

    _run(config_path, "remove", item_id)
    assert "Removed" in capsys.readouterr().out

    with pytest.raises(SystemExit):
        _run(config_path, "remove", item_id)


def test_summary(config_path, capsys):
    _run(config_path, "add", "Milk", "2000-01-01")
    _run(config_path, "add", "Rice", "2099-01-01")
    capsys.readouterr()

    _run(config_path, "summary")
    out = capsys.readouterr().out
    assert "Total:         2" in out
    assert "Expired:       1" in out
    assert "Active:        1" in out


def test_emails(config_path, capsys):
    _run(config_path, "emails", "add", "cook@example.com")
    _run(config_path, "emails", "list")
    assert "cook@example.com" in capsys.readouterr().out

    with pytest.raises(SystemExit):
        _run(config_path, "emails", "add", "cook@example.com")


@pytest.fixture
def stocked(config_path, capsys):
    today = date.today()
    _run(config_path, "add", "Milk", (today + timedelta(days=2)).isoformat(), "-l", "Fridge")
    _run(config_path, "add", "Butter", (today + timedelta(days=40)).isoformat(), "-l", "fridge")
    _run(config_path, "add", "Rice", (today + timedelta(days=300)).isoformat(), "-l", "Pantry")
    _run(config_path, "add", "Yogurt", (today - timedelta(days=1)).isoformat())
    capsys.readouterr()
    return config_path


def _names(config_path, capsys, *args):
    _run(config_path, "list", "--json", *args)
    return [d["name"] for d in json.loads(capsys.readouterr().out)]


def test_list_filters(stocked, capsys):
    assert _names(stocked, capsys, "--status", "expired") == ["Yogurt"]
    assert _names(stocked, capsys, "--location", "FRIDGE") == ["Milk", "Butter"]
    assert _names(stocked, capsys, "--search", "pan") == ["Rice"]
    assert _names(stocked, capsys, "--search", "t", "--status", "active") == ["Butter", "Rice"]


def test_list_sorting(stocked, capsys):
    assert _names(stocked, capsys) == ["Yogurt", "Milk", "Butter", "Rice"]
    assert _names(stocked, capsys, "--desc") == ["Rice", "Butter", "Milk", "Yogurt"]
    assert _names(stocked, capsys, "--sort", "name") == ["Butter", "Milk", "Rice", "Yogurt"]
    assert sorted(_names(stocked, capsys, "--sort", "created")) == [
        "Butter", "Milk", "Rice", "Yogurt",
    ]


def test_list_csv(stocked, capsys):
    _run(stocked, "list", "--csv", "--location", "pantry")
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "name,production_date,expiry_date,quantity,storage_location,status"
    assert len(lines) == 2
    assert lines[1].startswith("Rice,,")
    assert lines[1].endswith(",1,Pantry,active")


def test_list_json_and_csv_are_exclusive(stocked):
    with pytest.raises(SystemExit):
        _run(stocked, "list", "--json", "--csv")
