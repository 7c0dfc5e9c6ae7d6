"""
Tests for the command line interface.
"""

import json

from typer.testing import CliRunner

from cronos.cli.app import app

runner = CliRunner()

DOCUMENT = {
    "professionals": [{
        "id": "p1",
        "tenantId": "t1",
        "name": "Carlos Silva",
        "slotInterval": 60,
        "availability": [
            {"dayOfWeek": 1, "active": True, "start": "09:00", "end": "12:00",
             "breakStart": "10:00", "breakEnd": "10:30"},
        ],
    }],
    "services": [],
    "appointments": [],
}


def _config(tmp_path):
    (tmp_path / "data.json").write_text(json.dumps(DOCUMENT), encoding="utf-8")
    path = tmp_path / "config.yaml"
    path.write_text("tenant_id: t1\ndata_file: data.json\n", encoding="utf-8")
    return str(path)


def test_slots_command(tmp_path):
    """Open slots are printed."""
    result = runner.invoke(app, ["slots", "p1", "--date", "2024-11-25", "--config", _config(tmp_path)])

    assert result.exit_code == 0
    assert "09:00 - 10:00" in result.output
    assert "11:00 - 12:00" in result.output
    assert "10:00 - 11:00" not in result.output


def test_book_then_check(tmp_path):
    """A booked slot is rejected by a later check."""
    config = _config(tmp_path)

    booked = runner.invoke(app, ["book", "p1", "09:00", "--client", "c1", "--date", "2024-11-25", "-c", config])
    checked = runner.invoke(app, ["check", "p1", "09:00", "--date", "2024-11-25", "-c", config])

    assert booked.exit_code == 0
    assert "Booked" in booked.output
    assert checked.exit_code == 2
    assert "DoubleBooked" in checked.output


def test_unknown_professional_fails(tmp_path):
    """Lookup errors exit with status 1."""
    result = runner.invoke(app, ["slots", "p9", "--date", "2024-11-25", "-c", _config(tmp_path)])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_other_tenant_sees_nothing(tmp_path):
    """The tenant option scopes every lookup."""
    result = runner.invoke(app, ["professionals", "--tenant", "t2", "-c", _config(tmp_path)])

    assert result.exit_code == 0
    assert "No professionals" in result.output
