"""Tests for the riskzones CLI.

The Database handle is replaced by an in-memory fake so commands run
without a MongoDB server.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import yaml
from click.testing import CliRunner
from pymongo.errors import ServerSelectionTimeoutError

from riskzones.cli import cli, read_batch

# ---------------------------------------------------------------------------
# Helpers / Fixtures
# ---------------------------------------------------------------------------


class FakeSession:

    def __init__(self):
        self.transactions = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False

    async def with_transaction(self, callback):
        self.transactions += 1
        return await callback(self)


class FakeDatabase:
    """Async context manager standing in for riskzones.db.client.Database."""

    def __init__(self, collection):
        self.collection = collection
        self.collection_name = "risk_points"
        self.session = FakeSession()
        self.ping = AsyncMock(return_value={"ok": 1.0})

    def start_session(self):
        return self.session

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False


@pytest.fixture
def runner():
    """Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def database(collection):
    """Patch Database used in riskzones.cli with an in-memory fake."""
    fake = FakeDatabase(collection)
    with patch("riskzones.cli.Database", return_value=fake):
        yield fake


@pytest.fixture
def batch_file(tmp_path, sample_points):
    path = tmp_path / "points.yaml"
    path.write_text(yaml.safe_dump({"points": sample_points}, allow_unicode=True))
    return path


# ---------------------------------------------------------------------------
# Batch files
# ---------------------------------------------------------------------------

class TestReadBatch:

    def test_yaml_mapping(self, batch_file, sample_points):
        assert read_batch(batch_file) == sample_points

    def test_json_list(self, tmp_path, sample_points):
        path = tmp_path / "points.json"
        path.write_text(json.dumps(sample_points))
        assert read_batch(path) == sample_points

    def test_rejects_scalar(self, tmp_path):
        path = tmp_path / "points.yaml"
        path.write_text("just text\n")
        with pytest.raises(Exception, match="does not contain a list"):
            read_batch(path)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

class TestInit:

    def test_runs_lifecycle(self, runner, database):
        with patch("riskzones.cli.initialize", new_callable=AsyncMock) as mock_init:
            result = runner.invoke(cli, ["init"])

        assert result.exit_code == 0
        mock_init.assert_awaited_once_with(database)

    def test_failure_exits_nonzero(self, runner, database):
        with patch("riskzones.cli.initialize", AsyncMock(side_effect=ServerSelectionTimeoutError("no server"))):
            result = runner.invoke(cli, ["init"])

        assert result.exit_code == 1
        assert "Error: no server" in result.output


class TestLoad:

    def test_appends(self, runner, database, collection, batch_file, sample_points):
        result = runner.invoke(cli, ["load", str(batch_file)])

        assert result.exit_code == 0, result.output
        assert len(collection.documents) == len(sample_points)
        assert database.session.transactions == 0

    def test_replace_runs_in_transaction(self, runner, database, collection, batch_file, sample_points):
        runner.invoke(cli, ["load", str(batch_file)])
        result = runner.invoke(cli, ["load", str(batch_file), "--replace"])

        assert result.exit_code == 0, result.output
        assert len(collection.documents) == len(sample_points)
        assert database.session.transactions == 1
        assert collection.sessions[-2:] == [database.session, database.session]

    def test_invalid_batch(self, runner, database, collection, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([{"title": "X", "locpoint": [0, 0], "radius": 1, "risk": 1}]))

        result = runner.invoke(cli, ["load", str(path)])

        assert result.exit_code == 1
        assert "[0].radius" in result.output
        assert collection.documents == []


class TestTruncate:

    def test_requires_confirmation(self, runner, database, collection, batch_file):
        runner.invoke(cli, ["load", str(batch_file)])

        result = runner.invoke(cli, ["truncate"], input="n\n")

        assert result.exit_code == 1
        assert collection.documents != []

    def test_yes_flag(self, runner, database, collection, batch_file):
        runner.invoke(cli, ["load", str(batch_file)])

        result = runner.invoke(cli, ["truncate", "--yes"])

        assert result.exit_code == 0
        assert collection.documents == []


class TestNear:

    def test_inside_zone(self, runner, database, batch_file):
        runner.invoke(cli, ["load", str(batch_file)])

        result = runner.invoke(cli, ["near", "--", "-47.8910", "-21.9985"])

        assert result.exit_code == 0, result.output
        assert "Cemitério Nossa Senhora do Carmo" in result.output

    def test_json_no_match(self, runner, database):
        result = runner.invoke(cli, ["near", "--json", "--", "10", "10"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"point": None}

    def test_json_match(self, runner, database, batch_file):
        runner.invoke(cli, ["load", str(batch_file)])

        result = runner.invoke(cli, ["near", "--json", "--", "-47.898274", "-22.002302"])

        point = json.loads(result.output)["point"]
        assert point["title"] == "USP University"
        assert point["locpoint"] == [-47.898274, -22.002302]

    def test_out_of_range(self, runner, database):
        result = runner.invoke(cli, ["near", "200", "0"])

        assert result.exit_code == 1
        assert "Wrong data format" in result.output


class TestNearby:

    def test_json_output(self, runner, database, batch_file):
        runner.invoke(cli, ["load", str(batch_file)])

        result = runner.invoke(cli, [
            "nearby", "--grv", "-47.898274", "-22.002302", "--delta", "0.004",
            "--loc", "-47.898274", "-22.002302", "--json",
        ])

        assert result.exit_code == 0, result.output
        points = json.loads(result.output)
        assert [p["title"] for p in points] == ["USP University", "Pereire Lopes", "Parque do Kartódromo"]
        assert points[0]["distance"] == "0"
        assert set(points[0]) == {"time", "title", "locpoint", "radius", "risk", "distance"}

    def test_text_output(self, runner, database, batch_file):
        runner.invoke(cli, ["load", str(batch_file)])

        result = runner.invoke(cli, ["nearby", "--grv", "-47.898274", "-22.002302", "--delta", "0.004"])

        assert result.exit_code == 0, result.output
        assert "Found 3 risk points" in result.output

    def test_invalid_delta(self, runner, database):
        result = runner.invoke(cli, ["nearby", "--grv", "0", "0", "--delta", "0"])

        assert result.exit_code == 1
        assert "delta" in result.output


class TestHealth:

    def test_reports_count(self, runner, database, batch_file, sample_points):
        runner.invoke(cli, ["load", str(batch_file)])

        result = runner.invoke(cli, ["health"])

        assert result.exit_code == 0
        assert f"Risk points: {len(sample_points)}" in result.output
        database.ping.assert_awaited_once()

    def test_unreachable(self, runner, database):
        database.ping.side_effect = ServerSelectionTimeoutError("timed out")

        result = runner.invoke(cli, ["health"])

        assert result.exit_code == 1
        assert "Error: timed out" in result.output
