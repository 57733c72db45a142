import json

import pytest
from backend.search_core import query_cli
from backend.search_core.pipeline import QueryPipeline


@pytest.fixture
def offline_cli(monkeypatch, extractor, resolver):
    monkeypatch.setattr(query_cli, "QueryPipeline", lambda: QueryPipeline(extractor, resolver))


def test_json_output(offline_cli, capsys):
    assert query_cli.main(["vegan, pizza u Splitu", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["filters"]["dietary_type_ids"] == [40]
    assert payload["filters"]["food_type_ids"] == [1]
    assert payload["location"]["place"] == "split"
    assert payload["location"]["radiusKm"] == 10


def test_text_output(offline_cli, capsys):
    assert query_cli.main(["pizza, Domaći kruh", "--lat", "45.8", "--lng", "15.97"]) == 0
    out = capsys.readouterr().out
    assert "food_type_ids" in out
    assert "free text:   Domaći kruh" in out
    assert "'latitude': 45.8" in out
    assert "taxonomy unavailable" not in out


def test_lat_requires_lng(offline_cli, capsys):
    with pytest.raises(SystemExit) as excinfo:
        query_cli.main(["pizza", "--lat", "45.8"])
    assert excinfo.value.code == 2
    assert "--lat and --lng" in capsys.readouterr().err
