import json

from tracksurvey.services.submissions import tabulate, timestamp_from_filename


def _write(storage, name, data):
    storage.base_dir.mkdir(parents=True, exist_ok=True)
    (storage.base_dir / name).write_text(json.dumps(data), encoding="utf-8")


def test_timestamp_from_filename():
    assert timestamp_from_filename("10-0-0-1_20251019_093000.json") == "20251019_093000"
    assert timestamp_from_filename("10-0-0-1.json") == "unknown"


def test_missing_directory_lists_nothing(client):
    res = client.get("/api/results")
    assert res.status_code == 200
    assert res.json() == {"submissions": []}


def test_empty_directory_lists_nothing(client, storage):
    storage.base_dir.mkdir(parents=True)
    assert client.get("/api/results").json() == {"submissions": []}


def test_round_trip(client):
    body = {"1": {"q1_1": 5, "q1_2": "calm"}}
    client.post("/api/submit", json=body, headers={"X-Forwarded-For": "203.0.113.7"})

    subs = client.get("/api/results").json()["submissions"]
    assert len(subs) == 1
    assert subs[0]["filename"] == "203-0-113-7.json"
    assert subs[0]["timestamp"] == "unknown"
    assert subs[0]["data"] == body


def test_newest_first(client, storage):
    _write(storage, "1-1-1-1_20250101_090000.json", {"1": {"q": 1}})
    _write(storage, "2-2-2-2_20251019_120000.json", {"1": {"q": 2}})
    _write(storage, "3-3-3-3_20250601_000000.json", {"1": {"q": 3}})

    subs = client.get("/api/results").json()["submissions"]
    assert [s["timestamp"] for s in subs] == [
        "20251019_120000",
        "20250601_000000",
        "20250101_090000",
    ]


def test_non_json_files_ignored(client, storage):
    _write(storage, "1-1-1-1.json", {"1": {"q": 1}})
    (storage.base_dir / "notes.txt").write_text("hello", encoding="utf-8")
    subs = client.get("/api/results").json()["submissions"]
    assert [s["filename"] for s in subs] == ["1-1-1-1.json"]


def test_malformed_file_is_skipped(client, storage):
    _write(storage, "1-1-1-1_20250101_090000.json", {"1": {"q": 1}})
    (storage.base_dir / "2-2-2-2_20250102_090000.json").write_text("{broken", encoding="utf-8")

    res = client.get("/api/results")
    assert res.status_code == 200
    assert [s["filename"] for s in res.json()["submissions"]] == ["1-1-1-1_20250101_090000.json"]


def test_non_finite_file_is_skipped(client, storage):
    _write(storage, "1-1-1-1_20250101_090000.json", {"1": {"q": 1}})
    (storage.base_dir / "2-2-2-2_20250102_090000.json").write_text('{"1": {"q": NaN}}', encoding="utf-8")

    res = client.get("/api/results")
    assert res.status_code == 200
    assert [s["filename"] for s in res.json()["submissions"]] == ["1-1-1-1_20250101_090000.json"]


def test_single_result_and_404(client, storage):
    _write(storage, "1-1-1-1.json", {"2": {"q2_1": 3}})
    res = client.get("/api/results/1-1-1-1.json")
    assert res.status_code == 200
    assert res.json()["data"] == {"2": {"q2_1": 3}}

    assert client.get("/api/results/9-9-9-9.json").status_code == 404
    assert client.get("/api/results/notes.txt").status_code == 404


def test_tabulate_orders_tracks_numerically():
    record = {
        "filename": "x.json",
        "timestamp": "unknown",
        "data": {"10": {"b": "late"}, "2": {"a": 4, "b": "mid"}, "1": {"a": 5}},
    }
    table = tabulate(record)
    assert table["questionIds"] == ["a", "b"]
    assert [r["trackId"] for r in table["rows"]] == ["1", "2", "10"]
    assert table["rows"][0]["answers"] == {"a": 5, "b": "-"}
    assert table["rows"][2]["answers"] == {"a": "-", "b": "late"}


def test_table_endpoint(client, storage):
    _write(storage, "1-1-1-1_20250101_090000.json", {"1": {"q1_1": 5, "q1_2": "calm"}})
    table = client.get("/api/results/1-1-1-1_20250101_090000.json/table").json()
    assert table["timestamp"] == "20250101_090000"
    assert table["questionIds"] == ["q1_1", "q1_2"]


def test_download(client, storage):
    data = {"1": {"q1_1": 5}}
    _write(storage, "1-1-1-1.json", data)
    res = client.get("/api/results/1-1-1-1.json/download")
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("application/json")
    assert 'filename="1-1-1-1.json"' in res.headers["content-disposition"]
    assert json.loads(res.content) == data
