import json
import os
import subprocess
import sys

import pytest

from golquery.cli import main

from conftest import REPO_ROOT


def test_preset_prints_count_and_features(feature_file, capsys):
    code = main([str(feature_file), "--engine", "memory", "--preset", "restaurants",
                 "--bbox", "-73.9781", "45.4042", "-73.4766", "45.7042"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Found 2 features for 'na[amenity=restaurant]'" in out
    assert "Chez Nous" in out
    assert "cuisine: french" in out


def test_limit_caps_printed_features(feature_file, capsys):
    code = main([str(feature_file), "--engine", "memory", "--query", "na[amenity]",
                 "--center", "-73.6", "45.5", "0.2", "--limit", "1"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Found 5 features" in out
    assert "\n1. Chez Nous" in out
    assert "\n2. " not in out


def test_amenity_with_geojson(feature_file, capsys):
    code = main([str(feature_file), "--engine", "memory", "--amenity", "cafe",
                 "--bbox", "-73.9781", "45.4042", "-73.4766", "45.7042", "--geojson"])
    collection = json.loads(capsys.readouterr().out)
    assert code == 0
    assert collection["numberMatched"] == 1
    assert collection["features"][0]["properties"]["name"] == "Café Olimpico"


def test_store_path_from_environment(feature_file, monkeypatch, capsys):
    monkeypatch.setenv("GOLQUERY_GOL_PATH", str(feature_file))
    monkeypatch.setenv("GOLQUERY_ENGINE", "memory")
    code = main(["--preset", "bus-stops", "--bbox", "-73.9781", "45.4042", "-73.4766", "45.7042"])
    assert code == 0
    assert "ref: 52345" in capsys.readouterr().out


def test_missing_store_exits_with_failure(tmp_path, capsys):
    code = main([str(tmp_path / "missing.json"), "--engine", "memory", "--preset", "roads",
                 "--bbox", "0", "0", "1", "1"])
    assert code == 1
    assert capsys.readouterr().err.startswith("OpenFailure:")


def test_bad_query_exits_with_failure(feature_file, capsys):
    code = main([str(feature_file), "--engine", "memory", "--query", "na[amenity",
                 "--bbox", "0", "0", "1", "1"])
    assert code == 1
    assert capsys.readouterr().err.startswith("QueryFailure:")


def test_store_path_required():
    with pytest.raises(SystemExit) as exc_info:
        main(["--preset", "roads", "--bbox", "0", "0", "1", "1"])
    assert exc_info.value.code == 2


def test_query_and_preset_are_exclusive(feature_file):
    with pytest.raises(SystemExit):
        main([str(feature_file), "--preset", "roads", "--query", "w[highway]",
              "--bbox", "0", "0", "1", "1"])


def _run_module(args, cwd):
    env = {k: v for k, v in os.environ.items() if not k.startswith("GOLQUERY_")}
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")]))
    env.pop("DEBUG_LOGGING", None)
    return subprocess.run(
        [sys.executable, "-m", "golquery", *args],
        cwd=cwd, env=env, capture_output=True, text=True, timeout=120,
    )


def test_geojson_stdout_is_a_single_json_document(feature_file, tmp_path):
    proc = _run_module([str(feature_file), "--engine", "memory", "--amenity", "cafe",
                        "--bbox", "-73.9781", "45.4042", "-73.4766", "45.7042", "--geojson"], tmp_path)
    assert proc.returncode == 0, proc.stderr
    collection = json.loads(proc.stdout)
    assert collection["type"] == "FeatureCollection"
    assert collection["numberReturned"] == 1
    assert "Opened store" in proc.stderr


def test_summary_stdout_has_no_log_lines(feature_file, tmp_path):
    proc = _run_module([str(feature_file), "--engine", "memory", "--preset", "roads",
                        "--bbox", "-73.9781", "45.4042", "-73.4766", "45.7042"], tmp_path)
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.startswith("Found 1 features for 'w[highway]'")
    assert '"level"' not in proc.stdout
