# tests/test_persistence.py
import json
from pathlib import Path

import pandas as pd
import pytest

import wilson_score
from wilson_score import WilsonScoreInterval, InvalidArgument
from wilson_score.persistence import ParamsReader, read_metadata


def _votes():
    return pd.DataFrame({
        "docId": [1, 2, 2, 2],
        "positives": [2, 20, 200, 2000],
        "negatives": [1, 10, 100, 1000],
    })


def _configured():
    return (WilsonScoreInterval()
            .set_positive_col("positives")
            .set_negative_col("negatives")
            .set_output_col("score"))


def test_save_load_round_trip_reproduces_output(tmp_path: Path):
    ws = _configured()
    path = tmp_path / "wilson"
    ws.save(str(path))
    loaded = WilsonScoreInterval.load(str(path))

    assert loaded.uid == ws.uid
    assert loaded.param_map() == ws.param_map()
    pd.testing.assert_frame_equal(loaded.transform(_votes()), ws.transform(_votes()))


def test_round_trip_keeps_non_default_method(tmp_path: Path):
    ws = _configured().set_method("wilson").set_confidence(0.9)
    ws.write().save(tmp_path / "w")
    loaded = WilsonScoreInterval.read().load(tmp_path / "w")
    assert loaded.get_method() == "wilson"
    assert loaded.get_confidence() == 0.9
    pd.testing.assert_frame_equal(loaded.transform(_votes()), ws.transform(_votes()))


def test_metadata_layout(tmp_path: Path):
    ws = _configured()
    ws.save(tmp_path / "w")
    meta_dir = tmp_path / "w" / "metadata"
    assert (meta_dir / "_SUCCESS").exists()
    lines = (meta_dir / "part-00000").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    meta = json.loads(lines[0])
    assert meta["class"] == "wilson_score.transformer.WilsonScoreInterval"
    assert meta["uid"] == ws.uid
    assert meta["version"] == wilson_score.__version__
    assert isinstance(meta["timestamp"], int)
    assert meta["paramMap"] == {"positive_col": "positives", "negative_col": "negatives", "output_col": "score"}
    assert meta["defaultParamMap"] == {"method": "ranking", "confidence": 0.95}


def test_save_refuses_existing_path_without_overwrite(tmp_path: Path):
    ws = _configured()
    ws.save(tmp_path / "w")
    with pytest.raises(FileExistsError):
        ws.save(tmp_path / "w")


def test_overwrite_replaces_existing_file(tmp_path: Path):
    # a plain file sitting where the directory should go
    path = tmp_path / "wilson-score.tmp"
    path.write_text("", encoding="utf-8")
    ws = _configured()
    ws.write().overwrite().save(path)
    assert WilsonScoreInterval.load(path).uid == ws.uid


def test_overwrite_replaces_existing_directory(tmp_path: Path):
    target = tmp_path / "w"
    _configured().save(target)
    second = _configured().set_output_col("s2")
    second.save(target, overwrite=True)
    assert WilsonScoreInterval.load(target).get_output_col() == "s2"


def test_load_ignores_unknown_keys(tmp_path: Path):
    ws = _configured()
    ws.save(tmp_path / "w")
    meta_path = tmp_path / "w" / "metadata" / "part-00000"
    meta = json.loads(meta_path.read_text(encoding="utf-8"))
    meta["futureField"] = {"a": 1}
    meta["paramMap"]["handleInvalid"] = "skip"
    meta_path.write_text(json.dumps(meta) + "\n", encoding="utf-8")

    loaded = WilsonScoreInterval.load(tmp_path / "w")
    assert loaded.get_output_col() == "score"
    assert not loaded.is_set("handleInvalid")


def test_load_missing_or_corrupt_metadata(tmp_path: Path):
    with pytest.raises(InvalidArgument):
        WilsonScoreInterval.load(tmp_path / "nothing-here")

    meta_dir = tmp_path / "bad" / "metadata"
    meta_dir.mkdir(parents=True)
    (meta_dir / "part-00000").write_text("{not json", encoding="utf-8")
    with pytest.raises(InvalidArgument):
        read_metadata(tmp_path / "bad")


def test_load_rejects_other_class(tmp_path: Path):
    class Other(WilsonScoreInterval):
        pass

    Other(positive_col="p", negative_col="n", output_col="s").save(tmp_path / "o")
    with pytest.raises(InvalidArgument, match="expected"):
        ParamsReader(WilsonScoreInterval).load(tmp_path / "o")
