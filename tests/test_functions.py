# tests/test_functions.py
import sqlite3

import numpy as np
import pandas as pd
import pytest

from wilson_score import WilsonScoreInterval, InvalidArgument
from wilson_score.functions import FunctionRegistry, call_udf, define_udf, registry
from wilson_score.metrics import ranking_score

EXPECTED = [0.22328763310073402, 0.553022430377575, 0.6316800063346981, 0.6556334308906774]


def _votes():
    return pd.DataFrame({
        "docId": [1, 2, 2, 2],
        "positives": [2, 20, 200, 2000],
        "negatives": [1, 10, 100, 1000],
    })


def test_default_registry_names():
    assert registry.names() == ["wilson_lower_bound", "wilson_score_interval"]
    assert "wilson_score_interval" in registry
    assert registry.get("wilson_score_interval").arity == 2


def test_call_udf_on_columns():
    df = _votes()
    scores = call_udf("wilson_score_interval", df["positives"], df["negatives"])
    assert len(scores) == 4
    assert list(scores.index) == list(df.index)
    for got, want in zip(scores, EXPECTED):
        assert got == pytest.approx(want, abs=1e-5)

    with_col = df.assign(score=scores)
    assert list(with_col.columns) == ["docId", "positives", "negatives", "score"]


def test_sql_query_text():
    df = _votes()
    conn = define_udf()
    try:
        df.to_sql("test_data", conn, index=False)
        res = pd.read_sql_query("SELECT wilson_score_interval(positives, negatives) AS score FROM test_data", conn)
    finally:
        conn.close()
    assert len(res) == 4
    for got, want in zip(res["score"], EXPECTED):
        assert got == pytest.approx(want, abs=1e-5)


def test_sql_column_and_transform_paths_agree():
    df = _votes()
    transformed = (WilsonScoreInterval()
                   .set_positive_col("positives")
                   .set_negative_col("negatives")
                   .set_output_col("score")
                   .transform(df))["score"]
    column = call_udf("wilson_score_interval", df["positives"], df["negatives"])

    conn = define_udf(sqlite3.connect(":memory:"))
    try:
        df.to_sql("test_data", conn, index=False)
        rows = conn.execute(
            "SELECT wilson_score_interval(positives, negatives) FROM test_data ORDER BY rowid"
        ).fetchall()
    finally:
        conn.close()
    sql = [r[0] for r in rows]

    assert list(transformed) == list(column) == sql


def test_wilson_lower_bound_function_matches_wilson_method():
    df = _votes()
    transformed = WilsonScoreInterval(
        positive_col="positives", negative_col="negatives", output_col="score", method="wilson",
    ).transform(df)["score"]
    column = call_udf("wilson_lower_bound", df["positives"], df["negatives"])
    assert list(transformed) == list(column)


def test_sql_null_input_gives_null():
    conn = define_udf()
    try:
        row = conn.execute("SELECT wilson_score_interval(NULL, 3), wilson_score_interval(0, 0)").fetchone()
    finally:
        conn.close()
    assert row == (None, 0.0)


def test_sql_bad_row_raises():
    conn = define_udf()
    try:
        with pytest.raises(sqlite3.OperationalError):
            conn.execute("SELECT wilson_score_interval(-1, 3)").fetchone()
    finally:
        conn.close()


def test_unknown_function_and_wrong_arity():
    with pytest.raises(InvalidArgument, match="Unknown function"):
        call_udf("nope", [1], [1])
    with pytest.raises(InvalidArgument, match="takes 2 arguments"):
        call_udf("wilson_score_interval", [1])


def test_custom_registry_binds_only_its_functions():
    reg = FunctionRegistry()
    reg.register("half_ranking", lambda p, n: ranking_score(p, n) / 2, 2)
    conn = define_udf(functions=reg)
    try:
        (value,) = conn.execute("SELECT half_ranking(2, 1)").fetchone()
        with pytest.raises(sqlite3.OperationalError):
            conn.execute("SELECT wilson_score_interval(2, 1)").fetchone()
    finally:
        conn.close()
    assert value == pytest.approx(EXPECTED[0] / 2, abs=1e-5)

    # no vectorised form: falls back to row-by-row
    out = reg.call("half_ranking", np.array([2, 20]), np.array([1, 10]))
    assert out.tolist() == pytest.approx([EXPECTED[0] / 2, EXPECTED[1] / 2], abs=1e-5)


def test_register_rejects_bad_names():
    reg = FunctionRegistry()
    with pytest.raises(InvalidArgument):
        reg.register("not a name", ranking_score, 2)


def test_sql_text_counts_are_not_coerced():
    conn = define_udf()
    try:
        conn.execute("CREATE TABLE t (p TEXT, n TEXT)")
        conn.execute("INSERT INTO t VALUES ('2', '1')")
        with pytest.raises(sqlite3.OperationalError):
            conn.execute("SELECT wilson_score_interval(p, n) FROM t").fetchall()
        with pytest.raises(sqlite3.OperationalError):
            conn.execute("SELECT wilson_lower_bound(p, n) FROM t").fetchall()
    finally:
        conn.close()
