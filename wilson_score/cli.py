# wilson_score/cli.py
# Usage examples:
#   wilson-score score --in data/votes.csv --positive-col up --negative-col down --output-col score --out out/scored.csv
#   wilson-score score --in data/votes.csv --config params.yaml
#   wilson-score save --config params.yaml --out models/wilson --overwrite
#   wilson-score apply --model models/wilson --in data/votes.csv --out out/scored.csv
#   wilson-score query --in data/votes.csv --table votes --sql "SELECT id, wilson_score_interval(up, down) AS score FROM votes"

from __future__ import annotations
import sys, argparse, io, logging, sqlite3
from pathlib import Path
from typing import Any, Dict
import pandas as pd
import yaml

from wilson_score.errors import WilsonScoreError
from wilson_score.functions import define_udf
from wilson_score.params import load_params_yaml
from wilson_score.transformer import WilsonScoreInterval

logger = logging.getLogger("wilson_score.cli")

# ---------------- Basic IO helpers ----------------
def _read_table(path: Path) -> pd.DataFrame:
    p = str(path).lower()
    if p.endswith(".csv"):
        return pd.read_csv(path)
    elif p.endswith(".xlsx") or p.endswith(".xls"):
        return pd.read_excel(path)
    else:
        raise WilsonScoreError(f"Unsupported file type: {path}")

def _write_table(df: pd.DataFrame, out_path: Path):
    out_path.parent.mkdir(parents=True, exist_ok=True)
    low = str(out_path).lower()
    if low.endswith(".csv"):
        df.to_csv(out_path, index=False)
    elif low.endswith((".xlsx", ".xls")):
        with pd.ExcelWriter(out_path, engine="openpyxl") as xlw:
            df.to_excel(xlw, index=False, sheet_name="Data")
    else:
        raise WilsonScoreError("Output must be .csv or .xlsx")

def _emit(df: pd.DataFrame, out: str | None, what: str):
    if out:
        _write_table(df, Path(out))
        print(f"OK: Wrote {what}: {out}")
    else:
        buf = io.StringIO()
        df.head(20).to_string(buf, index=False)
        print(buf.getvalue())

# ---------------- Params ----------------
_PARAM_FLAGS = ("positive_col", "negative_col", "output_col", "method", "confidence")

def _collect_params(args: argparse.Namespace) -> Dict[str, Any]:
    """YAML file first, then explicit flags on top."""
    params: Dict[str, Any] = {}
    if args.config:
        params.update(load_params_yaml(args.config))
    for name in _PARAM_FLAGS:
        val = getattr(args, name, None)
        if val is not None:
            params[name] = val
    return params

def _add_param_args(p: argparse.ArgumentParser):
    p.add_argument("--config", dest="config", required=False, help="YAML file with transformer params")
    p.add_argument("--positive-col", dest="positive_col", required=False, help="Column with positive counts")
    p.add_argument("--negative-col", dest="negative_col", required=False, help="Column with negative counts")
    p.add_argument("--output-col", dest="output_col", required=False, help="Column to write scores to")
    p.add_argument("--method", dest="method", required=False, choices=["ranking", "wilson"],
                   help="ranking (default) or wilson lower bound")
    p.add_argument("--confidence", dest="confidence", required=False, type=float,
                   help="Confidence level for --method wilson (default 0.95)")

# ---------------- Commands ----------------
def cmd_score(args: argparse.Namespace) -> int:
    df = _read_table(Path(args.input))
    ws = WilsonScoreInterval(**_collect_params(args))
    out = ws.transform(df)
    _emit(out, args.out, "scored table")
    return 0

def cmd_save(args: argparse.Namespace) -> int:
    ws = WilsonScoreInterval(**_collect_params(args))
    # fail at save time rather than at first use
    ws.transform_schema(dict.fromkeys([ws.get_positive_col(), ws.get_negative_col()]))
    ws.save(args.out, overwrite=args.overwrite)
    print(f"OK: Saved {ws.uid} to {args.out}")
    return 0

def cmd_apply(args: argparse.Namespace) -> int:
    ws = WilsonScoreInterval.load(args.model)
    df = _read_table(Path(args.input))
    _emit(ws.transform(df), args.out, "scored table")
    return 0

def cmd_query(args: argparse.Namespace) -> int:
    df = _read_table(Path(args.input))
    conn = define_udf(sqlite3.connect(":memory:"))
    try:
        df.to_sql(args.table, conn, index=False)
        res = pd.read_sql_query(args.sql, conn)
    finally:
        conn.close()
    _emit(res, args.out, "query result")
    return 0

# ---------------- Parser + main ----------------
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="wilson-score", description="Wilson score interval tools")
    p.add_argument("--log-level", dest="log_level", default="WARNING",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level (default WARNING)")
    sub = p.add_subparsers(dest="cmd", required=True)

    # wilson-score score
    p_score = sub.add_parser("score", help="Append a Wilson score column to a table")
    p_score.add_argument("--in", dest="input", required=True, help="Input .csv/.xlsx")
    p_score.add_argument("--out", dest="out", required=False, help="Output .csv/.xlsx")
    _add_param_args(p_score)
    p_score.set_defaults(func=cmd_score)

    # wilson-score save
    p_save = sub.add_parser("save", help="Persist transformer params to a directory")
    p_save.add_argument("--out", dest="out", required=True, help="Target directory")
    p_save.add_argument("--overwrite", dest="overwrite", action="store_true", help="Replace an existing path")
    _add_param_args(p_save)
    p_save.set_defaults(func=cmd_save)

    # wilson-score apply
    p_apply = sub.add_parser("apply", help="Load saved params and score a table")
    p_apply.add_argument("--model", dest="model", required=True, help="Directory written by 'save'")
    p_apply.add_argument("--in", dest="input", required=True, help="Input .csv/.xlsx")
    p_apply.add_argument("--out", dest="out", required=False, help="Output .csv/.xlsx")
    p_apply.set_defaults(func=cmd_apply)

    # wilson-score query
    p_query = sub.add_parser("query", help="Run SQL with the Wilson functions over a table")
    p_query.add_argument("--in", dest="input", required=True, help="Input .csv/.xlsx")
    p_query.add_argument("--sql", dest="sql", required=True, help="SQL text")
    p_query.add_argument("--table", dest="table", default="data", help="Table name for the input (default: data)")
    p_query.add_argument("--out", dest="out", required=False, help="Output .csv/.xlsx")
    p_query.set_defaults(func=cmd_query)

    return p

def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except (WilsonScoreError, FileExistsError, FileNotFoundError, yaml.YAMLError,
            sqlite3.Error, pd.errors.DatabaseError) as e:
        logger.debug("Command %s failed", args.cmd, exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

if __name__ == "__main__":
    raise SystemExit(main())
