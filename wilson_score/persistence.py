# wilson_score/persistence.py
"""
Directory-based parameter store.

Layout written by ParamsWriter.save(path):

    <path>/metadata/part-00000   one JSON line: class, timestamp, version, uid,
                                 paramMap (explicit params), defaultParamMap
    <path>/metadata/_SUCCESS     empty marker

Unknown top-level keys and unknown params are ignored on load so newer
writers stay readable.
"""
from __future__ import annotations
import json
import logging
import shutil
import time
from pathlib import Path
from typing import Any, Dict

from .errors import InvalidArgument

logger = logging.getLogger(__name__)

METADATA_DIR = "metadata"
METADATA_FILE = "part-00000"
SUCCESS_FILE = "_SUCCESS"


def _class_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


class ParamsWriter:
    def __init__(self, instance: Any):
        self.instance = instance
        self.should_overwrite = False

    def overwrite(self) -> "ParamsWriter":
        self.should_overwrite = True
        return self

    def metadata(self) -> Dict[str, Any]:
        from . import __version__

        return {
            "class": _class_name(type(self.instance)),
            "timestamp": int(time.time() * 1000),
            "version": __version__,
            "uid": self.instance.uid,
            "paramMap": self.instance.param_map(),
            "defaultParamMap": self.instance.default_param_map(),
        }

    def save(self, path: str | Path) -> Path:
        root = Path(path)
        if root.exists():
            if not self.should_overwrite:
                raise FileExistsError(
                    f"Path {root} already exists. Use write().overwrite().save(path) to replace it."
                )
            if root.is_dir():
                shutil.rmtree(root)
            else:
                root.unlink()

        meta_dir = root / METADATA_DIR
        meta_dir.mkdir(parents=True, exist_ok=True)
        payload = self.metadata()
        (meta_dir / METADATA_FILE).write_text(json.dumps(payload, sort_keys=True) + "\n", encoding="utf-8")
        (meta_dir / SUCCESS_FILE).write_text("", encoding="utf-8")
        logger.debug("Saved %s params to %s", payload["uid"], root)
        return root


def read_metadata(path: str | Path) -> Dict[str, Any]:
    meta_path = Path(path) / METADATA_DIR / METADATA_FILE
    if not meta_path.is_file():
        raise InvalidArgument(f"No parameter metadata found at {meta_path}")
    lines = meta_path.read_text(encoding="utf-8").strip().splitlines()
    if not lines:
        raise InvalidArgument(f"Empty parameter metadata: {meta_path}")
    try:
        meta = json.loads(lines[0])
    except json.JSONDecodeError as e:
        raise InvalidArgument(f"Corrupt parameter metadata at {meta_path}: {e}") from e
    for key in ("class", "uid", "paramMap"):
        if key not in meta:
            raise InvalidArgument(f"Parameter metadata at {meta_path} is missing '{key}'")
    return meta


class ParamsReader:
    def __init__(self, cls: type):
        self.cls = cls

    def load(self, path: str | Path) -> Any:
        meta = read_metadata(path)
        expected = _class_name(self.cls)
        if meta["class"] != expected:
            raise InvalidArgument(f"Metadata at {path} is for {meta['class']}, expected {expected}")

        known = set(self.cls.param_names())
        params = {}
        for name, value in (meta.get("paramMap") or {}).items():
            if name in known:
                params[name] = value
            else:
                logger.warning("Ignoring unknown param '%s' in %s", name, path)

        instance = self.cls(uid=meta["uid"], **params)
        logger.debug("Loaded %s params from %s", instance.uid, path)
        return instance
