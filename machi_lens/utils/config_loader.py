from __future__ import annotations
from pathlib import Path
import copy
import re
from datetime import datetime
from typing import Any, Dict, Optional
import yaml

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "machi_lens.yaml"

# 設定ファイルが無い/キーが欠けている場合の既定値
DEFAULT_CONFIG: Dict[str, Any] = {
    "project": {"version": "v1"},
    "datasets": {
        # 国勢調査 年齢（3区分），男女別人口（令和2年）
        "population": {"stats_data_id": "0003448299", "selectors": {"class_id": "cat01"}},
        # 社会・人口統計体系 市区町村データ
        "crime": {"stats_data_id": "0000020211"},
        "education": {"stats_data_id": "0000020205"},
        "healthcare": {"stats_data_id": "0000020209"},
        "transport": {"stats_data_id": "0000020203"},
    },
    "api": {
        "estat": {
            "base_url": "https://api.e-stat.go.jp/rest/3.0/app/json/",
            "timeout_sec": 30,
            "max_retries": 3,
            "sleep_sec": 0.3,
        },
        "reinfo": {
            "base_url": "https://www.reinfolib.mlit.go.jp/ex-api/external/",
            "timeout_sec": 30,
            "max_retries": 3,
            "sleep_sec": 0.2,
        },
    },
    "scoring": {"preset": "childcare"},
    "io": {"output_dir": "data/processed", "encoding_out": "utf-8-sig"},
    "naming": {
        "ranking": {"filename_template": "city_ranking__${project.version}__${date:%Y%m%d}.csv"}
    },
}


def load_yaml(path: str | Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _deep_merge(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(path: Optional[str | Path] = None) -> dict:
    """YAML設定を読み込み、DEFAULT_CONFIG の上に重ねて返す。

    path 未指定時は config/machi_lens.yaml があればそれを使う。
    ユーザー指定の値が優先され、欠けているキーは既定値で補う。
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.exists() else None
    user_cfg = load_yaml(path) if path is not None else {}
    return _deep_merge(DEFAULT_CONFIG, user_cfg)


def render_filename(template: str, project: dict) -> str:
    """出力ファイル名テンプレートを展開する。

    ${project.<key>} は config の project セクション（version の既定は v1）、
    ${date:<strftime書式>} は実行日で置換する。
    """

    def sub_project(m):
        key = m.group(1)
        return str(project.get(key, "v1" if key == "version" else ""))

    s = re.sub(r"\$\{project\.(\w+)\}", sub_project, template)
    return re.sub(r"\$\{date:(%[^}]+)\}", lambda m: datetime.now().strftime(m.group(1)), s)
