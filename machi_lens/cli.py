import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from machi_lens.errors import MachiLensError, format_error
from machi_lens.estat.client import EstatApiClient
from machi_lens.pipeline.report_pipeline import DisasterRecord, PipelineInput, run_report_pipeline
from machi_lens.reinfo.client import ReinfoApiClient
from machi_lens.scoring.engine import results_to_frame
from machi_lens.scoring.presets import ALL_PRESETS
from machi_lens.utils.config_loader import PROJECT_ROOT, load_config, render_filename
from machi_lens.utils.logging_utils import setup_logging


def load_disaster_csv(path: Path) -> Dict[str, DisasterRecord]:
    """災害リスクCSV（area_code, flood_risk, landslide_risk, evacuation_site_count[, data_year]）を読む"""
    df = pd.read_csv(path, dtype={"area_code": str, "data_year": str})
    records = {}
    for row in df.itertuples(index=False):
        records[str(row.area_code).zfill(5)] = DisasterRecord(
            flood_risk=bool(row.flood_risk),
            landslide_risk=bool(row.landslide_risk),
            evacuation_site_count=int(row.evacuation_site_count),
            data_year=str(getattr(row, "data_year", "") or ""),
        )
    return records


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="市区町村の比較ランキングを作成する")
    parser.add_argument("cities", nargs="+", help="比較する市区町村名（例: 世田谷区 横浜市 浜松市中央区）")
    parser.add_argument("--config", type=Path, default=None, help="Config YAML (default: config/machi_lens.yaml)")
    parser.add_argument(
        "--preset",
        type=str,
        default=None,
        choices=[p.name for p in ALL_PRESETS],
        help="重みプリセット（未指定時は config の scoring.preset）",
    )
    parser.add_argument("--time-code", type=str, default=None, help="人口統計の時間コードを明示指定")
    parser.add_argument("--price-year", type=str, default=None, help="不動産価格の取引年（既定: 前年）")
    parser.add_argument("--property-type", type=str, default="condo", choices=["condo", "house", "land", "all"])
    parser.add_argument("--budget", type=float, default=None, help="予算上限（万円）")
    parser.add_argument("--disaster-csv", type=Path, default=None, help="災害リスクCSV")
    parser.add_argument("--no-price", action="store_true")
    parser.add_argument("--no-crime", action="store_true")
    parser.add_argument("--no-education", action="store_true")
    parser.add_argument("--no-healthcare", action="store_true")
    parser.add_argument("--no-transport", action="store_true")
    parser.add_argument("--output", type=Path, default=None, help="出力CSV（既定: io.output_dir + 命名テンプレート）")
    parser.add_argument("--log-level", type=str, default="INFO")
    return parser


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        cfg = load_config(args.config)
        estat_client = EstatApiClient.from_config(cfg)
        reinfo_client = None
        if not args.no_price:
            try:
                reinfo_client = ReinfoApiClient.from_config(cfg)
            except MachiLensError as e:
                logging.warning(f"不動産価格をスキップします: {e.message}")

        disaster = load_disaster_csv(args.disaster_csv) if args.disaster_csv else None
        pipeline_input = PipelineInput(
            city_names=tuple(args.cities),
            preset=args.preset or cfg.get("scoring", {}).get("preset", "childcare"),
            include_price=not args.no_price,
            include_crime=not args.no_crime,
            include_disaster=disaster is not None,
            include_education=not args.no_education,
            include_healthcare=not args.no_healthcare,
            include_transport=not args.no_transport,
            price_year=args.price_year,
            property_type=args.property_type,
            budget_man_yen=args.budget,
            time_code=args.time_code,
        )
        result = run_report_pipeline(pipeline_input, cfg, estat_client, reinfo_client, disaster)
    except MachiLensError as e:
        print(format_error(e), file=sys.stderr)
        return e.exit_code

    df = results_to_frame(result.results, result.definitions)
    if args.output is not None:
        out_path = args.output
    else:
        io_cfg = cfg.get("io", {})
        template = cfg["naming"]["ranking"]["filename_template"]
        out_path = PROJECT_ROOT / io_cfg.get("output_dir", "data/processed") / render_filename(
            template, cfg.get("project", {})
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out_path, index=False, encoding=cfg.get("io", {}).get("encoding_out", "utf-8-sig"))
    logging.info(f"Saved: {out_path}")
    print(f"✅ 出力: {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
