"""不動産情報ライブラリ API（国土交通省）のクライアント。"""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, List, Mapping, Optional

import requests
from requests import Session

from machi_lens.errors import ApiError, ConfigError
from machi_lens.utils.http import get_session

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.reinfolib.mlit.go.jp/ex-api/external/"
TRADE_ENDPOINT = "XIT001"


class ReinfoApiClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_sec: float = 30,
        max_retries: int = 3,
        sleep_sec: float = 0.2,
        session: Optional[Session] = None,
    ):
        if not api_key:
            raise ConfigError(
                "不動産情報ライブラリの API キーが設定されていません",
                ["環境変数 REINFOLIB_API_KEY を設定してください。"],
            )
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout_sec = timeout_sec
        self.sleep_sec = sleep_sec
        self.session = session or get_session(max_retries)
        self.session.headers.update({"Ocp-Apim-Subscription-Key": api_key})

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> "ReinfoApiClient":
        api = cfg.get("api", {}).get("reinfo", {})
        return cls(
            api_key=os.environ.get("REINFOLIB_API_KEY", ""),
            base_url=api.get("base_url", DEFAULT_BASE_URL),
            timeout_sec=api.get("timeout_sec", 30),
            max_retries=api.get("max_retries", 3),
            sleep_sec=api.get("sleep_sec", 0.2),
        )

    def fetch_trades(self, year: str, city: str, quarter: Optional[int] = None) -> List[Dict[str, Any]]:
        """取引価格情報（XIT001）を取得し、取引レコードのリストを返す。"""
        params: Dict[str, Any] = {"year": year, "city": city, "priceClassification": "01"}
        if quarter is not None:
            params["quarter"] = quarter
        logger.info("reinfolib %s %s", TRADE_ENDPOINT, params)
        try:
            res = self.session.get(self.base_url + TRADE_ENDPOINT, params=params, timeout=self.timeout_sec)
            # 404 は該当取引なし
            if res.status_code == 404:
                return []
            res.raise_for_status()
        except requests.RequestException as e:
            raise ApiError(
                f"不動産情報ライブラリ API の呼び出しに失敗しました: city={city}",
                ["API キーとネットワーク接続を確認してください。"],
                details=str(e),
            ) from e
        finally:
            time.sleep(self.sleep_sec)  # polite wait
        payload = res.json()
        return list(payload.get("data") or [])
