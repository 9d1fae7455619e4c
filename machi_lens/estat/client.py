"""e-Stat API 3.0 (JSON) の薄いクライアント。"""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Mapping, Optional

import requests
from requests import Session

from machi_lens.errors import ApiError, ConfigError
from machi_lens.utils.http import get_session

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.e-stat.go.jp/rest/3.0/app/json/"


def _result_of(payload: Mapping[str, Any], root_key: str) -> Mapping[str, Any]:
    root = payload.get(root_key) or {}
    return root.get("RESULT") or {}


class EstatApiClient:
    """getMetaInfo / getStatsData / getStatsList を呼ぶ。

    メタ情報は同じインスタンス内でメモ化する（プロセス内のみ。ディスクキャッシュは持たない）。
    呼び出しごとに sleep_sec だけ待機し、API の流量制限を守る。
    """

    def __init__(
        self,
        app_id: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_sec: float = 30,
        max_retries: int = 3,
        sleep_sec: float = 0.3,
        session: Optional[Session] = None,
    ):
        if not app_id:
            raise ConfigError(
                "e-Stat の appId が設定されていません",
                ["環境変数 ESTAT_APP_ID を設定してください。"],
            )
        self.app_id = app_id
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout_sec = timeout_sec
        self.sleep_sec = sleep_sec
        self.session = session or get_session(max_retries)
        self._meta_cache: Dict[str, dict] = {}

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> "EstatApiClient":
        api = cfg.get("api", {}).get("estat", {})
        return cls(
            app_id=os.environ.get("ESTAT_APP_ID", ""),
            base_url=api.get("base_url", DEFAULT_BASE_URL),
            timeout_sec=api.get("timeout_sec", 30),
            max_retries=api.get("max_retries", 3),
            sleep_sec=api.get("sleep_sec", 0.3),
        )

    def _get(self, endpoint: str, params: Mapping[str, Any], root_key: str) -> dict:
        query = {"appId": self.app_id, **{k: v for k, v in params.items() if v not in (None, "")}}
        logger.info("e-Stat %s %s", endpoint, {k: v for k, v in query.items() if k != "appId"})
        try:
            res = self.session.get(self.base_url + endpoint, params=query, timeout=self.timeout_sec)
            res.raise_for_status()
        except requests.RequestException as e:
            raise ApiError(
                f"e-Stat API の呼び出しに失敗しました: {endpoint}",
                ["ネットワーク接続と appId を確認してください。"],
                details=str(e),
            ) from e
        finally:
            time.sleep(self.sleep_sec)  # polite wait

        payload = res.json()
        result = _result_of(payload, root_key)
        status = str(result.get("STATUS", "0"))
        # STATUS 0 は正常、1 は該当データなし（空として扱う）
        if status not in ("0", "1"):
            raise ApiError(
                f"e-Stat API がエラーを返しました (STATUS={status})",
                ["statsDataId とパラメータを確認してください。"],
                details=str(result.get("ERROR_MSG", "")),
            )
        return payload

    def get_meta_info(self, stats_data_id: str) -> dict:
        if stats_data_id not in self._meta_cache:
            self._meta_cache[stats_data_id] = self._get(
                "getMetaInfo", {"statsDataId": stats_data_id}, "GET_META_INFO"
            )
        return self._meta_cache[stats_data_id]

    def get_stats_data(self, params: Mapping[str, Any]) -> dict:
        query = {"metaGetFlg": "N", "cntGetFlg": "N", **params}
        return self._get("getStatsData", query, "GET_STATS_DATA")

    def get_stats_list(self, search_word: str, limit: int = 20) -> dict:
        return self._get("getStatsList", {"searchWord": search_word, "limit": limit}, "GET_STATS_LIST")
