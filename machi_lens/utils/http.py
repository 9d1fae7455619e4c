from __future__ import annotations

import requests
from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

UA = "machi-lens/0.1"

# 429 と 5xx はバックオフ付きで再試行する
RETRY_STATUS = [429, 500, 502, 503, 504]


def get_session(max_retries: int = 3, user_agent: str = UA) -> Session:
    """Create a requests.Session with a common User-Agent and GET retries."""
    s = requests.Session()
    s.headers.update({"User-Agent": user_agent})
    retry = Retry(
        total=max_retries,
        allowed_methods=["GET"],
        backoff_factor=1,
        status_forcelist=RETRY_STATUS,
    )
    s.mount("https://", HTTPAdapter(max_retries=retry))
    s.mount("http://", HTTPAdapter(max_retries=retry))
    return s
