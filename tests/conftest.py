"""Shared fixtures: synthetic e-Stat classification trees and fake API clients."""

import pytest

from machi_lens.estat.meta import ClassificationAxis, ClassificationItem


def axis(axis_id, label, items):
    """Build a ClassificationAxis from (code, label) pairs."""
    return ClassificationAxis(
        id=axis_id,
        label=label,
        items=tuple(ClassificationItem(code=c, label=l) for c, l in items),
    )


def meta_response(class_objs):
    """Wrap [(id, name, [(code, name), ...]), ...] as a getMetaInfo payload."""
    return {
        "GET_META_INFO": {
            "RESULT": {"STATUS": 0},
            "METADATA_INF": {
                "CLASS_INF": {
                    "CLASS_OBJ": [
                        {
                            "@id": cid,
                            "@name": name,
                            "CLASS": [{"@code": code, "@name": label} for code, label in items],
                        }
                        for cid, name, items in class_objs
                    ]
                }
            },
        }
    }


def stats_response(rows):
    """Wrap VALUE rows ({'@area': ..., '@time': ..., '$': ...}) as a getStatsData payload."""
    return {
        "GET_STATS_DATA": {
            "RESULT": {"STATUS": 0},
            "STATISTICAL_DATA": {"DATA_INF": {"VALUE": rows}},
        }
    }


class FakeEstatClient:
    """Records getStatsData params; answers from a handler(params) -> rows."""

    def __init__(self, metas, handler):
        self.metas = metas
        self.handler = handler
        self.data_calls = []
        self.meta_calls = []

    def get_meta_info(self, stats_data_id):
        self.meta_calls.append(stats_data_id)
        return self.metas[stats_data_id]

    def get_stats_data(self, params):
        self.data_calls.append(dict(params))
        return stats_response(self.handler(params))


class FakeReinfoClient:
    def __init__(self, trades_by_city):
        self.trades_by_city = trades_by_city
        self.calls = []

    def fetch_trades(self, year, city, quarter=None):
        self.calls.append((year, city))
        return list(self.trades_by_city.get(city, []))


POPULATION_CLASS_OBJS = [
    ("tab", "表章項目", [("020", "人口")]),
    ("cat01", "年齢（3区分）", [("000", "総数"), ("010", "0～14歳"), ("020", "15～64歳"), ("030", "65歳以上")]),
    ("cat02", "男女", [("000", "男女計"), ("001", "男"), ("002", "女")]),
    (
        "area",
        "地域（2020）",
        [
            ("13104", "新宿区"),
            ("13112", "世田谷区"),
            ("14100", "横浜市"),
            ("22138", "浜松市中央区"),
            ("22139", "浜松市浜名区"),
        ],
    ),
    ("time", "時間軸（年次）", [("2015000000", "2015年"), ("2020000000", "2020年")]),
]


@pytest.fixture
def population_axes():
    return [axis(cid, name, items) for cid, name, items in POPULATION_CLASS_OBJS]


@pytest.fixture
def population_meta():
    return meta_response(POPULATION_CLASS_OBJS)


CRIME_CLASS_OBJS = [
    ("tab", "観測値", [("00001", "観測値")]),
    ("cat01", "Ｋ 安全", [("K4201", "刑法犯認知件数"), ("K4101", "交通事故発生件数")]),
    ("cat02", "区分", [("1", "実数"), ("2", "人口千人当たり")]),
    ("area", "地域", [("13104", "新宿区"), ("22131", "中区"), ("22132", "東区")]),
    ("time", "調査年", [("2020100000", "2020年度"), ("2021100000", "2021年度"), ("2019100000", "2019年度")]),
]


@pytest.fixture
def crime_meta():
    return meta_response(CRIME_CLASS_OBJS)
