"""
市区町村名の読み仮名（ひらがな）辞書。
ひらがな/カタカナだけで入力された市区町村名を漢字表記へ逆引きするために使う。
静的データのため、追加はデータ更新として扱う（コード変更不要）。
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Tuple

_READINGS: Dict[str, Tuple[str, ...]] = {
    # 東京23区
    "千代田区": ("ちよだく",),
    "中央区": ("ちゅうおうく",),
    "港区": ("みなとく",),
    "新宿区": ("しんじゅくく",),
    "文京区": ("ぶんきょうく",),
    "台東区": ("たいとうく",),
    "墨田区": ("すみだく",),
    "江東区": ("こうとうく",),
    "品川区": ("しながわく",),
    "目黒区": ("めぐろく",),
    "大田区": ("おおたく",),
    "世田谷区": ("せたがやく",),
    "渋谷区": ("しぶやく",),
    "中野区": ("なかのく",),
    "杉並区": ("すぎなみく",),
    "豊島区": ("としまく",),
    "北区": ("きたく",),
    "荒川区": ("あらかわく",),
    "板橋区": ("いたばしく",),
    "練馬区": ("ねりまく",),
    "足立区": ("あだちく",),
    "葛飾区": ("かつしかく",),
    "江戸川区": ("えどがわく",),
    # 政令指定都市
    "札幌市": ("さっぽろし",),
    "仙台市": ("せんだいし",),
    "さいたま市": ("さいたまし",),
    "千葉市": ("ちばし",),
    "横浜市": ("よこはまし",),
    "川崎市": ("かわさきし",),
    "相模原市": ("さがみはらし",),
    "新潟市": ("にいがたし",),
    "静岡市": ("しずおかし",),
    "浜松市": ("はままつし",),
    "名古屋市": ("なごやし",),
    "京都市": ("きょうとし",),
    "大阪市": ("おおさかし",),
    "堺市": ("さかいし",),
    "神戸市": ("こうべし",),
    "岡山市": ("おかやまし",),
    "広島市": ("ひろしまし",),
    "北九州市": ("きたきゅうしゅうし",),
    "福岡市": ("ふくおかし",),
    "熊本市": ("くまもとし",),
    # 東京都下・首都圏の主要市
    "八王子市": ("はちおうじし",),
    "立川市": ("たちかわし",),
    "武蔵野市": ("むさしのし",),
    "三鷹市": ("みたかし",),
    "府中市": ("ふちゅうし",),
    "調布市": ("ちょうふし",),
    "町田市": ("まちだし",),
    "小金井市": ("こがねいし",),
    "国分寺市": ("こくぶんじし",),
    "国立市": ("くにたちし",),
    "多摩市": ("たまし",),
    "船橋市": ("ふなばしし",),
    "市川市": ("いちかわし",),
    "松戸市": ("まつどし",),
    "柏市": ("かしわし",),
    "浦安市": ("うらやすし",),
    "流山市": ("ながれやまし",),
    "川口市": ("かわぐちし",),
    "所沢市": ("ところざわし",),
    "越谷市": ("こしがやし",),
    "川越市": ("かわごえし",),
    "藤沢市": ("ふじさわし",),
    "鎌倉市": ("かまくらし",),
    "横須賀市": ("よこすかし",),
    "茅ヶ崎市": ("ちがさきし",),
    "厚木市": ("あつぎし",),
    "つくば市": ("つくばし",),
    "宇都宮市": ("うつのみやし",),
    "前橋市": ("まえばしし",),
    "高崎市": ("たかさきし",),
    # 地方中枢都市
    "旭川市": ("あさひかわし",),
    "函館市": ("はこだてし",),
    "青森市": ("あおもりし",),
    "盛岡市": ("もりおかし",),
    "秋田市": ("あきたし",),
    "山形市": ("やまがたし",),
    "郡山市": ("こおりやまし",),
    "金沢市": ("かなざわし",),
    "富山市": ("とやまし",),
    "長野市": ("ながのし",),
    "松本市": ("まつもとし",),
    "岐阜市": ("ぎふし",),
    "豊田市": ("とよたし",),
    "岡崎市": ("おかざきし",),
    "津市": ("つし",),
    "大津市": ("おおつし",),
    "奈良市": ("ならし",),
    "和歌山市": ("わかやまし",),
    "姫路市": ("ひめじし",),
    "西宮市": ("にしのみやし",),
    "尼崎市": ("あまがさきし",),
    "明石市": ("あかしし",),
    "豊中市": ("とよなかし",),
    "吹田市": ("すいたし",),
    "高槻市": ("たかつきし",),
    "枚方市": ("ひらかたし",),
    "鳥取市": ("とっとりし",),
    "松江市": ("まつえし",),
    "福山市": ("ふくやまし",),
    "山口市": ("やまぐちし",),
    "下関市": ("しものせきし",),
    "高松市": ("たかまつし",),
    "松山市": ("まつやまし",),
    "高知市": ("こうちし",),
    "徳島市": ("とくしまし",),
    "久留米市": ("くるめし",),
    "佐賀市": ("さがし",),
    "長崎市": ("ながさきし",),
    "大分市": ("おおいたし",),
    "宮崎市": ("みやざきし",),
    "鹿児島市": ("かごしまし",),
    "那覇市": ("なはし",),
    # 浜松市の区（2024年再編後）
    "浜松市中央区": ("はままつしちゅうおうく",),
    "浜松市浜名区": ("はままつしはまなく",),
    "浜松市天竜区": ("はままつしてんりゅうく",),
}

MUNICIPALITY_READINGS = MappingProxyType(_READINGS)


def _build_reverse_index() -> Dict[str, Tuple[str, ...]]:
    index: Dict[str, List[str]] = {}
    for name, readings in _READINGS.items():
        for reading in readings:
            index.setdefault(reading, []).append(name)
    return {k: tuple(v) for k, v in index.items()}


_BY_READING = MappingProxyType(_build_reverse_index())


def get_municipality_reading(name: str) -> List[str]:
    return list(MUNICIPALITY_READINGS.get(name, ()))


def find_by_reading(reading: str) -> List[str]:
    """読み仮名（ひらがな）の完全一致で市区町村名を逆引きする。部分一致はしない。"""
    return list(_BY_READING.get(reading, ()))


def has_reading(name: str) -> bool:
    return name in MUNICIPALITY_READINGS
