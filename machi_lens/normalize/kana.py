# ひらがな・カタカナの相互変換（コードポイント差 0x60 を利用）

HIRAGANA_START = 0x3041
HIRAGANA_END = 0x3096
KATAKANA_START = 0x30A1
KATAKANA_END = 0x30F6
KANA_OFFSET = KATAKANA_START - HIRAGANA_START


def is_hiragana(char: str) -> bool:
    return bool(char) and HIRAGANA_START <= ord(char[0]) <= HIRAGANA_END


def is_katakana(char: str) -> bool:
    return bool(char) and KATAKANA_START <= ord(char[0]) <= KATAKANA_END


def katakana_to_hiragana(text: str) -> str:
    """全角カタカナをひらがなに変換する。それ以外の文字はそのまま。"""
    return "".join(
        chr(ord(ch) - KANA_OFFSET) if KATAKANA_START <= ord(ch) <= KATAKANA_END else ch
        for ch in text
    )


def hiragana_to_katakana(text: str) -> str:
    return "".join(
        chr(ord(ch) + KANA_OFFSET) if HIRAGANA_START <= ord(ch) <= HIRAGANA_END else ch
        for ch in text
    )
