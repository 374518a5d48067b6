"""出站回复分段。

长度按 Python 字符（code point）计算，切分永远不会截断多字节字符；
硬切分时还会向前回退，避免把组合字符、零宽连接符、变体选择符
或肤色修饰符与相邻字符拆开（例如 emoji 序列）。
每次在空白处切分只消耗一个空白字符，超长的连续空白会原样保留在分段中，
因此用单个空格拼接分段即可还原原文（硬切分边界与末尾空白除外）。
"""

import unicodedata
from typing import List

ZWJ = "\u200d"
_ATTACHED = {ZWJ, "\ufe0e", "\ufe0f"}


def _is_attached(ch: str) -> bool:
    """ch 是否必须与前一个字符留在同一段。"""
    return ch in _ATTACHED or unicodedata.combining(ch) != 0 or "\U0001F3FB" <= ch <= "\U0001F3FF"


def _breaks_cluster(text: str, cut: int) -> bool:
    return _is_attached(text[cut]) or text[cut - 1] == ZWJ


class ResponseSegmenter:
    def segment(self, text: str, max_segment_length: int) -> List[str]:
        if max_segment_length < 1:
            raise ValueError("max_segment_length must be >= 1")
        if not text or not text.strip():
            return []

        segments: List[str] = []
        remaining = text
        while len(remaining) > max_segment_length:
            cut = self._whitespace_cut(remaining, max_segment_length)
            if cut > 0:
                chunk, remaining = remaining[:cut], remaining[cut + 1:]
            else:
                cut = self._hard_cut(remaining, max_segment_length)
                chunk, remaining = remaining[:cut], remaining[cut:]
            segments.append(chunk)
        if remaining:
            segments.append(remaining)
        return segments

    @staticmethod
    def _whitespace_cut(text: str, limit: int) -> int:
        # 位置 limit 处的空白也可以作为边界：前 limit 个字符正好放满一段
        for i in range(limit, 0, -1):
            if text[i].isspace():
                return i
        return -1

    @staticmethod
    def _hard_cut(text: str, limit: int) -> int:
        cut = limit
        while cut > 1 and _breaks_cluster(text, cut):
            cut -= 1
        if _breaks_cluster(text, cut):
            # 整段都是同一个组合序列，只能按上限硬切
            return limit
        return cut
