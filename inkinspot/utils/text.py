"""Query text helpers."""

from __future__ import annotations

from typing import Optional


def normalize_query(query: Optional[str]) -> str:
    """검색어 정규화 (앞뒤 공백 제거 + 소문자화)

    순수 함수이며 멱등입니다: normalize_query(normalize_query(s)) == normalize_query(s)

    예시:
    - "  LION Chest " -> "lion chest"
    - "   " -> ""

    Args:
        query: 원본 검색어 (None 허용)

    Returns:
        정규화된 검색어
    """
    if not query:
        return ""
    return query.strip().lower()


def tokenize_query(query: str) -> list[str]:
    """정규화된 검색어를 공백 기준 토큰으로 분리 (순서 유지, 중복 제거)"""
    seen: set[str] = set()
    tokens: list[str] = []
    for token in query.split():
        if token not in seen:
            seen.add(token)
            tokens.append(token)
    return tokens
