#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Parse operator picks like "1,3-5" or "all" against a numbered list.
"""

from __future__ import annotations
from typing import List, Sequence, TypeVar

T = TypeVar("T")

ALL_TOKEN = "all"


def resolve_selection(raw: str, count: int) -> List[int]:
    """
    1-based indices chosen by raw, ascending and without duplicates.

    Tokens are single indices or inclusive ranges a-b. A token that is not a
    number, is out of 1..count, or is a reversed range is skipped.
    """
    text = (raw or "").strip()
    if text.lower() == ALL_TOKEN:
        return list(range(1, count + 1))

    chosen = set()
    for token in text.split(","):
        token = token.strip()
        if not token:
            continue
        if "-" in token:
            lo_s, _, hi_s = token.partition("-")
            try:
                lo, hi = int(lo_s), int(hi_s)
            except ValueError:
                continue
            if lo < 1 or hi > count or lo > hi:
                continue
            chosen.update(range(lo, hi + 1))
        else:
            try:
                idx = int(token)
            except ValueError:
                continue
            if 1 <= idx <= count:
                chosen.add(idx)
    return sorted(chosen)


def pick(items: Sequence[T], raw: str) -> List[T]:
    """Items of the displayed list selected by raw."""
    return [items[i - 1] for i in resolve_selection(raw, len(items))]
