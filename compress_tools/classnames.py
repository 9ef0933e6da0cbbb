#!/usr/bin/env python3
"""
Short class name generator: a, b, ..., z, aa, ab, ...

Names are derived from an explicit counter (bijective base 26), so a
generator can be reset and replayed to get the same sequence again.
"""
from __future__ import annotations


ALPHABET = "abcdefghijklmnopqrstuvwxyz"


def class_name(index: int) -> str:
    if index < 0:
        raise ValueError(f"class name index must be >= 0, got {index}")
    s = ""
    n = index
    while True:
        s = ALPHABET[n % 26] + s
        n = n // 26 - 1
        if n < 0:
            break
    return s


class ClassNameGenerator:
    """Sequential issuer of class names shared by all class tables of a run."""

    def __init__(self, start: int = 0):
        self.start = start
        self.index = start

    @property
    def issued(self) -> int:
        return self.index - self.start

    def next_name(self) -> str:
        name = class_name(self.index)
        self.index += 1
        return name

    def reset(self):
        self.index = self.start

    def __iter__(self):
        return self

    def __next__(self) -> str:
        return self.next_name()
