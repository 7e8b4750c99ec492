"""
settings-audit — password strength scoring

File: src/settings_audit/health/password.py
Last updated: 2026-10-17

Purpose
- Score configured service passwords on a 0-100 scale so weak ones can be reported.

Scoring (``HeuristicStrengthScorer``)
- Empty or absent password scores 0.
- Additions: unique characters (> 7, > 14), digits (> 0, > 2), special characters
  (> 0, > 2), mixed case.
- Deductions: runs of sequential digits, repeated adjacent characters.
- Result is clamped to [0, 100].
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PasswordStrengthScorer(Protocol):
    def score(self, password: str | None) -> int: ...


class HeuristicStrengthScorer:
    """Character-class heuristic; deterministic and side-effect free."""

    def score(self, password: str | None) -> int:
        if not password:
            return 0

        total = 0

        unique = len(set(password))
        if unique > 7:
            total += 10
        if unique > 14:
            total += 10

        digits = sum(1 for char in password if char.isdigit())
        if digits > 0:
            total += 8
        if digits > 2:
            total += 8

        specials = sum(1 for char in password if not char.isalnum())
        if specials > 0:
            total += 14
        if specials > 2:
            total += 14

        if any(char.isupper() for char in password) and any(char.islower() for char in password):
            total += 10

        sequential = _sequential_digit_count(password)
        if sequential > 2:
            total -= (sequential - 1) * 4

        repeated = _repeated_char_count(password)
        if repeated > 1:
            total -= repeated * 5

        return max(0, min(100, total))


def _sequential_digit_count(password: str) -> int:
    """Length of the longest run of ascending consecutive ASCII digits (``1234`` -> 4)."""

    longest = 0
    current = 0
    previous: int | None = None
    for char in password:
        if "0" <= char <= "9":
            value = ord(char) - ord("0")
            current = current + 1 if previous is not None and value == previous + 1 else 1
            previous = value
        else:
            current = 0
            previous = None
        longest = max(longest, current)
    return longest


def _repeated_char_count(password: str) -> int:
    """Number of characters equal to the character right before them."""

    return sum(1 for left, right in zip(password, password[1:]) if left == right)


__all__ = ["HeuristicStrengthScorer", "PasswordStrengthScorer"]
