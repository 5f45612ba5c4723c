"""Single-use discount codes."""

import logging
import re
from pathlib import Path
from typing import Iterable, Union

from .errors import NotFoundError
from .models import ApplyResult, DiscountState, LoadIssue
from .storage import read_lines

logger = logging.getLogger(__name__)

# Uppercase letters at even positions, digits at odd positions.
CODE_PATTERN = re.compile(r"[A-Z][0-9][A-Z][0-9]")

DISCOUNT_RATE_PERCENT = 10


def is_valid_code(text: str) -> bool:
    return CODE_PATTERN.fullmatch(text) is not None


class DiscountRegistry:
    """The set of valid codes that have not yet been used for a payment."""

    def __init__(self, codes: Iterable[str] = ()) -> None:
        self._codes: set[str] = set()
        for code in codes:
            if not is_valid_code(code):
                raise ValueError(f"Invalid discount code: {code!r}")
            self._codes.add(code)

    @classmethod
    def load(cls, path: Union[str, Path]) -> tuple["DiscountRegistry", list[LoadIssue]]:
        """Load codes from ``path``; a missing file gives an empty registry."""
        if not Path(path).exists():
            logger.warning(f"Discount file {path} not found, no discount codes available")
            return cls(), []

        registry, issues = cls.parse(read_lines(path))
        logger.info(f"Loaded {len(registry)} discount codes from {path}")
        return registry, issues

    @classmethod
    def parse(cls, lines: Iterable[str]) -> tuple["DiscountRegistry", list[LoadIssue]]:
        registry = cls()
        issues: list[LoadIssue] = []

        for line_number, line in enumerate(lines, 1):
            if not line.strip():
                continue
            if is_valid_code(line):
                registry._codes.add(line)
            else:
                issue = LoadIssue(line_number=line_number, line=line, reason="code does not match A1B2 pattern")
                logger.warning(f"Skipping discount code at {issue}")
                issues.append(issue)

        return registry, issues

    def try_apply(self, code: str, state: DiscountState) -> ApplyResult:
        """
        Try to activate ``code`` for the session.

        The code stays in the registry until the payment that uses it
        completes; see ``consume``.
        """
        if state.has_discount:
            return ApplyResult.ALREADY_HAS_DISCOUNT
        if code in self._codes:
            state.activate(code)
            logger.info(f"Discount code {code} applied")
            return ApplyResult.APPLIED
        if code:
            return ApplyResult.INVALID
        return ApplyResult.EMPTY

    def consume(self, code: str) -> None:
        """Permanently remove a used code."""
        if code not in self._codes:
            raise NotFoundError(f"Discount code {code} is not available")
        self._codes.remove(code)
        logger.info(f"Discount code {code} consumed")

    def __contains__(self, code: object) -> bool:
        return code in self._codes

    def __len__(self) -> int:
        return len(self._codes)
