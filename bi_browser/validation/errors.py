from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from bi_browser.core.exceptions import BiBrowserError


@dataclass(frozen=True)
class ValidationIssue:
    """One problem found in an imported document, e.g. SHEET_ID at sheets[2]."""
    code: str
    message: str
    path: Optional[str] = None

    def __str__(self) -> str:
        where = f" ({self.path})" if self.path else ""
        return f"{self.code}{where}: {self.message}"


class ValidationError(BiBrowserError):
    """Raised with every issue found, so an import can report them all at once."""

    def __init__(self, issues: List[ValidationIssue]):
        self.issues = issues
        super().__init__("\n".join(str(i) for i in issues))

    @property
    def codes(self) -> List[str]:
        return [i.code for i in self.issues]
