"""
Post-load count audit.

Re-counts entities in the store and compares them with what the run expected
to write. The verdict is advisory: nothing is rolled back or repaired.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

from statusdeck.contexts.storage.logger import log_validation_result
from statusdeck.contexts.storage.report_database import ITEM_TABLES, ReportDatabase


@dataclass
class CountCheck:
    kind: str
    expected: int
    actual: int

    @property
    def passed(self) -> bool:
        return self.expected == self.actual


@dataclass
class ValidationResult:
    """
    Outcome of a count audit.

    Attributes:
        checks: One CountCheck per entity kind, in reporting order
    """

    checks: List[CountCheck] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(check.passed for check in self.checks)

    @property
    def mismatches(self) -> List[CountCheck]:
        return [check for check in self.checks if not check.passed]

    @property
    def actual(self) -> Dict[str, int]:
        return {check.kind: check.actual for check in self.checks}

    @property
    def expected(self) -> Dict[str, int]:
        return {check.kind: check.expected for check in self.checks}


def validate_load(
    db: ReportDatabase,
    expected_reports: int,
    item_totals: Dict[str, int],
    period_end_dates: Optional[Iterable[date]] = None,
) -> ValidationResult:
    """
    Compare store counts with the totals of a load.

    Args:
        db: Store to audit
        expected_reports: Number of successfully parsed reports
        item_totals: Item table -> items written (LoadResult.item_totals)
        period_end_dates: Restrict counting to reports with these dates, so
            reports already in the store before the run are not counted;
            None counts whole tables

    Returns:
        ValidationResult (also logged)
    """
    dates = list(period_end_dates) if period_end_dates is not None else None

    checks = [CountCheck("reports", expected_reports, db.count("reports", dates))]
    for table in ITEM_TABLES:
        checks.append(CountCheck(table, item_totals.get(table, 0), db.count(table, dates)))

    result = ValidationResult(checks=checks)
    log_validation_result(result)
    return result
