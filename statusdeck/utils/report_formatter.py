"""
Text table formatting for run summaries and store statistics.
"""

from typing import Any, List, Mapping, Optional


class Column:
    """Column definition for table formatting."""

    def __init__(self, name: str, width: int, align: str = "<"):
        """
        Args:
            name: Column header name
            width: Column width in characters
            align: Alignment ('<' left, '>' right, '^' center)
        """
        self.name = name
        self.width = width
        self.align = align

    def format_header(self) -> str:
        return f"{self.name:{self.align}{self.width}}"

    def format_value(self, value: Any) -> str:
        return f"{value:{self.align}{self.width}}"


class TableFormatter:
    """Builder for formatted text tables with aligned columns."""

    def __init__(self, columns: List[Column], total_width: int = 60):
        """
        Args:
            columns: List of Column definitions
            total_width: Total report width for separators
        """
        self.columns = columns
        self.total_width = total_width
        self.lines: List[str] = []

    def add_section_header(self, title: str) -> "TableFormatter":
        """Add a title framed by '=' separator lines."""
        self.lines.append("=" * self.total_width)
        self.lines.append(title)
        self.lines.append("=" * self.total_width)
        return self

    def add_table_header(self) -> "TableFormatter":
        self.lines.append(" ".join(col.format_header() for col in self.columns))
        return self

    def add_separator(self, char: str = "-") -> "TableFormatter":
        self.lines.append(char * self.total_width)
        return self

    def add_row(self, values: List[Any]) -> "TableFormatter":
        """
        Add data row with column values.

        Raises:
            ValueError: If number of values doesn't match columns
        """
        if len(values) != len(self.columns):
            raise ValueError(f"Expected {len(self.columns)} values, got {len(values)}")

        self.lines.append(" ".join(col.format_value(val) for col, val in zip(self.columns, values)))
        return self

    def add_text(self, text: str) -> "TableFormatter":
        self.lines.append(text)
        return self

    def add_blank_line(self) -> "TableFormatter":
        self.lines.append("")
        return self

    def render(self) -> str:
        return "\n".join(self.lines)


def format_count_table(
    title: str,
    actual: Mapping[str, int],
    expected: Optional[Mapping[str, int]] = None,
    total_width: int = 60,
) -> str:
    """
    Render entity counts, optionally side by side with expected counts.

    Rows whose expected value is missing show "-" and no status.

    Args:
        title: Table title
        actual: Label -> count
        expected: Label -> expected count (optional)
        total_width: Width of separator lines

    Returns:
        Formatted table string

    Example:
        >>> print(format_count_table("Store", {"Reports": 3}, {"Reports": 3}))
    """
    if expected is None:
        columns = [Column("Entity", 20), Column("Count", 10, ">")]
    else:
        columns = [
            Column("Entity", 20),
            Column("Count", 10, ">"),
            Column("Expected", 10, ">"),
            Column("Status", 8, ">"),
        ]

    table = TableFormatter(columns, total_width=total_width)
    table.add_section_header(title).add_table_header().add_separator()

    for label, count in actual.items():
        if expected is None:
            table.add_row([label, count])
            continue
        if label in expected:
            status = "ok" if expected[label] == count else "MISMATCH"
            table.add_row([label, count, expected[label], status])
        else:
            table.add_row([label, count, "-", ""])

    table.add_separator("=")
    return table.render()
