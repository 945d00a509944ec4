"""
Interface definitions (Protocols) for the Tax Gain Harvester.

This module defines abstract interfaces that enable loose coupling
between the importers, the engine and the reporters, and facilitate
testing with mock implementations.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional, Protocol, runtime_checkable

from openpyxl import load_workbook

from .models import (
    CapitalGainRecord,
    FilingYearSummary,
    FiscalYearReport,
    HarvestPlan,
    HoldingPosition,
)


@runtime_checkable
class IHoldingsParser(Protocol):
    """
    Interface for holdings statement parsers.
    """

    def parse(self, source: Any) -> List[HoldingPosition]:
        """
        Parse a holdings statement.

        Args:
            source: Path or file-like object of the workbook

        Returns:
            List of HoldingPosition objects
        """
        ...


@runtime_checkable
class ICapitalGainsParser(Protocol):
    """
    Interface for realized capital gains report parsers.
    """

    def parse(self, source: Any) -> List[CapitalGainRecord]:
        """
        Parse a capital gains report.

        Args:
            source: Path or file-like object of the workbook

        Returns:
            List of CapitalGainRecord objects
        """
        ...


@runtime_checkable
class IReporter(Protocol):
    """
    Interface for report generators.
    """

    def generate(
        self,
        summary: FilingYearSummary,
        plan: Optional[HarvestPlan] = None,
        history: Optional[List[FiscalYearReport]] = None,
        **kwargs
    ) -> Any:
        """
        Generate a report.

        Args:
            summary: Filing-year summary
            plan: Disposal plan (optional)
            history: Per-year exemption usage (optional)
            **kwargs: Additional report-specific arguments

        Returns:
            Report output (format depends on implementation)
        """
        ...


class BaseWorkbookParser(ABC):
    """
    Abstract base class for Groww workbook parsers.

    Groww exports carry a free-form preamble (client details, summary
    totals) above the data table, so parsers scan the first sheet for the
    header row and read positional columns below it.
    """

    # Label reported in status lines
    SOURCE_LABEL: str = "Workbook"

    @abstractmethod
    def parse(self, source: Any) -> Any:
        """Parse the workbook."""
        pass

    def _read_rows(self, source: Any) -> List[tuple]:
        """
        Read the first sheet as a list of value tuples.

        Raises:
            Exception: Whatever openpyxl raises for unreadable files
        """
        wb = load_workbook(source, data_only=True)
        try:
            ws = wb.active
            return [tuple(row) for row in ws.iter_rows(values_only=True)]
        finally:
            wb.close()

    @staticmethod
    def _find_header(rows: Iterable[tuple], *labels: str) -> int:
        """
        Find the index of the row after the header.

        Args:
            rows: Sheet rows
            labels: Expected leading cell values of the header row

        Returns:
            Index of the first data row, or -1 if no header was found
        """
        for i, row in enumerate(rows):
            if not row:
                continue
            leading = tuple(_cell_text(c) for c in row[:len(labels)])
            if leading == labels:
                return i + 1
        return -1

    @staticmethod
    def _describe(source: Any) -> str:
        return getattr(source, 'name', None) or str(source)


def _cell_text(value: Any) -> str:
    return str(value).strip() if value is not None else ''


def cell(row: tuple, index: int) -> Any:
    """Get a cell value from a row, None when the row is too short."""
    return row[index] if len(row) > index else None
