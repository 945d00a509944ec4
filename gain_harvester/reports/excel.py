"""
Excel report generation module.

This module provides the ExcelReporter class for generating formatted
Excel workbooks with the realized gains summary, the harvesting plan and
the exemption history.
"""

from typing import List, Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill

from ..fiscal_year import classify
from ..models import (
    CapitalGainRecord,
    FilingYearSummary,
    FiscalYearReport,
    HarvestPlan,
    HarvestStatus,
    Term,
)


INR_FORMAT = '₹#,##0.00'


class ExcelReporter:
    """
    Reporter for generating Excel workbooks.

    Creates multi-sheet workbooks with:
    - Summary sheet (gains, losses, set-off, remaining exemption)
    - Recommendations sheet (if a plan is provided)
    - History sheet (if per-year reports are provided)
    - Realized sheet (if records are provided)
    """

    def __init__(self):
        """Initialize reporter with styles."""
        self.header_font = Font(bold=True, color="FFFFFF", size=11)
        self.header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
        self.header_alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

        self.thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        self.ltcg_fill = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
        self.stcg_fill = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
        self.loss_fill = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")

        self.summary_font = Font(bold=True, size=12)
        self.summary_fill = PatternFill(start_color="D9E1F2", end_color="D9E1F2", fill_type="solid")

    def generate(
        self,
        summary: FilingYearSummary,
        plan: Optional[HarvestPlan] = None,
        history: Optional[List[FiscalYearReport]] = None,
        **kwargs
    ) -> bool:
        """Export to the path given as the `filepath` keyword."""
        return self.export(
            kwargs['filepath'],
            summary,
            plan=plan,
            history=history,
            records=kwargs.get('records'),
        )

    def export(
        self,
        filepath,
        summary: FilingYearSummary,
        plan: Optional[HarvestPlan] = None,
        history: Optional[List[FiscalYearReport]] = None,
        records: Optional[List[CapitalGainRecord]] = None
    ) -> bool:
        """
        Export data to Excel workbook.

        Args:
            filepath: Output file path or binary file-like object
            summary: Filing-year summary
            plan: Disposal plan
            history: Per-year exemption usage
            records: Realized capital-gain records

        Returns:
            True if export successful
        """
        wb = Workbook()

        self._create_summary_sheet(wb, summary)
        if plan is not None:
            self._create_recommendations_sheet(wb, plan)
        if history:
            self._create_history_sheet(wb, history)
        if records:
            self._create_realized_sheet(wb, records, summary)

        wb.save(filepath)
        if isinstance(filepath, str):
            print(f"[OK] Excel exported to: {filepath}")
        return True

    def _write_headers(self, ws, headers, row: int = 1) -> None:
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = self.header_alignment
            cell.border = self.thin_border

    def _write_amount_row(self, ws, row: int, label: str, amount: float, bold: bool = False, fill=None) -> None:
        label_cell = ws.cell(row=row, column=1, value=label)
        amount_cell = ws.cell(row=row, column=2, value=amount)
        amount_cell.number_format = INR_FORMAT
        for cell in (label_cell, amount_cell):
            cell.border = self.thin_border
            if bold:
                cell.font = Font(bold=True)
            if fill is not None:
                cell.fill = fill

    def _create_summary_sheet(self, wb, summary: FilingYearSummary) -> None:
        """Create the summary sheet."""
        ws = wb.active
        ws.title = "Summary"

        row = 1
        title = f"REALIZED CAPITAL GAINS - {summary.fiscal_year}" if summary.fiscal_year else "REALIZED CAPITAL GAINS"
        ws.cell(row=row, column=1, value=title).font = self.summary_font
        ws.cell(row=row, column=1).fill = self.summary_fill
        ws.merge_cells(f'A{row}:D{row}')

        # Breakdown by asset class
        row += 2
        self._write_headers(ws, ["Category", "Mutual Funds", "Stocks", "Total"], row=row)
        breakdown = summary.breakdown
        lines = [
            ("LTCG", 'long_gain', self.ltcg_fill),
            ("STCG", 'short_gain', self.stcg_fill),
            ("LTCL", 'long_loss', self.loss_fill),
            ("STCL", 'short_loss', self.loss_fill),
        ]
        for label, attr, fill in lines:
            row += 1
            ws.cell(row=row, column=1, value=label)
            if breakdown:
                ws.cell(row=row, column=2, value=getattr(breakdown.fund, attr))
                ws.cell(row=row, column=3, value=getattr(breakdown.equity, attr))
            ws.cell(row=row, column=4, value=getattr(summary, f"total_{attr}"))
            for col in range(1, 5):
                ws.cell(row=row, column=col).border = self.thin_border
                ws.cell(row=row, column=col).fill = fill
                if col > 1:
                    ws.cell(row=row, column=col).number_format = INR_FORMAT

        # Set-off
        row += 2
        ws.cell(row=row, column=1, value="LOSS SET-OFF").font = self.summary_font
        ws.cell(row=row, column=1).fill = self.summary_fill
        offset = summary.offset
        if offset:
            row += 1
            self._write_amount_row(ws, row, "LTCL set off against LTCG", offset.long_loss_applied)
            row += 1
            self._write_amount_row(ws, row, "STCL set off against LTCG", offset.short_loss_applied_to_long)
            row += 1
            self._write_amount_row(ws, row, "Loss carried forward",
                                   offset.unabsorbed_short_loss + offset.unabsorbed_long_loss)
        row += 1
        self._write_amount_row(ws, row, "NET LTCG", summary.net_long_gain, bold=True)
        row += 1
        self._write_amount_row(ws, row, "NET STCG", summary.net_short_gain, bold=True)

        # Exemption
        row += 2
        ws.cell(row=row, column=1, value="LTCG EXEMPTION (Section 112A)").font = self.summary_font
        ws.cell(row=row, column=1).fill = self.summary_fill
        row += 1
        self._write_amount_row(ws, row, "Exemption limit", summary.exemption_limit)
        row += 1
        self._write_amount_row(ws, row, "REMAINING EXEMPTION", summary.remaining_exemption,
                               bold=True, fill=self.ltcg_fill)

        ws.column_dimensions['A'].width = 32
        for col in 'BCD':
            ws.column_dimensions[col].width = 18

    def _create_recommendations_sheet(self, wb, plan: HarvestPlan) -> None:
        """Create the recommendations sheet."""
        ws = wb.create_sheet("Recommendations")

        headers = [
            'S.No', 'Name', 'Type', 'Efficiency', 'Units to Sell',
            'Total Units', 'Full Exit', 'LTCG Realized', 'Capital Required'
        ]
        self._write_headers(ws, headers)
        ws.freeze_panes = 'A2'

        for row_idx, rec in enumerate(plan.recommendations, 2):
            row_data = [
                row_idx - 1, rec.name, rec.asset_class.label, rec.efficiency,
                rec.units_to_sell, rec.total_units, 'Yes' if rec.is_full_exit else 'No',
                rec.gain_from_sale, rec.capital_required,
            ]
            for col_idx, value in enumerate(row_data, 1):
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                cell.border = self.thin_border
                if col_idx == 4:
                    cell.number_format = '0.0%'
                elif col_idx in [5, 6]:
                    cell.number_format = '#,##0.000'
                elif col_idx in [8, 9]:
                    cell.number_format = INR_FORMAT
            ws.cell(row=row_idx, column=8).fill = self.ltcg_fill

        total_row = len(plan.recommendations) + 2
        ws.cell(row=total_row, column=1, value="TOTAL").font = Font(bold=True)
        ws.cell(row=total_row, column=8, value=plan.total_gain_harvested).font = Font(bold=True)
        ws.cell(row=total_row, column=9, value=plan.total_capital_required).font = Font(bold=True)
        for col in [8, 9]:
            ws.cell(row=total_row, column=col).number_format = INR_FORMAT

        status_row = total_row + 2
        ws.cell(row=status_row, column=1, value="Status").font = Font(bold=True)
        ws.cell(row=status_row, column=2, value=self._status_text(plan.status))
        ws.cell(row=status_row + 1, column=1, value="Remaining exemption").font = Font(bold=True)
        ws.cell(row=status_row + 1, column=2, value=plan.remaining_exemption).number_format = INR_FORMAT

        ws.column_dimensions['B'].width = 50
        for col in 'CDEFGHI':
            ws.column_dimensions[col].width = 16

    @staticmethod
    def _status_text(status: HarvestStatus) -> str:
        return {
            HarvestStatus.FILLED: "Exemption fully used",
            HarvestStatus.PARTIAL: "Not enough eligible gains to fill the exemption",
            HarvestStatus.EXHAUSTED: "LTCG limit already exhausted",
            HarvestStatus.NO_CANDIDATES: "No eligible holdings",
        }[status]

    def _create_history_sheet(self, wb, history: List[FiscalYearReport]) -> None:
        """Create the exemption history sheet."""
        ws = wb.create_sheet("History")

        headers = [
            'Fiscal Year', 'Net LTCG', 'Net STCG', 'Exemption Limit',
            'Exemption Used', 'Exemption Wasted', 'Tax Saved', 'Missed Savings'
        ]
        self._write_headers(ws, headers)
        ws.freeze_panes = 'A2'

        for row_idx, r in enumerate(history, 2):
            row_data = [
                str(r.fiscal_year), r.net_long_gain, r.net_short_gain, r.exemption_limit,
                r.exemption_used, r.exemption_wasted, r.tax_saved, r.missed_savings,
            ]
            for col_idx, value in enumerate(row_data, 1):
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                cell.border = self.thin_border
                if col_idx > 1:
                    cell.number_format = INR_FORMAT
            if r.exemption_wasted > 0:
                ws.cell(row=row_idx, column=6).fill = self.loss_fill
                ws.cell(row=row_idx, column=8).fill = self.loss_fill

        ws.column_dimensions['A'].width = 14
        for col in 'BCDEFGH':
            ws.column_dimensions[col].width = 18

    def _create_realized_sheet(self, wb, records: List[CapitalGainRecord], summary: FilingYearSummary) -> None:
        """Create the realized lots sheet."""
        ws = wb.create_sheet("Realized")

        headers = [
            'S.No', 'Name', 'Type', 'Fiscal Year', 'Acquisition Date', 'Disposal Date',
            'Quantity', 'Cost Basis', 'Proceeds', 'STCG', 'LTCG'
        ]
        self._write_headers(ws, headers)
        ws.freeze_panes = 'A2'

        if summary.fiscal_year is not None:
            records = [r for r in records if classify(r.disposal_date) == summary.fiscal_year]

        for row_idx, rec in enumerate(records, 2):
            fiscal_year = classify(rec.disposal_date)
            row_data = [
                row_idx - 1, rec.name, rec.asset_class.label,
                str(fiscal_year) if fiscal_year else '',
                rec.acquisition_date, rec.disposal_date,
                rec.quantity, rec.cost_basis, rec.proceeds,
                rec.short_term_gain, rec.long_term_gain,
            ]
            for col_idx, value in enumerate(row_data, 1):
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                cell.border = self.thin_border
                if col_idx in [8, 9, 10, 11]:
                    cell.number_format = INR_FORMAT
                elif col_idx in [5, 6] and not isinstance(value, str):
                    cell.number_format = 'DD-MMM-YYYY'

            if rec.reported_gain < 0:
                fill = self.loss_fill
            elif rec.term is Term.LONG:
                fill = self.ltcg_fill
            else:
                fill = self.stcg_fill
            ws.cell(row=row_idx, column=10).fill = fill
            ws.cell(row=row_idx, column=11).fill = fill

        ws.column_dimensions['B'].width = 50
        for col in 'CDEFGHIJK':
            ws.column_dimensions[col].width = 15
