"""
Tax Gain Harvester - Streamlit Web App

A web interface for finding how much of the Section 112A LTCG exemption
is still unused this year and which Groww holdings to sell and buy back
to use it up.
"""

import io
from datetime import datetime
from typing import List

import pandas as pd
import streamlit as st

from gain_harvester import (
    AssetFilter,
    FilingYearSummary,
    FiscalYearReport,
    HarvestContext,
    HarvestPlan,
    HarvestStatus,
    HistoricalAnalyzer,
    TaxGainHarvester,
)
from gain_harvester.parsers import (
    GrowwMFHoldingsParser,
    GrowwStockHoldingsParser,
    GrowwMFCapitalGainsParser,
    GrowwStockCapitalGainsParser,
    GrowwMFOrderHistoryParser,
)
from gain_harvester.reports import ExcelReporter
from gain_harvester.utils import FILE_TYPE_LABELS, detect_file_type, format_currency_inr

# Page configuration
st.set_page_config(
    page_title="Tax Gain Harvester",
    page_icon="🌾",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS
st.markdown("""
<style>
    @import url('https://fonts.googleapis.com/css2?family=DM+Sans:wght@400;500;600;700&display=swap');

    .stApp {
        font-family: 'DM Sans', sans-serif;
    }

    .main-header {
        background: linear-gradient(135deg, #1a1a2e 0%, #16213e 50%, #0f3460 100%);
        padding: 2rem 2.5rem;
        border-radius: 16px;
        margin-bottom: 2rem;
        box-shadow: 0 10px 40px rgba(0,0,0,0.3);
        border: 1px solid rgba(255,255,255,0.1);
    }

    .main-header h1 {
        color: #2ecc71;
        font-size: 2.5rem;
        font-weight: 700;
        margin: 0;
    }

    .main-header p {
        color: #a0a0a0;
        font-size: 1.1rem;
        margin: 0.5rem 0 0 0;
    }

    .metric-card {
        background: linear-gradient(145deg, #1e1e2f 0%, #2a2a40 100%);
        border-radius: 12px;
        padding: 1.5rem;
        border: 1px solid rgba(255,255,255,0.08);
        box-shadow: 0 4px 20px rgba(0,0,0,0.2);
    }

    .metric-card h3 {
        color: #888;
        font-size: 0.85rem;
        font-weight: 500;
        text-transform: uppercase;
        letter-spacing: 0.5px;
        margin: 0 0 0.5rem 0;
    }

    .metric-card .value {
        color: #fff;
        font-size: 1.8rem;
        font-weight: 700;
    }

    .metric-card .subtext {
        color: #666;
        font-size: 0.8rem;
        margin-top: 0.3rem;
    }

    .success-card {
        border-left: 4px solid #2ecc71;
    }

    .warning-card {
        border-left: 4px solid #f39c12;
    }

    .info-box {
        background: linear-gradient(145deg, #0f3460 0%, #16213e 100%);
        border-left: 4px solid #2ecc71;
        padding: 1rem 1.5rem;
        border-radius: 0 8px 8px 0;
        margin: 1rem 0;
    }

    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
</style>
""", unsafe_allow_html=True)


def create_header():
    """Create the main header with disclaimer."""
    st.markdown("""
    <div class="main-header">
        <h1>🌾 Tax Gain Harvester</h1>
        <p>Use up your LTCG exemption every year • Groww Mutual Funds & Stocks</p>
    </div>
    """, unsafe_allow_html=True)

    st.markdown("""
    <div style="background: linear-gradient(145deg, #3d2e0a 0%, #4a3a10 100%);
                border: 1px solid rgba(241, 196, 15, 0.3);
                border-radius: 8px;
                padding: 0.8rem 1rem;
                margin-bottom: 1.5rem;
                font-size: 0.85rem;">
        <strong style="color: #f1c40f;">⚠️ Disclaimer:</strong>
        <span style="color: #d0d0d0;">
            Recommendations are a greedy heuristic over your current holdings and
            ignore exit loads, STT and price movement between sale and buy-back.
            Always verify with a qualified tax professional.
        </span>
    </div>
    """, unsafe_allow_html=True)


def create_metric_card(title: str, value: str, subtext: str = "", card_type: str = "default"):
    """Create a styled metric card."""
    card_class = "metric-card"
    if card_type == "success":
        card_class += " success-card"
    elif card_type == "warning":
        card_class += " warning-card"

    return f"""
    <div class="{card_class}">
        <h3>{title}</h3>
        <div class="value">{value}</div>
        {f'<div class="subtext">{subtext}</div>' if subtext else ''}
    </div>
    """


def format_inr(amount: float) -> str:
    """Format amount in Indian number format, compacting lakhs and crores."""
    if abs(amount) >= 10000000:  # Crore
        return f"₹{amount/10000000:.2f} Cr"
    elif abs(amount) >= 100000:  # Lakh
        return f"₹{amount/100000:.2f} L"
    else:
        return format_currency_inr(amount)


def load_uploaded_files(uploaded_files, asset_filter: AssetFilter) -> HarvestContext:
    """
    Parse uploaded Groww exports into a HarvestContext.

    Files are routed by their Groww filename. Unrecognised files are
    reported and skipped.
    """
    context = HarvestContext(asset_filter=asset_filter)
    parsers = {
        'mf-holdings': (GrowwMFHoldingsParser(), context.holdings),
        'stock-holdings': (GrowwStockHoldingsParser(), context.holdings),
        'mf-capital-gains': (GrowwMFCapitalGainsParser(), context.capital_gains),
        'stock-capital-gains': (GrowwStockCapitalGainsParser(), context.capital_gains),
    }

    for uploaded_file in uploaded_files:
        file_type = detect_file_type(uploaded_file.name)
        if file_type is None:
            st.warning(f"Unrecognised file skipped: {uploaded_file.name}")
            continue

        data = io.BytesIO(uploaded_file.getvalue())
        if file_type == 'mf-order-history':
            context.order_history = GrowwMFOrderHistoryParser().parse(data)
            loaded = len(context.order_history)
        else:
            parser, target = parsers[file_type]
            items = parser.parse(data)
            target.extend(items)
            loaded = len(items)

        context.loaded_files[file_type] = uploaded_file.name
        st.success(f"✓ {FILE_TYPE_LABELS[file_type]}: {loaded} rows from {uploaded_file.name}")

    return context


def display_filing_summary(summary: FilingYearSummary):
    """Display realized gains and the remaining exemption."""
    st.markdown(f"### 📊 Realized Gains - {summary.fiscal_year}")

    col1, col2, col3, col4 = st.columns(4)

    with col1:
        st.markdown(create_metric_card(
            "Net LTCG",
            format_inr(summary.net_long_gain),
            f"Gains {format_inr(summary.total_long_gain)} • Losses {format_inr(summary.total_long_loss)}"
        ), unsafe_allow_html=True)

    with col2:
        st.markdown(create_metric_card(
            "Net STCG",
            format_inr(summary.net_short_gain),
            f"Gains {format_inr(summary.total_short_gain)} • Losses {format_inr(summary.total_short_loss)}"
        ), unsafe_allow_html=True)

    with col3:
        st.markdown(create_metric_card(
            "Exemption Limit",
            format_inr(summary.exemption_limit),
            "Section 112A"
        ), unsafe_allow_html=True)

    with col4:
        st.markdown(create_metric_card(
            "Remaining Exemption",
            format_inr(summary.remaining_exemption),
            "Available to harvest",
            "success" if summary.remaining_exemption > 0 else "warning"
        ), unsafe_allow_html=True)

    if summary.breakdown:
        rows = []
        for label, totals in (("MF", summary.breakdown.fund), ("Stocks", summary.breakdown.equity)):
            rows.append({
                "Source": label,
                "LTCG": format_currency_inr(totals.long_gain, decimals=2),
                "LTCL": format_currency_inr(totals.long_loss, decimals=2),
                "STCG": format_currency_inr(totals.short_gain, decimals=2),
                "STCL": format_currency_inr(totals.short_loss, decimals=2),
            })
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)


def display_recommendations(plan: HarvestPlan, context: HarvestContext):
    """Display the disposal plan."""
    st.markdown("### 🌾 Harvesting Recommendations")

    if plan.status is HarvestStatus.EXHAUSTED:
        st.warning("⚠ LTCG limit already exhausted for this year.")
        return
    if plan.status is HarvestStatus.NO_CANDIDATES:
        st.info("No eligible holdings: nothing outside lock-in has unrealized gains.")
        return

    col1, col2, col3 = st.columns(3)
    with col1:
        st.markdown(create_metric_card(
            "LTCG To Harvest",
            format_inr(plan.total_gain_harvested),
            f"{len(plan.recommendations)} holdings",
            "success"
        ), unsafe_allow_html=True)
    with col2:
        st.markdown(create_metric_card(
            "Capital To Reinvest",
            format_inr(plan.total_capital_required),
            "Sell and buy back the same day"
        ), unsafe_allow_html=True)
    with col3:
        st.markdown(create_metric_card(
            "Exemption Left Unused",
            format_inr(plan.unfilled_exemption),
            "Not enough eligible gains" if plan.status is HarvestStatus.PARTIAL else "Fully used",
            "warning" if plan.status is HarvestStatus.PARTIAL else "success"
        ), unsafe_allow_html=True)

    if not plan.recommendations:
        st.info("No holding can be sold within the remaining exemption.")
        return

    table_data = []
    for i, rec in enumerate(plan.recommendations, 1):
        bought = ""
        if context.order_history is not None and rec.asset_class.value == "fund":
            dates = context.order_history.buy_dates_for(rec.name)
            bought = str(dates) if dates else ""
        table_data.append({
            "#": i,
            "Name": rec.name,
            "Type": rec.asset_class.label,
            "Efficiency": f"{rec.efficiency * 100:.1f}%",
            "Sell": rec.get_units_str(),
            "Exit": "Full" if rec.is_full_exit else "Partial",
            "LTCG (₹)": format_currency_inr(rec.gain_from_sale, decimals=2),
            "Capital (₹)": format_currency_inr(rec.capital_required, decimals=2),
            "Bought": bought,
        })

    st.dataframe(pd.DataFrame(table_data), use_container_width=True, hide_index=True)


def display_history(history: List[FiscalYearReport]):
    """Display exemption usage per fiscal year."""
    if not history:
        st.info("No realized gains to analyze.")
        return

    totals = HistoricalAnalyzer.totals(history)
    col1, col2 = st.columns(2)
    with col1:
        st.markdown(create_metric_card(
            "Tax Saved",
            format_inr(totals['tax_saved']),
            f"Exemption used {format_inr(totals['exemption_used'])}",
            "success"
        ), unsafe_allow_html=True)
    with col2:
        st.markdown(create_metric_card(
            "Missed Savings",
            format_inr(totals['missed_savings']),
            f"Exemption wasted {format_inr(totals['exemption_wasted'])}",
            "warning" if totals['missed_savings'] > 0 else "success"
        ), unsafe_allow_html=True)

    table_data = [{
        "Fiscal Year": f"{r.fiscal_year}{' (current)' if r.is_current else ''}",
        "Net LTCG": format_currency_inr(r.net_long_gain),
        "Limit": format_currency_inr(r.exemption_limit),
        "Used": format_currency_inr(r.exemption_used),
        "Wasted": format_currency_inr(r.exemption_wasted),
        "Tax Saved": format_currency_inr(r.tax_saved),
        "Missed": format_currency_inr(r.missed_savings),
    } for r in history]
    st.dataframe(pd.DataFrame(table_data), use_container_width=True, hide_index=True)


def generate_excel_report(
    summary: FilingYearSummary,
    plan: HarvestPlan,
    history: List[FiscalYearReport],
    context: HarvestContext
) -> bytes:
    """Generate Excel report and return as bytes."""
    buffer = io.BytesIO()
    ExcelReporter().export(
        buffer,
        summary,
        plan=plan,
        history=history,
        records=context.capital_gains,
    )
    return buffer.getvalue()


def main():
    """Main application entry point."""
    create_header()

    with st.sidebar:
        st.markdown("## ⚙️ Configuration")

        filter_label = st.radio(
            "Harvest from",
            options=["Both", "Mutual Funds", "Stocks"],
            help="Which holdings may be sold to realize gains"
        )
        asset_filter = {
            "Both": AssetFilter.BOTH,
            "Mutual Funds": AssetFilter.FUND,
            "Stocks": AssetFilter.EQUITY,
        }[filter_label]

        st.markdown("---")
        st.markdown("## 📁 Upload Groww Exports")

        uploaded_files = st.file_uploader(
            "Holdings, capital gains and order history (XLSX)",
            type=['xlsx'],
            accept_multiple_files=True,
            help="Files are recognised by their Groww filename"
        )

        st.markdown("---")
        calculate_btn = st.button("🧮 Find Harvest", type="primary", use_container_width=True)

        if st.button("🗑️ Clear All Data", use_container_width=True):
            for key in list(st.session_state.keys()):
                del st.session_state[key]
            st.rerun()

    if calculate_btn:
        if not uploaded_files:
            st.warning("Please upload at least one Groww export.")
            return

        with st.spinner("Processing files..."):
            context = load_uploaded_files(uploaded_files, asset_filter)

            if not context.capital_gains and not context.holdings:
                st.warning("No records found in the uploaded files.")
                return

            now = datetime.now()
            harvester = TaxGainHarvester()
            summary = harvester.summarize_current_year(context.capital_gains, now)
            history = harvester.analyze_history(context.capital_gains, now)

            st.session_state['context'] = context
            st.session_state['summary'] = summary
            st.session_state['history'] = history
            st.session_state['calculated'] = True

    if st.session_state.get('calculated', False):
        context = st.session_state['context']
        summary = st.session_state['summary']
        history = st.session_state['history']
        # Every rerun allocates again so the sidebar filter applies immediately
        plan = TaxGainHarvester().plan_for_context(summary, context, asset_filter)

        st.markdown("---")
        display_filing_summary(summary)

        st.markdown("---")
        tab1, tab2 = st.tabs(["🌾 Recommendations", "📅 History"])

        with tab1:
            display_recommendations(plan, context)

        with tab2:
            display_history(history)

        st.markdown("---")
        st.markdown("### 📥 Download Report")

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        st.download_button(
            label="⬇️ Download Excel Report",
            data=generate_excel_report(summary, plan, history, context),
            file_name=f"tax_harvest_{timestamp}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )

    else:
        st.markdown("""
        <div class="info-box">
            <h3 style="color: #2ecc71; margin: 0 0 0.5rem 0;">Getting Started</h3>
            <ol style="color: #c0c0c0; margin: 0; padding-left: 1.5rem;">
                <li>Download your exports from Groww (Reports section)</li>
                <li>Upload them using the sidebar</li>
                <li>Choose which holdings may be sold</li>
                <li>Click <strong>Find Harvest</strong></li>
            </ol>
        </div>
        """, unsafe_allow_html=True)

        st.markdown("### 📚 Supported Files")
        col1, col2 = st.columns(2)
        with col1:
            st.markdown("""
            **Mutual Funds**
            - `Mutual_Funds_<id>_<from>_<to>.xlsx` (holdings)
            - `Mutual_Funds_Capital_Gains_Report_<from>_<to>.xlsx`
            - `Mutual_Funds_Order_History_<from>_<to>.xlsx` (optional)
            """)
        with col2:
            st.markdown("""
            **Stocks**
            - `Stocks_Holdings_Statement_<id>_<date>.xlsx`
            - `Stocks_Capital_Gains_Report_<id>_<from>_<to>.xlsx`
            """)


if __name__ == "__main__":
    main()
