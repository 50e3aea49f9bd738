import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st

import pandas as pd
import plotly.graph_objects as go
import plotly.express as px
from datetime import date

from schoolfin.config import Settings
from schoolfin.logging_config import configure_logging
from schoolfin.calendar_table import default_table
from schoolfin.categories import default_catalog
from schoolfin.convert import to_bs, format_bs, parse_bs
from schoolfin.domain import LedgerKind
from schoolfin.errors import CalendarError
from schoolfin.reports import series_to_frame, breakdown_to_frame, records_to_frame
from schoolfin.services import ReportService
from schoolfin.transforms import load_ledger

settings = Settings.from_env()
configure_logging(level=settings.log_level)

st.set_page_config(page_title="School Finance", layout="wide")

service = ReportService(default_table(), default_catalog())
records = load_ledger(settings.ledger_path)
today = date.today()
try:
    today_bs = to_bs(today)
except CalendarError as e:
    st.error(f"❌ {e}")
    today_bs = None

locale = st.sidebar.radio("Month names", ["en", "ne"], index=0 if settings.locale == "en" else 1)

menu = st.sidebar.radio(
    "Menu",
    ["🏠 Overview", "📈 Income vs. Expenses", "🗂 Categories", "📑 Finance Report"]
)

if today_bs is not None:
    st.sidebar.caption(f"Today: {format_bs(today_bs, locale)} BS ({today.isoformat()})")
else:
    st.sidebar.caption(f"Today: {today.isoformat()}")


def money(value) -> str:
    return f"₹{float(value):,.0f}"


def bs_label(day: date) -> str:
    try:
        return format_bs(to_bs(day), locale)
    except CalendarError:
        return f"{day.isoformat()} AD"


if menu == "🏠 Overview":
    st.title("🏠 Accountant Dashboard")

    summary_type = st.selectbox("Summary type", ["total", "month", "week", "day"], index=0)
    summary = service.summary_report(records, today)
    if summary.is_left():
        st.error(f"❌ {summary.get_error()['message']}")
    else:
        totals = summary.get_or_else(None)[summary_type]
        k1, k2, k3 = st.columns(3)
        with k1:
            st.metric("Total Revenue", money(totals.revenue))
        with k2:
            st.metric("Total Expenses", money(totals.expenses))
        with k3:
            st.metric("Net Profit", money(totals.net))

    df = records_to_frame(records)
    if not df.empty:
        recent = df.dropna(subset=["date"]).sort_values("date", ascending=False).head(10).copy()
        recent["date"] = recent["date"].map(lambda d: bs_label(d.date()))
        recent["amount"] = recent["amount"].map(money)
        st.subheader("Recent Transactions")
        st.table(recent[["date", "kind", "category", "amount", "note"]].reset_index(drop=True))
    else:
        st.info("No transactions to display.")

elif menu == "📈 Income vs. Expenses":
    st.title("📈 Income vs. Expenses")

    table = service.table
    years = list(range(table.first_year, table.last_year + 1))
    year = st.selectbox("BS year", years, index=years.index(today_bs.year) if today_bs is not None else len(years) - 1)

    result = service.monthly_report(records, year, locale)
    if result.is_left():
        error = result.get_error()
        st.error(f"❌ {error['message']}")
    else:
        report = result.get_or_else(None)
        df_series = series_to_frame(report["series"])

        fig = go.Figure()
        fig.add_trace(go.Bar(x=df_series["label"], y=df_series["income"], name="Income"))
        fig.add_trace(go.Bar(x=df_series["label"], y=df_series["expense"], name="Expense"))
        fig.add_trace(go.Scatter(x=df_series["label"], y=df_series["net"], mode="lines+markers", name="Net"))
        fig.update_layout(barmode="group", margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig, use_container_width=True)

        pl = report["profit_loss"]
        c1, c2, c3 = st.columns(3)
        c1.metric("Income", money(pl.income))
        c2.metric("Expense", money(pl.expense))
        c3.metric("Profit" if pl.is_profit else "Loss", money(abs(pl.net)))

        st.table(df_series)
        st.download_button("⬇ Download CSV", df_series.to_csv(index=False), file_name=f"income_expense_{year}.csv")

        if report["warnings"]:
            with st.expander(f"⚠ {len(report['warnings'])} records skipped"):
                st.write(pd.DataFrame(report["warnings"]))

elif menu == "🗂 Categories":
    st.title("🗂 Category Distribution")

    kind = st.radio("Type", [LedgerKind.EXPENSE.value, LedgerKind.INCOME.value], horizontal=True)
    report = service.category_report(records, LedgerKind(kind))
    df_cat = breakdown_to_frame(report["breakdown"])

    if not df_cat.empty:
        fig_cat = px.pie(df_cat, values="total", names="label", title=f"{kind.title()} by category")
        st.plotly_chart(fig_cat, use_container_width=True)
        st.table(df_cat)
        st.metric("Total", money(report["total"]))
    else:
        st.info("No records for this type.")

else:
    st.title("📑 Finance Report")

    col_a, col_b = st.columns(2)
    with col_a:
        from_text = st.text_input("From (BS, YYYY-MM-DD)", value=f"{today_bs.year}-01-01" if today_bs is not None else "")
    with col_b:
        to_text = st.text_input("To (BS, YYYY-MM-DD)", value=today_bs.isoformat() if today_bs is not None else "")

    try:
        start = parse_bs(from_text) if from_text else None
        end = parse_bs(to_text) if to_text else None
    except (ValueError, CalendarError) as e:
        st.error(f"❌ {e}")
        st.stop()

    result = service.range_report(records, start, end)
    if result.is_left():
        st.error(f"❌ {result.get_error()['message']}")
    else:
        report = result.get_or_else(None)
        pl = report["profit_loss"]
        c1, c2, c3 = st.columns(3)
        c1.metric("Income", money(pl.income))
        c2.metric("Expense", money(pl.expense))
        c3.metric("Net", money(pl.net))

        df_rec = records_to_frame(report["records"])
        st.subheader(f"{len(df_rec)} records")
        st.dataframe(df_rec, use_container_width=True)

        for title, breakdown in (("Income", report["income"]), ("Expense", report["expense"])):
            st.subheader(f"{title} by category")
            st.table(breakdown_to_frame(breakdown))

        st.download_button("⬇ Download CSV", df_rec.to_csv(index=False), file_name="finance_report.csv")
