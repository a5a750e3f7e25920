"""
Streamlit Frontend for Net Worth Tracker

The dashboard people open to see where their money stands.

DESIGN PRINCIPLES:
1. Headline numbers first, detail on demand
2. Every chart is built from the same live totals
3. Clear error messages in simple language
4. Visual feedback for all operations
"""

import asyncio
from datetime import date
from decimal import Decimal, InvalidOperation

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st
from pydantic import ValidationError

from networth_tracker.aggregation import LIABILITY_TYPES
from networth_tracker.audit import configure_logging
from networth_tracker.config import get_settings, validate_all_settings
from networth_tracker.errors import NetWorthTrackerError
from networth_tracker.models.account import AccountCategory, AccountType, utc_now
from networth_tracker.models.net_worth import (
    ExportFormat,
    Granularity,
    HistoryPeriod,
    Trend,
)
from networth_tracker.orchestrator import (
    AccountFlow,
    DashboardFlow,
    LiabilityFlow,
    SettingsFlow,
    create_demo_components,
)
from networth_tracker.services.export import MEDIA_TYPES, export_filename
from networth_tracker.validation import get_user_friendly_summary


# Page configuration
st.set_page_config(
    page_title="Net Worth Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

TREND_ARROWS = {Trend.UP: "▲", Trend.DOWN: "▼", Trend.FLAT: "■"}
DATE_FORMATS = ["MM/DD/YYYY", "DD/MM/YYYY", "YYYY-MM-DD"]
REFRESH_FREQUENCIES = ["manual", "daily", "weekly"]
THEMES = ["light", "dark", "system"]


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource(max_entries=1)
def get_components(as_of: date):
    """
    Application components over demo data dated `as_of` (cached).

    The cache holds one day's components; the first run on a new day
    rebuilds them so demo balances stay dated today.
    """
    configure_logging(get_settings().app.log_level)
    return run_async(create_demo_components(now=utc_now()))


def money(value) -> str:
    return f"${Decimal(str(value)):,.2f}"


def label(value: str) -> str:
    return value.replace("_", " ").title()


def main():
    """Main application entry point."""
    dashboard_flow, account_flow, liability_flow, settings_flow, _ = get_components(utc_now().date())

    st.sidebar.title("💰 Net Worth Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "🏦 Accounts", "💳 Liabilities", "📈 Net Worth", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("🔄 Refresh linked accounts"):
        count = run_async(account_flow.refresh_linked_accounts())
        st.sidebar.success(f"Refreshed {count} linked accounts")

    if page == "📊 Dashboard":
        render_dashboard_page(dashboard_flow)
    elif page == "🏦 Accounts":
        render_accounts_page(dashboard_flow, account_flow)
    elif page == "💳 Liabilities":
        render_liabilities_page(dashboard_flow, liability_flow)
    elif page == "📈 Net Worth":
        render_net_worth_page(dashboard_flow)
    elif page == "⚙️ Settings":
        render_settings_page(dashboard_flow, settings_flow)


def render_summary_cards(dashboard_flow: DashboardFlow):
    cards = run_async(dashboard_flow.get_summary_cards())
    for column, card in zip(st.columns(len(cards)), cards):
        with column:
            delta = None
            if card.change is not None:
                delta = (
                    f"{TREND_ARROWS[card.change.trend]} {money(card.change.amount)} "
                    f"({card.change.percentage:+.2f}%) {card.change.period}"
                )
            st.metric(
                card.title,
                money(card.value),
                delta=delta,
                delta_color="inverse" if card.title == "Total Liabilities" else "normal",
            )


def render_history_chart(history, title: str):
    df = pd.DataFrame([point.model_dump() for point in history])
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=df["date"], y=df["net_worth"], mode="lines+markers", name="Net Worth"))
    fig.add_trace(go.Scatter(x=df["date"], y=df["total_assets"], mode="lines", name="Assets"))
    fig.add_trace(go.Scatter(x=df["date"], y=df["total_liabilities"], mode="lines", name="Liabilities"))
    fig.update_layout(title=title, margin=dict(t=40, b=10, l=10, r=10))
    st.plotly_chart(fig, use_container_width=True)


def render_breakdown_charts(dashboard_flow: DashboardFlow):
    assets = run_async(dashboard_flow.get_asset_breakdown())
    liabilities = run_async(dashboard_flow.get_liability_breakdown())

    col1, col2 = st.columns(2)
    with col1:
        df = pd.DataFrame(
            [{"Category": label(k), "Value": float(v)} for k, v in assets.as_dict().items() if v]
        )
        if df.empty:
            st.info("No assets recorded yet.")
        else:
            fig = px.pie(df, values="Value", names="Category", title="Assets by Category")
            st.plotly_chart(fig, use_container_width=True)
    with col2:
        df = pd.DataFrame(
            [{"Type": label(k), "Owed": float(v)} for k, v in liabilities.as_dict().items()]
        )
        fig = px.bar(df, x="Type", y="Owed", title="Liabilities by Type")
        st.plotly_chart(fig, use_container_width=True)


def render_dashboard_page(dashboard_flow: DashboardFlow):
    """Render the dashboard overview."""
    st.title("📊 Dashboard")
    render_summary_cards(dashboard_flow)
    st.markdown("---")

    history = run_async(dashboard_flow.get_history())
    render_history_chart(history, "Net Worth - Last 12 Months")

    st.markdown("---")
    render_breakdown_charts(dashboard_flow)


def render_accounts_page(dashboard_flow: DashboardFlow, account_flow: AccountFlow):
    """Render the account list and manual account forms."""
    st.title("🏦 Accounts")

    col1, col2 = st.columns(2)
    with col1:
        type_filter = st.selectbox(
            "Filter by Type",
            options=[None] + list(AccountType),
            format_func=lambda x: "All Types" if x is None else label(x.value),
        )
    with col2:
        category_filter = st.selectbox(
            "Filter by Category",
            options=[None] + list(AccountCategory),
            format_func=lambda x: "All Categories" if x is None else label(x.value),
        )

    items = run_async(dashboard_flow.list_accounts(
        account_type=type_filter,
        category=category_filter,
    ))
    if items:
        df = pd.DataFrame([
            {
                "Name": item.name,
                "Institution": item.institution_name or "",
                "Type": label(item.type.value),
                "Category": label(item.category.value),
                "Balance": float(item.balance),
                "Mask": f"••{item.mask}" if item.mask else "",
                "Active": item.is_active,
            }
            for item in items
        ])
        st.dataframe(df, use_container_width=True, hide_index=True)
    else:
        st.info("No accounts match these filters.")

    st.markdown("---")
    st.markdown("### ➕ Add a manual asset or liability")
    with st.form("add_account"):
        name = st.text_input("Name", placeholder="e.g., Vacation Home")
        account_type = st.selectbox(
            "Type",
            options=[AccountType.MANUAL_ASSET, AccountType.MANUAL_LIABILITY],
            format_func=lambda x: label(x.value),
        )
        category = st.selectbox(
            "Category",
            options=list(AccountCategory),
            format_func=lambda x: label(x.value),
        )
        subtype = st.text_input("Subtype", value="other")
        amount = st.text_input("Current value", value="0.00")
        description = st.text_input("Description (optional)")
        submitted = st.form_submit_button("💾 Save account")

    if submitted:
        try:
            account = run_async(account_flow.create_manual_account(
                name=name,
                account_type=account_type,
                subtype=subtype,
                category=category,
                initial_balance=Decimal(amount),
                description=description or None,
            ))
            st.success(f"✅ Added {account.name}")
        except (InvalidOperation, ValidationError, NetWorthTrackerError) as e:
            st.error(f"❌ Could not add the account: {e}")

    st.markdown("### ✏️ Update a balance")
    all_items = run_async(dashboard_flow.list_accounts())
    if all_items:
        with st.form("update_balance"):
            selected = st.selectbox(
                "Account",
                options=all_items,
                format_func=lambda item: f"{item.name} ({money(item.balance)})",
            )
            new_amount = st.text_input("New balance", value="0.00")
            update = st.form_submit_button("💾 Record balance")
        if update:
            try:
                run_async(account_flow.record_balance(selected.id, Decimal(new_amount)))
                st.success(f"✅ Balance updated for {selected.name}")
            except (InvalidOperation, ValidationError, NetWorthTrackerError) as e:
                st.error(f"❌ Could not record the balance: {e}")


def render_liabilities_page(dashboard_flow: DashboardFlow, liability_flow: LiabilityFlow):
    """Render upcoming payments for a chosen liability."""
    st.title("💳 Liabilities")

    liabilities = [
        item for item in run_async(dashboard_flow.list_accounts())
        if item.type in LIABILITY_TYPES
    ]
    if not liabilities:
        st.info("No liabilities recorded.")
        return

    selected = st.selectbox(
        "Account",
        options=liabilities,
        format_func=lambda item: f"{item.name} ({money(item.balance)})",
    )
    schedule = run_async(liability_flow.get_payment_schedule(selected.id))

    col1, col2, col3 = st.columns(3)
    col1.metric("Balance", money(schedule.balance))
    col2.metric("APR", f"{schedule.annual_rate * 100:.2f}%")
    col3.metric("Payment", money(schedule.payment))

    if not schedule.items:
        st.success("✅ Nothing owed on this account.")
        return

    df = pd.DataFrame([
        {
            "Date": item.date,
            "Payment": float(item.amount),
            "Principal": float(item.principal),
            "Interest": float(item.interest),
            "Remaining": float(item.remaining_balance),
        }
        for item in schedule.items
    ])
    fig = px.bar(df, x="Date", y=["Principal", "Interest"], title="Upcoming Payments")
    st.plotly_chart(fig, use_container_width=True)
    st.dataframe(df, use_container_width=True, hide_index=True)
    st.caption(
        f"Interest over the next {len(schedule.items)} payments: "
        f"{money(schedule.total_interest)}"
    )


def render_net_worth_page(dashboard_flow: DashboardFlow):
    """Render history, trends, projections and downloads."""
    st.title("📈 Net Worth")

    settings = get_settings().app
    periods = list(HistoryPeriod)
    granularities = list(Granularity)

    col1, col2 = st.columns(2)
    with col1:
        period = st.selectbox(
            "Period",
            options=periods,
            index=periods.index(HistoryPeriod.parse(settings.default_history_period)),
            format_func=lambda p: p.label,
        )
    with col2:
        granularity = st.selectbox(
            "Granularity",
            options=granularities,
            index=granularities.index(Granularity.parse(settings.default_granularity)),
            format_func=lambda g: g.value.title(),
        )

    history = run_async(dashboard_flow.get_history(period, granularity))
    render_history_chart(history, f"Net Worth - {period.label}")

    performance = run_async(dashboard_flow.get_asset_performance(period, granularity))
    df = pd.DataFrame([point.model_dump() for point in performance])
    fig = px.area(df, x="date", y="total_assets", title="Asset Performance")
    st.plotly_chart(fig, use_container_width=True)

    st.markdown("---")
    st.markdown("### Trends")
    trends = run_async(dashboard_flow.get_trends(period))
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Avg. monthly growth", f"{trends.monthly_growth_rate:+.2f}%")
    col2.metric(f"Growth over {period.label}", f"{trends.period_growth:+.2f}%")
    col3.metric("Volatility", trends.volatility.title(), f"{trends.volatility_pct:.2f}%")
    col4.metric("Trend", trends.trend.title())

    st.markdown("### Projections")
    projections = run_async(dashboard_flow.get_projections())
    rows = []
    for scenario in ("conservative", "moderate", "aggressive"):
        for point in getattr(projections, scenario):
            rows.append({"Scenario": scenario.title(), "Date": point.date, "Value": point.value})
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    st.markdown("### Download")
    now = utc_now()
    col1, col2 = st.columns(2)
    for column, export_format in zip((col1, col2), ExportFormat):
        with column:
            content = run_async(dashboard_flow.export(export_format, period, granularity, now=now))
            st.download_button(
                f"⬇ Download {export_format.value.upper()}",
                content,
                file_name=export_filename(export_format, now),
                mime=MEDIA_TYPES[export_format],
            )

    st.markdown("### Reports")
    reports = dashboard_flow.list_reports()
    col1, col2 = st.columns(2)
    with col1:
        definition = st.selectbox(
            "Report",
            options=reports,
            format_func=lambda r: r.name,
        )
        st.caption(definition.description)
    with col2:
        report_format = st.selectbox(
            "Format",
            options=definition.formats,
            format_func=lambda f: f.value.upper(),
        )
    if st.button("📄 Generate report"):
        report = run_async(dashboard_flow.generate_report(
            definition.id, report_format, period, granularity, now=now,
        ))
        st.download_button(
            f"⬇ Download {report.filename}",
            report.content,
            file_name=report.filename,
            mime=report.media_type,
        )


def render_preferences(settings_flow: SettingsFlow):
    preferences = run_async(settings_flow.get_preferences())
    with st.form("preferences"):
        col1, col2 = st.columns(2)
        with col1:
            currency = st.text_input("Display currency", value=preferences.currency)
            date_format = st.selectbox(
                "Date format",
                options=DATE_FORMATS,
                index=DATE_FORMATS.index(preferences.date_format),
            )
        with col2:
            refresh = st.selectbox(
                "Refresh linked accounts",
                options=REFRESH_FREQUENCIES,
                index=REFRESH_FREQUENCIES.index(preferences.refresh_frequency),
                format_func=str.title,
            )
            theme = st.selectbox(
                "Theme",
                options=THEMES,
                index=THEMES.index(preferences.theme),
                format_func=str.title,
            )
        share = st.checkbox("Share anonymous usage data", value=preferences.privacy.share_anonymous_data)
        benchmarks = st.checkbox(
            "Include me in benchmarks",
            value=preferences.privacy.include_in_benchmarks,
        )
        saved = st.form_submit_button("💾 Save preferences")

    if saved:
        try:
            run_async(settings_flow.update_preferences({
                "currency": currency.upper(),
                "date_format": date_format,
                "refresh_frequency": refresh,
                "theme": theme,
                "privacy": {
                    "share_anonymous_data": share,
                    "include_in_benchmarks": benchmarks,
                },
            }))
            st.success("✅ Preferences saved")
        except ValidationError as e:
            st.error(f"❌ Could not save preferences: {e}")


def render_notifications(settings_flow: SettingsFlow):
    notifications = run_async(settings_flow.get_notifications())
    alerts = ("enabled", "weekly_reports", "account_alerts", "security_alerts")
    with st.form("notifications"):
        changes = {}
        for column, channel in zip(st.columns(3), ("email", "push", "sms")):
            with column:
                st.markdown(f"**{channel.upper() if channel == 'sms' else channel.title()}**")
                current = getattr(notifications, channel)
                changes[channel] = {
                    alert: st.checkbox(label(alert), value=getattr(current, alert), key=f"{channel}-{alert}")
                    for alert in alerts
                }
        saved = st.form_submit_button("💾 Save notifications")

    if saved:
        run_async(settings_flow.update_notifications(changes))
        st.success("✅ Notification settings saved")


def render_settings_page(dashboard_flow: DashboardFlow, settings_flow: SettingsFlow):
    """Render preferences, configuration status and the integrity report."""
    st.title("⚙️ Settings")

    st.markdown("### Preferences")
    render_preferences(settings_flow)

    st.markdown("### Notifications")
    render_notifications(settings_flow)

    st.markdown("---")
    st.markdown("### Configuration Status")
    status = validate_all_settings()
    for name, key in (
        ("Simulation", "simulation"),
        ("Projections", "projection"),
        ("Liabilities", "liability"),
        ("Application", "app"),
    ):
        if status.get(key, False):
            st.success(f"✅ {name} settings loaded")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")

    st.markdown("---")
    st.markdown("### Data Integrity")
    dataset_result, consistency = run_async(dashboard_flow.check_integrity())
    st.text(get_user_friendly_summary(dataset_result))
    if consistency.is_valid:
        st.success("✅ Totals, breakdowns and history agree")
    else:
        st.warning(get_user_friendly_summary(consistency))

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "Settings are read from environment variables or a `.env` file. "
        "Simulation knobs use the `NETWORTH_SIM_` prefix and projection "
        "rates use `NETWORTH_PROJECTION_`. Liability rates and terms use "
        "`NETWORTH_LIABILITY_`."
    )


if __name__ == "__main__":
    main()
