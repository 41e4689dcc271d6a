"""
Streamlit Frontend for Investment Manager

A single page with five tabs:
1. Dashboard - net worth, balances, portfolio value, dividends
2. Accounts - bank/brokerage/credit accounts and their balances
3. Budget Tracker - income and expense entries
4. Portfolio - simulated dividend holdings
5. Dividend Screener - filter the sample catalog, buy shares

The UI validates every form before calling the store. The store
handles saving; the UI just re-renders from its snapshots.
"""

import asyncio

import streamlit as st

from investment_manager.metrics import (
    holding_annual_dividend,
    holding_value,
    sum_amounts,
    top_holdings,
)
from investment_manager.models.finance import (
    ACCOUNT_TYPE_LABELS,
    AccountType,
    FrequencyFilter,
    ScreenFilters,
)
from investment_manager.config import get_settings, validate_all_settings
from investment_manager.orchestrator import create_app_components
from investment_manager.state import DashboardStore
from investment_manager.validation import (
    validate_account,
    validate_balance_update,
    validate_budget_entry,
    validate_share_count,
)


# Page configuration
st.set_page_config(
    page_title="Investment Manager Pro",
    page_icon="📈",
    layout="wide",
)

ACCOUNT_TYPE_COLORS = {
    AccountType.CHECKING: "blue",
    AccountType.SAVINGS: "green",
    AccountType.INVESTMENT: "violet",
    AccountType.CREDIT: "red",
    AccountType.LOAN: "orange",
    AccountType.OTHER: "gray",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()
        asyncio.set_event_loop(None)


@st.cache_resource
def get_store() -> DashboardStore:
    """
    Create the store and load saved data.

    Cached across reruns and shared by every session; the store and
    its writer serialize mutations from concurrent script threads.
    """
    store = create_app_components()
    run_async(store.load())
    return store


def money(value) -> str:
    return f"${value:,.2f}"


def show_issues(issues) -> bool:
    """Render validation issues; True if the form can be submitted."""
    for issue in issues:
        st.error(issue.message)
    return not issues


def main():
    """Main application entry point."""
    store = get_store()

    st.title("📈 Investment Manager Pro")
    st.caption("Track your budget, portfolio, and discover high-yield opportunities")

    dashboard, accounts, budget, portfolio, screener = st.tabs(
        ["Dashboard", "Accounts", "Budget Tracker", "Portfolio", "Dividend Screener"]
    )
    with dashboard:
        render_dashboard(store)
    with accounts:
        render_accounts(store)
    with budget:
        render_budget(store)
    with portfolio:
        render_portfolio(store)
    with screener:
        render_screener(store)
    render_settings(store)


def render_dashboard(store: DashboardStore):
    metrics = store.metrics()

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Net Worth", money(metrics.total_net_worth), "Accounts + Portfolio",
                delta_color="off")
    col2.metric("Account Balance", money(metrics.total_account_balance),
                f"{metrics.account_count} Accounts", delta_color="off")
    col3.metric("Portfolio Value", money(metrics.portfolio_value),
                f"{metrics.holding_count} Holdings", delta_color="off")
    col4.metric("Monthly Dividends", money(metrics.monthly_dividend_income),
                "Average", delta_color="off")

    left, right = st.columns(2)
    with left:
        st.subheader("Budget Overview")
        st.markdown(f"**Total Income:** :green[{money(metrics.total_income)}]")
        st.markdown(f"**Total Expenses:** :red[{money(metrics.total_expenses)}]")
        color = "green" if metrics.net_cash_flow >= 0 else "red"
        st.markdown(f"**Net Cash Flow:** :{color}[{money(metrics.net_cash_flow)}]")

    with right:
        st.subheader("Top Holdings")
        top = top_holdings(store.portfolio)
        if not top:
            st.info("No holdings yet")
        for holding, value in top:
            st.markdown(f"**{holding.ticker}** · {holding.shares} shares · {money(value)}")

    with st.expander("Recent activity"):
        for event in store.audit_logger.recent_events(limit=10):
            st.text(f"{event.timestamp:%H:%M:%S}  {event.description}")


def render_settings(store: DashboardStore):
    """Connection status and configuration, shown in the sidebar."""
    with st.sidebar.expander("⚙️ Settings"):
        st.markdown("**Connection Status**")
        status = validate_all_settings()
        groups = [
            ("Storage", "storage"),
            ("Google Sheets", "google_sheets"),
            ("Screener defaults", "screener"),
            ("App", "app"),
        ]
        for name, key in groups:
            if status.get(key, False):
                st.success(f"✅ {name}")
            else:
                error = status.get(f"{key}_error", "Not configured")
                st.error(f"❌ {name} - {error}")

        st.caption(f"Saving to: {type(store.storage).__name__}")
        st.markdown(
            "Configure the app with a `.env` file. "
            "See `.env.example` for the available variables."
        )

        if get_settings().app.debug_mode:
            st.markdown("**Audit events**")
            for event in store.audit_logger.recent_events(limit=25):
                st.json(event.to_log_dict(), expanded=False)


def render_accounts(store: DashboardStore):
    st.subheader("Accounts")
    st.markdown(f"**Total Balance:** {money(store.metrics().total_account_balance)}")

    with st.form("add_account", clear_on_submit=True):
        name = st.text_input("Account name")
        account_type = st.selectbox(
            "Type",
            options=list(AccountType),
            format_func=lambda t: ACCOUNT_TYPE_LABELS[t],
        )
        balance = st.text_input("Current balance")
        institution = st.text_input("Institution (optional)")
        if st.form_submit_button("Add Account"):
            if show_issues(validate_account(name, balance)):
                store.add_account(name, account_type, balance, institution)
                st.rerun()

    if not store.accounts:
        st.info("No accounts yet. Add your first account above.")

    for account in store.accounts:
        color = ACCOUNT_TYPE_COLORS[account.type]
        cols = st.columns([3, 2, 3, 1])
        cols[0].markdown(
            f"**{account.name}** :{color}[{account.type_label}]"
            + (f"  \n{account.institution}" if account.institution else "")
        )
        cols[1].markdown(money(account.balance))
        new_balance = cols[2].text_input(
            "New balance", key=f"balance_{account.id}", label_visibility="collapsed",
            placeholder="New balance",
        )
        if cols[2].button("Update", key=f"update_{account.id}"):
            if show_issues(validate_balance_update(new_balance)):
                store.update_account_balance(account.id, new_balance)
                st.rerun()
        if cols[3].button("🗑", key=f"delete_account_{account.id}"):
            store.delete_account(account.id)
            st.rerun()


def render_budget_section(store: DashboardStore, kind: str):
    entries = store.budget.income if kind == "income" else store.budget.expenses
    title = "Income" if kind == "income" else "Expenses"

    st.subheader(title)
    st.markdown(f"**Total:** {money(sum_amounts(entries))}")

    with st.form(f"add_{kind}", clear_on_submit=True):
        description = st.text_input("Description")
        amount = st.text_input("Amount")
        category = st.text_input("Category (optional)")
        if st.form_submit_button(f"Add {title}"):
            if show_issues(validate_budget_entry(description, amount)):
                if kind == "income":
                    store.add_income(description, amount, category)
                else:
                    store.add_expense(description, amount, category)
                st.rerun()

    for entry in entries:
        cols = st.columns([4, 2, 1])
        cols[0].markdown(
            f"**{entry.description}**" + (f"  \n{entry.category}" if entry.category else "")
        )
        cols[1].markdown(money(entry.amount))
        if cols[2].button("🗑", key=f"delete_{kind}_{entry.id}"):
            if kind == "income":
                store.delete_income(entry.id)
            else:
                store.delete_expense(entry.id)
            st.rerun()


def render_budget(store: DashboardStore):
    left, right = st.columns(2)
    with left:
        render_budget_section(store, "income")
    with right:
        render_budget_section(store, "expenses")


def render_portfolio(store: DashboardStore):
    st.subheader("My Portfolio")
    if not store.portfolio:
        st.info("No holdings yet. Add securities from the Dividend Screener!")
        return

    header = st.columns([2, 2, 2, 2, 2, 2, 1])
    for col, label in zip(
        header, ["Ticker", "Shares", "Price", "Value", "Yield", "Annual Dividend", ""]
    ):
        col.markdown(f"**{label}**")

    for holding in store.portfolio:
        cols = st.columns([2, 2, 2, 2, 2, 2, 1])
        cols[0].markdown(f"**{holding.ticker}**")
        cols[1].markdown(f"{holding.shares}")
        cols[2].markdown(money(holding.price))
        cols[3].markdown(money(holding_value(holding)))
        cols[4].markdown(f"{holding.dividend_yield:.1f}%")
        cols[5].markdown(money(holding_annual_dividend(holding)))
        if cols[6].button("🗑", key=f"remove_{holding.id}"):
            store.remove_from_portfolio(holding.id)
            st.rerun()


def render_screener(store: DashboardStore):
    st.subheader("High-Yield Dividend Screener")
    defaults = store.default_filters

    col1, col2 = st.columns(2)
    min_yield = col1.number_input(
        "Minimum Yield (%)", min_value=0.0, value=float(defaults.min_yield), step=1.0,
    )
    frequencies = list(FrequencyFilter)
    frequency = col2.selectbox(
        "Payout Frequency",
        options=frequencies,
        index=frequencies.index(defaults.payout_frequency),
        format_func=lambda f: "All" if f == FrequencyFilter.ALL else f.value.title(),
    )

    results = store.screen(ScreenFilters(min_yield=str(min_yield), payout_frequency=frequency))
    st.caption(f"{len(results)} securities match")

    for security in results:
        cols = st.columns([1, 3, 1, 1, 1, 1, 2])
        cols[0].markdown(f"**{security.ticker}**")
        cols[1].markdown(security.name)
        cols[2].markdown(f"{security.dividend_yield:.1f}%")
        cols[3].markdown(money(security.price))
        cols[4].markdown(security.frequency.value.title())
        cols[5].markdown(security.sector)
        shares = cols[6].text_input(
            "Shares", key=f"shares_{security.ticker}", label_visibility="collapsed",
            placeholder="Shares",
        )
        if cols[6].button("Add", key=f"buy_{security.ticker}"):
            if show_issues(validate_share_count(shares)):
                store.add_to_portfolio(security, shares)
                st.success(f"Added {shares} shares of {security.ticker}")


if __name__ == "__main__":
    main()
