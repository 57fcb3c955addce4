"""
Streamlit Frontend for Budget Tracker

Pages:
1. Home - balance, budget progress, top categories, recent activity
2. Expenses - one month at a time, add and delete transactions
3. Plans - future-dated transactions
4. Wallet - edit balance and monthly budget
5. Settings - currency, notifications, warning threshold

The UI holds no business rules. Every number shown comes from the
ledger's queries; every change goes through a ledger mutation.
"""

from datetime import date, datetime, time
from decimal import Decimal

import streamlit as st

from budget_tracker.async_runner import BackgroundEventLoop
from budget_tracker.ledger import (
    Ledger,
    PersistenceError,
    TransactionValidationError,
    create_ledger,
)
from budget_tracker.models import (
    CURRENCY_SYMBOLS,
    Transaction,
    TransactionType,
    UserSettings,
)
from budget_tracker.queries import sorted_by_date_desc
from budget_tracker.services.notifications import CollectingNotificationHook
from budget_tracker.validation import TransactionValidator


st.set_page_config(
    page_title="Budget Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_event_loop() -> BackgroundEventLoop:
    """One loop thread shared by all sessions; the ledger's lock lives on it."""
    return BackgroundEventLoop().start()


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    return get_event_loop().run(coro)


@st.cache_resource
def get_components() -> tuple[Ledger, CollectingNotificationHook, TransactionValidator]:
    """Get or create the ledger and its collaborators (cached)."""
    hook = CollectingNotificationHook()
    ledger = create_ledger(notification_hook=hook)
    run_async(ledger.load())
    return ledger, hook, TransactionValidator()


def show_budget_warnings(hook: CollectingNotificationHook) -> None:
    for warning in hook.drain():
        st.warning(f"⚠️ Budget Warning: {warning.message}")


def submit_transaction(
    ledger: Ledger,
    validator: TransactionValidator,
    amount: str,
    description: str,
    category_id: str,
    transaction_type: TransactionType,
    when: datetime,
    is_planned: bool,
) -> bool:
    """Validate and add; shows errors and returns False on failure."""
    draft, result = validator.build_draft(
        amount=amount,
        description=description,
        category=category_id,
        transaction_type=transaction_type,
        date=when,
        is_planned=is_planned,
    )
    if draft is None:
        st.error(validator.get_user_friendly_summary(result))
        return False

    try:
        run_async(ledger.add_transaction(draft))
    except TransactionValidationError as e:
        st.error(validator.get_user_friendly_summary(e.result))
        return False
    except PersistenceError as e:
        st.error(f"Could not save the transaction. Please try again. ({e.key})")
        return False
    return True


def transaction_row(ledger: Ledger, transaction: Transaction, key_prefix: str) -> None:
    category = ledger.category(transaction.category)
    sign = "-" if transaction.type == TransactionType.EXPENSE else "+"

    col1, col2, col3 = st.columns([4, 2, 1])
    with col1:
        st.markdown(f"**{transaction.description or 'No description'}**")
        st.caption(
            f"{category.name if category else 'Unknown'} · "
            f"{transaction.date.strftime('%d %b %Y')}"
        )
    with col2:
        st.markdown(f"{sign}{ledger.format_amount(transaction.amount)}")
    with col3:
        if st.button("🗑️", key=f"{key_prefix}_{transaction.id}"):
            try:
                run_async(ledger.delete_transaction(transaction.id))
            except PersistenceError:
                st.error("Could not delete the transaction. Please try again.")
            else:
                st.rerun()


def transaction_form(
    ledger: Ledger,
    validator: TransactionValidator,
    form_key: str,
    is_planned: bool,
) -> None:
    transaction_type = st.radio(
        "Type",
        [TransactionType.EXPENSE, TransactionType.INCOME],
        format_func=lambda t: t.value.capitalize(),
        horizontal=True,
        key=f"{form_key}_type",
    )
    choices = ledger.categories_for(transaction_type)

    with st.form(form_key, clear_on_submit=True):
        amount = st.text_input("Amount")
        description = st.text_input("Description")
        category = st.selectbox(
            "Category",
            choices,
            format_func=lambda c: c.name,
        )
        if is_planned:
            planned_day = st.date_input("Date", min_value=date.today())
        submitted = st.form_submit_button("Add")

    if not submitted:
        return

    when = datetime.combine(planned_day, time(12, 0)) if is_planned else datetime.now()
    if submit_transaction(
        ledger,
        validator,
        amount=amount,
        description=description,
        category_id=category.id if category else "",
        transaction_type=transaction_type,
        when=when,
        is_planned=is_planned,
    ):
        st.success("Saved")
        st.rerun()


def home_page(ledger: Ledger) -> None:
    st.header("🏠 Overview")
    status = ledger.budget_status()

    col1, col2, col3 = st.columns(3)
    col1.metric("Balance", ledger.format_amount(ledger.wallet.total_balance))
    col2.metric("Income this month", ledger.format_amount(status.month_income))
    col3.metric("Spent this month", ledger.format_amount(status.month_expenses))

    st.subheader("Monthly budget")
    st.progress(min(status.usage_percent, 100.0) / 100)
    st.caption(
        f"{status.usage_percent:.0f}% used · "
        f"Remaining {ledger.format_amount(abs(status.remaining))}"
        f"{' over' if status.remaining < 0 else ''} · "
        f"Budget {ledger.format_amount(status.monthly_budget)}"
    )
    st.caption(f"Planned transactions: {len(ledger.planned_transactions())}")

    st.subheader("Top categories")
    top = ledger.top_categories()
    if not top:
        st.info("No expenses yet.")
    for entry in top:
        st.markdown(f"- {entry.category.name}: {ledger.format_amount(entry.total)}")

    st.subheader("Recent transactions")
    for transaction in ledger.recent_transactions():
        transaction_row(ledger, transaction, "recent")


def expenses_page(ledger: Ledger, validator: TransactionValidator) -> None:
    st.header("💸 Expenses")

    today = date.today()
    col1, col2 = st.columns(2)
    month = col1.selectbox("Month", list(range(1, 13)), index=today.month - 1)
    year = col2.number_input("Year", min_value=2000, max_value=2100, value=today.year)

    data = ledger.monthly_data(int(month), int(year))
    st.subheader(f"{data.month} {data.year}")
    col1, col2, col3 = st.columns(3)
    col1.metric("Income", ledger.format_amount(data.total_income))
    col2.metric("Expenses", ledger.format_amount(data.total_expenses))
    col3.metric("Net", ledger.format_amount(data.net))

    for transaction in sorted_by_date_desc(data.transactions):
        transaction_row(ledger, transaction, "month")

    st.subheader("Add transaction")
    transaction_form(ledger, validator, "add_transaction", is_planned=False)


def plans_page(ledger: Ledger, validator: TransactionValidator) -> None:
    st.header("🗓️ Plans")
    summary = ledger.planned_summary()

    col1, col2 = st.columns(2)
    col1.metric("Planned expenses", ledger.format_amount(summary.upcoming_expenses))
    col2.metric("Planned income", ledger.format_amount(summary.upcoming_income))

    st.subheader("Upcoming")
    if not summary.upcoming:
        st.info("Nothing planned.")
    for transaction in summary.upcoming:
        transaction_row(ledger, transaction, "upcoming")

    if summary.past:
        st.subheader("Past")
        for transaction in summary.past:
            transaction_row(ledger, transaction, "past")

    st.subheader("Add plan")
    transaction_form(ledger, validator, "add_plan", is_planned=True)


def wallet_page(ledger: Ledger, validator: TransactionValidator) -> None:
    st.header("👛 Wallet")
    status = ledger.budget_status()

    if status.is_over_budget:
        st.error("You are over budget this month.")
    elif status.is_near_limit:
        st.warning("You are close to your monthly budget.")

    with st.form("wallet"):
        balance = st.text_input("Total balance", value=str(ledger.wallet.total_balance))
        budget = st.text_input("Monthly budget", value=str(ledger.wallet.monthly_budget))
        submitted = st.form_submit_button("Save")

    if submitted:
        result = validator.validate_wallet(balance, budget)
        if result.has_errors:
            st.error(validator.get_user_friendly_summary(result))
            return
        wallet = ledger.wallet.model_copy(update={
            "total_balance": Decimal(balance.strip()),
            "monthly_budget": Decimal(budget.strip()),
        })
        try:
            run_async(ledger.save_wallet(wallet))
        except PersistenceError:
            st.error("Could not save the wallet. Please try again.")
        else:
            st.success("Wallet updated successfully")


def settings_page(ledger: Ledger, validator: TransactionValidator) -> None:
    st.header("⚙️ Settings")
    current = ledger.settings
    currencies = list(CURRENCY_SYMBOLS)

    with st.form("settings"):
        currency = st.selectbox(
            "Currency",
            currencies,
            index=currencies.index(current.currency) if current.currency in currencies else 0,
        )
        notifications = st.toggle(
            "Budget notifications",
            value=current.notifications,
            help="Get notified when approaching budget limit",
        )
        threshold = st.slider(
            "Alert when budget usage reaches (%)",
            min_value=50,
            max_value=100,
            step=5,
            value=int(current.budget_warning_threshold),
        )
        submitted = st.form_submit_button("Save settings")

    if submitted:
        settings = UserSettings(
            currency=currency,
            notifications=notifications,
            budget_warning_threshold=float(threshold),
        )
        result = validator.validate_settings(settings)
        if result.has_errors:
            st.error(validator.get_user_friendly_summary(result))
            return
        try:
            run_async(ledger.save_settings(settings))
        except PersistenceError:
            st.error("Could not save settings. Please try again.")
        else:
            st.success("Settings saved successfully")


def main():
    """Main application entry point."""
    ledger, hook, validator = get_components()

    st.sidebar.title("💰 Budget Tracker")
    st.sidebar.markdown("---")
    page = st.sidebar.radio(
        "Navigate to:",
        ["🏠 Home", "💸 Expenses", "🗓️ Plans", "👛 Wallet", "⚙️ Settings"],
        index=0,
    )

    show_budget_warnings(hook)

    if page == "🏠 Home":
        home_page(ledger)
    elif page == "💸 Expenses":
        expenses_page(ledger, validator)
    elif page == "🗓️ Plans":
        plans_page(ledger, validator)
    elif page == "👛 Wallet":
        wallet_page(ledger, validator)
    else:
        settings_page(ledger, validator)


if __name__ == "__main__":
    main()
