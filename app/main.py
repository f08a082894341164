import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from tracker.config import configure_logging, get_settings
from tracker.domain import EXPENSE, INCOME, OVER, SUCCESS, UNDER, WARNING
from tracker.functional import categories_of_kind, validate_budget_input, validate_transaction_input
from tracker.lazy import by_date_range, iter_transactions
from tracker.periods import month_key, month_label
from tracker.services import DashboardService
from tracker.storage import FinanceStore, JsonFileBackend

settings = get_settings()
configure_logging(settings.log_level)

st.set_page_config(page_title="Personal Finance Tracker", layout="wide")

store = FinanceStore(JsonFileBackend(settings.store_path))
service = DashboardService(store, recent_count=settings.recent_count)
dash = service.snapshot()


def format_currency(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}{abs(amount):,.2f} {settings.currency}"


def tx_to_df(tx_list, categories):
    names = {c.id: f"{c.icon} {c.name}" for c in categories}
    rows = [
        {
            "id": t.id,
            "date": pd.to_datetime(t.date),
            "description": t.description,
            "kind": t.kind,
            "category": names.get(t.category_id, "Unknown"),
            "amount": t.amount,
            "signed": t.amount if t.kind == INCOME else -t.amount,
        }
        for t in tx_list
    ]
    return pd.DataFrame(rows, columns=["id", "date", "description", "kind", "category", "amount", "signed"])


def category_label(categories, cid):
    return next((f"{c.icon} {c.name}" for c in categories if c.id == cid), "Unknown Category")


st.sidebar.markdown("### 💰 Personal Finance Tracker")
st.sidebar.caption(f"Today: {dash.today.day:02d} {month_label(dash.today)}")
menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "🧾 Transactions", "📊 Analytics", "🎯 Budgets", "💡 Insights"],
)

if menu == "🏠 Dashboard":
    st.title("🏠 Dashboard")
    totals = dash.totals

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Total Balance", format_currency(totals.balance))
    with k2:
        st.metric("Monthly Balance", format_currency(totals.month_balance))
    with k3:
        st.metric("Total Income", format_currency(totals.total_income), f"{dash.transaction_count} transactions", delta_color="off")
    with k4:
        st.metric("Total Expenses", format_currency(totals.total_expenses), f"{dash.category_count} categories", delta_color="off")

    k5, k6, k7, k8 = st.columns(4)
    with k5:
        st.metric("This Month Income", format_currency(totals.month_income))
    with k6:
        st.metric("This Month Expenses", format_currency(totals.month_expenses))
    with k7:
        st.metric("Active Budgets", dash.budget_count)
    with k8:
        st.metric("Categories", dash.category_count)

    st.subheader("🕒 Recent Transactions")
    if dash.recent:
        recent_df = tx_to_df(dash.recent, dash.categories)
        recent_df["date"] = recent_df["date"].dt.strftime("%Y-%m-%d")
        recent_df["amount"] = recent_df["signed"].map(format_currency)
        st.table(recent_df[["date", "description", "category", "amount"]].reset_index(drop=True))
    else:
        st.info("No transactions yet. Add one from the Transactions page.")

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")

    editing = None
    if dash.transactions:
        edit_options = {"(new transaction)": None}
        edit_options.update({f"{t.date} · {t.description} · {t.amount:,.2f} · {t.id[:8]}": t for t in dash.transactions})
        editing = edit_options[st.selectbox("Edit existing", list(edit_options))]

    kind = st.radio(
        "Type",
        [EXPENSE, INCOME],
        index=[EXPENSE, INCOME].index(editing.kind) if editing else 0,
        horizontal=True,
    )
    choices = categories_of_kind(dash.categories, kind)
    choice_ids = [c.id for c in choices]

    with st.form("transaction_form", clear_on_submit=editing is None):
        amount = st.number_input("Amount", min_value=0.0, step=1.0, value=float(editing.amount) if editing else 0.0)
        on = st.date_input("Date", value=editing.date if editing else dash.today)
        description = st.text_input("Description", value=editing.description if editing else "")
        category_id = st.selectbox(
            "Category",
            choice_ids,
            index=choice_ids.index(editing.category_id) if editing and editing.category_id in choice_ids else 0,
            format_func=lambda cid: category_label(choices, cid),
        )
        submitted = st.form_submit_button("Update Transaction" if editing else "Add Transaction")

    if submitted:
        result = validate_transaction_input(amount, on, description, category_id)
        if result.is_left():
            st.error(result.get_error()["message"])
        else:
            data = result.get_or_else({})
            try:
                if editing:
                    store.update_transaction(editing.id, kind=kind, **data)
                else:
                    store.add_transaction(data["amount"], data["date"], data["description"], kind, data["category_id"])
            except ValueError as e:
                st.error(f"Transactions could not be saved: {e}")
            else:
                st.success("Transaction updated" if editing else "Transaction added")
                st.rerun()

    if editing and st.button("🗑 Delete this transaction"):
        store.delete_transaction(editing.id)
        st.rerun()

    st.subheader("📋 All Transactions")
    shown = dash.transactions
    if shown:
        date_range = st.date_input(
            "Date Range",
            value=(min(t.date for t in shown), max(t.date for t in shown)),
            key="tx_date_range",
        )
        if len(date_range) == 2:
            shown = tuple(iter_transactions(shown, by_date_range(*date_range)))
    df = tx_to_df(shown, dash.categories)
    if not df.empty:
        df = df.sort_values("date", ascending=False)
        display_df = df.assign(
            date=lambda x: x["date"].dt.strftime("%Y-%m-%d"),
            amount=lambda x: x["signed"].map(format_currency),
        )[["date", "description", "kind", "category", "amount"]]
        st.dataframe(display_df.reset_index(drop=True), use_container_width=True)
        st.download_button(
            "⬇️ Download CSV",
            df.drop(columns=["signed"]).to_csv(index=False),
            file_name="transactions.csv",
            mime="text/csv",
        )
    else:
        st.info("No transactions recorded yet")

elif menu == "📊 Analytics":
    st.title("📊 Analytics")

    st.subheader("Monthly Expenses")
    if dash.monthly:
        df_month = pd.DataFrame([m.__dict__ for m in dash.monthly])
        fig_month = px.bar(
            df_month,
            x="month",
            y="amount",
            hover_data=["count"],
            labels={"month": "Month", "amount": f"Expenses ({settings.currency})"},
            template="plotly_dark",
        )
        st.plotly_chart(fig_month, use_container_width=True)
    else:
        st.info("No expense data to chart")

    st.subheader("Expenses by Category")
    if dash.by_category:
        df_cat = pd.DataFrame([c.__dict__ for c in dash.by_category])
        fig_cat = go.Figure(
            go.Pie(
                labels=df_cat["category"],
                values=df_cat["amount"],
                marker=dict(colors=df_cat["color"]),
                hole=0.4,
            )
        )
        fig_cat.update_layout(template="plotly_dark", margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig_cat, use_container_width=True)
    else:
        st.info("No expense categories yet")

    st.subheader(f"Budget vs Actual ({dash.current_month})")
    if dash.budget_comparisons:
        df_budget = pd.DataFrame([b.__dict__ for b in dash.budget_comparisons])
        fig_budget = go.Figure()
        fig_budget.add_trace(go.Bar(x=df_budget["category_name"], y=df_budget["budgeted"], name="Budgeted"))
        fig_budget.add_trace(
            go.Bar(
                x=df_budget["category_name"],
                y=df_budget["actual"],
                name="Actual",
                marker_color=np.where(df_budget["status"] == OVER, "#ef4444", df_budget["color"]),
            )
        )
        fig_budget.update_layout(barmode="group", template="plotly_dark")
        st.plotly_chart(fig_budget, use_container_width=True)
    else:
        st.info("No budgets set for this month")

elif menu == "🎯 Budgets":
    st.title("🎯 Budgets")
    expense_categories = categories_of_kind(dash.categories, EXPENSE)
    expense_ids = [c.id for c in expense_categories]

    editing = None
    if dash.budgets:
        edit_options = {"(new budget)": None}
        edit_options.update({
            f"{b.month} · {category_label(dash.categories, b.category_id)} · {b.amount:,.2f} · {b.id[:8]}": b
            for b in dash.budgets
        })
        editing = edit_options[st.selectbox("Edit existing", list(edit_options), key="budget_edit")]

    with st.form("budget_form", clear_on_submit=editing is None):
        category_id = st.selectbox(
            "Category",
            expense_ids,
            index=expense_ids.index(editing.category_id) if editing and editing.category_id in expense_ids else 0,
            format_func=lambda cid: category_label(expense_categories, cid),
        )
        amount = st.number_input(
            "Budget amount", min_value=0.0, step=10.0, value=float(editing.amount) if editing else 0.0
        )
        month = st.text_input("Month (YYYY-MM)", value=editing.month if editing else dash.current_month)
        submitted = st.form_submit_button("Update Budget" if editing else "Add Budget")

    if submitted:
        result = validate_budget_input(
            category_id,
            amount,
            month,
            store.get_budget_for(category_id, month),
            editing_id=editing.id if editing else None,
        )
        if result.is_left():
            st.error(result.get_error()["message"])
        else:
            data = result.get_or_else({})
            try:
                if editing:
                    store.update_budget(editing.id, **data)
                else:
                    store.add_budget(data["category_id"], data["amount"], data["month"])
            except ValueError as e:
                st.error(f"Budgets could not be saved: {e}")
            else:
                st.success("Budget saved")
                st.rerun()

    selected_month = st.text_input("Filter by month", value=dash.current_month, key="budget_month_filter")
    comparisons = {c.category_id: c for c in service.budget_comparisons(selected_month)}
    month_budgets = [b for b in dash.budgets if b.month == selected_month]

    if not month_budgets:
        st.info("No budgets for this month")
    for b in month_budgets:
        cmp = comparisons.get(b.category_id)
        c1, c2, c3 = st.columns([3, 2, 1])
        with c1:
            st.markdown(f"**{category_label(dash.categories, b.category_id)}**")
            if cmp:
                st.progress(float(np.clip(cmp.percentage / 100, 0.0, 1.0)))
        with c2:
            st.markdown(format_currency(b.amount))
            if cmp:
                st.caption(
                    f"{format_currency(cmp.actual)} of {format_currency(cmp.budgeted)} "
                    f"({cmp.percentage:.0f}%, {cmp.status})"
                )
        with c3:
            if st.button("🗑", key=f"del_{b.id}"):
                store.delete_budget(b.id)
                st.rerun()

elif menu == "💡 Insights":
    st.title("💡 Financial Insights")
    if not dash.insights:
        st.info("No insights available. Add more transactions to get personalized insights.")
    for insight in dash.insights:
        text = f"**{insight.title}**: {insight.message}"
        if insight.value is not None:
            text += f" ({format_currency(insight.value)})"
        if insight.type == WARNING:
            st.warning(text, icon="⚠️")
        elif insight.type == SUCCESS:
            st.success(text, icon="✅")
        else:
            st.info(text)

    under = [c for c in dash.budget_comparisons if c.status == UNDER]
    if under:
        st.caption(f"{len(under)} of {dash.budget_count} budgets this month are below 80% used.")
    st.caption(f"Current month: {month_key(dash.today)}")
