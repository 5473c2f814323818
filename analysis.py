"""Spending summaries over an extracted ledger.

Everything here is a pure fold over ``core.Transaction`` records. Spending
means outflows: debits (negative amounts) reported as positive totals.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, timedelta

import pandas as pd

import categorisation
from core import Transaction

SAMPLE_MERCHANTS = [
    "BigBasket",
    "Swiggy",
    "Zomato",
    "Amazon",
    "Flipkart",
    "Netflix",
    "Airtel",
    "Uber",
    "Apollo Pharmacy",
    "HDFC Credit Card",
    "TATA CLiQ",
    "Reliance Mart",
    "BookMyShow",
    "MakeMyTrip",
    "Myntra",
]

MAX_RECOMMENDATIONS = 5


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    total: float
    color: str


@dataclass(frozen=True)
class MerchantTotal:
    merchant: str
    total: float


@dataclass(frozen=True)
class MonthlySpending:
    month: str
    amount: float


@dataclass(frozen=True)
class SavingRecommendation:
    id: str
    title: str
    description: str
    potential_savings: float
    category: str


# (id, category, share of total spending that triggers it, saving rate, title, advice)
_RECOMMENDATION_RULES = [
    (
        "1", categorisation.DINING, 0.10, 0.5, "Reduce Eating Out",
        "You're spending {total} on dining out. Try cooking at home more often to save up to 50% on food expenses.",
    ),
    (
        "2", categorisation.ENTERTAINMENT, 0.08, 0.3, "Share Subscription Costs",
        "Share your OTT subscriptions with family members or look for combo plans to reduce your {total} entertainment expenses.",
    ),
    (
        "3", categorisation.TRANSPORT, 0.15, 0.4, "Optimize Transport Costs",
        "Consider carpooling or using public transport more often to reduce your {total} transportation expenses.",
    ),
    (
        "4", categorisation.SHOPPING, 0.10, 0.3, "Plan Your Shopping",
        "You spent {total} on shopping. Wait for seasonal sales and create a shopping list to avoid impulse purchases.",
    ),
    (
        "5", categorisation.UTILITIES, 0.10, 0.2, "Reduce Utility Bills",
        "Your utility bills amount to {total}. Consider switching to energy-efficient appliances and being mindful of power consumption.",
    ),
]


def format_inr(value: float) -> str:
    """Format with Indian digit grouping, e.g. 1234567.5 -> '₹12,34,567.50'."""
    sign = "-" if value < 0 else ""
    whole, frac = f"{abs(value):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}₹{whole}.{frac}"


def _spending_frame(transactions: list[Transaction]) -> pd.DataFrame:
    df = pd.DataFrame(
        [t.as_dict() for t in transactions],
        columns=["id", "date", "description", "amount", "merchant", "category"],
    )
    df["amount"] = df["amount"].astype(float)
    df = df[df["amount"] < 0].copy()
    df["spent"] = -df["amount"]
    return df


def total_spending(transactions: list[Transaction]) -> float:
    return round(float(_spending_frame(transactions)["spent"].sum()), 2)


def calculate_category_totals(transactions: list[Transaction], table=categorisation.CATEGORY_TABLE) -> list[CategoryTotal]:
    df = _spending_frame(transactions)
    totals = df.groupby("category", sort=False)["spent"].sum()
    return [
        CategoryTotal(category=cat, total=round(float(total), 2), color=categorisation.category_color(cat, table))
        for cat, total in totals.items()
    ]


def calculate_merchant_totals(transactions: list[Transaction], limit: int = 5) -> list[MerchantTotal]:
    df = _spending_frame(transactions)
    totals = df.groupby("merchant", sort=False)["spent"].sum().sort_values(ascending=False, kind="stable")
    return [MerchantTotal(merchant=m, total=round(float(t), 2)) for m, t in totals.head(limit).items()]


def calculate_monthly_spending(transactions: list[Transaction]) -> list[MonthlySpending]:
    df = _spending_frame(transactions)
    if df.empty:
        return []
    df["period"] = pd.to_datetime(df["date"], format="%Y-%m-%d").dt.to_period("M")
    totals = df.groupby("period")["spent"].sum().sort_index()
    return [
        MonthlySpending(month=period.strftime("%b %Y"), amount=round(float(amount), 2))
        for period, amount in totals.items()
    ]


def generate_saving_recommendations(transactions: list[Transaction]) -> list[SavingRecommendation]:
    by_category = {c.category: c.total for c in calculate_category_totals(transactions)}
    spending = sum(by_category.values())

    recommendations = []
    for rec_id, category, share, rate, title, advice in _RECOMMENDATION_RULES:
        total = by_category.get(category, 0.0)
        if total > share * spending:
            recommendations.append(
                SavingRecommendation(
                    id=rec_id,
                    title=title,
                    description=advice.format(total=format_inr(total)),
                    potential_savings=round(total * rate, 2),
                    category=category,
                )
            )

    if len(recommendations) < 3:
        recommendations.append(
            SavingRecommendation(
                id="6",
                title="Create a Monthly Budget",
                description=(
                    "Setting up a monthly budget for each category can help you track and reduce "
                    f"your overall expenses of {format_inr(spending)}."
                ),
                potential_savings=round(spending * 0.1, 2),
                category=categorisation.OTHERS,
            )
        )

    return recommendations[:MAX_RECOMMENDATIONS]


def build_text_report(transactions: list[Transaction], title: str = "STATEMENT LEDGER - FINANCIAL REPORT") -> str:
    categories = calculate_category_totals(transactions)
    top_merchants = calculate_merchant_totals(transactions)
    recommendations = generate_saving_recommendations(transactions)
    spending = total_spending(transactions)
    savings = sum(r.potential_savings for r in recommendations)

    lines = [title, "=" * len(title), ""]
    lines += ["SUMMARY", "-------"]
    lines.append(f"Total Spending: {format_inr(spending)}")
    lines.append(f"Potential Savings: {format_inr(savings)}")
    lines += ["", "SPENDING BY CATEGORY", "--------------------"]
    lines += [f"{c.category}: {format_inr(c.total)}" for c in categories]
    lines += ["", "TOP MERCHANTS", "-------------"]
    lines += [f"{m.merchant}: {format_inr(m.total)}" for m in top_merchants]
    lines += ["", "RECOMMENDATIONS", "---------------"]
    for r in recommendations:
        lines.append(f"{r.title}: Save up to {format_inr(r.potential_savings)}")
        lines.append(r.description)
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def generate_sample_transactions(count: int = 100, seed: int | None = None, today: date | None = None) -> list[Transaction]:
    """Demo ledger for when a statement cannot be parsed: six months of payments."""
    rng = random.Random(seed)
    today = today or date.today()
    start = today - timedelta(days=182)

    txns = []
    for i in range(count):
        merchant = rng.choice(SAMPLE_MERCHANTS)
        description = f"Payment to {merchant}"
        txns.append(
            Transaction(
                id=f"sample-{i}",
                date=(start + timedelta(days=rng.randint(0, 182))).isoformat(),
                description=description,
                amount=-float(rng.randint(100, 5099)),
                merchant=merchant,
                category=categorisation.categorise_transaction(description),
            )
        )

    txns.sort(key=lambda t: t.date, reverse=True)
    return txns
