"""Prometheus metrics for portfolio flows."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

user_created_total = Counter(
    "portfolio_user_created_total",
    "Number of users provisioned",
)

wallet_created_total = Counter(
    "portfolio_wallet_created_total",
    "Number of wallets registered grouped by wallet type",
    ["wallet_type"],
)

wallet_lookup_total = Counter(
    "portfolio_wallet_lookup_total",
    "Wallet data lookups grouped by outcome",
    ["outcome"],
)

account_lookup_total = Counter(
    "portfolio_account_lookup_total",
    "Blockfrost account lookups grouped by outcome",
    ["outcome"],
)

account_lookup_latency_seconds = Histogram(
    "portfolio_account_lookup_latency_seconds",
    "Latency of Blockfrost account lookups",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)
