"""Portfolio service: user wallets enriched with live Cardano account data."""
