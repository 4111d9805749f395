"""walletflow: wallets, income/expense sources and the daily ledger run."""
