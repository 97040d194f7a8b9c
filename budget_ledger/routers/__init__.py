from . import accounts, budgets, categories, forecast, transactions, users, workspaces
