from __future__ import annotations

from enum import Enum


class EventType(str, Enum):
    workspace_created = "workspace_created"
    category_created = "category_created"
    category_updated = "category_updated"
    category_archived = "category_archived"
    account_created = "account_created"
    account_updated = "account_updated"
    account_archived = "account_archived"
    initial_balance_set = "initial_balance_set"
    default_account_set = "default_account_set"
    transaction_created = "transaction_created"
    transaction_updated = "transaction_updated"
    transaction_deleted = "transaction_deleted"
    budget_created = "budget_created"
    budget_updated = "budget_updated"
    budget_deleted = "budget_deleted"

