from .accounts import AccountsDataAccess
from .budgets import BudgetsDataAccess
from .categories import CategoriesDataAccess
from .events import EventsDataAccess
from .transactions import TransactionsDataAccess
from .workspaces import WorkspacesDataAccess
