from .accounts import AccountsService
from .archive import ArchiveService
from .budgets import BudgetsService
from .categories import CategoriesService
from .forecast import ForecastService
from .transactions import TransactionsService
from .workspaces import WorkspacesService
