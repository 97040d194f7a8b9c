from .accounts import (
    Account,
    AccountCreate,
    AccountMove,
    AccountResponse,
    AccountStatus,
    AccountSubtype,
    AccountType,
    AccountUpdate,
)
from .budgets import (
    AvailableBalanceResponse,
    Budget,
    BudgetResponse,
    BudgetUpsert,
    BudgetUpsertResponse,
    PublishForward,
    PublishForwardAll,
    PublishSummary,
    PublishSummaryResponse,
)
from .categories import (
    ArchiveResult,
    ArchiveResultResponse,
    ArchiveStatus,
    Category,
    CategoryArchive,
    CategoryCreate,
    CategoryMove,
    CategoryResponse,
    CategoryStatus,
    CategoryType,
    CategoryUpdate,
    MoveDirection,
)
from .events import EventType
from .forecast import Forecast, ForecastPoint, ForecastPointResponse, ForecastResponse
from .transactions import (
    FinancialSummary,
    FinancialSummaryResponse,
    SingleTransaction,
    Transaction,
    TransactionCreate,
    TransactionDraft,
    TransactionPair,
    TransactionResponse,
    TransactionType,
    TransactionUpdate,
    TransactionWrite,
)
from .users import User, UserProfileResponse
from .workspaces import (
    Workspace,
    WorkspaceCreate,
    WorkspaceMember,
    WorkspaceMemberCreate,
    WorkspaceMemberResponse,
    WorkspaceResponse,
)
