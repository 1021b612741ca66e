"""Command objects accepted by the transaction service."""

from dataclasses import dataclass
from typing import Union

from fintrack.domain.entities import TransactionDraft


@dataclass(frozen=True)
class CreateTransactionCommand:
    draft: TransactionDraft


@dataclass(frozen=True)
class CreateRecurringTransactionCommand:
    """Expand a recurring template and create every occurrence, all or nothing."""

    draft: TransactionDraft


@dataclass(frozen=True)
class UpdateTransactionCommand:
    transaction_id: str
    draft: TransactionDraft


@dataclass(frozen=True)
class DeleteTransactionCommand:
    transaction_id: str


TransactionCommand = Union[
    CreateTransactionCommand,
    CreateRecurringTransactionCommand,
    UpdateTransactionCommand,
    DeleteTransactionCommand,
]
