"""Account domain service."""

from dataclasses import replace
from decimal import Decimal
from typing import Optional

import structlog

from fintrack.domain.entities import Account, AccountType
from fintrack.domain.entity_store import EntityStore
from fintrack.domain.errors import (
    DependencyError,
    DuplicateNameError,
    NotFoundError,
    ValidationError,
    account_not_found,
    delete_blocked,
)
from fintrack.utils.amount_parser import to_money
from fintrack.utils.clock import IdGenerator

logger = structlog.get_logger(__name__)


class AccountService:
    """Service for managing accounts."""

    def __init__(self, store: EntityStore, ids: IdGenerator):
        """Initialize account service.

        Args:
            store: Entity store owning all collections
            ids: Identifier generator for new accounts
        """
        self.store = store
        self.ids = ids

    def create_account(
        self,
        name: str,
        account_type: AccountType = AccountType.BANK,
        balance: Decimal = Decimal("0"),
        currency: str = "USD",
    ) -> Account:
        """Create a new account.

        Args:
            name: Account name
            account_type: Kind of account
            balance: Opening balance
            currency: Three-letter currency code

        Returns:
            Created account

        Raises:
            ValidationError: If name or currency is invalid
            DuplicateNameError: If account name already exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Account name is required", field="name")
        self._check_unique(name)
        currency = self._check_currency(currency)
        try:
            balance = to_money(balance)
        except ValueError:
            raise ValidationError(f"Invalid opening balance '{balance}'", field="balance")

        account = Account(
            id=self.ids.new_id(),
            name=name,
            account_type=self._check_type(account_type),
            balance=balance,
            currency=currency,
        )
        self.store.put_account(account)
        logger.info("account_created", account_id=account.id, name=name)
        return account

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.store.get_account(account_id)

    def list_accounts(self) -> list[Account]:
        """List all accounts in creation order."""
        return self.store.list_accounts()

    def update_account(
        self,
        account_id: str,
        name: Optional[str] = None,
        account_type: Optional[AccountType] = None,
        currency: Optional[str] = None,
    ) -> Account:
        """Update account details. The balance is owned by transactions and can't be set here.

        Raises:
            NotFoundError: If account not found
            DuplicateNameError: If the new name already exists
        """
        account = self.store.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        changes = {}
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Account name is required", field="name")
            self._check_unique(name, exclude_id=account_id)
            changes["name"] = name
        if account_type is not None:
            changes["account_type"] = self._check_type(account_type)
        if currency is not None:
            changes["currency"] = self._check_currency(currency)

        account = replace(account, **changes)
        self.store.put_account(account)
        return account

    def delete_account(self, account_id: str) -> Account:
        """Delete an account.

        Raises:
            NotFoundError: If account not found
            DependencyError: If transactions still reference the account
        """
        account = self.store.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        transaction_count = sum(
            1 for txn in self.store.list_transactions() if txn.account_id == account_id
        )
        if transaction_count > 0:
            raise DependencyError(delete_blocked("account", account.name, transaction_count))

        self.store.remove_account(account_id)
        logger.info("account_deleted", account_id=account_id)
        return account

    def _check_unique(self, name: str, exclude_id: Optional[str] = None) -> None:
        for acc in self.store.list_accounts():
            if acc.id != exclude_id and acc.name == name:
                raise DuplicateNameError(f"Account with name '{name}' already exists", field="name")

    def _check_type(self, account_type) -> AccountType:
        try:
            return AccountType(account_type)
        except ValueError:
            raise ValidationError(f"Unknown account type: {account_type}", field="type")

    def _check_currency(self, currency: str) -> str:
        currency = (currency or "").strip().upper()
        if len(currency) != 3 or not currency.isalpha():
            raise ValidationError(f"Invalid currency code '{currency}'", field="currency")
        return currency
