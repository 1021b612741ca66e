"""Transaction breakdown (sub-item) validation.

``classify_breakdown`` is pure: it compares a transaction amount with the sum
of its sub-items and reports whether they balance. ``BreakdownEditor`` models
the editing session a form goes through: enable with a positive amount, add
and adjust items, and disable through an explicit request/confirm pair.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence

from fintrack.domain.entities import SubItem, SubItemStatus
from fintrack.domain.errors import ValidationError, NotFoundError
from fintrack.utils.amount_parser import positive_amount
from fintrack.utils.clock import IdGenerator, UUIDGenerator

TOLERANCE = Decimal("0.01")


class BreakdownStatus(str, Enum):
    BALANCED = "Balanced"
    UNDER = "Under"
    OVER = "Over"


@dataclass(frozen=True)
class BreakdownResult:
    """Classification of a breakdown against its transaction amount.

    ``difference`` is the remaining amount when UNDER, the excess when OVER
    and the (sub-cent) gap when BALANCED.
    """

    status: BreakdownStatus
    total: Decimal
    difference: Decimal

    @property
    def is_balanced(self) -> bool:
        return self.status == BreakdownStatus.BALANCED

    @property
    def remaining(self) -> Decimal:
        return self.difference if self.status == BreakdownStatus.UNDER else Decimal("0")

    @property
    def excess(self) -> Decimal:
        return self.difference if self.status == BreakdownStatus.OVER else Decimal("0")

    def message(self, amount: Decimal) -> Optional[str]:
        """Human readable explanation of an unbalanced breakdown."""
        if self.status == BreakdownStatus.OVER:
            return (
                f"The breakdown total (${self.total:,.2f}) exceeds the transaction "
                f"amount (${amount:,.2f}). Please adjust."
            )
        if self.status == BreakdownStatus.UNDER:
            return (
                f"The breakdown total (${self.total:,.2f}) is less than the transaction "
                f"amount (${amount:,.2f}). Please adjust."
            )
        return None


def sub_items_total(sub_items: Sequence[SubItem]) -> Decimal:
    return sum((item.amount for item in sub_items), Decimal("0"))


def classify_breakdown(amount: Decimal, sub_items: Sequence[SubItem]) -> BreakdownResult:
    """Compare ``amount`` with the sum of ``sub_items``.

    Amounts closer than one cent are treated as balanced.
    """
    total = sub_items_total(sub_items)
    gap = amount - total
    if abs(gap) < TOLERANCE:
        return BreakdownResult(BreakdownStatus.BALANCED, total, abs(gap))
    if gap > 0:
        return BreakdownResult(BreakdownStatus.UNDER, total, gap)
    return BreakdownResult(BreakdownStatus.OVER, total, -gap)


def validate_sub_items(sub_items: Sequence[SubItem]) -> tuple[SubItem, ...]:
    """Check each sub-item on its own and return them with typed amount and status.

    Raises:
        ValidationError: If an item has no name, a non-positive amount or an unknown status
    """
    checked = []
    for index, item in enumerate(sub_items):
        if not item.name or not str(item.name).strip():
            raise ValidationError(f"Breakdown item {index + 1}: name is required", field="sub_items")
        amount = positive_amount(item.amount)
        if amount is None:
            raise ValidationError(
                f"Breakdown item {index + 1}: amount must be greater than 0", field="sub_items"
            )
        try:
            status = SubItemStatus(item.status)
        except ValueError:
            raise ValidationError(
                f"Breakdown item {index + 1}: unknown status '{item.status}'", field="sub_items"
            )
        checked.append(replace(item, amount=amount, status=status))
    return tuple(checked)


def check_breakdown(
    amount: Decimal, sub_items: Optional[Sequence[SubItem]], confirm_empty: bool = False
) -> tuple[SubItem, ...]:
    """Validate a submitted breakdown and return the sub-items to store.

    Args:
        amount: Transaction amount
        sub_items: Submitted items, or None when breakdown mode is off
        confirm_empty: Caller confirmed that an empty breakdown means "no breakdown"

    Returns:
        Tuple of sub-items (empty when there is no breakdown)

    Raises:
        ValidationError: If the breakdown is unbalanced, has invalid items, or is
            empty without confirmation
    """
    if sub_items is None:
        return ()
    if len(sub_items) == 0:
        if not confirm_empty:
            raise ValidationError(
                f"No breakdown items added. Confirm to record the transaction with a "
                f"total of ${amount:,.2f} and no breakdown.",
                field="sub_items",
            )
        return ()
    sub_items = validate_sub_items(sub_items)
    result = classify_breakdown(amount, sub_items)
    if not result.is_balanced:
        raise ValidationError(result.message(amount), field="amount")
    return sub_items


@dataclass(frozen=True)
class DisableBreakdownIntent:
    """Token returned by ``BreakdownEditor.request_disable``.

    Confirming it clears the listed items and restores ``restore_amount``.
    """

    token: str
    items_to_clear: int
    restore_amount: Decimal


class BreakdownEditor:
    """Editing session for a transaction breakdown.

    While enabled, the transaction amount is fixed at the value it had when
    breakdown mode was switched on; items are checked against it on demand.
    """

    def __init__(
        self,
        amount: Decimal = Decimal("0"),
        sub_items: Sequence[SubItem] = (),
        id_generator: Optional[IdGenerator] = None,
    ):
        self.ids = id_generator or UUIDGenerator()
        self._amount = amount
        self._original_amount = amount
        self._items: list[SubItem] = list(sub_items)
        self._enabled = bool(self._items)
        self._pending_disable: Optional[DisableBreakdownIntent] = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def amount(self) -> Decimal:
        return self._amount

    @property
    def items(self) -> tuple[SubItem, ...]:
        return tuple(self._items)

    def set_amount(self, amount: Decimal) -> None:
        """Change the standalone amount. Refused while breakdown mode is on."""
        if self._enabled:
            raise ValidationError("Amount is calculated from the breakdown", field="amount")
        self._amount = amount
        self._original_amount = amount

    def enable(self) -> SubItem:
        """Switch breakdown mode on and return the first, blank item.

        Raises:
            ValidationError: If the amount is not positive
        """
        if self._amount <= 0:
            raise ValidationError(
                "Please enter a transaction amount before adding breakdown.", field="amount"
            )
        self._original_amount = self._amount
        self._enabled = True
        if not self._items:
            return self._append_blank()
        return self._items[0]

    def _append_blank(self) -> SubItem:
        item = SubItem(id=self.ids.new_id(), name="", amount=Decimal("0"))
        self._items.append(item)
        return item

    def _require_enabled(self) -> None:
        if not self._enabled:
            raise ValidationError("Breakdown mode is not enabled", field="sub_items")

    def _index(self, item_id: str) -> int:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        raise NotFoundError(f"Breakdown item {item_id} not found", field="sub_items")

    def add_item(
        self, name: str = "", amount: Decimal = Decimal("0"), status: SubItemStatus = SubItemStatus.PAID
    ) -> SubItem:
        self._require_enabled()
        item = SubItem(id=self.ids.new_id(), name=name, amount=amount, status=status)
        self._items.append(item)
        return item

    def update_item(
        self,
        item_id: str,
        name: Optional[str] = None,
        amount: Optional[Decimal] = None,
        status: Optional[SubItemStatus] = None,
    ) -> SubItem:
        self._require_enabled()
        index = self._index(item_id)
        item = self._items[index]
        changes = {}
        if name is not None:
            changes["name"] = name
        if amount is not None:
            changes["amount"] = amount
        if status is not None:
            changes["status"] = status
        self._items[index] = replace(item, **changes)
        return self._items[index]

    def remove_item(self, item_id: str) -> None:
        self._require_enabled()
        del self._items[self._index(item_id)]

    def status(self) -> BreakdownResult:
        """Current classification of the items against the amount."""
        return classify_breakdown(self._amount, self._items)

    def request_disable(self) -> DisableBreakdownIntent:
        """First phase of switching breakdown mode off.

        Nothing changes until the returned intent is confirmed.
        """
        self._require_enabled()
        self._pending_disable = DisableBreakdownIntent(
            token=self.ids.new_id(),
            items_to_clear=len(self._items),
            restore_amount=self._original_amount,
        )
        return self._pending_disable

    def confirm_disable(self, intent: DisableBreakdownIntent) -> Decimal:
        """Second phase: clear all items and restore the standalone amount.

        Raises:
            ValidationError: If ``intent`` is not the pending request
        """
        if self._pending_disable is None or intent.token != self._pending_disable.token:
            raise ValidationError("No matching request to remove the breakdown", field="sub_items")
        self._items = []
        self._enabled = False
        self._amount = intent.restore_amount
        self._pending_disable = None
        return self._amount

    def cancel_disable(self) -> None:
        self._pending_disable = None

    def to_sub_items(self, confirm_empty: bool = False) -> Optional[tuple[SubItem, ...]]:
        """Return the sub-items to submit, or None when breakdown mode is off.

        Raises:
            ValidationError: If the breakdown does not balance, or is empty without
                ``confirm_empty``
        """
        if not self._enabled:
            return None
        items = check_breakdown(self._amount, self._items, confirm_empty=confirm_empty)
        return items or None
