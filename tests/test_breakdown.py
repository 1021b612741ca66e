"""Tests for breakdown classification and the breakdown editor."""

import pytest
from decimal import Decimal

from fintrack.domain.breakdown import (
    BreakdownEditor,
    BreakdownStatus,
    check_breakdown,
    classify_breakdown,
)
from fintrack.domain.entities import SubItem, SubItemStatus
from fintrack.domain.errors import NotFoundError, ValidationError


def _items(*amounts: str) -> list[SubItem]:
    return [SubItem(id=f"s{i}", name=f"Item {i}", amount=Decimal(a)) for i, a in enumerate(amounts)]


class TestClassifyBreakdown:
    """Tests for classify_breakdown."""

    def test_balanced(self):
        result = classify_breakdown(Decimal("30.00"), _items("20.00", "10.00"))
        assert result.status == BreakdownStatus.BALANCED
        assert result.is_balanced
        assert result.total == Decimal("30.00")

    def test_sub_cent_gap_is_balanced(self):
        result = classify_breakdown(Decimal("30.00"), _items("19.995", "10.00"))
        assert result.is_balanced

    def test_one_cent_gap_is_under(self):
        result = classify_breakdown(Decimal("30.00"), _items("29.99"))
        assert result.status == BreakdownStatus.UNDER
        assert result.remaining == Decimal("0.01")
        assert result.excess == Decimal("0")

    def test_over(self):
        result = classify_breakdown(Decimal("30.00"), _items("25.00", "10.00"))
        assert result.status == BreakdownStatus.OVER
        assert result.excess == Decimal("5.00")
        assert "exceeds" in result.message(Decimal("30.00"))

    def test_balanced_has_no_message(self):
        assert classify_breakdown(Decimal("5"), _items("5")).message(Decimal("5")) is None


class TestCheckBreakdown:
    """Tests for check_breakdown."""

    def test_none_means_no_breakdown(self):
        assert check_breakdown(Decimal("30"), None) == ()

    def test_empty_requires_confirmation(self):
        with pytest.raises(ValidationError) as exc_info:
            check_breakdown(Decimal("30"), [])
        assert exc_info.value.field == "sub_items"
        assert "$30.00" in exc_info.value.message

    def test_empty_confirmed(self):
        assert check_breakdown(Decimal("30"), [], confirm_empty=True) == ()

    def test_unbalanced_rejected_on_amount(self):
        with pytest.raises(ValidationError) as exc_info:
            check_breakdown(Decimal("30"), _items("20"))
        assert exc_info.value.field == "amount"

    def test_item_needs_name(self):
        items = [SubItem(id="s1", name="  ", amount=Decimal("30"))]
        with pytest.raises(ValidationError, match="name is required"):
            check_breakdown(Decimal("30"), items)

    def test_item_needs_positive_amount(self):
        items = _items("30", "0")
        with pytest.raises(ValidationError, match="greater than 0"):
            check_breakdown(Decimal("30"), items)

    def test_returns_tuple(self):
        items = _items("10", "20")
        assert check_breakdown(Decimal("30"), items) == tuple(items)

    def test_stored_strings_normalized(self):
        items = [
            SubItem(id="s1", name="Shirt", amount="20", status="Paid"),
            SubItem(id="s2", name="Socks", amount="10", status="Owed"),
        ]
        result = check_breakdown(Decimal("30"), items)
        assert result[0].amount == Decimal("20.00")
        assert result[1].status is SubItemStatus.OWED

    def test_unknown_status_rejected(self):
        items = [SubItem(id="s1", name="Shirt", amount=Decimal("30"), status="Lost")]
        with pytest.raises(ValidationError) as exc_info:
            check_breakdown(Decimal("30"), items)
        assert exc_info.value.field == "sub_items"


class TestBreakdownEditor:
    """Tests for the two-phase breakdown editing session."""

    def test_enable_requires_amount(self):
        editor = BreakdownEditor(amount=Decimal("0"))
        with pytest.raises(ValidationError, match="enter a transaction amount"):
            editor.enable()
        assert not editor.enabled

    def test_enable_adds_blank_item(self, ids):
        editor = BreakdownEditor(amount=Decimal("30"), id_generator=ids)
        first = editor.enable()
        assert editor.enabled
        assert first == SubItem(id="id-1", name="", amount=Decimal("0"))
        assert editor.status().status == BreakdownStatus.UNDER

    def test_amount_locked_while_enabled(self):
        editor = BreakdownEditor(amount=Decimal("30"))
        editor.enable()
        with pytest.raises(ValidationError):
            editor.set_amount(Decimal("50"))

    def test_edit_and_submit(self, ids):
        editor = BreakdownEditor(amount=Decimal("30"), id_generator=ids)
        first = editor.enable()
        editor.update_item(first.id, name="Shirt", amount=Decimal("20"))
        editor.add_item("Socks", Decimal("10"), SubItemStatus.OWED)

        assert editor.status().is_balanced
        items = editor.to_sub_items()
        assert [item.name for item in items] == ["Shirt", "Socks"]
        assert items[1].status == SubItemStatus.OWED

    def test_balance_break_and_correct(self, ids):
        editor = BreakdownEditor(amount=Decimal("30"), id_generator=ids)
        shirt = editor.enable()
        editor.update_item(shirt.id, name="Shirt", amount=Decimal("20"))
        socks = editor.add_item("Socks", Decimal("10"))
        assert editor.status().status == BreakdownStatus.BALANCED
        assert len(editor.to_sub_items()) == 2

        editor.update_item(socks.id, amount=Decimal("12"))
        assert editor.status().status == BreakdownStatus.OVER
        with pytest.raises(ValidationError) as exc_info:
            editor.to_sub_items()
        assert exc_info.value.field == "amount"

        editor.update_item(socks.id, amount=Decimal("10"))
        assert editor.status().is_balanced
        items = editor.to_sub_items()
        assert [item.amount for item in items] == [Decimal("20.00"), Decimal("10.00")]

    def test_submit_unbalanced_refused(self):
        editor = BreakdownEditor(amount=Decimal("30"))
        first = editor.enable()
        editor.update_item(first.id, name="Shirt", amount=Decimal("20"))
        with pytest.raises(ValidationError):
            editor.to_sub_items()

    def test_remove_unknown_item(self):
        editor = BreakdownEditor(amount=Decimal("30"))
        editor.enable()
        with pytest.raises(NotFoundError):
            editor.remove_item("missing")

    def test_disabled_editor_submits_none(self):
        assert BreakdownEditor(amount=Decimal("30")).to_sub_items() is None

    def test_request_disable_changes_nothing(self):
        editor = BreakdownEditor(amount=Decimal("30"), sub_items=_items("10", "20"))
        intent = editor.request_disable()
        assert intent.items_to_clear == 2
        assert editor.enabled
        assert len(editor.items) == 2

    def test_confirm_disable_clears_items_and_restores_amount(self):
        editor = BreakdownEditor(amount=Decimal("30"), sub_items=_items("10", "20"))
        intent = editor.request_disable()
        restored = editor.confirm_disable(intent)
        assert restored == Decimal("30")
        assert not editor.enabled
        assert editor.items == ()

    def test_confirm_requires_matching_token(self):
        editor = BreakdownEditor(amount=Decimal("30"), sub_items=_items("30"))
        intent = editor.request_disable()
        editor.cancel_disable()
        with pytest.raises(ValidationError):
            editor.confirm_disable(intent)
        assert editor.enabled
