import pytest
from beanie import PydanticObjectId

from src.commonUtils.errors import NotFoundError, ValidationError
from src.crud.cartService import add_line, decrease_line, merge_lines, remove_line
from src.models.cartModel import CartItem

P1 = PydanticObjectId()
P2 = PydanticObjectId()


def quantities(items):
    return {item.product_id: item.quantity for item in items}


def test_add_to_empty_cart():
    assert quantities(add_line([], P1)) == {P1: 1}


def test_adds_of_same_product_merge():
    items = add_line(add_line([], P1, 2), P1, 3)
    assert len(items) == 1
    assert items[0].quantity == 5


def test_add_rejects_non_positive_quantity():
    with pytest.raises(ValidationError):
        add_line([], P1, 0)


def test_add_does_not_mutate_input():
    items = [CartItem(product_id=P1, quantity=1)]
    add_line(items, P1, 1)
    assert items[0].quantity == 1


def test_decrease_to_zero_removes_line():
    assert decrease_line(add_line([], P1, 1), P1) == []


def test_decrease_keeps_other_lines():
    items = add_line(add_line([], P1, 3), P2, 1)
    assert quantities(decrease_line(items, P1)) == {P1: 2, P2: 1}


def test_decrease_absent_product():
    with pytest.raises(NotFoundError):
        decrease_line([], P1)


def test_remove_is_unconditional_and_idempotent():
    items = add_line([], P1, 4)
    assert remove_line(items, P1) == []
    assert remove_line([], P1) == []


def test_merge_collapses_duplicate_lines():
    items = [CartItem(product_id=P1, quantity=1), CartItem(product_id=P2, quantity=1),
             CartItem(product_id=P1, quantity=2)]
    assert quantities(merge_lines(items)) == {P1: 3, P2: 1}
    assert [item.product_id for item in merge_lines(items)] == [P1, P2]
