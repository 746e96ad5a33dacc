import pytest

from medcare.errors import InvalidTransition, ValidationError
from medcare.order_status import check_transition


@pytest.mark.parametrize("current,target", [
    ("Pending", "Processing"),
    ("Pending", "Delivered"),
    ("Processing", "Shipped"),
    ("Shipped", "Delivered"),
    ("Shipped", "Cancelled"),
    ("Delivered", "Delivered"),
    ("Cancelled", "Cancelled"),
])
def test_allowed_transitions(current, target):
    check_transition(current, target)


@pytest.mark.parametrize("current,target", [
    ("Processing", "Pending"),
    ("Delivered", "Shipped"),
    ("Delivered", "Cancelled"),
    ("Cancelled", "Processing"),
])
def test_rejected_transitions(current, target):
    with pytest.raises(InvalidTransition):
        check_transition(current, target)


def test_unknown_status():
    with pytest.raises(ValidationError, match="Invalid status"):
        check_transition("Pending", "Teleported")
