"""Precondition helpers shared by the order translation layers."""

from typing import Iterable, Optional, Type, TypeVar

from lending_sdk.models.exceptions import ObligationShapeError, OrderPreconditionError


T = TypeVar("T")


def check_that(
    condition: bool,
    message: str,
    error_type: Type[OrderPreconditionError] = OrderPreconditionError,
) -> None:
    """Fail fast with a descriptive error when the condition does not hold.

    Args:
        condition: The evaluated precondition.
        message: Human-readable description of the violated expectation.
        error_type: Concrete error class to raise.

    Raises:
        OrderPreconditionError: If ``condition`` is falsy.
    """
    if not condition:
        raise error_type(message)


def check_not_null(value: Optional[T], message: str = "unexpected null value") -> T:
    """Return the value, or fail if it is ``None``."""
    check_that(value is not None, message)
    return value  # type: ignore[return-value]


def get_single_element(items: Iterable[T], item_name: str = "element") -> T:
    """Return the only element of the iterable.

    Raises:
        ObligationShapeError: If there are zero or more than one elements.
    """
    iterator = iter(items)
    try:
        first = next(iterator)
    except StopIteration:
        raise ObligationShapeError("expected exactly one {0}, got none".format(item_name))
    for _ in iterator:
        raise ObligationShapeError("expected exactly one {0}, got more".format(item_name))
    return first
