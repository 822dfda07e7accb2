from typing import Any, List

from .enums import FirestoreOperators


class DocumentField:
    """
    Class-level handle on a persisted field, used to build query filters.

    >>> Review.user_id == "demo-user-1"
    ('userId', FirestoreOperators.EQ, 'demo-user-1')

    The tuple carries the *persisted* name (the alias), so filters can be
    written with the Python attribute names. On an instance the stored
    value wins, because the descriptor is non-data.
    """

    def __init__(self, field_name: str):
        self.field_name = field_name

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return getattr(instance, self.field_name, None)

    def __str__(self) -> str:
        return self.field_name

    __repr__ = __str__

    def __hash__(self) -> int:
        return hash(self.field_name)

    def __eq__(self, other):  # type: ignore[override]
        return (self.field_name, FirestoreOperators.EQ, other)

    def __ne__(self, other):  # type: ignore[override]
        return (self.field_name, FirestoreOperators.NE, other)

    def __lt__(self, other):
        return (self.field_name, FirestoreOperators.LT, other)

    def __le__(self, other):
        return (self.field_name, FirestoreOperators.LTE, other)

    def __gt__(self, other):
        return (self.field_name, FirestoreOperators.GT, other)

    def __ge__(self, other):
        return (self.field_name, FirestoreOperators.GTE, other)

    def in_(self, values: List[Any]) -> tuple:
        return (self.field_name, FirestoreOperators.IN, values)

    def not_in_(self, values: List[Any]) -> tuple:
        return (self.field_name, FirestoreOperators.NOT_IN, values)
