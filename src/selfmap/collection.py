import sys
import numbers
import functools
from collections.abc import Mapping
from typing import Any, Callable, Iterable, Iterator, TextIO
import structlog
from structlog import get_logger
from .exceptions import ItemNotFound

log = get_logger()

# argument types that has()/delete() treat as a key rather than a record
KEY_TYPES = (str, bytes, numbers.Number)


def _debug(event: str, **kw: Any) -> None:
    # silent until the application configures structlog (e.g. via load_config)
    if structlog.is_configured():
        log.debug(event, **kw)


class KeyedCollection:
    """
    An ordered collection of records keyed by the live value of one field.

    The key is never stored: every lookup reads ``unique_property`` from the
    records as they are now, so mutating that field on a stored record
    changes its key in place.  Lookups are linear scans over the backing list.

    Records may be mappings (key read with ``record.get(field)``) or any
    object with attributes, e.g. pydantic models (``getattr(record, field)``).
    A field the record lacks gives a ``None`` key.

    ``add`` keeps keys unique, but two records can still end up sharing a key
    if their fields are changed outside the collection; lookups then return
    whichever comes first.

    Not thread safe.  Callers sharing a collection across threads must
    provide their own locking.
    """

    def __init__(self, records: Iterable[Any] | None, unique_property: str):
        if records is None:
            records = []
        elif not isinstance(records, list):
            records = list(records)
        self._records: list[Any] = records
        self._unique_property = unique_property

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._unique_property}, size={self.size})"

    def __str__(self) -> str:
        return self.to_string()

    @property
    def unique_property(self) -> str:
        return self._unique_property

    @property
    def size(self) -> int:
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def key_of(self, record: Any) -> Any:
        """
        Return the current key of a record, read from its unique property.
        """
        if isinstance(record, Mapping):
            return record.get(self._unique_property)
        return getattr(record, self._unique_property, None)

    @staticmethod
    def is_key(value: Any) -> bool:
        # bool is a Number, but True == 1 would match an int key
        return isinstance(value, KEY_TYPES) and not isinstance(value, bool)

    def _index_of_key(self, key: Any) -> int:
        for index, record in enumerate(self._records):
            if self.key_of(record) == key:
                return index
        return -1

    def _index_of_record(self, record: Any) -> int:
        for index, stored in enumerate(self._records):
            if stored is record:
                return index
        return -1

    # section: lookup #########################################################

    def get(self, key: Any, default: Any = None) -> Any:
        """
        Return the first record whose key equals ``key``, or ``default``.
        """
        for record in self._records:
            if self.key_of(record) == key:
                return record
        return default

    def __getitem__(self, key: Any) -> Any:
        index = self._index_of_key(key)
        if index == -1:
            raise ItemNotFound(f"{key} not found by {self._unique_property}")
        return self._records[index]

    def has_key(self, key: Any) -> bool:
        return self._index_of_key(key) != -1

    def has_record(self, record: Any) -> bool:
        return self._index_of_record(record) != -1

    def has(self, key_or_record: Any) -> bool:
        """
        Check for a key (str, bytes or a non-bool number) or for a record by identity.

        A record is only found if that exact object is stored; an equal copy
        or a different record with the same key does not count.
        """
        if self.is_key(key_or_record):
            return self.has_key(key_or_record)
        return self.has_record(key_or_record)

    def __contains__(self, key_or_record: Any) -> bool:
        return self.has(key_or_record)

    # section: mutation #######################################################

    def add(self, record: Any) -> "KeyedCollection":
        """
        Add a record, replacing any other record that has the same key.

        Adding a record that is already stored does nothing.  A replaced
        record keeps its position.  Returns the collection for chaining.
        """
        if self.has_record(record):
            return self

        key = self.key_of(record)
        index = self._index_of_key(key)
        if index == -1:
            self._records.append(record)
        else:
            _debug("record replaced", key=key, index=index)
            self._records[index] = record
        return self

    def add_records(self, records: Iterable[Any]) -> "KeyedCollection":
        for record in records:
            self.add(record)
        return self

    def delete_key(self, key: Any) -> Any:
        """
        Remove the first record with ``key`` and return it, or None.
        """
        index = self._index_of_key(key)
        if index == -1:
            return None
        _debug("record deleted", key=key, index=index)
        return self._records.pop(index)

    def delete_record(self, record: Any) -> Any:
        """
        Remove ``record`` (matched by identity) and return the key it held, or None.
        """
        index = self._index_of_record(record)
        if index == -1:
            return None
        key = self.key_of(self._records.pop(index))
        _debug("record deleted", key=key, index=index)
        return key

    def delete(self, key_or_record: Any) -> Any:
        """
        Delete by key or by record.

        Deleting by key returns the removed record; deleting by record
        returns the key it held.  Either returns None if nothing matched.
        """
        if self.is_key(key_or_record):
            return self.delete_key(key_or_record)
        return self.delete_record(key_or_record)

    def clear(self) -> None:
        # rebind rather than empty in place: the constructor's list is the caller's
        _debug("collection cleared", size=len(self._records))
        self._records = []

    # section: iteration ######################################################

    def keys(self) -> Iterator[Any]:
        for record in self._records:
            yield self.key_of(record)

    def values(self) -> Iterator[Any]:
        yield from self._records

    def entries(self) -> Iterator[tuple[Any, Any]]:
        for record in self._records:
            yield self.key_of(record), record

    def __iter__(self) -> Iterator[tuple[Any, Any]]:
        return self.entries()

    def for_each(
        self,
        callback: Callable[[Any, Any, "KeyedCollection"], None],
        this_arg: Any = None,
    ) -> None:
        """
        Call ``callback(record, key, collection)`` for each record in order.

        If ``this_arg`` is given it is passed as the callback's first argument,
        so an unbound method can be called against another object.
        """
        if this_arg is not None:
            callback = functools.partial(callback, this_arg)
        for record in self._records:
            callback(record, self.key_of(record), self)

    # section: rendering ######################################################

    def to_string(self) -> str:
        name = self.__class__.__name__
        if not self._records:
            return f"{name}({self.size}) {{}}"
        lines = [f"{name}({self.size}) {{"]
        for key, record in self.entries():
            lines.append(f"  {key} => {record}")
        lines.append("}")
        return "\n".join(lines)

    def print(self, file: TextIO | None = None) -> None:
        print(self.to_string(), file=file or sys.stderr)

    def log(self, file: TextIO | None = None) -> None:
        """
        Alias for print().
        """
        self.print(file)
