import uuid
from typing import Optional, Any
from datetime import datetime, timezone
from collections.abc import Iterator, Mapping, MutableMapping
import jsonpickle
from .conf import (
    SESSION_KEY,
    SESSION_ID
)


class SessionData(MutableMapping[str, Any]):
    """Session-scoped storage.

    Holds values that live exactly as long as the authenticated session:
    the exported vault key is kept here and wiped by ``invalidate()`` on
    logout. Two tabs sharing storage are modelled by handing the same
    instance (or a ``dumps()``/``loads()`` copy) to both.
    """

    _data: dict[str, Any]

    # Internal attributes that should not be stored in _data
    _internal_attrs = frozenset({
        '_data', '_changed', '_id_', '_identity', '_new',
        '_max_age', '_now', '_created'
    })

    def __init__(
        self,
        *,
        data: Optional[Mapping[str, Any]] = None,
        new: bool = False,
        id: Optional[str] = None,
        identity: Optional[Any] = None,
        max_age: Optional[int] = None
    ) -> None:
        object.__setattr__(self, '_data', {})
        # If new, mark as changed so it gets saved
        object.__setattr__(self, '_changed', True if new else False)
        # Unique ID:
        self._id_ = (data.get(SESSION_ID, None) if data else id) or uuid.uuid4().hex
        # Session Identity
        self._identity = (
            data.get(SESSION_KEY, None) if data else identity
        ) or self._id_
        self._new = new if data != {} else True
        self._max_age = max_age or None
        created = data.get('created', None) if data else None
        now = int(datetime.now(timezone.utc).timestamp())
        self._now = now  # time for this instance creation
        age = now - created if created else now
        if max_age is not None and age > max_age:
            # session is over, everything it held is gone.
            data = None
        self._created = now if self._new or created is None else created
        if data is not None:
            self._data.update(
                {k: v for k, v in data.items() if k not in (SESSION_ID, SESSION_KEY, 'created')}
            )

    def __repr__(self) -> str:
        return (
            f'<Vault-Session [new:{self.new}, created:{self.created}] '
            f'keys={list(self._data.keys())}>'
        )

    # --- Properties ---

    @property
    def new(self) -> bool:
        return self._new

    @property
    def session_id(self) -> str:
        return self._id_

    @property
    def identity(self) -> Optional[Any]:  # type: ignore[misc]
        return self._identity

    @property
    def created(self) -> int:
        return self._created

    @property
    def empty(self) -> bool:
        return not bool(self._data)

    @property
    def max_age(self) -> Optional[int]:
        return self._max_age

    @property
    def is_changed(self) -> bool:
        return self._changed

    def invalidate(self) -> None:
        """Clear all session data."""
        self._changed = True
        self._data = {}

    # --- Magic Methods ---

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __contains__(self, key: object) -> bool:
        return str(key) in self._data

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._changed = True

    def __delitem__(self, key: str) -> None:
        del self._data[key]
        self._changed = True

    def __getattr__(self, key: str) -> Any:
        # Avoid infinite recursion for internal attributes
        if key.startswith('_'):
            raise AttributeError(key)
        try:
            return self._data[key]
        except KeyError:
            raise AttributeError(key) from None

    def __setattr__(self, key: str, value: Any) -> None:
        if key in self._internal_attrs or key.startswith('_'):
            object.__setattr__(self, key, value)
        else:
            self[key] = value

    def encode(self, obj: Any) -> str:
        """encode

            Encode an object using jsonpickle.
        Args:
            obj (Any): Object to be encoded using jsonpickle

        Raises:
            RuntimeError: Error converting data to json.

        Returns:
            str: json version of the data
        """
        try:
            return jsonpickle.encode(obj)
        except Exception as err:
            raise RuntimeError(err) from err

    def dumps(self) -> str:
        """Serialize the whole session (id, identity, created and data)."""
        payload = {
            SESSION_ID: self._id_,
            SESSION_KEY: self._identity,
            'created': self._created,
            **self._data
        }
        self._changed = False
        return self.encode(payload)

    @classmethod
    def loads(cls, payload: str, max_age: Optional[int] = None) -> "SessionData":
        """Restore a session previously serialized with ``dumps()``.

        Raises:
            RuntimeError: payload is not a serialized session.
        """
        try:
            data = jsonpickle.decode(payload)
        except Exception as err:
            raise RuntimeError(err) from err
        if not isinstance(data, dict):
            raise RuntimeError(
                f"Invalid session payload: {type(data).__name__}"
            )
        return cls(data=data, max_age=max_age)
