"""Abstract base class for payload normalizers."""

from abc import ABC, abstractmethod
from typing import Any


class Normalizer(ABC):
    """Base class for API payload normalizers.

    Normalizers turn raw JSON from the portal proxy into the typed records of
    ``explore.models``. They are the only place where loosely shaped payloads
    are accepted, so missing required fields fail here instead of travelling
    further into the engine.
    """

    @abstractmethod
    def normalize(self, payload: dict[str, Any]) -> Any:
        """Convert one payload into a record.

        Args:
            payload: Raw JSON object from the API

        Returns:
            The record built from the payload

        Raises:
            ValueError: If the payload is not an object or lacks required fields
        """
        pass

    def normalize_many(self, payloads: Any) -> list:
        """Normalize a JSON array; anything that is not a list is rejected."""
        if not isinstance(payloads, list):
            raise ValueError(f"Expected a list payload, got {type(payloads).__name__}")
        return [self.normalize(item) for item in payloads]

    def _require_object(self, payload: Any) -> dict[str, Any]:
        if not isinstance(payload, dict):
            raise ValueError(f"Expected an object payload, got {type(payload).__name__}")
        return payload

    def _safe_get(self, data: dict[str, Any], *keys: str, default: Any = None) -> Any:
        """Safely navigate nested dictionary keys.

        Example:
            >>> self._safe_get({'commit': {'author': {'name': 'ada'}}}, 'commit', 'author', 'name')
            'ada'
            >>> self._safe_get({'commit': {}}, 'commit', 'author', 'name', default='missing')
            'missing'
        """
        current = data
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current

    def _first(self, data: dict[str, Any], *keys: str, default: Any = None) -> Any:
        """Return the first present, non-null value among alias keys.

        Example:
            >>> self._first({'authorDate': '2024-01-01'}, 'date', 'authorDate')
            '2024-01-01'
        """
        for key in keys:
            value = data.get(key)
            if value is not None and value != "":
                return value
        return default

    def _int(self, value: Any, default: int = 0) -> int:
        """Coerce numeric-looking values to int, falling back to default."""
        if isinstance(value, bool):
            return int(value)
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _text(self, value: Any) -> str | None:
        """Return value when it is a non-empty string, otherwise None."""
        return value if isinstance(value, str) and value else None
