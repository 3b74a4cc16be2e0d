"""Environment-backed settings for the tenant retrieval core."""

import logging
import os
from typing import Any

_TRUE_LITERALS = ("true", "1", "yes", "on")
_FALSE_LITERALS = ("false", "0", "no", "off")


class HelperConfig:
    """Typed access to environment variables.

    Keys are upper-cased before lookup. A variable that is unset, empty or only
    whitespace is treated as missing: the getter then returns `default`, or
    raises ValueError when no default was given.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _read_raw(self, key: str) -> str | None:
        raw = (os.getenv(key.upper()) or "").strip()
        return raw or None

    def _missing(self, key: str, default: Any) -> Any:
        if default is None:
            raise ValueError(f"Environment variable '{key.upper()}' is not set.")
        return default

    def has_val(self, key: str) -> bool:
        return self._read_raw(key) is not None

    def get_string_val(self, key: str, default: str | None = None) -> str:
        """Stripped string value of `key`."""
        raw = self._read_raw(key)
        return raw if raw is not None else self._missing(key, default)

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Numeric value of `key`: int unless the literal contains a dot.

        Raises:
            ValueError: If the key is missing without default or does not parse.
        """
        raw = self._read_raw(key)
        if raw is None:
            return self._missing(key, default)
        try:
            return float(raw) if "." in raw else int(raw)
        except ValueError:
            raise ValueError(f"Environment variable '{key.upper()}' is not a valid number: '{raw}'.")

    def get_positive_int_val(self, key: str, default: int | None = None) -> int:
        """Whole number > 0, used for sizes and limits ("2.0" is accepted, "2.5" is not)."""
        number = self.get_number_val(key, default=default)
        if isinstance(number, float) and not number.is_integer():
            raise ValueError(f"Environment variable '{key.upper()}' must be an integer, got '{number}'.")
        if int(number) <= 0:
            raise ValueError(f"Environment variable '{key.upper()}' must be a positive integer, got {int(number)}.")
        return int(number)

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        """Boolean value of `key`.

        Accepts true/1/yes/on and false/0/no/off, case-insensitive. Anything
        else raises ValueError, even when a default is given.
        """
        raw = self._read_raw(key)
        if raw is None:
            return self._missing(key, default)
        literal = raw.lower()
        if literal in _TRUE_LITERALS:
            return True
        if literal in _FALSE_LITERALS:
            return False
        raise ValueError(f"Environment variable '{key.upper()}' is not a valid boolean: '{raw}'.")

    def get_list_val(self, key: str, default: list[str] | None = None, separator: str = ",", element_type: type = str) -> list:
        """List value written as "[a,b,c]".

        Args:
            key (str): Variable name.
            default (list[str] | None): Returned when the variable is missing.
            separator (str): Element delimiter inside the brackets.
            element_type (type): Callable applied to every stripped element.

        Raises:
            ValueError: If the brackets are missing or an element fails to convert.
        """
        raw = self._read_raw(key)
        if raw is None:
            return self._missing(key, default)
        if not (raw.startswith("[") and raw.endswith("]")):
            raise ValueError(f"Environment variable '{key.upper()}' must look like '[a{separator}b]', got '{raw}'.")

        items = [item.strip() for item in raw[1:-1].split(separator)]
        try:
            return [element_type(item) for item in items if item]
        except ValueError as e:
            raise ValueError(f"Environment variable '{key.upper()}' has an element that is not {element_type.__name__}: {e}")

    def get_logger(self) -> logging.Logger:
        return self._logger
