from __future__ import annotations

from typing import Any, Iterator, Mapping

from eos_upror.schema import SCHEMA, describe

FormValue = float | int | str | None


class FormValues(Mapping[str, FormValue]):
    """In-progress record of the calculator form.

    Holds one slot per schema key. ``None`` marks a field the user has not
    filled in yet. Continuous slots may hold a number or the raw text typed in
    the form; categorical slots hold the selected option.

    Example:
        >>> values = FormValues()
        >>> values.set("eos_type", "Idiopathic")
        >>> values["eos_type"]
        'Idiopathic'
        >>> values["age_at_insertion"] is None
        True
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, FormValue] = {key: None for key in SCHEMA}
        if initial:
            self.update(initial)

    def set(self, key: str, value: FormValue) -> None:
        """Set a single field, failing on keys outside the schema."""
        describe(key)
        self._values[key] = value

    def update(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            self.set(key, value)

    def clear(self, key: str) -> None:
        describe(key)
        self._values[key] = None

    def reset(self) -> None:
        """Mark every field as unset again."""
        for key in self._values:
            self._values[key] = None

    def unset_keys(self) -> list[str]:
        return [key for key, value in self._values.items() if value is None]

    def __getitem__(self, key: str) -> FormValue:
        describe(key)
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"FormValues({self._values!r})"
