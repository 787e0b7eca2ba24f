"""Variant dimension of a stock key.

A stock row belongs either to the base product (no variant dimension) or to one
named variant. Storage keeps a nullable ``variant_name`` column; everywhere else
code works with ``Variant`` values instead of comparing names against None.
"""

from dataclasses import dataclass

from stockledger.exceptions import InvalidArgumentError


@dataclass(frozen=True)
class Variant:
    name: str | None = None

    def __post_init__(self):
        if self.name is not None and not str(self.name).strip():
            raise InvalidArgumentError("Variant name must not be blank")

    @classmethod
    def base(cls) -> "Variant":
        return cls(None)

    @classmethod
    def named(cls, name: str) -> "Variant":
        if name is None:
            raise InvalidArgumentError("Named variant requires a name")
        return cls(str(name).strip())

    @classmethod
    def from_storage(cls, variant_name: str | None) -> "Variant":
        """Decode the nullable storage column (or an API field)."""
        if variant_name is None or not str(variant_name).strip():
            return cls.base()
        return cls.named(variant_name)

    @property
    def is_base(self) -> bool:
        return self.name is None

    def to_storage(self) -> str | None:
        return self.name

    def __str__(self):
        return "base" if self.is_base else self.name
