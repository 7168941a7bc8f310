"""Localisable validation outcome."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ValidationIssue:
    """A failed check, described by a translation key and its parameters."""

    i18n_key: str
    i18n_params: dict = field(default_factory=dict, hash=False)

    ok = False

    def to_dict(self) -> dict:
        return {"ok": False, "i18n_key": self.i18n_key, "i18n_params": dict(self.i18n_params)}
