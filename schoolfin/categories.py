import json
import os
from functools import lru_cache
from typing import Mapping, Optional

from schoolfin.config import Settings
from schoolfin.domain import CategoryStyle, LedgerKind
from schoolfin.errors import CategoryCatalogError

__all__ = ["DEFAULT_COLOR_CLASS", "OTHER", "CategoryCatalog", "normalize_code", "load_catalog", "default_catalog"]

DEFAULT_COLOR_CLASS = "bg-gray-100 text-gray-800"
OTHER = "OTHER"

BUNDLED_CATALOG = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "categories.json")


def normalize_code(code: str) -> str:
    """TEACHER_SALARY -> 'Teacher salary'."""
    words = code.replace("_", " ").strip().lower()
    return words[:1].upper() + words[1:]


class CategoryCatalog:
    """Display labels and color classes for ledger categories, per kind."""

    def __init__(self, styles: Mapping[LedgerKind, Mapping[str, CategoryStyle]], default_color_class: str = DEFAULT_COLOR_CLASS):
        self._styles = {LedgerKind(kind): dict(codes) for kind, codes in styles.items()}
        self.default_color_class = default_color_class

    def style(self, kind: LedgerKind, code: Optional[str]) -> Optional[CategoryStyle]:
        return self._styles.get(LedgerKind(kind), {}).get(code or OTHER)

    def label(self, kind: LedgerKind, code: Optional[str]) -> str:
        style = self.style(kind, code)
        if style is not None:
            return style.label
        return normalize_code(code or OTHER)

    def color_class(self, kind: LedgerKind, code: Optional[str]) -> str:
        style = self.style(kind, code)
        return style.color_class if style is not None else self.default_color_class

    def codes(self, kind: LedgerKind) -> tuple[str, ...]:
        return tuple(self._styles.get(LedgerKind(kind), {}))

    @classmethod
    def from_mapping(cls, data: Mapping) -> "CategoryCatalog":
        default_color = data.get("default_color_class", DEFAULT_COLOR_CLASS)
        styles = {}
        for kind in LedgerKind:
            entries = data.get(kind.value, {})
            try:
                styles[kind] = {
                    code: CategoryStyle(
                        label=entry["label"],
                        color_class=entry.get("color_class", default_color),
                    )
                    for code, entry in entries.items()
                }
            except (AttributeError, KeyError, TypeError) as e:
                raise CategoryCatalogError(f"Malformed {kind.value} category entry: {e}") from e
        return cls(styles, default_color_class=default_color)


def load_catalog(path: str = BUNDLED_CATALOG) -> CategoryCatalog:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return CategoryCatalog.from_mapping(data)


@lru_cache(maxsize=None)
def default_catalog() -> CategoryCatalog:
    settings = Settings.from_env()
    return load_catalog(settings.categories_path or BUNDLED_CATALOG)
