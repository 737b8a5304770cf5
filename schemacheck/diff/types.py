"""Change codes, categories and the change event record."""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class ChangeCode(str, Enum):
    """Every kind of structural difference the differ can report."""

    TYPE_ADDED = "TYPE_ADDED"
    TYPE_REMOVED = "TYPE_REMOVED"
    TYPE_KIND_CHANGED = "TYPE_KIND_CHANGED"
    FIELD_ADDED = "FIELD_ADDED"
    FIELD_REMOVED = "FIELD_REMOVED"
    FIELD_CHANGED_KIND = "FIELD_CHANGED_KIND"
    FIELD_DEPRECATION_ADDED = "FIELD_DEPRECATION_ADDED"
    FIELD_DEPRECATION_REMOVED = "FIELD_DEPRECATION_REMOVED"
    ARG_ADDED = "ARG_ADDED"
    ARG_REMOVED = "ARG_REMOVED"
    ARG_CHANGED_KIND = "ARG_CHANGED_KIND"
    ARG_DEFAULT_VALUE_CHANGE = "ARG_DEFAULT_VALUE_CHANGE"
    ENUM_VALUE_ADDED = "ENUM_VALUE_ADDED"
    ENUM_VALUE_REMOVED = "ENUM_VALUE_REMOVED"
    UNION_MEMBER_ADDED = "UNION_MEMBER_ADDED"
    UNION_MEMBER_REMOVED = "UNION_MEMBER_REMOVED"
    INVALID_SCHEMA = "INVALID_SCHEMA"


class ChangeCategory(str, Enum):
    """Coarse shape of a change."""

    ADDITION = "ADDITION"
    UPDATE = "UPDATE"
    REMOVAL = "REMOVAL"


CATEGORY_BY_CODE: MappingProxyType[ChangeCode, ChangeCategory] = MappingProxyType(
    {
        ChangeCode.TYPE_ADDED: ChangeCategory.ADDITION,
        ChangeCode.TYPE_REMOVED: ChangeCategory.REMOVAL,
        ChangeCode.TYPE_KIND_CHANGED: ChangeCategory.UPDATE,
        ChangeCode.FIELD_ADDED: ChangeCategory.ADDITION,
        ChangeCode.FIELD_REMOVED: ChangeCategory.REMOVAL,
        ChangeCode.FIELD_CHANGED_KIND: ChangeCategory.UPDATE,
        ChangeCode.FIELD_DEPRECATION_ADDED: ChangeCategory.UPDATE,
        ChangeCode.FIELD_DEPRECATION_REMOVED: ChangeCategory.UPDATE,
        ChangeCode.ARG_ADDED: ChangeCategory.ADDITION,
        ChangeCode.ARG_REMOVED: ChangeCategory.REMOVAL,
        ChangeCode.ARG_CHANGED_KIND: ChangeCategory.UPDATE,
        ChangeCode.ARG_DEFAULT_VALUE_CHANGE: ChangeCategory.UPDATE,
        ChangeCode.ENUM_VALUE_ADDED: ChangeCategory.ADDITION,
        ChangeCode.ENUM_VALUE_REMOVED: ChangeCategory.REMOVAL,
        ChangeCode.UNION_MEMBER_ADDED: ChangeCategory.ADDITION,
        ChangeCode.UNION_MEMBER_REMOVED: ChangeCategory.REMOVAL,
        ChangeCode.INVALID_SCHEMA: ChangeCategory.UPDATE,
    }
)


def categorize(code: ChangeCode, required_argument: bool = False) -> ChangeCategory:
    """Look up the category of a change code.

    Adding a required argument breaks callers that omit it, so it is an
    UPDATE rather than an ADDITION.
    """
    if code == ChangeCode.ARG_ADDED and required_argument:
        return ChangeCategory.UPDATE
    return CATEGORY_BY_CODE[code]


@dataclass(frozen=True)
class ChangeEvent:
    """One atomic structural difference between two schema versions."""

    code: ChangeCode
    category: ChangeCategory
    path: str
    description: str

    @classmethod
    def create(
        cls,
        code: ChangeCode,
        path: str,
        description: str,
        required_argument: bool = False,
    ) -> "ChangeEvent":
        """Create an event whose category comes from the code table."""
        return cls(
            code=code,
            category=categorize(code, required_argument),
            path=path,
            description=description,
        )

    @property
    def usage_coordinate(self) -> str:
        """Coordinate whose usage decides how risky this change is.

        A newly added argument has no usage of its own; what matters is
        whether anyone calls the field it was added to.
        """
        if self.code == ChangeCode.ARG_ADDED:
            return self.path.rsplit(".", 1)[0]
        return self.path

    def to_dict(self) -> dict[str, str]:
        return {
            "code": self.code.value,
            "category": self.category.value,
            "path": self.path,
            "description": self.description,
        }

    def __str__(self) -> str:
        return f"{self.code.value} {self.path}: {self.description}"
