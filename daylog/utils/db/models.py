# daylog/utils/db/models.py
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional
from dataclasses import asdict, dataclass, fields
from datetime import date, datetime


class BaseModel:
    def asdict(self) -> dict:
        """
        Convert dataclass to dict, but keep raw types (Enum, date, datetime) for internal use.
        """
        return asdict(self)

    def to_dict(self) -> dict:
        """
        Convert dataclass to JSON-serializable dict:
         - Enum fields → their .value
         - date/datetime fields → ISO-format strings
         - Nested dataclasses: also converted recursively
        """
        result = {}
        for f in fields(self.__class__):
            result[f.name] = _serialize(getattr(self, f.name))
        return result

    def __repr__(self):
        cname = self.__class__.__name__
        fields_str = ', '.join(f"{k}={v!r}" for k, v in self.to_dict().items())
        return f"{cname}({fields_str})"


def _serialize(val: Any) -> Any:
    if val is None:
        return None
    if isinstance(val, Enum):
        return val.value
    if isinstance(val, (datetime, date)):
        return val.isoformat()
    if hasattr(val, "to_dict") and callable(val.to_dict):
        return val.to_dict()
    if isinstance(val, (list, tuple)):
        return [_serialize(item) for item in val]
    if isinstance(val, dict):
        return {k: _serialize(v) for k, v in val.items()}
    return val


def _parse_datetime(val: Any) -> Optional[datetime]:
    if val is None or isinstance(val, datetime):
        return val
    try:
        return datetime.fromisoformat(val)
    except (TypeError, ValueError):
        return None


def _parse_date(val: Any) -> Optional[date]:
    if val is None:
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    try:
        return date.fromisoformat(str(val)[:10])
    except ValueError:
        return None


@dataclass(repr=False)
class CategoryGroup(BaseModel):
    id: Optional[int] = None
    uid: Optional[str] = None
    name: str = ""
    color_hex: str = "#8E8E93"
    sort_order: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(repr=False)
class Category(BaseModel):
    id: Optional[int] = None
    uid: Optional[str] = None
    name: str = ""
    icon: str = "circle.fill"
    sort_order: int = 0
    group_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(repr=False)
class HourLog(BaseModel):
    """
    One hour block [hour, hour + 1) of a calendar day.
    `rating` is a generic numeric score; what it measures is up to the user.
    """
    id: Optional[int] = None
    uid: Optional[str] = None
    day: Optional[date] = None
    hour: int = 0
    notes: str = ""
    rating: Optional[float] = None
    category_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_logged(self) -> bool:
        return self.category_id is not None


def get_group_fields() -> List[str]:
    # Exclude 'id' (auto-incremented primary key)
    return [f.name for f in fields(CategoryGroup) if f.name != "id"]


def get_category_fields() -> List[str]:
    return [f.name for f in fields(Category) if f.name != "id"]


def get_hour_log_fields() -> List[str]:
    return [f.name for f in fields(HourLog) if f.name != "id"]


def group_from_row(row: Dict[str, Any]) -> CategoryGroup:
    return CategoryGroup(
        id=row.get("id"),
        uid=row.get("uid"),
        name=row.get("name") or "",
        color_hex=row.get("color_hex") or "#8E8E93",
        sort_order=int(row.get("sort_order") or 0),
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
    )


def category_from_row(row: Dict[str, Any]) -> Category:
    return Category(
        id=row.get("id"),
        uid=row.get("uid"),
        name=row.get("name") or "",
        icon=row.get("icon") or "circle.fill",
        sort_order=int(row.get("sort_order") or 0),
        group_id=row.get("group_id"),
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
    )


def hour_log_from_row(row: Dict[str, Any]) -> HourLog:
    kwargs = {}
    for field in fields(HourLog):
        name = field.name
        val = row.get(name)
        if name == "day":
            kwargs[name] = _parse_date(val)
        elif name in ("created_at", "updated_at"):
            kwargs[name] = _parse_datetime(val)
        elif name == "rating":
            kwargs[name] = float(val) if val is not None else None
        elif name == "hour":
            kwargs[name] = int(val) if val is not None else 0
        elif name == "notes":
            kwargs[name] = val or ""
        else:
            kwargs[name] = val
    return HourLog(**kwargs)


class CategoryIndex:
    """
    Read-only lookup over the group/category hierarchy, keyed by id.
    A category whose group_id points at a missing group is treated as ungrouped.
    """

    def __init__(self, groups: Iterable[CategoryGroup] = (), categories: Iterable[Category] = ()):
        self._groups = {g.id: g for g in groups}
        self._categories = {c.id: c for c in categories}

    @property
    def groups(self) -> List[CategoryGroup]:
        return sorted(self._groups.values(), key=lambda g: (g.sort_order, g.id or 0))

    @property
    def categories(self) -> List[Category]:
        return sorted(self._categories.values(), key=lambda c: (c.sort_order, c.id or 0))

    def category(self, category_id: Optional[int]) -> Optional[Category]:
        if category_id is None:
            return None
        return self._categories.get(category_id)

    def group(self, group_id: Optional[int]) -> Optional[CategoryGroup]:
        if group_id is None:
            return None
        return self._groups.get(group_id)

    def group_for_category(self, category_id: Optional[int]) -> Optional[CategoryGroup]:
        cat = self.category(category_id)
        if cat is None:
            return None
        return self.group(cat.group_id)

    def group_by_name(self, name: str) -> Optional[CategoryGroup]:
        wanted = (name or "").strip().lower()
        for g in self.groups:
            if g.name.lower() == wanted:
                return g
        return None

    def category_by_name(self, name: str) -> Optional[Category]:
        wanted = (name or "").strip().lower()
        for c in self.categories:
            if c.name.lower() == wanted:
                return c
        return None

    def categories_in_group(self, group_id: int) -> List[Category]:
        return [c for c in self.categories if c.group_id == group_id]
