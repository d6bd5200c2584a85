from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from meter.functional import Maybe, Nothing


class CategoryType(str, Enum):
    EXPENSE = "expense"    # money; unused budget rolls forward
    QUANTITY = "quantity"  # counted units
    CUSTOM = "custom"      # any other metered quantity


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    type: CategoryType
    unit: str  # currency code for expenses
    base_budget: Maybe[float] = field(default=Nothing())     # expense only
    monthly_target: Maybe[float] = field(default=Nothing())  # quantity/custom only
    color: str = ""
    created_at: Maybe[datetime] = field(default=Nothing())


@dataclass(frozen=True)
class Entry:
    id: str
    category_id: str
    date: date  # bucketing key
    value: float
    created_at: datetime  # tie-break only
    note: str = ""


@dataclass(frozen=True)
class CategoryBreakdown:
    category: Category
    value: float
    available_budget: Maybe[float] = field(default=Nothing())
    carryover: Maybe[float] = field(default=Nothing())
    progress: Maybe[float] = field(default=Nothing())


@dataclass(frozen=True)
class MonthSummary:
    key: str  # "YYYY-MM"
    label: str
    total_expense: float
    base_budget: float
    carryover: float
    available: float
    categories: tuple[CategoryBreakdown, ...] = ()
