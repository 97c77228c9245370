"""
Translate loosely-typed listing filters into a normalized JobQuery.

Pure functions only: no session, no I/O. The repository turns a JobQuery
into SQL; the service turns the count it gets back into pagination metadata.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from app.config import settings
from app.errors import ValidationError
from app.schemas.job import PaginationMeta
from app.utils.dates import format_ts, parse_iso8601

logger = logging.getLogger(__name__)

JOB_STATUSES = ("OPEN", "CLOSED", "ON_HOLD")
TEXT_FILTER_FIELDS = (
    "job_title", "job_description", "designation", "location",
    "mode", "experience", "salary",
)
DATE_FILTER_FIELDS = ("joining_date", "open_till")
SORTABLE_FIELDS = (
    "job_title", "designation", "location", "mode", "experience", "salary",
    "vacancy", "joining_date", "open_till", "status", "created_at",
)
SORT_ORDERS = ("asc", "desc")
DEFAULT_SORT_BY = "joining_date"
DEFAULT_SORT_ORDER = "desc"

# camelCase keys are what the web clients send; snake_case is accepted too.
_SORT_BY_KEYS = ("sortBy", "sort_by")
_SORT_ORDER_KEYS = ("sortOrder", "sort_order")
KNOWN_KEYS = frozenset(
    TEXT_FILTER_FIELDS + DATE_FILTER_FIELDS + _SORT_BY_KEYS + _SORT_ORDER_KEYS
    + ("vacancy", "status", "owner_id", "page", "limit")
)
# SQLite INTEGER is a signed 64-bit value.
MAX_SQL_INT = 2**63 - 1


@dataclass(frozen=True)
class JobQuery:
    text: dict[str, str] = field(default_factory=dict)
    vacancy: int | None = None
    joining_date_from: str | None = None
    open_till_from: str | None = None
    status: str | None = None
    owner_id: str | None = None
    page: int = 1
    limit: int = 10
    sort_by: str = DEFAULT_SORT_BY
    sort_order: str = DEFAULT_SORT_ORDER

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def effective_filters(self) -> dict[str, str | int]:
        """Echo back every filter that differs from the defaults."""
        echoed: dict[str, str | int] = dict(self.text)
        if self.vacancy is not None:
            echoed["vacancy"] = self.vacancy
        if self.joining_date_from:
            echoed["joining_date"] = self.joining_date_from
        if self.open_till_from:
            echoed["open_till"] = self.open_till_from
        if self.status:
            echoed["status"] = self.status
        if self.owner_id:
            echoed["owner_id"] = self.owner_id
        if self.page != 1:
            echoed["page"] = self.page
        if self.limit != settings.default_page_size:
            echoed["limit"] = self.limit
        if self.sort_by != DEFAULT_SORT_BY:
            echoed["sortBy"] = self.sort_by
        if self.sort_order != DEFAULT_SORT_ORDER:
            echoed["sortOrder"] = self.sort_order
        return echoed


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _first_present(raw: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if not _is_blank(raw.get(key)):
            return raw[key]
    return None


def parse_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer", fields=[name])
    if isinstance(value, int):
        parsed = value
    else:
        try:
            parsed = int(str(value).strip())
        except ValueError:
            raise ValidationError(f"{name} must be an integer", fields=[name]) from None
    if not -MAX_SQL_INT - 1 <= parsed <= MAX_SQL_INT:
        raise ValidationError(f"{name} is out of range", fields=[name])
    return parsed


def parse_date_field(name: str, value: Any) -> str:
    try:
        return format_ts(parse_iso8601(value))
    except ValueError:
        raise ValidationError(
            f"Invalid {name} format. Use ISO 8601 format", fields=[name]
        ) from None


def build_job_query(raw: Mapping[str, Any] | None = None) -> JobQuery:
    """Normalize a flat filter mapping; absent or blank values mean no filter."""
    raw = raw or {}
    ignored = sorted(set(raw) - KNOWN_KEYS)
    if ignored:
        logger.debug("Ignoring unknown job filter keys: %s", ignored)

    text = {
        name: str(raw[name]).strip()
        for name in TEXT_FILTER_FIELDS
        if not _is_blank(raw.get(name))
    }

    vacancy = None
    if not _is_blank(raw.get("vacancy")):
        vacancy = parse_int("vacancy", raw["vacancy"])

    dates = {
        name: parse_date_field(name, raw[name])
        for name in DATE_FILTER_FIELDS
        if not _is_blank(raw.get(name))
    }

    status = None
    if not _is_blank(raw.get("status")):
        status = str(raw["status"]).strip().upper()
        if status not in JOB_STATUSES:
            raise ValidationError(
                f"Invalid status. Must be one of: {', '.join(JOB_STATUSES)}",
                fields=["status"],
            )

    owner_id = None
    if not _is_blank(raw.get("owner_id")):
        owner_id = str(raw["owner_id"]).strip()

    page = 1
    if not _is_blank(raw.get("page")):
        page = parse_int("page", raw["page"])
        if page < 1:
            raise ValidationError("page must be at least 1", fields=["page"])

    limit = settings.default_page_size
    if not _is_blank(raw.get("limit")):
        limit = parse_int("limit", raw["limit"])
        if not 1 <= limit <= settings.max_page_size:
            raise ValidationError(
                f"limit must be between 1 and {settings.max_page_size}",
                fields=["limit"],
            )
    if (page - 1) * limit > MAX_SQL_INT:
        raise ValidationError("page is out of range", fields=["page"])

    sort_by = DEFAULT_SORT_BY
    requested_sort = _first_present(raw, _SORT_BY_KEYS)
    if requested_sort is not None:
        sort_by = str(requested_sort).strip()
        if sort_by not in SORTABLE_FIELDS:
            raise ValidationError(
                f"Cannot sort by '{sort_by}'. Must be one of: {', '.join(SORTABLE_FIELDS)}",
                fields=["sortBy"],
            )

    sort_order = DEFAULT_SORT_ORDER
    requested_order = _first_present(raw, _SORT_ORDER_KEYS)
    if requested_order is not None:
        sort_order = str(requested_order).strip().lower()
        if sort_order not in SORT_ORDERS:
            raise ValidationError("sortOrder must be 'asc' or 'desc'", fields=["sortOrder"])

    return JobQuery(
        text=text,
        vacancy=vacancy,
        joining_date_from=dates.get("joining_date"),
        open_till_from=dates.get("open_till"),
        status=status,
        owner_id=owner_id,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )


def build_pagination(total_count: int, page: int, limit: int) -> PaginationMeta:
    total_pages = math.ceil(total_count / limit)
    return PaginationMeta(
        current_page=page,
        total_pages=total_pages,
        total_count=total_count,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )
