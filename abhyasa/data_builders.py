"""Habit and habit-log record builders.

This module is the SINGLE SOURCE OF TRUTH for:
- Record field defaults
- Business rule validation of habit configuration
- Mapping camelCase store documents to canonical snake_case records

### Mapping Functions
Documents in the hosted store use camelCase keys (`startDate`, `habitId`)
and carry legacy spellings (comparison aliases, the mobile `count` field).
`map_document_to_habit_data()` / `map_document_to_log_data()` translate them
into the records the engines consume.

### Validation Functions
`validate_habit_data()` returns a dict of errors ({field: error_key}), empty
when the data is valid. It never raises.

### Build Functions
`build_habit()` / `build_habit_log()` return complete records ready for the
caller to persist. They raise HabitValidationError on invalid input.

Nothing here persists anything. Callers own storage.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any, cast
import uuid

from . import const
from .engines.status_engine import StatusEngine
from .type_defs import HabitData, HabitFrequencyData, HabitLogData
from .utils.dt_utils import dt_day_key, dt_to_day, dt_today_local

# ==============================================================================
# HELPER FUNCTIONS FOR FIELD NORMALIZATION
# ==============================================================================


def _normalize_list_field(value: Any) -> list[Any]:
    """Normalize a field that should be a list.

    This prevents bugs like list("abc") → ['a', 'b', 'c'].
    """
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    if isinstance(value, str):
        return [value] if value else []
    return list(value) if value else []


def _normalize_number(value: Any) -> float | None:
    """Return value as float, None when absent or not numeric."""
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _normalize_timestamp(value: Any) -> str | None:
    """Return an ISO string for a date/datetime/string input, None if unparseable.

    Plain days stay plain days ("2026-01-18"); timestamps keep their time and
    offset so the engines can normalize them to the local day later.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        return value.strip() if dt_to_day(value) is not None else None
    return None


def _normalize_frequency(raw: Any) -> HabitFrequencyData:
    """Normalize a stored frequency into the tagged-variant record.

    Accepts the dict form ({"type": "weekly", "times": 3}) or a bare type
    string ("daily"). Unknown shapes keep their type so validation can
    report them.
    """
    if isinstance(raw, str):
        raw = {const.DATA_FREQUENCY_TYPE: raw}
    if not isinstance(raw, Mapping):
        raw = {}

    frequency_type = str(raw.get(const.DATA_FREQUENCY_TYPE) or "").strip().lower()
    frequency: dict[str, Any] = {const.DATA_FREQUENCY_TYPE: frequency_type}

    if frequency_type == const.FREQUENCY_SPECIFIC_DAYS:
        days: list[int] = []
        for day in _normalize_list_field(raw.get(const.DATA_FREQUENCY_DAYS)):
            try:
                days.append(int(day))
            except (TypeError, ValueError):
                days.append(-1)  # reported by validation
        frequency[const.DATA_FREQUENCY_DAYS] = sorted(set(days))
    elif frequency_type in const.QUOTA_FREQUENCIES:
        times = raw.get(const.DATA_FREQUENCY_TIMES, const.DEFAULT_FREQUENCY_TIMES)
        try:
            frequency[const.DATA_FREQUENCY_TIMES] = int(times)
        except (TypeError, ValueError):
            frequency[const.DATA_FREQUENCY_TIMES] = 0  # reported by validation

    return cast(HabitFrequencyData, frequency)


# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class HabitValidationError(Exception):
    """Validation error with field-specific information for form highlighting.

    Attributes:
        field: The DATA_* key of the field that failed
        error_key: The ERROR_* constant describing the failure
        placeholders: Optional values for the error message

    Example:
        raise HabitValidationError(
            field=const.DATA_HABIT_DAILY_TARGET,
            error_key=const.ERROR_INVALID_DAILY_TARGET,
            placeholders={"value": "-3"},
        )
    """

    def __init__(
        self,
        field: str,
        error_key: str,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize HabitValidationError."""
        self.field = field
        self.error_key = error_key
        self.placeholders = placeholders or {}
        super().__init__(error_key)


# ==============================================================================
# DOCUMENT MAPPING
# ==============================================================================

_HABIT_DOCUMENT_KEYS: dict[str, str] = {
    const.DOC_HABIT_START_DATE: const.DATA_HABIT_START_DATE,
    const.DOC_HABIT_END_DATE: const.DATA_HABIT_END_DATE,
    const.DOC_HABIT_DAILY_TARGET: const.DATA_HABIT_DAILY_TARGET,
    const.DOC_HABIT_DAILY_TARGET_COMPARISON: const.DATA_HABIT_DAILY_TARGET_COMPARISON,
    const.DOC_HABIT_TOTAL_TARGET: const.DATA_HABIT_TOTAL_TARGET,
    const.DOC_HABIT_TOTAL_TARGET_COMPARISON: const.DATA_HABIT_TOTAL_TARGET_COMPARISON,
}

_LOG_DOCUMENT_KEYS: dict[str, str] = {
    const.DOC_LOG_HABIT_ID: const.DATA_LOG_HABIT_ID,
    const.DOC_LOG_COMPLETED_CHECKLIST_ITEMS: const.DATA_LOG_COMPLETED_CHECKLIST_ITEMS,
}


def _rename_keys(document: Mapping[str, Any], mapping: Mapping[str, str]) -> dict[str, Any]:
    """Copy a document, renaming camelCase keys. Existing snake_case keys win."""
    data: dict[str, Any] = {}
    for key, value in document.items():
        target = mapping.get(key, key)
        if target != key and target in document:
            continue
        data[target] = value
    return data


def map_document_to_habit_data(document: Mapping[str, Any]) -> dict[str, Any]:
    """Map a stored habit document to canonical record keys.

    Frequency and comparison spellings are normalized; other fields are
    passed through untouched.
    """
    data = _rename_keys(document, _HABIT_DOCUMENT_KEYS)
    data[const.DATA_HABIT_FREQUENCY] = _normalize_frequency(
        data.get(const.DATA_HABIT_FREQUENCY)
    )
    for key in (
        const.DATA_HABIT_DAILY_TARGET_COMPARISON,
        const.DATA_HABIT_TOTAL_TARGET_COMPARISON,
    ):
        if data.get(key):
            data[key] = StatusEngine.normalize_comparison(data[key])
    return data


def map_document_to_log_data(document: Mapping[str, Any]) -> dict[str, Any]:
    """Map a stored log document to canonical record keys.

    The legacy mobile `count` field becomes `value` when no value is set.
    A stored `status` is dropped: the engines always recompute it.
    """
    data = _rename_keys(document, _LOG_DOCUMENT_KEYS)
    legacy_count = data.pop(const.DOC_LOG_COUNT_LEGACY, None)
    if data.get(const.DATA_LOG_VALUE) is None and legacy_count is not None:
        data[const.DATA_LOG_VALUE] = legacy_count
    data.pop(const.DATA_LOG_STATUS_LEGACY, None)
    return data


# ==============================================================================
# HABITS
# ==============================================================================


def validate_habit_data(data: Mapping[str, Any]) -> dict[str, str]:
    """Validate habit business rules - SINGLE SOURCE OF TRUTH.

    Works with canonical record keys.

    Args:
        data: Habit data dict (already mapped from the document if needed)

    Returns:
        Dict of errors: {field: error_key}. Empty dict means validation passed.

    Validation Rules:
        1. Type is one of the known habit types
        2. Frequency type is known
        3. Weekly/monthly `times` >= 1
        4. Specific days non-empty and within 0..6
        5. start_date parseable
        6. end_date parseable and not before start_date
        7. daily_target / total_target non-negative numbers
        8. Comparisons known (after alias resolution)
    """
    errors: dict[str, str] = {}

    # === 1. Type ===
    if data.get(const.DATA_HABIT_TYPE) not in const.HABIT_TYPE_OPTIONS:
        errors[const.DATA_HABIT_TYPE] = const.ERROR_INVALID_HABIT_TYPE

    # === 2-4. Frequency ===
    frequency = _normalize_frequency(data.get(const.DATA_HABIT_FREQUENCY))
    frequency_type = frequency.get(const.DATA_FREQUENCY_TYPE)
    if frequency_type not in const.FREQUENCY_OPTIONS:
        errors[const.DATA_HABIT_FREQUENCY] = const.ERROR_INVALID_FREQUENCY
    elif frequency_type in const.QUOTA_FREQUENCIES:
        if frequency.get(const.DATA_FREQUENCY_TIMES, 0) < 1:
            errors[const.DATA_HABIT_FREQUENCY] = const.ERROR_INVALID_FREQUENCY_TIMES
    elif frequency_type == const.FREQUENCY_SPECIFIC_DAYS:
        days = frequency.get(const.DATA_FREQUENCY_DAYS, [])
        if not days or any(
            not const.WEEKDAY_SUNDAY <= day <= const.WEEKDAY_SATURDAY for day in days
        ):
            errors[const.DATA_HABIT_FREQUENCY] = const.ERROR_INVALID_FREQUENCY_DAYS

    # === 5-6. Window ===
    start_day = dt_to_day(data.get(const.DATA_HABIT_START_DATE))
    if start_day is None:
        errors[const.DATA_HABIT_START_DATE] = const.ERROR_INVALID_START_DATE
    raw_end = data.get(const.DATA_HABIT_END_DATE)
    if raw_end:
        end_day = dt_to_day(raw_end)
        if end_day is None or (start_day is not None and end_day < start_day):
            errors[const.DATA_HABIT_END_DATE] = const.ERROR_END_BEFORE_START

    # === 7. Targets ===
    for key, error_key in (
        (const.DATA_HABIT_DAILY_TARGET, const.ERROR_INVALID_DAILY_TARGET),
        (const.DATA_HABIT_TOTAL_TARGET, const.ERROR_INVALID_TOTAL_TARGET),
    ):
        raw = data.get(key)
        if raw is None or raw == "":
            continue
        number = _normalize_number(raw)
        if number is None or number < 0:
            errors[key] = error_key

    # === 8. Comparisons ===
    for key in (
        const.DATA_HABIT_DAILY_TARGET_COMPARISON,
        const.DATA_HABIT_TOTAL_TARGET_COMPARISON,
    ):
        raw = data.get(key)
        if not raw:
            continue
        key_value = str(raw).strip().lower()
        resolved = const.COMPARISON_ALIASES.get(key_value, key_value)
        if resolved not in const.COMPARISON_OPTIONS:
            errors[key] = const.ERROR_INVALID_COMPARISON

    return errors


def build_habit(
    user_input: Mapping[str, Any],
    existing: HabitData | None = None,
) -> HabitData:
    """Build habit data for create or update operations.

    One function handles both create (existing=None) and update.

    Args:
        user_input: Data with canonical keys (may have missing fields)
        existing: None for create, existing HabitData for update

    Returns:
        Complete HabitData ready for storage

    Raises:
        HabitValidationError: On the first field that fails validation

    Examples:
        # CREATE mode - generates UUID, start_date defaults to today
        habit = build_habit({"type": "count", "frequency": {"type": "daily"},
                             "daily_target": 8})

        # UPDATE mode - preserves existing fields not in user_input
        habit = build_habit({"daily_target": 10}, existing=old_habit)
    """

    def get_field(data_key: str, default: Any) -> Any:
        """Get field value: user_input > existing > default."""
        if data_key in user_input:
            return user_input[data_key]
        if existing is not None:
            return existing.get(data_key, default)
        return default

    merged: dict[str, Any] = {
        const.DATA_HABIT_TYPE: get_field(const.DATA_HABIT_TYPE, const.HABIT_TYPE_BINARY),
        const.DATA_HABIT_FREQUENCY: _normalize_frequency(
            get_field(
                const.DATA_HABIT_FREQUENCY,
                {const.DATA_FREQUENCY_TYPE: const.FREQUENCY_DAILY},
            )
        ),
        const.DATA_HABIT_START_DATE: get_field(const.DATA_HABIT_START_DATE, None)
        or dt_today_local().isoformat(),
        const.DATA_HABIT_END_DATE: get_field(const.DATA_HABIT_END_DATE, None),
        const.DATA_HABIT_DAILY_TARGET: get_field(const.DATA_HABIT_DAILY_TARGET, None),
        const.DATA_HABIT_DAILY_TARGET_COMPARISON: get_field(
            const.DATA_HABIT_DAILY_TARGET_COMPARISON, None
        ),
        const.DATA_HABIT_TOTAL_TARGET: get_field(const.DATA_HABIT_TOTAL_TARGET, None),
        const.DATA_HABIT_TOTAL_TARGET_COMPARISON: get_field(
            const.DATA_HABIT_TOTAL_TARGET_COMPARISON, None
        ),
    }

    errors = validate_habit_data(merged)
    if errors:
        field, error_key = next(iter(errors.items()))
        raise HabitValidationError(
            field=field,
            error_key=error_key,
            placeholders={"value": str(merged.get(field))},
        )

    if existing is None:
        habit_id = str(user_input.get(const.DATA_HABIT_ID) or uuid.uuid4())
    else:
        habit_id = existing.get(const.DATA_HABIT_ID) or str(uuid.uuid4())

    checklist = [
        {
            const.DATA_CHECKLIST_ITEM_ID: str(
                item.get(const.DATA_CHECKLIST_ITEM_ID) or uuid.uuid4()
            ),
            const.DATA_CHECKLIST_ITEM_TEXT: str(
                item.get(const.DATA_CHECKLIST_ITEM_TEXT, "")
            ).strip(),
        }
        for item in _normalize_list_field(get_field(const.DATA_HABIT_CHECKLIST, []))
        if isinstance(item, Mapping)
    ]

    daily_comparison = merged[const.DATA_HABIT_DAILY_TARGET_COMPARISON]
    total_comparison = merged[const.DATA_HABIT_TOTAL_TARGET_COMPARISON]

    return HabitData(
        id=habit_id,
        title=str(get_field(const.DATA_HABIT_TITLE, "")).strip(),
        type=merged[const.DATA_HABIT_TYPE],
        frequency=merged[const.DATA_HABIT_FREQUENCY],
        start_date=_normalize_timestamp(merged[const.DATA_HABIT_START_DATE]) or "",
        end_date=_normalize_timestamp(merged[const.DATA_HABIT_END_DATE]),
        daily_target=_normalize_number(merged[const.DATA_HABIT_DAILY_TARGET]),
        daily_target_comparison=(
            StatusEngine.normalize_comparison(daily_comparison)
            if daily_comparison
            else None
        ),
        total_target=_normalize_number(merged[const.DATA_HABIT_TOTAL_TARGET]),
        total_target_comparison=(
            StatusEngine.normalize_comparison(total_comparison)
            if total_comparison
            else None
        ),
        checklist=checklist,  # type: ignore[typeddict-item]
    )


# ==============================================================================
# HABIT LOGS
# ==============================================================================


def build_habit_log(
    habit: HabitData | Mapping[str, Any],
    day: date | datetime | str,
    *,
    value: float | None = None,
    completed_checklist_items: Sequence[str] | None = None,
    notes: str | None = None,
    existing: HabitLogData | None = None,
) -> HabitLogData:
    """Build the log record for one habit on one day.

    The day is normalized to its ISO key. Checklist ids not defined on the
    habit are dropped. No status is written; it is always computed.

    Raises:
        HabitValidationError: If the day cannot be parsed or value is negative.
    """
    log_day = dt_to_day(day)
    if log_day is None:
        raise HabitValidationError(
            field=const.DATA_LOG_DATE,
            error_key=const.ERROR_INVALID_LOG_DATE,
            placeholders={"value": str(day)},
        )

    if value is None and existing is not None:
        value = existing.get(const.DATA_LOG_VALUE)
    number = _normalize_number(value)
    if value is not None and (number is None or number < 0):
        raise HabitValidationError(
            field=const.DATA_LOG_VALUE,
            error_key=const.ERROR_INVALID_LOG_VALUE,
            placeholders={"value": str(value)},
        )

    log = HabitLogData(
        id=(existing or {}).get(const.DATA_LOG_ID) or str(uuid.uuid4()),
        habit_id=habit.get(const.DATA_HABIT_ID, ""),
        date=dt_day_key(log_day),
    )
    if number is not None:
        log[const.DATA_LOG_VALUE] = number  # type: ignore[literal-required]

    if completed_checklist_items is None and existing is not None:
        completed_checklist_items = existing.get(
            const.DATA_LOG_COMPLETED_CHECKLIST_ITEMS
        )
    if completed_checklist_items is not None:
        known_ids = {
            item.get(const.DATA_CHECKLIST_ITEM_ID)
            for item in habit.get(const.DATA_HABIT_CHECKLIST) or []
        }
        seen: list[str] = []
        for item_id in _normalize_list_field(completed_checklist_items):
            if item_id in known_ids and item_id not in seen:
                seen.append(item_id)
        log[const.DATA_LOG_COMPLETED_CHECKLIST_ITEMS] = seen  # type: ignore[literal-required]

    if notes is None and existing is not None:
        notes = existing.get(const.DATA_LOG_NOTES)
    if notes:
        log[const.DATA_LOG_NOTES] = notes  # type: ignore[literal-required]

    return log
