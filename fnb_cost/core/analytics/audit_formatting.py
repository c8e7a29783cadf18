"""
Human-readable rendering of audit log details.

Audit ``details`` are JSON objects whose shape depends on the writer:
``created``/``deleted`` snapshots, ``before``/``after`` pairs with a
``changes`` map, bulk operation counters or report export metadata. This
module turns them into the multi-line text used in the CSV export.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List, Mapping

FIELD_NAMES = {
    "is_active": "Status",
    "property_id": "Property",
    "outlet_id": "Outlet",
    "category_id": "Category",
    "user_id": "User",
    "created_by": "Created By",
    "updated_by": "Updated By",
    "created_at": "Created Date",
    "updated_at": "Updated Date",
    "total_cost": "Total Cost",
    "outlet_code": "Outlet Code",
    "property_code": "Property Code",
    "category_name": "Category Name",
    "access_level": "Access Level",
    "granted_at": "Granted Date",
    "granted_by": "Granted By",
    "phone_number": "Phone Number",
    "last_login_at": "Last Login",
}

_ISO_DATETIME = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")
_MONEY_HINTS = ("cost", "revenue", "price")
_STRUCTURAL_KEYS = {"changes", "created", "deleted", "before", "after", "bulk_operation"}


def format_field_name(name: str) -> str:
    """``snake_case`` or ``camelCase`` key to a display label."""
    if name in FIELD_NAMES:
        return FIELD_NAMES[name]
    spaced = re.sub(r"([A-Z])", r" \1", name).replace("_", " ").strip()
    return spaced[:1].upper() + spaced[1:]


def _format_datetime(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{moment.strftime('%b')} {moment.day}, {moment.year} {hour}:{moment.minute:02d} {suffix}"


def format_value(value: Any, context: str = "") -> str:
    """Render one detail value, using ``context`` (the field name) for hints."""
    if value is None:
        return "None"
    if isinstance(value, bool):
        if context == "is_active":
            return "Active" if value else "Inactive"
        return "Yes" if value else "No"
    if isinstance(value, datetime):
        return _format_datetime(value)
    if isinstance(value, str):
        if _ISO_DATETIME.match(value):
            try:
                return _format_datetime(datetime.fromisoformat(value.replace("Z", "+00:00")))
            except ValueError:
                return value
        return value
    if isinstance(value, (int, float)):
        if any(hint in context.lower() for hint in _MONEY_HINTS):
            sign = "-" if value < 0 else ""
            return f"{sign}${abs(value):,.2f}"
        return str(value)
    if isinstance(value, Mapping):
        for key in ("name", "email", "title"):
            if value.get(key):
                return str(value[key])
        if value.get("id") and value.get("description"):
            return f"{value['description']} (ID: {value['id']})"
        if value.get("id"):
            return f"ID: {value['id']}"
    return str(value)


def _item_label(item: Any, field: str) -> str:
    if not isinstance(item, Mapping):
        return str(item)
    if "detail" in field.lower() and item.get("category_name") and item.get("cost"):
        return f"{item['category_name']}: {format_value(item['cost'], 'cost')}"
    for key in ("name", "title", "category_name", "description", "email"):
        if item.get(key):
            return str(item[key])
    if item.get("id"):
        return f"ID: {item['id']}"
    return "Item"


def _array_change(before: Any, after: Any, field: str) -> List[str]:
    before = before or []
    after = after or []
    diff = len(after) - len(before)
    plural = "s" if abs(diff) > 1 else ""
    if diff > 0:
        summary = f"Added {diff} item{plural} ({len(before)} → {len(after)})"
    elif diff < 0:
        summary = f"Removed {abs(diff)} item{plural} ({len(before)} → {len(after)})"
    else:
        summary = f"Modified items ({len(after)} total)"

    before_ids = {i.get("id") for i in before if isinstance(i, Mapping) and i.get("id")}
    after_ids = {i.get("id") for i in after if isinstance(i, Mapping) and i.get("id")}
    moves = [
        f"added: {_item_label(i, field)}"
        for i in after
        if isinstance(i, Mapping) and i.get("id") and i["id"] not in before_ids
    ]
    moves += [
        f"removed: {_item_label(i, field)}"
        for i in before
        if isinstance(i, Mapping) and i.get("id") and i["id"] not in after_ids
    ]
    lines = [f"  • {format_field_name(field)}: {summary}"]
    if moves:
        lines.append(f"    {', '.join(moves)}")
    return lines


def _object_change(before: Any, after: Any, field: str) -> List[str]:
    if not before or not after:
        summary = "Object removed" if before else "Object added"
        return [f"  • {format_field_name(field)}: {summary}"]
    changed = [
        format_field_name(key)
        for key in dict.fromkeys([*before.keys(), *after.keys()])
        if before.get(key) != after.get(key) and key not in ("created_at", "updated_at", "id")
    ]
    summary = f"Modified {len(changed)} field{'s' if len(changed) > 1 else ''}" if changed else "Object updated"
    lines = [f"  • {format_field_name(field)}: {summary}"]
    if changed:
        lines.append(f"    Changed: {', '.join(changed)}")
    return lines


def _format_changes(changes: Mapping[str, Any]) -> List[str]:
    lines = [f"Changes ({len(changes)}):"]
    for field, change in changes.items():
        before = change.get("from") if isinstance(change, Mapping) else None
        after = change.get("to") if isinstance(change, Mapping) else None
        if isinstance(before, list) or isinstance(after, list):
            lines.extend(_array_change(before, after, field))
        elif isinstance(before, Mapping) or isinstance(after, Mapping):
            lines.extend(_object_change(before, after, field))
        else:
            lines.append(f"  • {format_field_name(field)}: {format_value(before, field)} → {format_value(after, field)}")
    return lines


def _snapshot(title: str, data: Mapping[str, Any]) -> List[str]:
    return [title] + [f"  • {format_field_name(k)}: {format_value(v, k)}" for k, v in data.items()]


def format_details(details: Any) -> str:
    """Render audit ``details`` as export text.

    Returns:
        Multi-line text, an empty string for no details, or
        ``"No additional details"`` for an object that yields no lines
    """
    if not isinstance(details, Mapping):
        return str(details) if details else ""

    sections: List[str] = []
    if isinstance(details.get("changes"), Mapping):
        sections.extend(_format_changes(details["changes"]))

    created = details.get("created") or (details.get("after") if not details.get("before") else None)
    if isinstance(created, Mapping):
        sections.extend(_snapshot("Created Data:", created))

    deleted = details.get("deleted") or (details.get("before") if not details.get("after") else None)
    if isinstance(deleted, Mapping):
        sections.extend(_snapshot("Deleted Data:", deleted))

    if details.get("bulk_operation"):
        total = details.get("total_items") or 0
        success = details.get("success_count") or 0
        sections.append("Bulk Operation:")
        sections.append(f"  • Total Items: {total}")
        sections.append(f"  • Successful: {success}")
        sections.append(f"  • Failed: {details.get('failure_count') or 0}")
        if total:
            sections.append(f"  • Success Rate: {round(success / total * 100)}%")

    if details.get("report_type"):
        sections.append("Report Export:")
        sections.append(f"  • Type: {details['report_type']}")
        if details.get("filters"):
            sections.append("  • Filters Applied: Yes")
        if details.get("exported_at"):
            sections.append(f"  • Exported At: {format_value(details['exported_at'])}")

    if not sections:
        extra: Dict[str, Any] = {k: v for k, v in details.items() if k not in _STRUCTURAL_KEYS}
        sections.extend(_snapshot("Additional Information:", extra))

    return "\n".join(sections) if sections else "No additional details"
