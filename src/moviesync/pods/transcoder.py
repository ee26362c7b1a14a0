"""
Pods transcoder: local catalog rows <-> WordPress REST payloads.

Pure functions, no I/O. Both directions are driven by the PodSchema field
list, so there is no per-entity code here.

Outgoing payload shape:

    {
        "title": "Samurai Cop",
        "slug": "samurai-cop",          # only for pods with a slug column
        "status": "publish",
        "meta": {"movie_title": "Samurai Cop", "movie_year": "1991", ...},
    }

Empty values (None, "", []) are left out of "meta" so a partial local row
never blanks a value that only exists on the WordPress side.

Incoming payloads are decoded into a plain dict of local column values. With
full=False (update) only the fields WordPress actually sent are returned; with
full=True (new local row) every mapped column is present, None when missing.
"""
import html
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from moviesync.errors import TranscodeError
from moviesync.pods.schema import FieldKind, FieldMapping, PodSchema

# Pods stores an unset date as all zeroes
_EMPTY_DATES = {"0000-00-00", "0000-00-00 00:00:00"}


def _is_empty(value: Any) -> bool:
    return value is None or value is False or value == "" or value == [] or value == {}


# ─── Local → remote ───────────────────────────────────────────────────────────

def to_remote_format(schema: PodSchema, entity: Any) -> Dict[str, Any]:
    """Build the WordPress create/update body for a local row."""
    meta: Dict[str, Any] = {}
    for mapping in schema.fields:
        value = getattr(entity, mapping.local_name, None)
        if _is_empty(value):
            continue
        meta[mapping.remote_name] = _encode(mapping, value)

    payload: Dict[str, Any] = {"status": "publish", "meta": meta}
    title = getattr(entity, schema.title_field, None)
    if not _is_empty(title):
        payload["title"] = str(title)
    if schema.slug_field:
        slug = getattr(entity, schema.slug_field, None)
        if not _is_empty(slug):
            payload["slug"] = slug
    return payload


def _encode(mapping: FieldMapping, value: Any) -> Any:
    if mapping.kind == FieldKind.DATE:
        return _encode_date(mapping, value)
    if mapping.kind in (FieldKind.REPEATABLE_TEXT, FieldKind.RELATIONSHIP_PICK):
        return _encode_list(mapping, value)
    return _coerce_scalar(mapping, value)


def _encode_date(mapping: FieldMapping, value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        return _parse_date(mapping, value).isoformat()
    raise TranscodeError(
        f"{mapping.local_name}: expected a date, got {type(value).__name__}"
    )


def _encode_list(mapping: FieldMapping, value: Any) -> List[Any]:
    if isinstance(value, (str, int)):
        return [value]
    if not isinstance(value, (list, tuple)):
        raise TranscodeError(
            f"{mapping.local_name}: expected a list, got {type(value).__name__}"
        )
    items = []
    for item in value:
        if _is_empty(item):
            continue
        if not isinstance(item, (str, int)):
            raise TranscodeError(
                f"{mapping.local_name}: list items must be text or ids, "
                f"got {type(item).__name__}"
            )
        # repeatable text is always sent as strings; picks keep ids as ints
        items.append(str(item) if mapping.kind == FieldKind.REPEATABLE_TEXT else item)
    return items


# ─── Remote → local ───────────────────────────────────────────────────────────

def from_remote_format(
    schema: PodSchema, payload: Dict[str, Any], full: bool = False
) -> Dict[str, Any]:
    """Decode a WordPress record into local column values.

    Args:
        schema: Pod schema of the record.
        payload: JSON object returned by the WordPress REST API.
        full: Return every mapped column (None when absent) instead of only
            the columns WordPress supplied.

    Raises:
        TranscodeError: if the payload or one of its fields has the wrong shape.
    """
    if not isinstance(payload, dict):
        raise TranscodeError(f"{schema.name}: payload is not a JSON object")
    meta = payload.get("meta") or {}
    if not isinstance(meta, dict):
        raise TranscodeError(f"{schema.name}: 'meta' is not a JSON object")

    fields: Dict[str, Any] = {}
    for mapping in schema.fields:
        raw = meta.get(mapping.remote_name)
        value = None if _is_empty(raw) else _decode(mapping, raw)
        if value is not None or full:
            fields[mapping.local_name] = value

    # Post title is the fallback when the pod's own title field is unset
    if fields.get(schema.title_field) is None:
        title = _rendered_title(payload.get("title"))
        if title:
            fields[schema.title_field] = title

    if schema.slug_field:
        slug = payload.get("slug")
        if slug:
            fields[schema.slug_field] = slug
        elif full:
            fields[schema.slug_field] = None
    return fields


def merge_into(entity: Any, fields: Dict[str, Any]) -> Any:
    """Apply decoded fields onto an existing row in place (partial update)."""
    for name, value in fields.items():
        setattr(entity, name, value)
    return entity


def _rendered_title(title: Any) -> Optional[str]:
    if isinstance(title, dict):
        title = title.get("rendered") or title.get("raw")
    if isinstance(title, str) and title.strip():
        return html.unescape(title.strip())
    return None


def _decode(mapping: FieldMapping, raw: Any) -> Any:
    if mapping.kind == FieldKind.REPEATABLE_TEXT:
        return _decode_text_list(mapping, raw)
    if mapping.kind == FieldKind.RELATIONSHIP_PICK:
        return _decode_pick(mapping, raw)

    value = _unwrap(mapping, raw)
    if _is_empty(value):
        return None
    if mapping.kind == FieldKind.DATE:
        if not isinstance(value, str):
            raise TranscodeError(
                f"{mapping.remote_name}: expected a date string, "
                f"got {type(value).__name__}"
            )
        if value.strip() in _EMPTY_DATES:
            return None
        return _parse_date(mapping, value)
    return _coerce_scalar(mapping, value)


def _unwrap(mapping: FieldMapping, raw: Any) -> Any:
    """WordPress returns non-single meta as a list; accept exactly one value."""
    if isinstance(raw, list):
        if len(raw) > 1:
            raise TranscodeError(
                f"{mapping.remote_name}: expected one value, got {len(raw)}"
            )
        return raw[0] if raw else None
    return raw


def _decode_text_list(mapping: FieldMapping, raw: Any) -> List[str]:
    if isinstance(raw, (str, int, float)):
        return [str(raw)]
    if not isinstance(raw, list):
        raise TranscodeError(
            f"{mapping.remote_name}: expected a list, got {type(raw).__name__}"
        )
    out = []
    for item in raw:
        if _is_empty(item):
            continue
        if isinstance(item, (dict, list)):
            raise TranscodeError(f"{mapping.remote_name}: nested values not allowed")
        out.append(str(item))
    return out


def _decode_pick(mapping: FieldMapping, raw: Any) -> List[str]:
    if isinstance(raw, (str, int, dict)):
        raw = [raw]
    if not isinstance(raw, list):
        raise TranscodeError(
            f"{mapping.remote_name}: expected related items, got {type(raw).__name__}"
        )
    out = []
    for item in raw:
        if _is_empty(item):
            continue
        if isinstance(item, dict):
            # Pods expands picks to post objects: {"ID": 77, "post_title": "..."}
            label = item.get("post_title") or item.get("name") or item.get("title")
            if isinstance(label, dict):
                label = label.get("rendered")
            if label is None:
                label = item.get("ID") or item.get("id")
            if label is None:
                raise TranscodeError(
                    f"{mapping.remote_name}: related item has no title or id"
                )
            out.append(html.unescape(str(label)))
        elif isinstance(item, (str, int)):
            out.append(str(item))
        else:
            raise TranscodeError(
                f"{mapping.remote_name}: unsupported related item "
                f"{type(item).__name__}"
            )
    return out


def _coerce_scalar(mapping: FieldMapping, value: Any) -> Any:
    if isinstance(value, (dict, list, tuple)) or isinstance(value, bool):
        raise TranscodeError(
            f"{mapping.local_name}: expected a scalar, got {type(value).__name__}"
        )
    if mapping.python_type is int:
        try:
            return int(str(value).strip())
        except ValueError:
            raise TranscodeError(
                f"{mapping.local_name}: {value!r} is not an integer"
            ) from None
    return value if isinstance(value, str) else str(value)


def _parse_date(mapping: FieldMapping, value: str) -> date:
    text = value.strip()
    try:
        # "YYYY-MM-DD" or "YYYY-MM-DD HH:MM:SS" / "YYYY-MM-DDTHH:MM:SS"
        return datetime.strptime(text[:10], "%Y-%m-%d").date()
    except ValueError:
        raise TranscodeError(
            f"{mapping.local_name}: {value!r} is not a YYYY-MM-DD date"
        ) from None
