# backend/parish_records/services/record_notes.py
"""Rebuild the client-facing ``notes`` JSON document from a record's detail row.

The document layout (camelCase keys) is what the parish frontends render on
record cards and certificates, so keys are kept stable here.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, Optional

from parish_records.services.common import detail_collection, fmt_date, norm_type, to_iso
from parish_records.storage import DocumentStore

Notes = Dict[str, Any]


def _v(row: Dict[str, Any], key: str) -> Any:
    value = row.get(key)
    return value if value not in ("", None) else None


def _register(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "bookNo": _v(row, "book_number"),
        "pageNo": _v(row, "page_number"),
        "lineNo": _v(row, "line_number"),
    }


def _meta(record_id: str, row: Dict[str, Any], created_at: Optional[str], registry: bool = True) -> Dict[str, Any]:
    meta: Dict[str, Any] = {"recordId": record_id}
    if registry:
        meta["registryNo"] = _v(row, "registry_number")
    meta.update(_register(row))
    meta["createdAt"] = created_at
    meta["dateEncoded"] = created_at
    return meta


def _baptism(record_id: str, row: Dict[str, Any], created_at: Optional[str]) -> Notes:
    return {
        "registry": {"registryNo": _v(row, "registry_number"), **_register(row)},
        "child": {
            "fullName": _v(row, "name"),
            "dateOfBirth": fmt_date(row.get("date_of_birth")),
            "placeOfBirth": _v(row, "place_of_birth"),
            "gender": _v(row, "gender"),
            "address": None,
            "legitimacy": None,
        },
        "parents": {
            "father": _v(row, "father_name"),
            "mother": _v(row, "mother_name"),
            "marriageInfo": None,
        },
        "godparents": {
            "godfather1": _v(row, "godfather_name"),
            "godmother1": _v(row, "godmother_name"),
            "godfather2": None,
            "godmother2": None,
        },
        "baptism": {
            "date": fmt_date(row.get("date_of_baptism") or row.get("date")),
            "time": _v(row, "time_of_baptism"),
            "place": _v(row, "place"),
            "minister": _v(row, "minister_name"),
        },
        "metadata": {
            "remarks": None,
            "certificateIssued": False,
            "staffName": None,
            "dateEncoded": created_at,
            "recordId": record_id,
        },
        "attachments": [],
    }


def _marriage(record_id: str, row: Dict[str, Any], created_at: Optional[str]) -> Notes:
    blank_party = {"ageOrDob": None, "civilStatus": None, "religion": None, "address": None, "father": None, "mother": None}
    return {
        "marriage": {
            "date": fmt_date(row.get("date")),
            "place": _v(row, "place"),
            "officiant": _v(row, "officiant_name"),
            "licenseNumber": None,
        },
        "groom": {
            "fullName": _v(row, "groom_name"),
            "ageOrDob": _v(row, "groom_age_or_dob"),
            "civilStatus": _v(row, "groom_civil_status"),
            "religion": _v(row, "groom_religion"),
            "address": _v(row, "groom_address"),
            "father": None,
            "mother": None,
        },
        "bride": {"fullName": _v(row, "bride_name"), **blank_party},
        "witnesses": {
            "witness1": _v(row, "witness1_name"),
            "witness2": _v(row, "witness2_name"),
        },
        "remarks": _v(row, "remarks"),
        "attachments": [],
        "meta": _meta(record_id, row, created_at, registry=False),
    }


def _confirmation(record_id: str, row: Dict[str, Any], created_at: Optional[str]) -> Notes:
    return {
        "confirmand": {
            "fullName": _v(row, "name"),
            # free text (age) or a date; kept as entered
            "dateOfBirth": _v(row, "age_or_dob"),
            "placeOfBirth": _v(row, "place_of_birth"),
            "address": _v(row, "address"),
        },
        "parents": {"father": _v(row, "father_name"), "mother": _v(row, "mother_name")},
        "sponsor": {"fullName": _v(row, "sponsor_name"), "relationship": None},
        "confirmation": {
            "date": fmt_date(row.get("date")),
            "place": _v(row, "place"),
            "officiant": _v(row, "minister_name"),
        },
        "remarks": _v(row, "remarks"),
        "attachments": [],
        "meta": _meta(record_id, row, created_at),
    }


def _death(record_id: str, row: Dict[str, Any], created_at: Optional[str]) -> Notes:
    return {
        "deceased": {
            "fullName": _v(row, "name"),
            "gender": _v(row, "gender"),
            "age": _v(row, "age_or_dob"),
            "dateOfBirth": fmt_date(row.get("date_of_birth")),
            "dateOfDeath": fmt_date(row.get("date")),
            "placeOfDeath": _v(row, "place_of_death"),
            "causeOfDeath": _v(row, "cause_of_death"),
            "civilStatus": _v(row, "civil_status"),
            "address": _v(row, "address"),
        },
        "family": {
            "father": _v(row, "father_name"),
            "mother": _v(row, "mother_name"),
            "spouse": _v(row, "spouse_name"),
        },
        "representative": {
            "name": _v(row, "informant_name"),
            "relationship": _v(row, "informant_relation"),
        },
        "burial": {
            "date": fmt_date(row.get("burial_date")),
            "place": _v(row, "burial_place"),
            "officiant": _v(row, "minister_name"),
        },
        "remarks": None,
        "attachments": [],
        "meta": _meta(record_id, row, created_at),
    }


_BUILDERS: Dict[str, Callable[[str, Dict[str, Any], Optional[str]], Notes]] = {
    "baptism": _baptism,
    "marriage": _marriage,
    "confirmation": _confirmation,
    "death": _death,
}


def build_notes(summary: Dict[str, Any], detail: Optional[Dict[str, Any]]) -> Optional[Notes]:
    """Return the notes document for ``summary`` or None (unknown type / no detail row)."""
    record_id = summary.get("id")
    builder = _BUILDERS.get(norm_type(summary.get("type"), default=""))
    if not record_id or builder is None or not detail:
        return None
    return builder(str(record_id), detail, to_iso(summary.get("created_at")))


def load_notes(store: DocumentStore, summary: Dict[str, Any]) -> Optional[Notes]:
    t = norm_type(summary.get("type"), default="")
    if t not in _BUILDERS or not summary.get("id"):
        return None
    detail = store.get(detail_collection(t), str(summary["id"]))
    return build_notes(summary, detail)


def dumps_notes(notes: Optional[Notes]) -> Optional[str]:
    return json.dumps(notes) if notes is not None else None
