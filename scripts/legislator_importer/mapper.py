"""Map Congress.gov member payloads to legislator rows."""

from __future__ import annotations

from datetime import UTC, datetime

from .schema import LegislatorRecord, RawMember, RawTerm


def _objects(items) -> list[dict]:
    # Null or scalar entries become empty objects
    return [item if isinstance(item, dict) else {} for item in items]


def _terms(raw: RawMember) -> list[RawTerm]:
    terms = raw.get("terms") or []
    # Some API versions wrap the list as {"item": [...]}
    if isinstance(terms, dict):
        terms = terms.get("item") or []
    if not isinstance(terms, list):
        return []
    return _objects(terms)


def to_legislator_record(raw: RawMember, now: datetime | None = None) -> LegislatorRecord:
    """
    Convert one upstream member into a LegislatorRecord.

    Never raises on missing or malformed nested data: absent fields and
    non-object entries in partyHistory or terms become None.

    Party comes from the first partyHistory entry. Chamber and start date
    come from the first term; end date comes from the last term, so the
    record spans the member's whole service window.

    Args:
        raw: Member object from the /member endpoint
        now: Timestamp for last_updated (defaults to current UTC time)

    Returns:
        LegislatorRecord ready for upsert
    """
    party_history = raw.get("partyHistory")
    party_history = _objects(party_history) if isinstance(party_history, list) else []
    first_party = party_history[0] if party_history else {}
    terms = _terms(raw)
    first_term = terms[0] if terms else {}
    last_term = terms[-1] if terms else {}
    depiction = raw.get("depiction")
    depiction = depiction if isinstance(depiction, dict) else {}

    return LegislatorRecord(
        bioguide_id=raw.get("bioguideId"),
        full_name=raw.get("fullName"),
        first_name=raw.get("firstName"),
        last_name=raw.get("lastName"),
        party=first_party.get("partyName"),
        state=raw.get("state"),
        chamber=first_term.get("chamber"),
        congress_start_date=first_term.get("start"),
        congress_end_date=last_term.get("end"),
        url=raw.get("url"),
        image_url=depiction.get("imageUrl"),
        last_updated=now or datetime.now(UTC),
    )
