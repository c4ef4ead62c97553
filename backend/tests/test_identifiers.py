"""
Junkick Backend — Identifier Resolution Tests
===============================================

What:  Reference-id parsing, legacy-id classification, and owner resolution
       against a real database.
"""

import uuid

import pytest

from junkick.exceptions import InvalidReferenceError
from junkick.services.identifiers import (
    LegacyNumericId,
    OwnerRef,
    ReferenceId,
    classify,
    parse_reference,
    resolve_owner_ref,
)


class TestParsing:

    def test_parse_reference(self):
        value = uuid.uuid4()
        assert parse_reference(f"  {value} ") == value

    @pytest.mark.parametrize("raw", ["", "abc", "42", "not-a-uuid-at-all"])
    def test_invalid_reference(self, raw):
        with pytest.raises(InvalidReferenceError) as exc_info:
            parse_reference(raw, "project")
        assert exc_info.value.code == "INVALID_ID"
        assert exc_info.value.status_code == 400

    def test_classify_legacy(self):
        assert classify("42") == LegacyNumericId(42)

    def test_classify_reference(self):
        value = uuid.uuid4()
        assert classify(str(value)) == ReferenceId(value)

    def test_empty_owner_ref_has_no_filter(self):
        assert OwnerRef(reference_id=None, legacy_id=None).project_filter() is None


class TestResolveOwnerRef:

    @pytest.mark.asyncio
    async def test_legacy_id_finds_reference(self, db_session, make_user):
        user = await make_user(db_session, legacy_id=7)
        ref = await resolve_owner_ref(db_session, "7")
        assert ref == OwnerRef(reference_id=user.id, legacy_id=7)

    @pytest.mark.asyncio
    async def test_reference_id_finds_legacy(self, db_session, make_user):
        user = await make_user(db_session, legacy_id=11)
        ref = await resolve_owner_ref(db_session, str(user.id))
        assert ref == OwnerRef(reference_id=user.id, legacy_id=11)

    @pytest.mark.asyncio
    async def test_unknown_legacy_id_keeps_legacy_half(self, db_session):
        ref = await resolve_owner_ref(db_session, "999")
        assert ref.reference_id is None
        assert ref.legacy_id == 999
        assert ref.project_filter() is not None
