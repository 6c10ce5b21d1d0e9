"""
tests/test_client_resolver.py

Find-or-create client resolution against an in-memory database.
"""

from __future__ import annotations

import random
from datetime import date

import pytest
from sqlalchemy.orm import Session

from db.models.client import ACTIVE_CLIENT_STATUS, Client
from intake.entity_resolver import ClientResolver, UNSPECIFIED
from intake.repository import ClientRepository


@pytest.fixture()
def resolver(session: Session, clock, rng: random.Random) -> ClientResolver:
    return ClientResolver(ClientRepository(session), clock=clock, rng=rng)


class TestIdentify:
    def test_reads_owner_details_through_aliases(self, resolver: ClientResolver) -> None:
        identity = resolver.identify(
            {
                "Name": "Ali",
                "ID": 1234567890.0,
                "Mobile": "0501234567",
                "Birth Date": "1980-05-01",
                "Village": "Al Khalidiya",
            }
        )

        assert identity.name == "Ali"
        assert identity.national_id == "1234567890"
        assert identity.phone == "0501234567"
        assert identity.birth_date == date(1980, 5, 1)
        assert identity.village == "Al Khalidiya"
        assert identity.is_complete

    def test_incomplete_identity(self, resolver: ClientResolver) -> None:
        assert not resolver.identify({"Name": "Ali", "ID": "1234567890"}).is_complete


class TestResolve:
    def test_same_national_id_resolves_to_same_client(self, session: Session, resolver: ClientResolver) -> None:
        row = {"Name": "Ali", "ID": "1234567890", "Phone": "0501234567"}

        first = resolver.resolve(row, "u1")
        second = resolver.resolve(dict(row), "u1")

        assert first.id == second.id
        assert ClientRepository(session).count() == 1

    def test_complete_identity_matches_on_any_key(self, session: Session, resolver: ClientResolver) -> None:
        original = resolver.resolve({"Name": "Ali", "ID": "1234567890", "Phone": "0501234567"}, None)

        matched = resolver.resolve({"Name": "Ali Hassan", "ID": "9999999999", "Phone": "0501234567"}, None)

        assert matched.id == original.id

    def test_national_id_alone_is_used_for_lookup(self, session: Session, resolver: ClientResolver) -> None:
        original = resolver.resolve({"Name": "Ali", "ID": "1234567890", "Phone": "0501234567"}, None)

        matched = resolver.resolve({"ID": "1234567890"}, None)

        assert matched.id == original.id

    def test_name_alone_never_matches(self, session: Session, resolver: ClientResolver) -> None:
        resolver.resolve({"Name": "Ali", "ID": "1234567890", "Phone": "0501234567"}, None)

        created = resolver.resolve({"Name": "Ali"}, None)

        assert created.national_id != "1234567890"
        assert ClientRepository(session).count() == 2

    def test_placeholders_for_missing_owner(self, resolver: ClientResolver) -> None:
        client = resolver.resolve({"Location": "Wadi Farm", "Serial No": "V9"}, "u1")

        assert client.name == "مربي Wadi Farm"
        assert len(client.national_id) == 10
        assert client.national_id.isdigit()
        assert len(client.phone) == 9
        assert client.phone.startswith("5")
        assert client.village == "Wadi Farm"
        assert client.status == ACTIVE_CLIENT_STATUS
        assert client.created_by == "u1"

    def test_placeholder_name_prefers_serial_over_unspecified(self, resolver: ClientResolver) -> None:
        assert resolver.resolve({"Serial No": "V9"}, None).name == "مربي V9"
        assert resolver.resolve({}, None).name == f"مربي {UNSPECIFIED}"

    def test_placeholder_national_id_comes_from_clock(self, resolver: ClientResolver) -> None:
        # 2025-03-14T09:26:53.589Z in epoch milliseconds is 1741944413589.
        assert resolver.placeholder_national_id() == "1741944413"

    def test_custom_default_status(self, session: Session, clock) -> None:
        resolver = ClientResolver(ClientRepository(session), default_status="inactive", clock=clock)

        client = resolver.resolve({"Name": "Ali"}, None)

        assert client.status == "inactive"
        assert session.get(Client, client.id) is client
