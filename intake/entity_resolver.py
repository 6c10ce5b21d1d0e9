"""
intake/entity_resolver.py

Find-or-create resolution of the client (owner) a row belongs to.

Every row gets a client. When the sheet lacks owner details a placeholder
client is synthesized from the farm location or serial number, so repeated
imports of poor-quality sheets can accumulate near-duplicate clients.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Mapping

from db.models.client import ACTIVE_CLIENT_STATUS, Client
from intake.aliases import CLIENT_FIELD_ALIASES, SHARED_FIELD_ALIASES, FieldAliasSet, build_alias_table
from intake.dates import DateNormalizer
from intake.field_resolver import FieldResolver, Row
from intake.logging_utils import log_event
from intake.repository import ClientRepository

logger = logging.getLogger(__name__)

UNSPECIFIED = "غير محدد"
PLACEHOLDER_NAME_PREFIX = "مربي"
NATIONAL_ID_LENGTH = 10
PHONE_LENGTH = 9


@dataclass(frozen=True)
class ClientIdentity:
    """
    Owner details as they appear in one row, before lookup.
    """

    name: str | None
    national_id: str | None
    phone: str | None
    village: str | None
    address: str | None
    birth_date: date | None
    holding_code: str | None
    farm_location: str | None
    serial_no: str | None

    @property
    def is_complete(self) -> bool:
        return bool(self.name and self.national_id and self.phone)


def _identifier_text(value: Any) -> str | None:
    """Stringify ID-like cells; spreadsheet numbers such as 1012345678.0 lose the '.0'."""

    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


class ClientResolver:
    """
    Resolves or synthesizes the client referenced by a row.

    Lookup policy:
      * name, national ID and phone all present: oldest client matching any of them;
      * otherwise, national ID present: oldest client with that national ID;
      * no match: a new client, with placeholders for whatever is missing.
    """

    def __init__(
        self,
        repository: ClientRepository,
        *,
        field_resolver: FieldResolver | None = None,
        date_normalizer: DateNormalizer | None = None,
        aliases: Mapping[str, FieldAliasSet] | None = None,
        default_status: str = ACTIVE_CLIENT_STATUS,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._repository = repository
        self._fields = field_resolver or FieldResolver()
        self._dates = date_normalizer or DateNormalizer()
        self._aliases = build_alias_table(
            SHARED_FIELD_ALIASES,
            CLIENT_FIELD_ALIASES,
            aliases or {},
        )
        self._default_status = default_status
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._rng = rng or random.Random()

    def identify(self, row: Row) -> ClientIdentity:
        """
        Pull owner details out of a row without touching storage.
        """

        def text(attribute: str) -> str | None:
            return self._fields.resolve_text(row, self._aliases[attribute]) or None

        return ClientIdentity(
            name=text("client_name"),
            national_id=_identifier_text(self._fields.resolve(row, self._aliases["client_national_id"])),
            phone=_identifier_text(self._fields.resolve(row, self._aliases["client_phone"])),
            village=text("client_village"),
            address=text("client_address"),
            birth_date=self._dates.parse(self._fields.resolve(row, self._aliases["client_birth_date"])),
            holding_code=text("holding_code"),
            farm_location=text("farm_location"),
            serial_no=text("serial_no"),
        )

    def resolve(self, row: Row, creator_id: str | None) -> Client:
        identity = self.identify(row)

        existing: Client | None = None
        if identity.is_complete:
            existing = self._repository.find_any(
                national_id=identity.national_id,
                phone=identity.phone,
                name=identity.name,
            )
        elif identity.national_id:
            existing = self._repository.find_by_national_id(identity.national_id)

        if existing is not None:
            return existing

        client = self._synthesize(identity, creator_id)
        self._repository.add(client)
        log_event(
            logger,
            logging.INFO,
            "client_created",
            client_id=str(client.id),
            national_id=client.national_id,
            placeholder_name=identity.name is None,
            created_by=creator_id,
        )
        return client

    # ------------------------------------------------------------------
    # Placeholders
    # ------------------------------------------------------------------

    def _synthesize(self, identity: ClientIdentity, creator_id: str | None) -> Client:
        location = identity.farm_location or identity.village
        village = identity.village or identity.farm_location or UNSPECIFIED
        return Client(
            name=identity.name or self.placeholder_name(identity),
            national_id=identity.national_id or self.placeholder_national_id(),
            phone=identity.phone or self.placeholder_phone(),
            village=village,
            detailed_address=identity.address or location or UNSPECIFIED,
            birth_date=identity.birth_date,
            holding_code=identity.holding_code,
            status=self._default_status,
            created_by=creator_id,
        )

    def placeholder_name(self, identity: ClientIdentity) -> str:
        label = identity.farm_location or identity.serial_no or UNSPECIFIED
        return f"{PLACEHOLDER_NAME_PREFIX} {label}"

    def placeholder_national_id(self) -> str:
        millis = str(int(self._clock().timestamp() * 1000))
        return millis[:NATIONAL_ID_LENGTH].rjust(NATIONAL_ID_LENGTH, "1")

    def placeholder_phone(self) -> str:
        digits = f"{self._rng.randrange(10 ** (PHONE_LENGTH - 1)):0{PHONE_LENGTH - 1}d}"
        return f"5{digits}"[:PHONE_LENGTH]
