from __future__ import annotations

import unittest

from intake.aliases import (
    CLIENT_FIELD_ALIASES,
    SHARED_FIELD_ALIASES,
    VACCINATION_FIELD_ALIASES,
    build_alias_table,
    preferred_header,
)
from intake.field_resolver import FieldResolver, is_blank


class TestFieldResolver(unittest.TestCase):
    def setUp(self) -> None:
        self.resolver = FieldResolver()

    def test_first_alias_with_value_wins(self) -> None:
        row = {"name": "B", "Name": "A"}

        self.assertEqual(self.resolver.resolve(row, ("Name", "name")), "A")

    def test_empty_values_fall_through_to_later_aliases(self) -> None:
        row = {"Name": "  ", "clientName": "Ali"}

        self.assertEqual(self.resolver.resolve(row, ("Name", "clientName")), "Ali")

    def test_case_and_whitespace_insensitive_second_pass(self) -> None:
        row = {"  SERIAL NO ": "V001"}

        self.assertEqual(self.resolver.resolve(row, ("Serial No",)), "V001")

    def test_exact_match_beats_case_insensitive_match(self) -> None:
        row = {"serial no": "lower", "serialNo": "exact"}

        self.assertEqual(self.resolver.resolve(row, ("Serial No", "serialNo")), "exact")

    def test_missing_attribute_resolves_to_none(self) -> None:
        self.assertIsNone(self.resolver.resolve({"Other": 1}, ("Name",)))
        self.assertEqual(self.resolver.resolve_text({"Other": 1}, ("Name",), "n/a"), "n/a")

    def test_zero_is_a_value(self) -> None:
        self.assertEqual(self.resolver.resolve({"Sheep": 0}, ("Sheep",)), 0)

    def test_resolve_text_strips_and_stringifies(self) -> None:
        self.assertEqual(self.resolver.resolve_text({"ID": 1234567890}, ("ID",)), "1234567890")
        self.assertEqual(self.resolver.resolve_text({"Name": "  Ali "}, ("Name",)), "Ali")

    def test_is_blank(self) -> None:
        self.assertTrue(is_blank(None))
        self.assertTrue(is_blank("   "))
        self.assertFalse(is_blank(0))
        self.assertFalse(is_blank("x"))


class TestAliasTables(unittest.TestCase):
    def test_build_alias_table_returns_independent_copy(self) -> None:
        table = build_alias_table(SHARED_FIELD_ALIASES, {"remarks": ("Notes",)})

        self.assertEqual(table["remarks"], ("Notes",))
        self.assertNotEqual(SHARED_FIELD_ALIASES["remarks"], ("Notes",))

    def test_preferred_header_is_first_alias(self) -> None:
        table = build_alias_table(SHARED_FIELD_ALIASES, CLIENT_FIELD_ALIASES, VACCINATION_FIELD_ALIASES)

        self.assertEqual(preferred_header(table, "serial_no"), "Serial No")
        self.assertEqual(preferred_header(table, "latitude"), "N")
        self.assertEqual(preferred_header(table, "sheep_total"), "Sheep")
        self.assertEqual(preferred_header(table, "unknown_attribute"), "unknown_attribute")

    def test_herd_count_aliases_include_camel_case_keys(self) -> None:
        self.assertIn("sheepTotal", VACCINATION_FIELD_ALIASES["sheep_total"])
        self.assertIn("camelVaccinated", VACCINATION_FIELD_ALIASES["camel_vaccinated"])


if __name__ == "__main__":
    unittest.main()
