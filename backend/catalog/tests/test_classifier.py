from django.test import SimpleTestCase, override_settings

from catalog.importer.classifier import (
    DEFAULT_THRESHOLDS,
    configured_thresholds,
    describe_wrong_column,
    is_usable_title,
    is_valid_employee_name,
    looks_like_code,
    looks_like_csv_artifact,
    looks_like_date,
    looks_like_notes,
    looks_like_platform_or_status,
    looks_like_wrong_column,
)


class WrongColumnTests(SimpleTestCase):
    def test_real_titles_pass(self):
        for title in ["Starlight", "Exceptional Love", "March of the Ants", "Summer 2023", "Lonely Road"]:
            with self.subTest(title=title):
                self.assertFalse(looks_like_wrong_column(title))

    def test_platform_status_concatenation_is_flagged(self):
        self.assertTrue(looks_like_wrong_column("ringtunes, pending, yes"))
        self.assertEqual(describe_wrong_column("YouTube"), "Contains platform/status content")

    def test_notes_are_flagged(self):
        self.assertTrue(looks_like_wrong_column("Please upload to all platforms"))
        self.assertTrue(looks_like_wrong_column("Will whitelist the channel next week"))
        self.assertTrue(looks_like_notes("x" * 120))

    def test_long_note_sentence_is_flagged(self):
        self.assertTrue(
            looks_like_wrong_column("Please note: this track will whitelist on YouTube next week due to licensing")
        )
        self.assertFalse(looks_like_wrong_column("Midnight Dreams"))

    def test_payment_dates_and_codes_are_flagged(self):
        self.assertEqual(describe_wrong_column("Payment via bank transfer"), "Contains payment remarks")
        self.assertEqual(describe_wrong_column("March 15, 2024"), "Is a date")
        self.assertEqual(describe_wrong_column("a9x72k"), "Looks like a code or identifier")
        self.assertTrue(looks_like_wrong_column("12/03/2024"))

    def test_whole_cell_values_only_match_entire_cell(self):
        self.assertTrue(looks_like_platform_or_status("Single"))
        self.assertFalse(looks_like_platform_or_status("Single Ladies Anthem"))

    def test_empty_title_is_not_a_wrong_column(self):
        self.assertFalse(looks_like_wrong_column(""))
        self.assertEqual(describe_wrong_column(None), "")


class HelperPredicateTests(SimpleTestCase):
    def test_csv_artifacts(self):
        self.assertTrue(looks_like_csv_artifact("a, b, c"))
        self.assertTrue(looks_like_csv_artifact("released 15-Jan-25"))
        self.assertTrue(looks_like_csv_artifact("2024.1130"))
        self.assertFalse(looks_like_csv_artifact("Rock, Paper"))

    def test_dates_need_a_day(self):
        self.assertTrue(looks_like_date("2024-01-05"))
        self.assertFalse(looks_like_date("May Flowers"))

    def test_codes_need_digits_and_letters(self):
        self.assertTrue(looks_like_code("ab12cd"))
        self.assertTrue(looks_like_code("video id=123"))
        self.assertFalse(looks_like_code("Starlight"))
        self.assertFalse(looks_like_code("123456"))


class EmployeeNameTests(SimpleTestCase):
    def test_valid_names(self):
        self.assertTrue(is_valid_employee_name("Jane Smith"))
        self.assertTrue(is_valid_employee_name("Kofi"))

    def test_invalid_names(self):
        for value in ["", "uploaded", "Pending, check later, 2024", "12345", "jane@example.com", "n" * 60]:
            with self.subTest(value=value):
                self.assertFalse(is_valid_employee_name(value))


class ThresholdTests(SimpleTestCase):
    def test_usable_title(self):
        self.assertTrue(is_usable_title("Good Song"))
        self.assertFalse(is_usable_title("---"))
        self.assertFalse(is_usable_title(""))

    @override_settings(CATALOG_IMPORT={"CLASSIFIER": {"title_length": 20, "unknown": 1}})
    def test_configured_thresholds_override_known_fields(self):
        thresholds = configured_thresholds()
        self.assertEqual(thresholds.title_length, 20)
        self.assertEqual(thresholds.notes_length, DEFAULT_THRESHOLDS.notes_length)
        self.assertEqual(describe_wrong_column("A fairly long release title", thresholds), "Too long for a title")
