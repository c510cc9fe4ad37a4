from django.test import SimpleTestCase

from catalog.importer.columns import (
    RELEASE,
    TRACK,
    MappingConfig,
    RawRow,
    auto_detect_mapping,
    normalize_column_name,
    parse_csv,
)


class AutoDetectTests(SimpleTestCase):
    def setUp(self):
        headers = [
            "Artist Name",
            "Album/Single Name",
            "Song 1 Name",
            "Song 2 Artist",
            "YouTube Channel",
            "FB Status",
            "A&R",
            "Title",
            "Mystery",
        ]
        self.mapping = {column.csv_column: column for column in auto_detect_mapping(headers)}

    def test_release_fields(self):
        self.assertEqual(self.mapping["Artist Name"].target_field, "artist_name")
        self.assertEqual(self.mapping["Album/Single Name"].target_field, "release_title")
        self.assertEqual(self.mapping["A&R"].target_field, "assigned_ar")
        self.assertEqual(self.mapping["Artist Name"].field_type, RELEASE)

    def test_numbered_track_fields(self):
        song = self.mapping["Song 2 Artist"]
        self.assertEqual((song.target_field, song.field_type, song.track_index), ("artist_name", TRACK, 2))
        self.assertEqual(self.mapping["Song 1 Name"].track_index, 1)

    def test_platform_columns_and_aliases(self):
        self.assertEqual(self.mapping["YouTube Channel"].target_field, "youtube_channel")
        self.assertEqual(self.mapping["FB Status"].target_field, "facebook_status")

    def test_unrecognised_headers_stay_unmapped(self):
        self.assertIsNone(self.mapping["Title"].target_field)
        self.assertIsNone(self.mapping["Mystery"].target_field)

    def test_normalize_column_name(self):
        self.assertEqual(normalize_column_name("  Song 1 - Name "), "song_1_name")


class RawRowTests(SimpleTestCase):
    def test_lookup_falls_back_to_normalized_keys(self):
        row = RawRow({"Album Name ": " Starlight "})
        self.assertEqual(row.lookup("album name"), "Starlight")

    def test_lookup_skips_blank_values(self):
        row = RawRow({"A": "  ", "B": "x", "C": None})
        self.assertEqual(row.lookup("A", "C", "B"), "x")
        self.assertEqual(row.lookup("missing"), "")
        self.assertEqual(row["C"], "")


class MappingConfigTests(SimpleTestCase):
    def test_from_dict_rejects_unknown_fields(self):
        with self.assertRaises(ValueError):
            MappingConfig.from_dict({"columns": [{"csv_column": "X", "target_field": "nope"}]})
        with self.assertRaises(ValueError):
            MappingConfig.from_dict({"columns": [{"csv_column": "X", "field_type": "track", "track_index": 0}]})
        with self.assertRaises(ValueError):
            MappingConfig.from_dict([])

    def test_track_columns_grouped_by_index(self):
        config = MappingConfig.for_headers(["Song 2 Name", "Song 1 Name", "Song 1 Genre", "Notes"])
        self.assertEqual(
            config.track_columns(),
            {1: {"name": ["Song 1 Name"], "genre": ["Song 1 Genre"]}, 2: {"name": ["Song 2 Name"]}},
        )
        self.assertEqual(config.release_columns("notes"), ["Notes"])
        self.assertEqual(MappingConfig.from_dict(config.to_dict()), config)


class ParseCsvTests(SimpleTestCase):
    def test_bom_blank_rows_and_duplicate_headers(self):
        headers, rows = parse_csv('\ufeffName,Name,"Artist"\nA,B,C\n,,\nD\n')
        self.assertEqual(headers, ["Name", "Name", "Artist"])
        self.assertEqual(len(rows), 2)
        self.assertEqual(rows[0].to_dict(), {"Name": "A", "Artist": "C"})
        self.assertEqual(rows[1].to_dict(), {"Name": "D", "Artist": ""})

    def test_empty_text(self):
        self.assertEqual(parse_csv(""), ([], []))
