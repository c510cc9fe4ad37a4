import json

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.urls import reverse

from catalog.models import Artist, ImportSession, Release, ReleaseArtist, Track, TrackArtist

CSV = (
    "Submission ID,Artist Name,Album/Single Name,Song 1 Name\n"
    "S1,Alpha,First,Track One\n"
    "S2,,Second,Track Two\n"
).encode("utf-8")


def upload(content=CSV, name="catalog.csv"):
    return SimpleUploadedFile(name, content, content_type="text/csv")


class CatalogViewTests(TestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(
            username="casey", password="password", email="casey@example.com"
        )
        perms = Permission.objects.filter(
            codename__in=["run_catalog_import", "repair_catalog_data", "merge_artists"]
        )
        self.user.user_permissions.set(perms)
        self.client.login(username="casey", password="password")

    def post_json(self, name, payload, **kwargs):
        return self.client.post(
            reverse(name, kwargs=kwargs or None),
            data=json.dumps(payload),
            content_type="application/json",
            HTTP_HX_REQUEST="true",
        )

    def test_preview(self):
        response = self.client.post(reverse("catalog:import_preview"), {"csv_file": upload()})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["row_count"], 2)
        self.assertEqual(data["headers"][1], "Artist Name")
        self.assertIsNone(data["duplicate_session_id"])
        self.assertEqual(ImportSession.objects.count(), 0)

    def test_start_import_htmx(self):
        response = self.client.post(
            reverse("catalog:import_start"),
            {"csv_file": upload()},
            HTTP_HX_REQUEST="true",
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["status"], "completed")
        self.assertEqual(data["success_count"], 1)
        self.assertEqual(data["error_count"], 1)
        self.assertIn("import:finished", json.loads(response.headers["HX-Trigger"]))
        self.assertEqual(ImportSession.objects.get().created_by, self.user)

    def test_start_import_with_explicit_mapping(self):
        mapping = {
            "columns": [
                {"csv_column": "Artist Name", "target_field": "artist_name", "field_type": "release"},
                {"csv_column": "Album/Single Name", "target_field": "release_title", "field_type": "release"},
            ]
        }
        response = self.client.post(
            reverse("catalog:import_start"),
            {"csv_file": upload(), "mapping": json.dumps(mapping)},
        )
        self.assertEqual(response.status_code, 200)
        self.assertNotIn("HX-Trigger", response.headers)
        self.assertEqual(Release.objects.get().tracks.count(), 0)

    def test_start_import_rejects_bad_upload(self):
        response = self.client.post(reverse("catalog:import_start"), {"csv_file": upload(name="catalog.xlsx")})
        self.assertEqual(response.status_code, 400)
        self.assertIn("csv_file", response.json()["fields"])

    def test_progress_failed_rows_and_reprocess(self):
        self.client.post(reverse("catalog:import_start"), {"csv_file": upload()})
        session = ImportSession.objects.get()

        progress = self.client.get(reverse("catalog:import_progress", kwargs={"session_id": session.pk}))
        self.assertEqual(progress.json()["current_operation"], "Import completed")

        failed = self.client.get(reverse("catalog:import_failed_rows", kwargs={"session_id": session.pk}))
        self.assertEqual(failed.json()["total"], 1)
        self.assertEqual(failed.json()["rows"][0]["row"], 2)

        response = self.post_json("catalog:import_reprocess", {}, session_id=session.pk)
        self.assertEqual(response.json()["error_count"], 1)
        self.assertIn("HX-Trigger", response.headers)

    def test_cancel(self):
        session = ImportSession.objects.create(file_name="x.csv", file_hash="x")
        response = self.post_json("catalog:import_cancel", {"reason": "Wrong file"}, session_id=session.pk)
        self.assertEqual(response.json()["status"], "cancelled")
        again = self.post_json("catalog:import_cancel", {}, session_id=session.pk)
        self.assertEqual(again.status_code, 409)
        missing = self.post_json("catalog:import_cancel", {}, session_id=999999)
        self.assertEqual(missing.status_code, 404)

    def test_cancel_all(self):
        ImportSession.objects.create(file_name="x.csv", file_hash="x")
        response = self.client.post(reverse("catalog:import_cancel_all"))
        self.assertEqual(response.json(), {"cancelled": 1})

    def test_repair_releases(self):
        artist = Artist.objects.create(name="Ama")
        release = Release.objects.create(title="YouTube", artist=artist, raw_row={"Album Name": "Starlight"})

        identify = self.post_json("catalog:repair_releases", {"action": "identify"})
        self.assertEqual(identify.json()["count"], 1)

        fix = self.post_json("catalog:repair_releases", {"action": "fix", "release_ids": [release.pk]})
        self.assertEqual(fix.json()["fixed"], 1)
        release.refresh_from_db()
        self.assertEqual(release.title, "Starlight")

        unknown = self.post_json("catalog:repair_releases", {"action": "delete"})
        self.assertEqual(unknown.status_code, 400)
        bad_ids = self.post_json("catalog:repair_releases", {"action": "fix", "release_ids": ["x"]})
        self.assertEqual(bad_ids.status_code, 400)

    def test_repair_employees_dry_run(self):
        response = self.post_json("catalog:repair_employees", {"dry_run": True})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["dry_run"])

    def test_merge_and_duplicates(self):
        source = Artist.objects.create(name="ama")
        target = Artist.objects.create(name="Ama")
        release = Release.objects.create(title="Dawn", artist=source)
        ReleaseArtist.objects.create(release=release, artist=source, is_primary=True)

        duplicates = self.client.get(reverse("catalog:artist_duplicates"))
        self.assertEqual(len(duplicates.json()["groups"]), 1)

        response = self.post_json("catalog:artist_merge", {"source_id": source.pk, "target_id": target.pk})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["releases_moved"], 1)
        self.assertIn("artists:merged", json.loads(response.headers["HX-Trigger"]))

        missing = self.post_json("catalog:artist_merge", {"source_id": source.pk, "target_id": target.pk})
        self.assertEqual(missing.status_code, 404)
        same = self.post_json("catalog:artist_merge", {"source_id": target.pk, "target_id": target.pk})
        self.assertEqual(same.status_code, 409)
        incomplete = self.post_json("catalog:artist_merge", {"source_id": target.pk})
        self.assertEqual(incomplete.status_code, 400)

    def test_merge_preview(self):
        source = Artist.objects.create(name="Kwame")
        other = Artist.objects.create(name="Abena")
        owned = Release.objects.create(title="Alpha", artist=source)
        ReleaseArtist.objects.create(release=owned, artist=source, is_primary=True)
        owned_track = Track.objects.create(release=owned, track_number=1, name="Alpha One")
        TrackArtist.objects.create(track=owned_track, artist=source, is_primary=True)
        TrackArtist.objects.create(track=owned_track, artist=other, is_primary=False)
        credited = Release.objects.create(title="Beta", artist=other)
        ReleaseArtist.objects.create(release=credited, artist=other, is_primary=True)
        ReleaseArtist.objects.create(release=credited, artist=source, is_primary=False)
        credited_track = Track.objects.create(release=credited, track_number=1, name="Beta One")
        TrackArtist.objects.create(track=credited_track, artist=other, is_primary=True)
        elsewhere = Release.objects.create(title="Gamma", artist=other)
        guest_track = Track.objects.create(release=elsewhere, track_number=1, name="Gamma One")
        TrackArtist.objects.create(track=guest_track, artist=source, is_primary=False)

        response = self.client.get(reverse("catalog:artist_merge_preview", args=[source.pk]))
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["artist"], {"id": source.pk, "name": "Kwame"})
        releases = {row["title"]: row for row in body["releases"]}
        self.assertEqual(set(releases), {"Alpha", "Beta"})
        self.assertEqual(releases["Alpha"]["source_artist_role"], "primary")
        self.assertEqual(releases["Beta"]["source_artist_role"], "secondary")
        self.assertEqual(
            [artist["name"] for artist in releases["Beta"]["artists"]],
            ["Abena", "Kwame"],
        )
        tracks = {row["name"]: row for row in body["tracks"]}
        self.assertEqual(set(tracks), {"Alpha One", "Beta One", "Gamma One"})
        self.assertEqual(tracks["Alpha One"]["source_artist_role"], "primary")
        self.assertEqual(tracks["Beta One"]["source_artist_role"], "none")
        self.assertEqual(tracks["Gamma One"]["source_artist_role"], "secondary")
        self.assertEqual(len(tracks["Alpha One"]["artists"]), 2)
        self.assertEqual(tracks["Gamma One"]["release_title"], "Gamma")

        missing = self.client.get(reverse("catalog:artist_merge_preview", args=[999999]))
        self.assertEqual(missing.status_code, 404)

    def test_methods_are_enforced(self):
        response = self.client.get(reverse("catalog:import_start"))
        self.assertEqual(response.status_code, 405)


class CatalogViewPermissionTests(TestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username="viewer", password="password")

    def test_anonymous_is_redirected(self):
        response = self.client.post(reverse("catalog:import_start"))
        self.assertEqual(response.status_code, 302)

    def test_missing_permission_is_forbidden(self):
        self.client.login(username="viewer", password="password")
        for name in ["catalog:import_start", "catalog:repair_employees", "catalog:artist_merge"]:
            with self.subTest(name=name):
                self.assertEqual(self.client.post(reverse(name)).status_code, 403)
        self.assertEqual(self.client.get(reverse("catalog:artist_duplicates")).status_code, 403)
        artist = Artist.objects.create(name="Kwame")
        preview = reverse("catalog:artist_merge_preview", args=[artist.pk])
        self.assertEqual(self.client.get(preview).status_code, 403)
