from unittest import mock

from django.test import TestCase

from core.clerk_integration.exceptions import ClerkAPIException
from marketplace.models import DEFAULT_AVATAR_URL, Course, Enrollment, User
from marketplace.services.accounts import AccountService, profile_from_clerk_user

from .helpers import identity, make_course, make_user

CLERK_USER = {
    "id": "user_clerk",
    "first_name": "Ada",
    "last_name": "Lovelace",
    "image_url": "https://img.clerk.com/ada.png",
    "primary_email_address_id": "idn_2",
    "email_addresses": [
        {"id": "idn_1", "email_address": "old@example.com"},
        {"id": "idn_2", "email_address": "ada@example.com"},
    ],
}


class ProfileMappingTests(TestCase):
    def test_maps_name_primary_email_and_image(self):
        self.assertEqual(
            profile_from_clerk_user(CLERK_USER),
            {"name": "Ada Lovelace", "email": "ada@example.com", "image_url": "https://img.clerk.com/ada.png"},
        )

    def test_defaults(self):
        profile = profile_from_clerk_user({"id": "user_x", "email_addresses": []})
        self.assertEqual(profile["name"], "User")
        self.assertEqual(profile["email"], "")
        self.assertEqual(profile["image_url"], DEFAULT_AVATAR_URL)

    def test_username_fallback(self):
        self.assertEqual(profile_from_clerk_user({"username": "ada"})["name"], "ada")


class AccountServiceTests(TestCase):
    def test_ensure_user_from_token_claims(self):
        user = AccountService().ensure_user(identity("user_1", name="Grace", email="grace@example.com"))
        self.assertEqual(user.name, "Grace")
        self.assertEqual(user.email, "grace@example.com")

    def test_ensure_user_returns_existing_row(self):
        make_user("user_1", name="Existing")
        user = AccountService().ensure_user(identity("user_1", name="Other"))
        self.assertEqual(user.name, "Existing")

    def test_ensure_user_loads_profile_from_clerk(self):
        clerk = mock.Mock()
        clerk.get_user.return_value = CLERK_USER

        user = AccountService(clerk=clerk).ensure_user(identity("user_clerk"))

        clerk.get_user.assert_called_once_with("user_clerk")
        self.assertEqual(user.name, "Ada Lovelace")

    def test_ensure_user_survives_clerk_failure(self):
        clerk = mock.Mock()
        clerk.get_user.side_effect = ClerkAPIException("down")

        user = AccountService(clerk=clerk).ensure_user(identity("user_clerk"))

        self.assertEqual(user.name, "User")
        self.assertEqual(user.image_url, DEFAULT_AVATAR_URL)

    def test_upsert_creates_then_updates(self):
        service = AccountService()
        service.upsert_from_clerk(CLERK_USER)
        service.upsert_from_clerk({**CLERK_USER, "first_name": "Augusta"})

        user = User.objects.get(pk="user_clerk")
        self.assertEqual(user.name, "Augusta Lovelace")
        self.assertEqual(User.objects.count(), 1)

    def test_upsert_requires_id(self):
        with self.assertRaises(ValueError):
            AccountService().upsert_from_clerk({"first_name": "Nobody"})

    def test_delete_cascades_edges_and_keeps_courses(self):
        educator = make_user("user_educator")
        course = make_course(educator)
        student = make_user("user_student")
        Enrollment.objects.create(user=student, course=course)

        self.assertTrue(AccountService().delete_user("user_student"))
        self.assertTrue(AccountService().delete_user("user_educator"))

        self.assertFalse(Enrollment.objects.exists())
        self.assertIsNone(Course.objects.get(pk=course.pk).educator)
        self.assertFalse(AccountService().delete_user("user_student"))
