import base64
import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from django.test import TestCase, override_settings
from svix.webhooks import Webhook

from marketplace.models import Course, Enrollment, Purchase, User

CLERK_WEBHOOK_SECRET = "whsec_" + base64.b64encode(b"clerk-webhook-test-secret-key-01").decode()


def user_payload(user_id="user_clerk_1", **overrides):
    data = {
        "id": user_id,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "image_url": "https://img.clerk.com/ada.png",
        "primary_email_address_id": "idn_1",
        "email_addresses": [{"id": "idn_1", "email_address": "ada@example.com"}],
    }
    data.update(overrides)
    return data


@override_settings(CLERK_WEBHOOK_SECRET=CLERK_WEBHOOK_SECRET)
class ClerkWebhookViewTests(TestCase):
    def post_event(self, event_type, data, secret=CLERK_WEBHOOK_SECRET, sent_at=None):
        payload = json.dumps({"type": event_type, "data": data, "object": "event"})
        msg_id = "msg_test_1"
        sent_at = sent_at or datetime.now(tz=timezone.utc)
        signature = Webhook(secret).sign(msg_id, sent_at, payload)
        return self.client.post(
            "/clerk",
            data=payload,
            content_type="application/json",
            HTTP_SVIX_ID=msg_id,
            HTTP_SVIX_TIMESTAMP=str(int(sent_at.timestamp())),
            HTTP_SVIX_SIGNATURE=signature,
        )

    def test_user_created(self):
        response = self.post_event("user.created", user_payload())

        self.assertEqual(response.status_code, 201)
        user = User.objects.get(pk="user_clerk_1")
        self.assertEqual(user.name, "Ada Lovelace")
        self.assertEqual(user.email, "ada@example.com")
        self.assertEqual(user.image_url, "https://img.clerk.com/ada.png")

    def test_user_updated(self):
        User.objects.create(id="user_clerk_1", name="Old Name")

        response = self.post_event("user.updated", user_payload(first_name="Augusta"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(User.objects.get(pk="user_clerk_1").name, "Augusta Lovelace")

    def test_user_deleted_cascades(self):
        user = User.objects.create(id="user_clerk_1", name="Ada")
        course = Course.objects.create(title="Course", price=Decimal("10"))
        Enrollment.objects.create(user=user, course=course)
        Purchase.objects.create(user=user, course=course, amount=Decimal("10"))

        response = self.post_event("user.deleted", {"id": "user_clerk_1", "deleted": True})

        self.assertEqual(response.status_code, 200)
        self.assertFalse(User.objects.exists())
        self.assertFalse(Enrollment.objects.exists())
        self.assertFalse(Purchase.objects.exists())
        self.assertTrue(Course.objects.filter(pk=course.pk).exists())

    def test_unhandled_type(self):
        response = self.post_event("session.created", {"id": "sess_1"})

        self.assertEqual(response.status_code, 200)
        self.assertFalse(User.objects.exists())

    def test_invalid_signature(self):
        other_secret = "whsec_" + base64.b64encode(b"some-other-secret-entirely-00000").decode()

        response = self.post_event("user.created", user_payload(), secret=other_secret)

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])
        self.assertFalse(User.objects.exists())

    def test_expired_timestamp(self):
        response = self.post_event(
            "user.created", user_payload(), sent_at=datetime.now(tz=timezone.utc) - timedelta(hours=1)
        )

        self.assertEqual(response.status_code, 400)
        self.assertFalse(User.objects.exists())

    def test_missing_headers(self):
        response = self.client.post(
            "/clerk", data=json.dumps({"type": "user.created"}), content_type="application/json"
        )
        self.assertEqual(response.status_code, 400)
