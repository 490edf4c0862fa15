"""
Shared fixtures for the marketplace test-suite.

Identities are built as `ClerkTokenUser` objects from plain claim dicts and
attached with `APIClient.force_authenticate`, so no JWKS is needed.
"""

from decimal import Decimal
from types import SimpleNamespace

from backend.custom_auth import ClerkTokenUser
from marketplace.models import Course, User

SAMPLE_CONTENT = [
    {
        "chapterId": "ch1",
        "chapterOrder": 1,
        "chapterTitle": "Getting Started",
        "chapterContent": [
            {
                "lectureId": "lec1",
                "lectureTitle": "Welcome",
                "lectureDuration": 5,
                "lectureUrl": "https://youtu.be/preview",
                "isPreviewFree": True,
                "lectureOrder": 1,
            },
            {
                "lectureId": "lec2",
                "lectureTitle": "Deep Dive",
                "lectureDuration": 25,
                "lectureUrl": "https://youtu.be/paid",
                "isPreviewFree": False,
                "lectureOrder": 2,
            },
        ],
    }
]


def identity(user_id="user_student", role=None, **claims):
    payload = {"sub": user_id, **claims}
    if role:
        payload["metadata"] = {"role": role}
    return ClerkTokenUser(payload)


def educator_identity(user_id="user_educator", **claims):
    return identity(user_id, role="educator", **claims)


def make_user(user_id="user_student", name="Student", **fields):
    fields.setdefault("email", f"{user_id}@example.com")
    return User.objects.create(id=user_id, name=name, **fields)


def make_course(educator=None, title="Django for Beginners", price="100.00", discount=20, **fields):
    fields.setdefault("content", SAMPLE_CONTENT)
    fields.setdefault("thumbnail", "https://media.example.com/course_thumbnails/abc.png")
    return Course.objects.create(
        educator=educator,
        title=title,
        description="<p>Learn Django</p>",
        price=Decimal(price),
        discount=discount,
        **fields,
    )


class FakeStorage:
    """In-memory stand-in for MediaStorageService."""

    def __init__(self, fail_delete=False):
        self.uploaded = []
        self.deleted = []
        self.fail_delete = fail_delete

    def upload_thumbnail(self, file):
        url = f"https://media.example.com/course_thumbnails/{len(self.uploaded) + 1}.png"
        self.uploaded.append((file.name, url))
        return url

    def delete_by_url(self, url):
        from marketplace.exceptions import UpstreamServiceError

        if self.fail_delete:
            raise UpstreamServiceError("storage down", service="storage")
        self.deleted.append(url)
        return True


class FakeGateway:
    """Records checkout sessions instead of calling Stripe."""

    currency = "usd"

    def __init__(self, minimum=Decimal("0.50"), error=None):
        self.minimum = minimum
        self.error = error
        self.sessions = []

    def minimum_charge(self, currency=None):
        return self.minimum

    def create_checkout_session(self, **kwargs):
        if self.error is not None:
            raise self.error
        self.sessions.append(kwargs)
        session_id = f"cs_test_{len(self.sessions)}"
        return SimpleNamespace(id=session_id, url=f"https://checkout.stripe.com/c/pay/{session_id}")
