from decimal import Decimal
from unittest import mock

import stripe
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from core.stripe_integration.exceptions import CheckoutSessionException
from core.stripe_integration.gateway import PaymentGateway
from marketplace.exceptions import AlreadyEnrolled, CourseNotFound, UpstreamServiceError
from marketplace.models import Enrollment, Purchase
from marketplace.services.checkout import CheckoutService
from marketplace.services.enrollment import EnrollmentService

from .helpers import FakeGateway, identity, make_course, make_user


class CheckoutServiceTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.course = make_course(price="100.00", discount=20)
        self.gateway = FakeGateway()
        self.service = CheckoutService(self.gateway, EnrollmentService(), bypass_enabled=False)

    def test_creates_pending_purchase_and_session(self):
        result = self.service.purchase(self.user, self.course.pk, origin="https://shop.example.com/")

        purchase = result.purchase
        purchase.refresh_from_db()
        self.assertEqual(purchase.status, Purchase.Status.PENDING)
        self.assertEqual(purchase.amount, Decimal("80.00"))
        self.assertFalse(purchase.price_adjusted)
        self.assertEqual(purchase.stripe_session_id, "cs_test_1")
        self.assertEqual(result.session_url, "https://checkout.stripe.com/c/pay/cs_test_1")

        session = self.gateway.sessions[0]
        self.assertEqual(session["amount"], Decimal("80.00"))
        self.assertEqual(session["success_url"], "https://shop.example.com/loading/my-enrollments")
        self.assertEqual(session["cancel_url"], f"https://shop.example.com/course/{self.course.pk}")
        self.assertEqual(
            session["metadata"],
            {
                "purchaseId": purchase.pk,
                "userId": "user_student",
                "courseId": self.course.pk,
                "courseTitle": self.course.title,
            },
        )
        self.assertFalse(Enrollment.objects.exists())

    @override_settings(FRONTEND_URL="http://localhost:5173")
    def test_falls_back_to_frontend_url(self):
        self.service.purchase(self.user, self.course.pk, origin=None)
        self.assertTrue(self.gateway.sessions[0]["success_url"].startswith("http://localhost:5173/"))

    def test_amount_below_minimum_is_adjusted(self):
        cheap = make_course(title="Cheap", price="0.40", discount=0)

        purchase = self.service.purchase(self.user, cheap.pk).purchase
        purchase.refresh_from_db()

        self.assertEqual(purchase.amount, Decimal("0.50"))
        self.assertEqual(purchase.original_amount, Decimal("0.40"))
        self.assertTrue(purchase.price_adjusted)
        self.assertEqual(self.gateway.sessions[0]["amount"], Decimal("0.50"))

    def test_free_course_is_charged_minimum(self):
        free = make_course(title="Free", price="0", discount=0)
        purchase = self.service.purchase(self.user, free.pk).purchase
        self.assertEqual(purchase.amount, Decimal("0.50"))
        self.assertEqual(purchase.original_amount, Decimal("0.00"))

    def test_already_enrolled(self):
        Enrollment.objects.create(user=self.user, course=self.course)
        with self.assertRaises(AlreadyEnrolled):
            self.service.purchase(self.user, self.course.pk)
        self.assertFalse(Purchase.objects.exists())

    def test_unknown_course(self):
        with self.assertRaises(CourseNotFound):
            self.service.purchase(self.user, 999999)

    def test_gateway_error_marks_purchase_failed(self):
        self.gateway.error = CheckoutSessionException("Your card was declined")

        with self.assertRaises(UpstreamServiceError) as ctx:
            self.service.purchase(self.user, self.course.pk)

        self.assertEqual(str(ctx.exception.detail), "Your card was declined")
        self.assertEqual(Purchase.objects.get().status, Purchase.Status.FAILED)

    def test_bypass_completes_and_enrolls(self):
        service = CheckoutService(self.gateway, EnrollmentService(), bypass_enabled=True)

        result = service.purchase(self.user, self.course.pk)

        self.assertEqual(result.redirect_url, "/loading/my-enrollments")
        self.assertEqual(result.purchase.status, Purchase.Status.COMPLETED)
        self.assertEqual(self.gateway.sessions, [])
        edge = Enrollment.objects.get(user=self.user, course=self.course)
        self.assertEqual(edge.source, Enrollment.Source.BYPASS)

    @override_settings(PAYMENT_BYPASS_ENABLED=False)
    def test_bypass_defaults_to_settings(self):
        self.assertFalse(CheckoutService(self.gateway, EnrollmentService()).bypass_enabled)


class PurchaseViewTests(TestCase):
    client_class = APIClient

    def setUp(self):
        self.course = make_course()
        self.gateway = FakeGateway()
        patcher = mock.patch(
            "marketplace.users.views.user_views.get_checkout_service",
            return_value=CheckoutService(self.gateway, EnrollmentService(), bypass_enabled=False),
        )
        patcher.start()
        self.addCleanup(patcher.stop)
        self.client.force_authenticate(user=identity("user_buyer", name="Bea Buyer", email="bea@example.com"))

    def test_returns_session_url_and_creates_user(self):
        response = self.client.post(
            "/api/user/purchase",
            {"courseId": self.course.pk},
            format="json",
            HTTP_ORIGIN="https://shop.example.com",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["session_url"], "https://checkout.stripe.com/c/pay/cs_test_1")
        purchase = Purchase.objects.get()
        self.assertEqual(purchase.user.name, "Bea Buyer")
        self.assertEqual(purchase.user.email, "bea@example.com")

    def test_missing_course_id(self):
        response = self.client.post("/api/user/purchase", {}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "courseId: Course ID is required")

    def test_already_enrolled(self):
        make_user("user_buyer")
        Enrollment.objects.create(user_id="user_buyer", course=self.course)

        response = self.client.post("/api/user/purchase", {"courseId": self.course.pk}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "You are already enrolled in this course")

    def test_bypass_returns_redirect(self):
        with mock.patch(
            "marketplace.users.views.user_views.get_checkout_service",
            return_value=CheckoutService(self.gateway, EnrollmentService(), bypass_enabled=True),
        ):
            response = self.client.post("/api/user/purchase", {"courseId": self.course.pk}, format="json")

        self.assertEqual(response.json()["redirectUrl"], "/loading/my-enrollments")
        self.assertTrue(Enrollment.objects.filter(user_id="user_buyer", course=self.course).exists())


class PaymentGatewayCheckoutTests(TestCase):
    def setUp(self):
        self.gateway = PaymentGateway(api_key="sk_test_123", webhook_secret="whsec_test", currency="usd")

    def test_session_uses_minor_units_and_string_metadata(self):
        session = mock.Mock(id="cs_test_42", url="https://checkout.stripe.com/c/pay/cs_test_42")
        with mock.patch.object(stripe.checkout.Session, "create", return_value=session) as create:
            result = self.gateway.create_checkout_session(
                amount=Decimal("39.99"),
                product_name="Course",
                success_url="https://a/ok",
                cancel_url="https://a/cancel",
                metadata={"purchaseId": 7, "userId": "user_1"},
                image_url="https://media.example.com/t.png",
            )

        self.assertIs(result, session)
        kwargs = create.call_args.kwargs
        self.assertEqual(kwargs["api_key"], "sk_test_123")
        self.assertEqual(kwargs["mode"], "payment")
        line_item = kwargs["line_items"][0]
        self.assertEqual(line_item["price_data"]["unit_amount"], 3999)
        self.assertEqual(line_item["price_data"]["currency"], "usd")
        self.assertEqual(line_item["price_data"]["product_data"]["images"], ["https://media.example.com/t.png"])
        self.assertEqual(kwargs["metadata"], {"purchaseId": "7", "userId": "user_1"})

    def test_stripe_error_is_wrapped(self):
        with mock.patch.object(
            stripe.checkout.Session, "create", side_effect=stripe.APIConnectionError("Network down")
        ):
            with self.assertRaises(CheckoutSessionException):
                self.gateway.create_checkout_session(
                    amount=Decimal("10"),
                    product_name="Course",
                    success_url="https://a/ok",
                    cancel_url="https://a/cancel",
                    metadata={},
                )

    def test_minimum_charge_table(self):
        self.assertEqual(self.gateway.minimum_charge(), Decimal("0.50"))
        self.assertEqual(self.gateway.minimum_charge("gbp"), Decimal("0.30"))
        self.assertEqual(self.gateway.minimum_charge("JPY"), Decimal("50"))
        self.assertEqual(self.gateway.minimum_charge("xyz"), Decimal("0.50"))

    def test_minor_units(self):
        self.assertEqual(self.gateway.to_minor_units(Decimal("80.00")), 8000)
        self.assertEqual(self.gateway.to_minor_units(Decimal("500"), "jpy"), 500)
        self.assertEqual(self.gateway.from_minor_units(3999), Decimal("39.99"))
