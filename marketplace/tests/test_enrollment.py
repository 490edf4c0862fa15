from decimal import Decimal
from unittest import mock

from django.test import TestCase
from rest_framework.test import APIClient

from marketplace.models import Course, CourseProgress, Enrollment, Purchase
from marketplace.services.enrollment import EnrollmentService, parse_id

from .helpers import identity, make_course, make_user


class EnrollServiceTests(TestCase):
    def setUp(self):
        self.service = EnrollmentService()
        self.user = make_user()
        self.course = make_course()

    def test_enroll_is_idempotent(self):
        self.assertTrue(self.service.enroll(self.user, self.course))
        self.assertFalse(self.service.enroll(self.user, self.course, source=Enrollment.Source.DIRECT))

        self.assertEqual(Enrollment.objects.count(), 1)
        self.assertEqual(self.user.enrolled_courses.count(), 1)
        self.assertEqual(self.course.enrolled_students.count(), 1)

    def test_missing_edge_after_write_is_reapplied(self):
        exists_calls = []
        original_filter = Enrollment.objects.filter

        def filter_hiding_first_check(*args, **kwargs):
            queryset = original_filter(*args, **kwargs)
            if not exists_calls:
                exists_calls.append(True)
                return queryset.none()
            return queryset

        with mock.patch.object(Enrollment.objects, "filter", side_effect=filter_hiding_first_check):
            self.service.enroll(self.user, self.course)

        self.assertEqual(Enrollment.objects.filter(user=self.user, course=self.course).count(), 1)

    def test_parse_id(self):
        self.assertEqual(parse_id("12"), 12)
        self.assertEqual(parse_id(7), 7)
        self.assertIsNone(parse_id(None))
        self.assertIsNone(parse_id("abc"))
        self.assertIsNone(parse_id(True))


class PaymentReconciliationTests(TestCase):
    def setUp(self):
        self.service = EnrollmentService()
        self.user = make_user()
        self.course = make_course()
        self.purchase = Purchase.objects.create(
            user=self.user, course=self.course, amount=Decimal("80.00"), stripe_session_id="cs_1"
        )

    def test_success_completes_purchase_and_enrolls(self):
        purchase = self.service.record_payment_success(purchase_id=str(self.purchase.pk), reference="cs_1")

        self.assertEqual(purchase.status, Purchase.Status.COMPLETED)
        self.assertIsNotNone(purchase.completed_at)
        self.assertTrue(self.user.is_enrolled_in(self.course.pk))

    def test_duplicate_success_keeps_single_edge(self):
        for _ in range(2):
            self.service.record_payment_success(purchase_id=self.purchase.pk, reference="cs_1")

        self.assertEqual(Enrollment.objects.filter(user=self.user, course=self.course).count(), 1)
        self.assertEqual(Purchase.objects.filter(status=Purchase.Status.COMPLETED).count(), 1)

    def test_success_found_by_session_reference(self):
        purchase = self.service.record_payment_success(purchase_id="bogus", reference="cs_1")
        self.assertEqual(purchase.pk, self.purchase.pk)
        self.assertEqual(purchase.status, Purchase.Status.COMPLETED)

    def test_unknown_purchase_falls_back_to_metadata(self):
        purchase = self.service.record_payment_success(
            purchase_id="999999",
            user_id=self.user.pk,
            course_id=str(self.course.pk),
            reference="cs_other",
            amount=Decimal("80.00"),
        )

        self.assertNotEqual(purchase.pk, self.purchase.pk)
        self.assertEqual(purchase.status, Purchase.Status.COMPLETED)
        self.assertEqual(purchase.stripe_session_id, "cs_other")
        self.assertTrue(self.user.is_enrolled_in(self.course.pk))

    def test_missing_user_is_terminal(self):
        result = self.service.record_payment_success(
            purchase_id=None, user_id="user_ghost", course_id=self.course.pk, reference="cs_x"
        )
        self.assertIsNone(result)
        self.assertFalse(Enrollment.objects.exists())

    def test_missing_course_is_terminal(self):
        result = self.service.record_payment_success(
            purchase_id=None, user_id=self.user.pk, course_id=999999, reference="cs_x"
        )
        self.assertIsNone(result)
        self.assertFalse(Enrollment.objects.exists())

    def test_failure_marks_open_purchase_failed(self):
        self.service.record_payment_failure(purchase_id=self.purchase.pk)
        self.purchase.refresh_from_db()
        self.assertEqual(self.purchase.status, Purchase.Status.FAILED)
        self.assertFalse(Enrollment.objects.exists())

    def test_failure_does_not_touch_completed_purchase(self):
        self.service.record_payment_success(purchase_id=self.purchase.pk)
        self.service.record_payment_failure(reference="cs_1")
        self.purchase.refresh_from_db()
        self.assertEqual(self.purchase.status, Purchase.Status.COMPLETED)

    def test_processing(self):
        self.service.record_payment_processing(reference="cs_1")
        self.purchase.refresh_from_db()
        self.assertEqual(self.purchase.status, Purchase.Status.PROCESSING)

        self.service.record_payment_success(purchase_id=self.purchase.pk)
        self.purchase.refresh_from_db()
        self.assertEqual(self.purchase.status, Purchase.Status.COMPLETED)


class LearnerEnrollmentViewTests(TestCase):
    client_class = APIClient

    def setUp(self):
        self.user = make_user("user_student")
        self.course = make_course(price="100.00", discount=20)
        self.client.force_authenticate(user=identity("user_student"))

    def test_user_data_creates_profile_on_first_access(self):
        self.client.force_authenticate(user=identity("user_fresh", name="Fresh Face"))

        response = self.client.get("/api/user/data")

        self.assertEqual(response.status_code, 200)
        user = response.json()["user"]
        self.assertEqual(user["_id"], "user_fresh")
        self.assertEqual(user["name"], "Fresh Face")
        self.assertEqual(user["enrolledCourses"], [])

    def test_user_data_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get("/api/user/data")

        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()["success"])

    def test_direct_enroll(self):
        response = self.client.post("/api/user/direct-enroll", {"courseId": self.course.pk}, format="json")

        self.assertEqual(response.status_code, 200)
        purchase = Purchase.objects.get(pk=response.json()["purchaseId"])
        self.assertEqual(purchase.status, Purchase.Status.COMPLETED)
        self.assertEqual(purchase.amount, Decimal("80.00"))
        self.assertEqual(Enrollment.objects.get().source, Enrollment.Source.DIRECT)

    def test_direct_enroll_free_course(self):
        free = make_course(title="Free", price="0", discount=0)
        response = self.client.post("/api/user/direct-enroll", {"courseId": free.pk}, format="json")
        self.assertEqual(Purchase.objects.get(pk=response.json()["purchaseId"]).amount, Decimal("0"))

    def test_direct_enroll_twice(self):
        self.client.post("/api/user/direct-enroll", {"courseId": self.course.pk}, format="json")
        response = self.client.post("/api/user/direct-enroll", {"courseId": self.course.pk}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(Enrollment.objects.count(), 1)

    def test_direct_enroll_unknown_course(self):
        response = self.client.post("/api/user/direct-enroll", {"courseId": 999999}, format="json")
        self.assertEqual(response.status_code, 404)

    def test_enrolled_courses_is_union_of_edges_and_completed_purchases(self):
        via_edge = self.course
        via_purchase = make_course(title="Bought")
        pending_only = make_course(title="Pending")
        Enrollment.objects.create(user=self.user, course=via_edge)
        Purchase.objects.create(
            user=self.user, course=via_edge, amount=Decimal("80"), status=Purchase.Status.COMPLETED
        )
        Purchase.objects.create(
            user=self.user, course=via_purchase, amount=Decimal("80"), status=Purchase.Status.COMPLETED
        )
        Purchase.objects.create(user=self.user, course=pending_only, amount=Decimal("80"))

        response = self.client.get("/api/user/enrolled-courses")

        self.assertEqual(response.status_code, 200)
        ids = sorted(course["_id"] for course in response.json()["enrolledCourses"])
        self.assertEqual(ids, sorted([via_edge.pk, via_purchase.pk]))

    def test_enrolled_courses_include_lecture_urls(self):
        Enrollment.objects.create(user=self.user, course=self.course)
        course = self.client.get("/api/user/enrolled-courses").json()["enrolledCourses"][0]
        self.assertEqual(course["courseContent"][0]["chapterContent"][1]["lectureUrl"], "https://youtu.be/paid")

    def test_unenroll_removes_edge_progress_and_purchases(self):
        Enrollment.objects.create(user=self.user, course=self.course)
        CourseProgress.objects.create(user=self.user, course=self.course, completed_lectures=["lec1"])
        Purchase.objects.create(
            user=self.user, course=self.course, amount=Decimal("80"), status=Purchase.Status.COMPLETED
        )

        response = self.client.post("/api/user/unenroll", {"courseId": self.course.pk}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Enrollment.objects.exists())
        self.assertFalse(CourseProgress.objects.exists())
        self.assertFalse(Purchase.objects.exists())

        status_response = self.client.get(f"/api/user/enrollment-status/{self.course.pk}")
        self.assertEqual(
            status_response.json(), {"success": True, "isEnrolled": False, "isPending": False}
        )

    def test_unenroll_when_not_enrolled(self):
        response = self.client.post("/api/user/unenroll", {"courseId": self.course.pk}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_unenroll_from_deleted_course(self):
        course_id = self.course.pk
        Purchase.objects.create(
            user=self.user, course=self.course, amount=Decimal("80"), status=Purchase.Status.COMPLETED
        )
        Course.objects.filter(pk=course_id).delete()

        response = self.client.post("/api/user/unenroll", {"courseId": course_id}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Purchase.objects.filter(course_id=course_id).exists())

    def test_status_enrolled(self):
        Enrollment.objects.create(user=self.user, course=self.course)
        response = self.client.get(f"/api/user/enrollment-status/{self.course.pk}")
        self.assertEqual(response.json(), {"success": True, "isEnrolled": True, "isPending": False})

    def test_status_pending(self):
        Purchase.objects.create(user=self.user, course=self.course, amount=Decimal("80"))
        response = self.client.get(f"/api/user/enrollment-status/{self.course.pk}")
        self.assertEqual(response.json(), {"success": True, "isEnrolled": False, "isPending": True})

    def test_status_neither(self):
        Purchase.objects.create(
            user=self.user, course=self.course, amount=Decimal("80"), status=Purchase.Status.FAILED
        )
        response = self.client.get(f"/api/user/enrollment-status/{self.course.pk}")
        self.assertEqual(response.json(), {"success": True, "isEnrolled": False, "isPending": False})

    def test_status_repairs_missing_edge(self):
        Purchase.objects.create(
            user=self.user, course=self.course, amount=Decimal("80"), status=Purchase.Status.COMPLETED
        )

        response = self.client.get(f"/api/user/enrollment-status/{self.course.pk}")

        self.assertEqual(response.json(), {"success": True, "isEnrolled": True, "isPending": False})
        edge = Enrollment.objects.get(user=self.user, course=self.course)
        self.assertEqual(edge.source, Enrollment.Source.REPAIR)
        self.assertIn(self.user, self.course.enrolled_students.all())
