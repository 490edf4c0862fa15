from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                (
                    "id",
                    models.CharField(
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                        verbose_name="Clerk User ID",
                    ),
                ),
                ("name", models.CharField(max_length=200, verbose_name="Name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="E-mail")),
                (
                    "image_url",
                    models.URLField(
                        default="https://ui-avatars.com/api/?name=User",
                        max_length=500,
                        verbose_name="Image URL",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "User",
                "verbose_name_plural": "Users",
                "db_table": "marketplace_user",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Course",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255, verbose_name="Title")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="Price",
                    ),
                ),
                (
                    "discount",
                    models.PositiveSmallIntegerField(
                        default=0,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                        verbose_name="Discount (%)",
                    ),
                ),
                ("thumbnail", models.URLField(blank=True, max_length=500, verbose_name="Thumbnail")),
                ("is_published", models.BooleanField(default=True, verbose_name="Published")),
                ("content", models.JSONField(blank=True, default=list, verbose_name="Course Content")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "educator",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="authored_courses",
                        to="marketplace.user",
                        verbose_name="Educator",
                    ),
                ),
            ],
            options={
                "verbose_name": "Course",
                "verbose_name_plural": "Courses",
                "db_table": "marketplace_course",
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("discount__gte", 0), ("discount__lte", 100)),
                        name="course_discount_between_0_and_100",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("price__gte", 0)),
                        name="course_price_not_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Enrollment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "source",
                    models.CharField(
                        choices=[
                            ("checkout", "Stripe Checkout"),
                            ("direct", "Direct Enrollment"),
                            ("bypass", "Development Bypass"),
                            ("repair", "Read Repair"),
                            ("admin", "Admin"),
                        ],
                        default="checkout",
                        max_length=16,
                        verbose_name="Source",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="enrollments",
                        to="marketplace.course",
                        verbose_name="Course",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="enrollments",
                        to="marketplace.user",
                        verbose_name="User",
                    ),
                ),
            ],
            options={
                "verbose_name": "Enrollment",
                "verbose_name_plural": "Enrollments",
                "db_table": "marketplace_enrollment",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user", "course"), name="unique_enrollment_per_user_course"
                    )
                ],
            },
        ),
        migrations.AddField(
            model_name="user",
            name="enrolled_courses",
            field=models.ManyToManyField(
                blank=True,
                related_name="enrolled_students",
                through="marketplace.Enrollment",
                to="marketplace.course",
                verbose_name="Enrolled Courses",
            ),
        ),
        migrations.CreateModel(
            name="CourseProgress",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("completed_lectures", models.JSONField(blank=True, default=list)),
                ("last_watched_chapter", models.CharField(blank=True, max_length=64)),
                ("last_watched_lecture", models.CharField(blank=True, max_length=64)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="progress_entries",
                        to="marketplace.course",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="course_progress",
                        to="marketplace.user",
                    ),
                ),
            ],
            options={
                "verbose_name": "Course Progress",
                "verbose_name_plural": "Course Progress",
                "db_table": "marketplace_course_progress",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user", "course"), name="unique_progress_per_user_course"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="CourseRating",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "rating",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ]
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ratings",
                        to="marketplace.course",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="course_ratings",
                        to="marketplace.user",
                    ),
                ),
            ],
            options={
                "verbose_name": "Course Rating",
                "verbose_name_plural": "Course Ratings",
                "db_table": "marketplace_course_rating",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("course", "user"), name="unique_rating_per_course_user"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Purchase",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="Charged Amount",
                    ),
                ),
                (
                    "original_amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Intended price before the minimum-charge adjustment",
                        max_digits=10,
                        null=True,
                        verbose_name="Original Amount",
                    ),
                ),
                ("price_adjusted", models.BooleanField(default=False, verbose_name="Price Adjusted")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                            ("refunded", "Refunded"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=12,
                        verbose_name="Status",
                    ),
                ),
                ("completed_at", models.DateTimeField(blank=True, null=True, verbose_name="Completed At")),
                ("stripe_session_id", models.CharField(blank=True, db_index=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "course",
                    models.ForeignKey(
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="purchases",
                        to="marketplace.course",
                        verbose_name="Course",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="purchases",
                        to="marketplace.user",
                        verbose_name="User",
                    ),
                ),
            ],
            options={
                "verbose_name": "Purchase",
                "verbose_name_plural": "Purchases",
                "db_table": "marketplace_purchase",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["user", "course", "status"],
                        name="purchase_user_course_status",
                    )
                ],
            },
        ),
    ]
