"""
Seed a demo educator and sample courses.

Usage:
    python manage.py seed_courses
    python manage.py seed_courses --educator-id user_123 --unpublished

Running the command again leaves existing rows untouched: the educator is
matched by id and courses by (educator, title).
"""

import logging
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from marketplace.models import Course, User
from marketplace.services.authoring import build_content_tree

logger = logging.getLogger(__name__)

DEMO_EDUCATOR = {
    "id": "user_demo_educator",
    "name": "Demo Educator",
    "email": "educator@example.com",
    "image_url": "https://ui-avatars.com/api/?name=Demo+Educator",
}

SAMPLE_COURSES = [
    {
        "title": "Introduction to JavaScript",
        "description": "<p>Learn the basics of JavaScript, the language of the web.</p>",
        "price": Decimal("49.99"),
        "discount": 20,
        "thumbnail": "https://placehold.co/600x400?text=JavaScript",
        "content": [
            {
                "chapterOrder": 1,
                "chapterTitle": "Getting Started with JavaScript",
                "chapterContent": [
                    {
                        "lectureTitle": "What is JavaScript?",
                        "lectureDuration": 16,
                        "lectureUrl": "https://youtu.be/CBWnBi-awSA",
                        "isPreviewFree": True,
                        "lectureOrder": 1,
                    },
                    {
                        "lectureTitle": "Setting Up Your Environment",
                        "lectureDuration": 19,
                        "lectureUrl": "https://youtu.be/4l87c2aeB4I",
                        "isPreviewFree": False,
                        "lectureOrder": 2,
                    },
                ],
            },
            {
                "chapterOrder": 2,
                "chapterTitle": "Variables and Data Types",
                "chapterContent": [
                    {
                        "lectureTitle": "Understanding Variables",
                        "lectureDuration": 20,
                        "lectureUrl": "https://youtu.be/pZQeBJsGoDQ",
                        "isPreviewFree": True,
                        "lectureOrder": 1,
                    },
                    {
                        "lectureTitle": "Data Types in JavaScript",
                        "lectureDuration": 10,
                        "lectureUrl": "https://youtu.be/ufHT2WEkkC4",
                        "isPreviewFree": False,
                        "lectureOrder": 2,
                    },
                ],
            },
        ],
    },
    {
        "title": "Advanced Python Programming",
        "description": "<p>Deepen your Python skills with data structures and OOP.</p>",
        "price": Decimal("79.99"),
        "discount": 15,
        "thumbnail": "https://placehold.co/600x400?text=Python",
        "content": [
            {
                "chapterOrder": 1,
                "chapterTitle": "Advanced Data Structures",
                "chapterContent": [
                    {
                        "lectureTitle": "Lists and Tuples",
                        "lectureDuration": 720,
                        "lectureUrl": "https://youtu.be/HdLIMoQkXFA",
                        "isPreviewFree": True,
                        "lectureOrder": 1,
                    },
                    {
                        "lectureTitle": "Dictionaries and Sets",
                        "lectureDuration": 850,
                        "lectureUrl": "https://youtu.be/HdLIMoQkXFA",
                        "isPreviewFree": False,
                        "lectureOrder": 2,
                    },
                ],
            },
        ],
    },
    {
        "title": "Free Git Crash Course",
        "description": "<p>Version control fundamentals in one sitting.</p>",
        "price": Decimal("0"),
        "discount": 0,
        "thumbnail": "https://placehold.co/600x400?text=Git",
        "content": [
            {
                "chapterOrder": 1,
                "chapterTitle": "Basics",
                "chapterContent": [
                    {
                        "lectureTitle": "Commits and Branches",
                        "lectureDuration": 12,
                        "lectureUrl": "https://youtu.be/8JJ101D3knE",
                        "isPreviewFree": True,
                        "lectureOrder": 1,
                    },
                ],
            },
        ],
    },
]


class Command(BaseCommand):
    help = "Seeds a demo educator and sample courses (idempotent)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--educator-id",
            default=DEMO_EDUCATOR["id"],
            help="Clerk user id of the educator owning the sample courses",
        )
        parser.add_argument(
            "--unpublished",
            action="store_true",
            help="Create the sample courses unpublished",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        educator_defaults = {key: value for key, value in DEMO_EDUCATOR.items() if key != "id"}
        educator, created = User.objects.get_or_create(
            pk=options["educator_id"], defaults=educator_defaults
        )
        if created:
            self.stdout.write(self.style.SUCCESS(f"Created educator {educator.pk}"))
        else:
            self.stdout.write(f"Educator {educator.pk} already exists")

        created_count = 0
        for sample in SAMPLE_COURSES:
            defaults = {
                "description": sample["description"],
                "price": sample["price"],
                "discount": sample["discount"],
                "thumbnail": sample["thumbnail"],
                "is_published": not options["unpublished"],
                "content": build_content_tree(sample["content"]),
            }
            course, created = Course.objects.get_or_create(
                educator=educator, title=sample["title"], defaults=defaults
            )
            if created:
                created_count += 1
                logger.info("Seeded course %s (%s)", course.pk, course.title)
            else:
                self.stdout.write(f"Course '{course.title}' already exists, skipping")

        self.stdout.write(
            self.style.SUCCESS(
                f"Seeding finished: {created_count} of {len(SAMPLE_COURSES)} courses created"
            )
        )
