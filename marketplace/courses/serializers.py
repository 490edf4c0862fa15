from rest_framework import serializers

from marketplace.models import Course, CourseRating, User


class EducatorSummarySerializer(serializers.ModelSerializer):
    _id = serializers.CharField(source="id", read_only=True)
    imageUrl = serializers.CharField(source="image_url", read_only=True)

    class Meta:
        model = User
        fields = ["_id", "name", "imageUrl"]


class CourseRatingSerializer(serializers.ModelSerializer):
    userId = serializers.CharField(source="user_id", read_only=True)

    class Meta:
        model = CourseRating
        fields = ["userId", "rating"]


class CourseSerializer(serializers.ModelSerializer):
    """
    Course in the client's wire format.

    `courseContent` is rendered by `get_course_content`; subclasses decide
    how much of the lecture URLs a caller may see. The full content tree is
    returned here, which is only used for enrolled learners and owners.
    """

    _id = serializers.IntegerField(source="id", read_only=True)
    courseTitle = serializers.CharField(source="title")
    courseDescription = serializers.CharField(source="description")
    coursePrice = serializers.DecimalField(
        source="price", max_digits=10, decimal_places=2, coerce_to_string=False
    )
    discount = serializers.IntegerField()
    discountedPrice = serializers.DecimalField(
        source="discounted_price",
        max_digits=10,
        decimal_places=2,
        coerce_to_string=False,
        read_only=True,
    )
    courseThumbnail = serializers.CharField(source="thumbnail")
    isPublished = serializers.BooleanField(source="is_published")
    educator = EducatorSummarySerializer(read_only=True)
    courseContent = serializers.SerializerMethodField(method_name="get_course_content")
    enrolledStudents = serializers.SerializerMethodField()
    courseRatings = CourseRatingSerializer(source="ratings", many=True, read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Course
        fields = [
            "_id",
            "courseTitle",
            "courseDescription",
            "coursePrice",
            "discount",
            "discountedPrice",
            "courseThumbnail",
            "isPublished",
            "educator",
            "courseContent",
            "enrolledStudents",
            "courseRatings",
            "createdAt",
            "updatedAt",
        ]

    def get_course_content(self, obj):
        return obj.content or []

    def get_enrolledStudents(self, obj):
        return [enrollment.user_id for enrollment in obj.enrollments.all()]


class CourseListSerializer(CourseSerializer):
    """Catalog listing: no lecture URLs at all."""

    def get_course_content(self, obj):
        return obj.content_without_urls()


class CourseDetailSerializer(CourseSerializer):
    """Public course page: only free preview lectures keep their URL."""

    def get_course_content(self, obj):
        return obj.content_with_gated_previews()


# --- Authoring input ---


class LectureSerializer(serializers.Serializer):
    lectureId = serializers.CharField(max_length=64, required=False)
    lectureTitle = serializers.CharField(max_length=255)
    lectureDuration = serializers.FloatField(min_value=0)
    lectureUrl = serializers.URLField(max_length=500)
    isPreviewFree = serializers.BooleanField(default=False)
    lectureOrder = serializers.IntegerField(min_value=1)


class ChapterSerializer(serializers.Serializer):
    chapterId = serializers.CharField(max_length=64, required=False)
    chapterOrder = serializers.IntegerField(min_value=1)
    chapterTitle = serializers.CharField(max_length=255)
    chapterContent = LectureSerializer(many=True)


class CourseCreateSerializer(serializers.Serializer):
    """
    Parsed `courseData` of the add-course form. The educator is never read
    from here; it comes from the authenticated identity.
    """

    courseTitle = serializers.CharField(
        max_length=255,
        error_messages={"required": "Course title is required", "blank": "Course title is required"},
    )
    courseDescription = serializers.CharField(required=False, allow_blank=True, default="")
    coursePrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    discount = serializers.IntegerField(min_value=0, max_value=100, default=0)
    isPublished = serializers.BooleanField(default=True)
    courseContent = ChapterSerializer(
        many=True,
        allow_empty=False,
        error_messages={
            "required": "Course content is required",
            "empty": "Course content is required",
        },
    )


class AddCourseFormSerializer(serializers.Serializer):
    """Multipart envelope of the add-course request."""

    courseData = serializers.JSONField(
        binary=True,
        error_messages={"required": "Course data is required", "invalid": "Invalid course data format"},
    )
    image = serializers.FileField(
        error_messages={"required": "Thumbnail Not Attached", "empty": "Thumbnail Not Attached"},
    )
