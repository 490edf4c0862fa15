from rest_framework import serializers

from marketplace.models import CourseProgress, User


class UserSerializer(serializers.ModelSerializer):
    """Profile of the current user with the ids of the enrolled courses."""

    _id = serializers.CharField(source="id", read_only=True)
    imageUrl = serializers.CharField(source="image_url", read_only=True)
    enrolledCourses = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = User
        fields = ["_id", "name", "email", "imageUrl", "enrolledCourses", "createdAt"]

    def get_enrolledCourses(self, obj):
        return list(obj.enrollments.values_list("course_id", flat=True))


class CourseProgressSerializer(serializers.ModelSerializer):
    courseId = serializers.IntegerField(source="course_id", read_only=True)
    lectureCompleted = serializers.ListField(source="completed_lectures", read_only=True)
    lastWatchedChapter = serializers.CharField(source="last_watched_chapter", read_only=True)
    lastWatchedLecture = serializers.CharField(source="last_watched_lecture", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = CourseProgress
        fields = ["courseId", "lectureCompleted", "lastWatchedChapter", "lastWatchedLecture", "updatedAt"]


# --- Request bodies ---


class CourseIdSerializer(serializers.Serializer):
    courseId = serializers.IntegerField(
        min_value=1,
        error_messages={"required": "Course ID is required", "null": "Course ID is required"},
    )


class ProgressUpdateSerializer(CourseIdSerializer):
    lectureId = serializers.CharField(max_length=64)
    chapterId = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")


class RatingSerializer(CourseIdSerializer):
    rating = serializers.IntegerField(
        min_value=1,
        max_value=5,
        error_messages={"min_value": "Invalid Details", "max_value": "Invalid Details"},
    )
