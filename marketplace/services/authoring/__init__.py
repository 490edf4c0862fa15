from .authoring_service import AuthoringService, build_content_tree

__all__ = ["AuthoringService", "build_content_tree"]
