"""Publishers persist annotations to a publishing service."""

from marginalia.publisher.base import Publisher, PublishError, ReplyRequest

__all__ = ["PublishError", "Publisher", "ReplyRequest"]
