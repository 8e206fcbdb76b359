"""Views of the blog API"""

from flask import request

from restframe.api.flask.viewsets import (
    GenericAPIResourceSet,
    ReadOnlyAPIResourceSet,
    action,
)
from restframe.core.repository import repository_for

from .models import Comment, Post, User
from .serializers import (
    CommentSerializer,
    PostDetailSerializer,
    PostSerializer,
    UserSerializer,
)


class PostResourceSet(GenericAPIResourceSet):
    entity_cls = Post
    serializer_cls = PostSerializer

    def show_resource(self, identifier):
        # Embed comments when a single post is requested
        self.serializer_cls = PostDetailSerializer
        return super().show_resource(identifier)

    @action(detail=True, method="GET")
    def comments(self, identifier):
        """List the comments of a post"""
        post = self.get_object(identifier)
        comments = repository_for(Comment).filter(post_id=post.id)
        return self.serialize_page(comments, serializer=CommentSerializer(many=True)), 200


class CommentResourceSet(GenericAPIResourceSet):
    entity_cls = Comment
    serializer_cls = CommentSerializer

    def get_payload(self):
        """New comments are attributed to the authenticated user, unless specified"""
        payload = super().get_payload()
        if request.method != "POST" or self.user is None:
            return payload
        if isinstance(payload, dict) and "user" not in payload:
            payload = {**payload, "user": self.user.id}
        return payload


class UserResourceSet(ReadOnlyAPIResourceSet):
    entity_cls = User
    serializer_cls = UserSerializer
