"""Serializers of the blog API"""

from restframe.core.serializer import EntitySerializer

from .models import Comment, Post, User


class UserSerializer(EntitySerializer):
    class Meta:
        entity = User


class PostSerializer(EntitySerializer):
    class Meta:
        entity = Post
        fields = ("id", "title", "text", "created", "comments")


class PostDetailSerializer(EntitySerializer):
    """Embeds comments in the post representation"""

    class Meta:
        entity = Post
        depth = 1


class CommentSerializer(EntitySerializer):
    class Meta:
        entity = Comment


class LinkedPostSerializer(EntitySerializer):
    """Post representation with related resources referenced by URL"""

    class Meta:
        entity = Post
        relations = "link"


class LinkedCommentSerializer(EntitySerializer):
    """Comment representation with related resources referenced by URL"""

    class Meta:
        entity = Comment
        relations = "link"
