# 모든 모델을 import 하여 relationship 문자열 참조가 해석되도록 매퍼 등록
from cityloops.models.user import User, Role
from cityloops.models.loop import Loop, LoopTag
from cityloops.models.place import Place
from cityloops.models.comment import Comment
from cityloops.models.like import Like, CommentLike

__all__ = [
    "User", "Role", "Loop", "LoopTag", "Place", "Comment", "Like", "CommentLike",
]
