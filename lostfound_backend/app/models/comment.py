# app/models/comment.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from app.utils.datetime_utils import DateTimeUtils

@dataclass
class Comment:
    """
    Firestore 'comments' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    parent_comment_id가 None이면 최상위 댓글, 값이 있으면 답글입니다.
    """
    comment_id: str
    post_id: str
    user_id: str
    text: str
    parent_comment_id: Optional[str] = None
    created_at: datetime = field(default_factory=DateTimeUtils.now)
