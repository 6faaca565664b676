# app/models/user.py
from dataclasses import dataclass
from typing import Optional

@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 중 댓글 작성자 표시에 필요한 부분.
    사용자 문서의 생성/수정은 이 서비스의 범위 밖입니다.
    """
    user_id: str
    email: Optional[str] = None
    profile_picture: Optional[str] = None
