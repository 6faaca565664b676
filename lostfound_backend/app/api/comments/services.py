# app/api/comments/services.py

import logging
from dataclasses import asdict
from typing import Optional, Dict, Any, List, Callable
from datetime import datetime

from firebase_admin import firestore
from marshmallow import ValidationError

from app.models.comment import Comment
from app.models.user import User
from app.utils.datetime_utils import DateTimeUtils

class CommentService:
    """
    댓글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 최상위 댓글/답글 생성, 답글을 포함한 목록 조회, 답글까지 함께 지우는 삭제를 포함합니다.
    - 답글은 한 단계 깊이만 가정합니다 (목록 조회와 연쇄 삭제 모두 직계 답글만 다룸).
    """
    # Firestore WriteBatch 한 번에 담을 수 있는 최대 쓰기 수
    BATCH_LIMIT = 500

    def __init__(self, db=None, clock: Optional[Callable[[], datetime]] = None):
        """서비스 초기화 시 Firestore 클라이언트 및 컬렉션 참조를 설정합니다."""
        self.db = db if db is not None else firestore.client()
        self.comments_ref = self.db.collection('comments')
        self.users_ref = self.db.collection('users')
        self.clock = clock or DateTimeUtils.now

    def _insert(self, post_id: str, user_id: str, text: str, parent_comment_id: Optional[str] = None) -> Dict[str, Any]:
        """자동 생성 ID로 새 댓글 문서를 저장하고 저장된 내용을 반환합니다."""
        doc_ref = self.comments_ref.document()
        new_comment = Comment(
            comment_id=doc_ref.id,
            post_id=post_id,
            user_id=user_id,
            text=text,
            parent_comment_id=parent_comment_id,
            created_at=self.clock()
        )
        doc_ref.set(DateTimeUtils.for_firestore(asdict(new_comment)))
        return asdict(new_comment)

    def create_comment(self, post_id: str, user_id: str, text: str) -> Dict[str, Any]:
        """게시글에 최상위 댓글을 작성합니다."""
        comment = self._insert(post_id, user_id, text)
        logging.info(f"댓글 생성 완료 (comment_id: {comment['comment_id']}, post_id: {post_id})")
        return comment

    def create_reply(self, post_id: str, parent_comment_id: str, user_id: str, text: str) -> Dict[str, Any]:
        """
        기존 댓글에 답글을 작성합니다.
        - 부모 댓글이 없으면 ValueError
        - 부모 댓글과 다른 게시글로 답글을 달려고 하면 ValidationError
        """
        parent_doc = self.comments_ref.document(parent_comment_id).get()
        if not parent_doc.exists:
            raise ValueError("Parent comment not found")

        parent = parent_doc.to_dict()
        if parent.get('post_id') != post_id:
            raise ValidationError({"postId": ["postId does not match the parent comment's post"]})

        reply = self._insert(post_id, user_id, text, parent_comment_id=parent_comment_id)
        logging.info(f"답글 생성 완료 (comment_id: {reply['comment_id']}, parent: {parent_comment_id})")
        return reply

    def _get_author(self, user_id: Optional[str], cache: Dict[str, Optional[Dict[str, Any]]]) -> Optional[Dict[str, Any]]:
        """작성자 표시 정보(email, profile_picture)를 조회합니다. 요청 단위로 캐시합니다."""
        if not user_id:
            return None
        if user_id not in cache:
            user_doc = self.users_ref.document(user_id).get()
            if user_doc.exists:
                user_info = user_doc.to_dict()
                cache[user_id] = asdict(User(
                    user_id=user_id,
                    email=user_info.get('email'),
                    profile_picture=user_info.get('profile_picture')
                ))
            else:
                cache[user_id] = None
        return cache[user_id]

    def _with_author(self, doc, authors: Dict[str, Optional[Dict[str, Any]]]) -> Dict[str, Any]:
        comment = DateTimeUtils.from_firestore(doc.to_dict())
        comment['author'] = self._get_author(comment.get('user_id'), authors)
        return comment

    def get_comments_for_post(self, post_id: str) -> List[Dict[str, Any]]:
        """
        게시글의 최상위 댓글을 최신순으로 조회하고, 각 댓글에 직계 답글을 오래된 순으로 붙입니다.
        삭제 표시 같은 필터 없이 일치하는 문서를 모두 반환합니다.
        """
        authors: Dict[str, Optional[Dict[str, Any]]] = {}
        query = (
            self.comments_ref
            .where('post_id', '==', post_id)
            .where('parent_comment_id', '==', None)
            .order_by('created_at', direction=firestore.Query.DESCENDING)
        )
        comments = [self._with_author(doc, authors) for doc in query.stream()]

        for comment in comments:
            replies_query = (
                self.comments_ref
                .where('parent_comment_id', '==', comment['comment_id'])
                .order_by('created_at', direction=firestore.Query.ASCENDING)
            )
            comment['replies'] = [self._with_author(doc, authors) for doc in replies_query.stream()]

        return comments

    def delete_comment(self, comment_id: str, user_id: str) -> int:
        """
        댓글을 삭제하고 삭제된 문서 수를 반환합니다. (작성자 본인만 가능)
        최상위 댓글이면 직계 답글도 같은 WriteBatch로 함께 삭제합니다.
        """
        comment_ref = self.comments_ref.document(comment_id)
        comment_doc = comment_ref.get()
        if not comment_doc.exists:
            raise ValueError("Comment not found")

        comment_data = comment_doc.to_dict()
        if comment_data.get('user_id') != user_id:
            raise PermissionError("Not authorized to delete this comment")

        refs_to_delete = []
        if comment_data.get('parent_comment_id') is None:
            replies = self.comments_ref.where('parent_comment_id', '==', comment_id).stream()
            refs_to_delete.extend(doc.reference for doc in replies)
        # 부모 댓글은 마지막 배치에 들어가도록 맨 뒤에 둡니다.
        refs_to_delete.append(comment_ref)

        try:
            for i in range(0, len(refs_to_delete), self.BATCH_LIMIT):
                batch = self.db.batch()
                for ref in refs_to_delete[i:i + self.BATCH_LIMIT]:
                    batch.delete(ref)
                batch.commit()
        except Exception as e:
            logging.error(f"댓글 삭제 실패 (comment_id: {comment_id}): {e}", exc_info=True)
            raise

        logging.info(f"댓글 삭제 완료 (comment_id: {comment_id}, 삭제된 문서 수: {len(refs_to_delete)})")
        return len(refs_to_delete)
