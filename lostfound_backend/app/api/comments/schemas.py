# app/api/comments/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE, ValidationError

from app.utils.identifiers import is_valid_document_id

# --- 요청 스키마 ---

def _document_id(data_key: str, label: str) -> fields.Str:
    """Firestore 문서 ID 형식을 검사하는 필수 문자열 필드를 만듭니다."""
    def _check(value):
        if not is_valid_document_id(value):
            raise ValidationError(f"Invalid {label} format")

    return fields.Str(
        required=True,
        data_key=data_key,
        validate=_check,
        error_messages={"required": f"{label} is required", "null": f"{label} is required"},
    )

def _text_field() -> fields.Str:
    return fields.Str(
        required=True,
        validate=validate.Length(min=1, error="Comment text is required"),
        error_messages={"required": "Comment text is required", "null": "Comment text is required"},
    )

class CommentCreateSchema(Schema):
    """
    POST /api/comments/{postId}
    최상위 댓글 생성 요청 본문. postId는 경로에서 받아 함께 검사합니다.
    """
    class Meta:
        unknown = EXCLUDE

    text = _text_field()
    post_id = _document_id('postId', 'postId')

class ReplyCreateSchema(Schema):
    """
    POST /api/comments/comments/reply
    답글 생성 요청 본문. text, parentCommentId, postId 모두 필수입니다.
    """
    class Meta:
        unknown = EXCLUDE

    text = _text_field()
    parent_comment_id = _document_id('parentCommentId', 'parentCommentId')
    post_id = _document_id('postId', 'postId')

class PostIdSchema(Schema):
    """GET /api/comments/{postId} 경로 파라미터 검사."""
    post_id = _document_id('postId', 'postId')

class CommentIdSchema(Schema):
    """DELETE /api/comments/{commentId} 경로 파라미터 검사."""
    comment_id = _document_id('commentId', 'commentId')

# --- 응답 스키마 ---

class AuthorSchema(Schema):
    """댓글 작성자 표시 정보 (users 컬렉션에서 조회)."""
    user_id = fields.Str(data_key='id')
    email = fields.Str(allow_none=True)
    profile_picture = fields.Str(data_key='profilePicture', allow_none=True)

class CommentResponseSchema(Schema):
    """
    댓글/답글 정보 응답을 위한 최종 JSON 형식을 정의합니다.
    """
    comment_id = fields.Str(data_key='id')
    post_id = fields.Str(data_key='postId')
    user_id = fields.Str(data_key='userId')
    text = fields.Str()
    parent_comment_id = fields.Str(data_key='parentCommentId', allow_none=True)
    created_at = fields.DateTime(data_key='createdAt')

class ReplyWithAuthorSchema(CommentResponseSchema):
    author = fields.Nested(AuthorSchema, allow_none=True)

class CommentThreadSchema(ReplyWithAuthorSchema):
    """GET 목록 응답: 최상위 댓글 + 작성자 + 답글 목록."""
    replies = fields.List(fields.Nested(ReplyWithAuthorSchema), dump_default=list)
