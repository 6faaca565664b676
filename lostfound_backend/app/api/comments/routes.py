# app/api/comments/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from app.api.comments.schemas import (
    CommentCreateSchema,
    ReplyCreateSchema,
    PostIdSchema,
    CommentIdSchema,
    CommentResponseSchema,
    CommentThreadSchema
)

comments_bp = Blueprint('comments_bp', __name__)


def _json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def validation_error_response(err: ValidationError):
    # 첫 번째 필드 오류를 대표 메시지로 사용합니다.
    messages = err.messages if isinstance(err.messages, dict) else {"_schema": err.messages}
    first = next(iter(messages.values()), ["Invalid input"])
    message = first[0] if isinstance(first, list) and first else str(first)
    return jsonify({"error_code": "VALIDATION_ERROR", "message": message, "details": messages}), 400


# '/comments/reply'는 두 세그먼트라 '/<post_id>' 규칙과 겹치지 않습니다.
@comments_bp.route('/comments/reply', methods=['POST'])
@jwt_required()
def create_reply():
    """
    기존 댓글에 답글을 작성합니다.
    - 부모 댓글이 없으면 404, 필수 값 누락/형식 오류/게시글 불일치는 400을 반환합니다.
    """
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        data = ReplyCreateSchema().load(_json_body())
        reply = comment_service.create_reply(data['post_id'], data['parent_comment_id'], user_id, data['text'])
        return jsonify({
            "message": "Reply added successfully",
            "reply": CommentResponseSchema().dump(reply)
        }), 201
    except ValidationError as err:
        return validation_error_response(err)
    except ValueError as e:
        return jsonify({"error_code": "PARENT_COMMENT_NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logging.error(f"답글 생성 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "REPLY_CREATION_FAILED", "message": "Server error posting reply", "error": str(e)}), 500


@comments_bp.route('/<string:post_id>', methods=['POST'])
@jwt_required()
def create_comment(post_id: str):
    """
    특정 게시글에 최상위 댓글을 작성합니다.
    - 성공 시, 생성된 댓글 정보를 201 Created 상태 코드와 함께 반환합니다.
    """
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        payload = dict(_json_body(), postId=post_id)
        data = CommentCreateSchema().load(payload)
        new_comment = comment_service.create_comment(data['post_id'], user_id, data['text'])
        return jsonify({
            "message": "Comment added successfully",
            "comment": CommentResponseSchema().dump(new_comment)
        }), 201
    except ValidationError as err:
        return validation_error_response(err)
    except Exception as e:
        logging.error(f"댓글 생성 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "COMMENT_CREATION_FAILED", "message": "Server error posting comment"}), 500


@comments_bp.route('/<string:post_id>', methods=['GET'])
def get_comments(post_id: str):
    """
    특정 게시글의 댓글 목록을 답글과 함께 조회합니다. 인증이 필요 없습니다.
    """
    comment_service = current_app.services['comments']
    try:
        PostIdSchema().load({"postId": post_id})
        comments = comment_service.get_comments_for_post(post_id)
        return jsonify(CommentThreadSchema(many=True).dump(comments)), 200
    except ValidationError as err:
        return validation_error_response(err)
    except Exception as e:
        logging.error(f"댓글 목록 조회 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "Error fetching comments", "error": str(e)}), 500


@comments_bp.route('/<string:comment_id>', methods=['DELETE'])
@jwt_required()
def delete_comment(comment_id: str):
    """
    특정 댓글을 삭제합니다. (작성자 본인만 가능)
    - 최상위 댓글이면 직계 답글도 함께 삭제됩니다.
    """
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        CommentIdSchema().load({"commentId": comment_id})
        comment_service.delete_comment(comment_id, user_id)
        return jsonify({"message": "Comment deleted successfully"}), 200
    except ValidationError as err:
        return validation_error_response(err)
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except ValueError as e:
        return jsonify({"error_code": "COMMENT_NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logging.error(f"댓글 삭제 중 오류 발생 (comment_id: {comment_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "Server error deleting comment", "error": str(e)}), 500
