# app/utils/identifiers.py
"""Firestore 문서 ID 형식 검사."""

import re
from typing import Any

# Firestore가 collection.document()로 자동 생성하는 ID: 영문 대소문자+숫자 20자
DOCUMENT_ID_PATTERN = r'^[A-Za-z0-9]{20}$'

_document_id_re = re.compile(DOCUMENT_ID_PATTERN)


def is_valid_document_id(value: Any) -> bool:
    """값이 Firestore 자동 생성 문서 ID 형식인지 확인합니다."""
    return isinstance(value, str) and _document_id_re.fullmatch(value) is not None
