# conftest.py
"""
공용 pytest 픽스처.

실제 Firestore 대신 CommentService가 사용하는 범위(collection/document/where/order_by/stream/batch)만
흉내 내는 메모리 저장소를 주입합니다.
"""

import copy
import random
import string
from datetime import datetime, timedelta, timezone

import pytest
from firebase_admin import firestore
from flask_jwt_extended import create_access_token

from app import create_app
from app.api.comments.services import CommentService

_ID_ALPHABET = string.ascii_letters + string.digits
_MISSING = object()


class FakeDocumentSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self._data = data

    @property
    def id(self):
        return self.reference.id

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocumentReference:
    def __init__(self, collection, doc_id):
        self._collection = collection
        self.id = doc_id

    def get(self, transaction=None):
        return FakeDocumentSnapshot(self, self._collection.docs.get(self.id))

    def set(self, data):
        self._collection.docs[self.id] = copy.deepcopy(data)

    def delete(self):
        self._collection.docs.pop(self.id, None)


class FakeQuery:
    def __init__(self, collection, filters=(), orders=()):
        self._collection = collection
        self._filters = tuple(filters)
        self._orders = tuple(orders)

    def where(self, field_path, op_string, value):
        assert op_string == '==', f"unsupported operator in fake: {op_string}"
        return FakeQuery(self._collection, self._filters + ((field_path, value),), self._orders)

    def order_by(self, field_path, direction=firestore.Query.ASCENDING):
        return FakeQuery(self._collection, self._filters, self._orders + ((field_path, direction),))

    def stream(self, transaction=None):
        matched = []
        for doc_id, data in self._collection.docs.items():
            if all(data.get(field_path, _MISSING) == value for field_path, value in self._filters):
                matched.append((doc_id, data))

        # 마지막 정렬 조건부터 안정 정렬을 반복해 다중 order_by를 흉내 냅니다.
        for field_path, direction in reversed(self._orders):
            matched = [item for item in matched if field_path in item[1]]
            matched.sort(
                key=lambda item: item[1][field_path],
                reverse=direction == firestore.Query.DESCENDING
            )

        for doc_id, data in matched:
            yield FakeDocumentSnapshot(FakeDocumentReference(self._collection, doc_id), copy.deepcopy(data))


class FakeCollectionReference(FakeQuery):
    def __init__(self, name):
        self.id = name
        self.docs = {}
        super().__init__(self)

    def document(self, document_id=None):
        if document_id is None:
            document_id = ''.join(random.choice(_ID_ALPHABET) for _ in range(20))
        return FakeDocumentReference(self, document_id)


class FakeWriteBatch:
    def __init__(self, db):
        self._db = db
        self._deletes = []

    def delete(self, reference):
        self._deletes.append(reference)

    def commit(self):
        if self._db.fail_on_commit:
            raise RuntimeError("simulated Firestore commit failure")
        for reference in self._deletes:
            reference.delete()
        self._db.committed_batches.append(len(self._deletes))


class FakeFirestore:
    """CommentService가 쓰는 Firestore 클라이언트 API의 메모리 구현."""

    def __init__(self):
        self._collections = {}
        self.committed_batches = []
        self.fail_on_commit = False

    def collection(self, name):
        if name not in self._collections:
            self._collections[name] = FakeCollectionReference(name)
        return self._collections[name]

    def batch(self):
        return FakeWriteBatch(self)


class StepClock:
    """호출할 때마다 1초씩 증가하는 시계. 생성 시각 정렬을 결정적으로 만듭니다."""

    def __init__(self, start=None):
        self.current = start or datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        value = self.current
        self.current += timedelta(seconds=1)
        return value


# 테스트에서 쓰는 Firestore 형식(영숫자 20자) ID
POST_ID = 'post0000000000000001'
OTHER_POST_ID = 'post0000000000000002'
MISSING_COMMENT_ID = 'nocomment00000000001'


@pytest.fixture
def fake_db():
    return FakeFirestore()


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def comment_service(fake_db, clock):
    return CommentService(db=fake_db, clock=clock)


@pytest.fixture
def app(fake_db, comment_service):
    app = create_app('testing', firestore_client=fake_db)
    app.services['comments'] = comment_service
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """사용자 ID로 서명된 Access Token을 담은 Authorization 헤더를 만듭니다."""
    def _make(user_id):
        with app.app_context():
            token = create_access_token(identity=user_id)
        return {"Authorization": f"Bearer {token}"}
    return _make


@pytest.fixture
def seed_user(fake_db):
    def _seed(user_id, email, profile_picture=None):
        fake_db.collection('users').document(user_id).set({
            'user_id': user_id,
            'email': email,
            'profile_picture': profile_picture,
        })
    return _seed
