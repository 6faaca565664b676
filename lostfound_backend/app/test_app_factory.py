# app/test_app_factory.py
"""
앱 팩토리 전역 에러 핸들러 테스트

사용법: python -m pytest app/test_app_factory.py -v
"""

from marshmallow import ValidationError


def test_uncaught_validation_error_has_message_and_details(app):
    @app.route('/_raise-validation')
    def raise_validation():
        raise ValidationError({'text': ['Comment text is required']})

    res = app.test_client().get('/_raise-validation')

    assert res.status_code == 400
    assert res.get_json() == {
        'error_code': 'VALIDATION_ERROR',
        'message': 'Comment text is required',
        'details': {'text': ['Comment text is required']},
    }

def test_uncaught_schema_level_validation_error(app):
    @app.route('/_raise-schema-validation')
    def raise_schema_validation():
        raise ValidationError('Invalid input')

    body = app.test_client().get('/_raise-schema-validation').get_json()

    assert body['message'] == 'Invalid input'
    assert body['details'] == {'_schema': ['Invalid input']}

def test_uncaught_exception_is_500(app):
    @app.route('/_raise-runtime')
    def raise_runtime():
        raise RuntimeError('boom')

    res = app.test_client().get('/_raise-runtime')

    assert res.status_code == 500
    assert res.get_json()['error_code'] == 'INTERNAL_SERVER_ERROR'

def test_unknown_route_is_plain_404(client):
    assert client.get('/api/nothing-here').status_code == 404
