# app/utils/test_identifiers.py
import pytest

from app.utils.identifiers import is_valid_document_id

@pytest.mark.parametrize('value', ['aB3dE5gH7jK9mN1pQ3sT', '00000000000000000000'])
def test_valid_document_ids(value):
    assert is_valid_document_id(value)

@pytest.mark.parametrize('value', [
    '', 'short', 'aB3dE5gH7jK9mN1pQ3sTx', 'aB3dE5gH7jK9mN1pQ3s-', 'aB3dE5gH7jK9mN1pQ3s\n', None, 12345,
])
def test_invalid_document_ids(value):
    assert not is_valid_document_id(value)
