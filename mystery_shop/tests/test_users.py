import pytest

from mystery_shop.repositories import EmailTakenError
from mystery_shop.services import DuplicateEmailError, ValidationError


def test_register_hashes_password(users, container):
    user = users.register('ana@example.com', 'password123', 'Ana', 'Pérez')

    assert user.id
    assert user.email == 'ana@example.com'
    assert user.full_name == 'Ana Pérez'
    assert user.password_hash != 'password123'
    assert 'password123' not in user.password_hash
    assert container.user_repo.user_exists(user.id)


def test_serialized_user_has_no_password(users):
    user = users.register('ana@example.com', 'password123', 'Ana', 'Pérez')
    data = user.to_dict()

    assert data['email'] == 'ana@example.com'
    assert data['firstName'] == 'Ana'
    assert 'passwordHash' not in data
    assert 'password_hash' not in data


def test_duplicate_email_is_rejected(users):
    users.register('ana@example.com', 'password123', 'Ana', 'Pérez')
    with pytest.raises(DuplicateEmailError):
        users.register('ana@example.com', 'otherpass99', 'Otra', 'Ana')


@pytest.mark.parametrize('email, password, first, last', [
    ('not-an-email', 'password123', 'Ana', 'Pérez'),
    ('', 'password123', 'Ana', 'Pérez'),
    ('ana@example.com', 'short', 'Ana', 'Pérez'),
    ('ana@example.com', None, 'Ana', 'Pérez'),
    ('ana@example.com', 'password123', '', 'Pérez'),
    ('ana@example.com', 'password123', 'Ana', '  '),
])
def test_register_validates_input(users, email, password, first, last):
    with pytest.raises(ValidationError):
        users.register(email, password, first, last)


def test_login_with_valid_credentials(users):
    created = users.register('ana@example.com', 'password123', 'Ana', 'Pérez')
    assert users.authenticate('ana@example.com', 'password123') == created


def test_login_with_wrong_password_returns_none(users):
    users.register('ana@example.com', 'password123', 'Ana', 'Pérez')
    assert users.authenticate('ana@example.com', 'password124') is None


def test_login_unknown_email_returns_none(users):
    assert users.authenticate('nobody@example.com', 'password123') is None


def test_login_email_is_case_sensitive(users):
    users.register('ana@example.com', 'password123', 'Ana', 'Pérez')
    assert users.authenticate('ANA@example.com', 'password123') is None


def test_login_with_non_text_input_returns_none(users):
    assert users.authenticate(None, 'password123') is None
    assert users.authenticate('ana@example.com', 12345678) is None


def test_get_user(users):
    created = users.register('ana@example.com', 'password123', 'Ana', 'Pérez')
    assert users.get_user(created.id) == created
    assert users.get_user('missing') is None


def test_duplicate_email_keeps_storage_error_as_cause(users):
    users.register('ana@example.com', 'password123', 'Ana', 'Pérez')
    with pytest.raises(DuplicateEmailError) as excinfo:
        users.register('ana@example.com', 'password123', 'Ana', 'Pérez')
    assert isinstance(excinfo.value.__cause__, EmailTakenError)
