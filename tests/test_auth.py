from datetime import timedelta

from jose import jwt

from auth import JWT_ALG, JWT_SECRET, create_token, decode_token, resolve_identity
from utils import utcnow


class TestResolveIdentity:
    def test_valid_token(self):
        identity = resolve_identity(f"Bearer {create_token('user-001')}")
        assert identity.user_id == "user-001"
        assert identity.is_guest is False

    def test_guest_token_keeps_guest_flag(self):
        identity = resolve_identity(f"Bearer {create_token('guest_1_abc', is_guest=True)}")
        assert identity.user_id == "guest_1_abc"
        assert identity.is_guest is True

    def test_missing_header_mints_guest(self):
        identity = resolve_identity(None)
        assert identity.is_guest is True
        assert identity.user_id.startswith("guest_")

    def test_guest_ids_differ_per_call(self):
        assert resolve_identity(None).user_id != resolve_identity(None).user_id

    def test_bad_signature_falls_back_to_guest(self):
        token = jwt.encode({"userId": "user-001"}, "some-other-secret", algorithm=JWT_ALG)
        identity = resolve_identity(f"Bearer {token}")
        assert identity.is_guest is True
        assert identity.user_id != "user-001"

    def test_expired_token_falls_back_to_guest(self):
        token = jwt.encode(
            {"userId": "user-001", "exp": utcnow() - timedelta(minutes=1)}, JWT_SECRET, algorithm=JWT_ALG
        )
        assert resolve_identity(f"Bearer {token}").is_guest is True

    def test_garbage(self):
        assert resolve_identity("Bearer not.a.token").is_guest is True
        assert resolve_identity("Bearer ").is_guest is True


def test_token_without_user_id_is_rejected():
    token = jwt.encode({"isGuest": False}, JWT_SECRET, algorithm=JWT_ALG)
    assert decode_token(token) is None
