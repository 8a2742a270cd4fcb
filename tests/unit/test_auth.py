"""Tests for the JWT gate: Basic-auth extraction and token verification."""

from __future__ import annotations

import base64
import time

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from s3channel.core.auth import JwtGate, extract_auth_password
from s3channel.core.errors import AuthConfigError


def _basic(user: str, password: str) -> dict[str, str]:
    encoded = base64.b64encode(f"{user}:{password}".encode()).decode()
    return {"Authorization": f"Basic {encoded}"}


def _token(private_key, **claims) -> str:
    payload = {"exp": int(time.time()) + 300, **claims}
    payload = {k: v for k, v in payload.items() if v is not None}
    return jwt.encode(payload, private_key, algorithm="RS256")


class TestExtractAuthPassword:
    def test_returns_password(self):
        assert extract_auth_password(_basic("nix", "s3cret")) == "s3cret"

    def test_password_may_contain_colons(self):
        assert extract_auth_password(_basic("nix", "a:b:c")) == "a:b:c"

    def test_empty_user(self):
        assert extract_auth_password(_basic("", "token")) == "token"

    def test_lowercase_header_name(self):
        headers = {"authorization": _basic("u", "p")["Authorization"]}
        assert extract_auth_password(headers) == "p"

    def test_missing_header(self):
        assert extract_auth_password({}) is None

    def test_bearer_scheme_is_ignored(self):
        assert extract_auth_password({"Authorization": "Bearer abc"}) is None

    def test_invalid_base64(self):
        assert extract_auth_password({"Authorization": "Basic %%%"}) is None

    def test_no_colon(self):
        encoded = base64.b64encode(b"justuser").decode()
        assert extract_auth_password({"Authorization": f"Basic {encoded}"}) is None


class TestJwtGate:
    def test_valid_token_passes(self, rsa_private_key, rsa_public_pem):
        gate = JwtGate(rsa_public_pem)
        assert gate.check(_basic("nix", _token(rsa_private_key))) is True

    def test_audience_is_not_checked(self, rsa_private_key, rsa_public_pem):
        gate = JwtGate(rsa_public_pem)
        token = _token(rsa_private_key, aud="someone-else")
        assert gate.check(_basic("nix", token)) is True

    def test_missing_header_rejected(self, rsa_public_pem):
        assert JwtGate(rsa_public_pem).check({}) is False

    def test_expired_token_rejected(self, rsa_private_key, rsa_public_pem):
        token = _token(rsa_private_key, exp=int(time.time()) - 3600)
        assert JwtGate(rsa_public_pem).check(_basic("nix", token)) is False

    def test_token_without_exp_rejected(self, rsa_private_key, rsa_public_pem):
        token = _token(rsa_private_key, exp=None)
        assert JwtGate(rsa_public_pem).check(_basic("nix", token)) is False

    def test_not_yet_valid_token_rejected(self, rsa_private_key, rsa_public_pem):
        token = _token(rsa_private_key, nbf=int(time.time()) + 3600)
        assert JwtGate(rsa_public_pem).check(_basic("nix", token)) is False

    def test_tampered_token_rejected(self, rsa_private_key, rsa_public_pem):
        header, payload, signature = _token(rsa_private_key).split(".")
        forged = base64.urlsafe_b64encode(b'{"exp": 9999999999, "sub": "root"}')
        tampered = ".".join([header, forged.decode().rstrip("="), signature])
        assert JwtGate(rsa_public_pem).check(_basic("nix", tampered)) is False

    def test_token_signed_by_other_key_rejected(self, rsa_public_pem):
        other = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        assert JwtGate(rsa_public_pem).check(_basic("nix", _token(other))) is False

    def test_hmac_token_rejected(self, rsa_public_pem):
        token = jwt.encode({"exp": int(time.time()) + 60}, "shared", algorithm="HS256")
        assert JwtGate(rsa_public_pem).check(_basic("nix", token)) is False

    def test_garbage_token_rejected(self, rsa_public_pem):
        assert JwtGate(rsa_public_pem).check(_basic("nix", "not-a-jwt")) is False

    def test_rejection_reason_is_logged(self, rsa_private_key, rsa_public_pem, caplog):
        token = _token(rsa_private_key, exp=int(time.time()) - 3600)
        with caplog.at_level("INFO", logger="s3channel.core.auth"):
            JwtGate(rsa_public_pem).check(_basic("nix", token))
        assert "JWT validation error" in caplog.text


class TestJwtGateConfiguration:
    def test_from_pem_file(self, tmp_path, rsa_private_key, rsa_public_pem):
        pem = tmp_path / "jwt.pem"
        pem.write_bytes(rsa_public_pem)
        gate = JwtGate.from_pem_file(pem)
        assert gate.check(_basic("nix", _token(rsa_private_key))) is True

    def test_unreadable_file_is_an_error(self, tmp_path):
        with pytest.raises(AuthConfigError, match="Failed to read public key"):
            JwtGate.from_pem_file(tmp_path / "missing.pem")

    def test_invalid_pem_is_an_error(self):
        with pytest.raises(AuthConfigError, match="decode"):
            JwtGate(b"-----BEGIN PUBLIC KEY-----\nnope\n-----END PUBLIC KEY-----\n")

    def test_non_rsa_key_is_an_error(self):
        ec_pem = ec.generate_private_key(ec.SECP256R1()).public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        with pytest.raises(AuthConfigError, match="RSA"):
            JwtGate(ec_pem)
