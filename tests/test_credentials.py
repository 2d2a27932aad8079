"""Tests for credential providers and API token signing."""

import time
from unittest.mock import MagicMock, patch

import jwt
import pytest
from botocore.exceptions import ClientError

from credentials import (
    ConfigCredentials,
    ParameterStoreCredentials,
    generate_token,
)
from fetcher_errors import AuthError


class TestGenerateToken:
    def test_signed_with_secret_and_issued_by_key(self):
        token = generate_token("key", "secret")

        assert isinstance(token, str)
        payload = jwt.decode(token, "secret", algorithms=["HS256"])
        assert payload["iss"] == "key"
        assert payload["exp"] > time.time()

    def test_expires(self):
        token = generate_token("key", "secret", lifetime=-10)
        with pytest.raises(jwt.ExpiredSignatureError):
            jwt.decode(token, "secret", algorithms=["HS256"])

    def test_wrong_secret_does_not_verify(self):
        token = generate_token("key", "secret")
        with pytest.raises(jwt.InvalidSignatureError):
            jwt.decode(token, "other", algorithms=["HS256"])

    @pytest.mark.parametrize("key, secret", [("", "secret"), ("key", ""), (None, None)])
    def test_missing_credentials(self, key, secret):
        with pytest.raises(AuthError):
            generate_token(key, secret)


class TestConfigCredentials:
    def test_reads_config(self, make_config):
        provider = ConfigCredentials(make_config(api_key="k", api_secret="s"))
        assert provider.get_credentials() == ("k", "s")

    def test_authorization_token(self, make_config):
        provider = ConfigCredentials(make_config(api_key="k", api_secret="s"))
        payload = jwt.decode(provider.authorization_token(), "s", algorithms=["HS256"])
        assert payload["iss"] == "k"


class TestParameterStoreCredentials:
    @pytest.fixture
    def ssm(self) -> MagicMock:
        ssm = MagicMock()
        values = {"/zoom/api_key": "stored-key", "/zoom/api_secret": "stored-secret"}
        ssm.get_parameter.side_effect = lambda Name, WithDecryption: {
            "Parameter": {"Name": Name, "Value": values[Name]}
        }
        return ssm

    def test_resolves_named_parameters(self, make_config, ssm):
        config = make_config(api_key="/zoom/api_key", api_secret="/zoom/api_secret")
        provider = ParameterStoreCredentials(config, ssm_client=ssm)

        assert provider.get_credentials() == ("stored-key", "stored-secret")
        ssm.get_parameter.assert_any_call(Name="/zoom/api_key", WithDecryption=True)

    def test_looks_parameters_up_once(self, make_config, ssm):
        config = make_config(api_key="/zoom/api_key", api_secret="/zoom/api_secret")
        provider = ParameterStoreCredentials(config, ssm_client=ssm)

        provider.get_credentials()
        provider.authorization_token()
        assert ssm.get_parameter.call_count == 2

    def test_creates_ssm_client_lazily(self, make_config, ssm):
        config = make_config(api_key="/zoom/api_key", api_secret="/zoom/api_secret")
        with patch("credentials.boto3.client", return_value=ssm) as client:
            provider = ParameterStoreCredentials(config)
            client.assert_not_called()
            assert provider.get_credentials()[0] == "stored-key"
        client.assert_called_once_with("ssm")

    def test_missing_parameter(self, make_config):
        ssm = MagicMock()
        ssm.get_parameter.side_effect = ClientError(
            {"Error": {"Code": "ParameterNotFound", "Message": "not found"}}, "GetParameter"
        )
        provider = ParameterStoreCredentials(make_config(), ssm_client=ssm)

        with pytest.raises(AuthError, match="couldn't read parameter 'key'"):
            provider.get_credentials()
