"""
API credentials and the signed token used to authenticate to Zoom.

A CredentialProvider is handed to the ZoomClient by whoever builds it: the
CLI reads credentials straight from the configuration file, the serverless
handler resolves them from the SSM Parameter Store.
"""

import time

import boto3
import jwt
from botocore.exceptions import BotoCoreError, ClientError

from fetcher_errors import AuthError

TOKEN_LIFETIME_SECONDS = 60 * 60
TOKEN_ALGORITHM = "HS256"


def generate_token(api_key, api_secret, lifetime=TOKEN_LIFETIME_SECONDS):
    """Sign a short-lived JWT with the API secret, issued by the API key."""
    if not api_key or not api_secret:
        raise AuthError("API key and secret are required to sign a token")

    payload = {"iss": api_key, "exp": int(time.time()) + lifetime}
    try:
        return jwt.encode(payload, api_secret, algorithm=TOKEN_ALGORITHM)
    except jwt.PyJWTError as e:
        raise AuthError(f"couldn't sign API token: {e}") from e


class CredentialProvider:
    def get_credentials(self):
        """Return the (api_key, api_secret) pair."""
        raise NotImplementedError

    def authorization_token(self):
        api_key, api_secret = self.get_credentials()
        return generate_token(api_key, api_secret)


class ConfigCredentials(CredentialProvider):
    def __init__(self, config):
        self.config = config

    def get_credentials(self):
        return self.config.api_key, self.config.api_secret


class ParameterStoreCredentials(CredentialProvider):
    """
    Look the key and secret up in the SSM Parameter Store. The configured
    ``api_key`` and ``api_secret`` are the names of the parameters.
    Values are fetched once and reused for the rest of the run.
    """

    def __init__(self, config, ssm_client=None):
        self.config = config
        self.ssm = ssm_client
        self._credentials = None

    def _get_parameter(self, name):
        try:
            if self.ssm is None:
                self.ssm = boto3.client("ssm")
            response = self.ssm.get_parameter(Name=name, WithDecryption=True)
            return response["Parameter"]["Value"]
        except (BotoCoreError, ClientError, KeyError) as e:
            raise AuthError(f"couldn't read parameter '{name}': {e}") from e

    def get_credentials(self):
        if self._credentials is None:
            self._credentials = (
                self._get_parameter(self.config.api_key),
                self._get_parameter(self.config.api_secret),
            )
        return self._credentials
