"""
Coffee API - Parameter Resolver (AWS SSM Parameter Store)
==========================================================

What:  Fetches named configuration values (database host/user/password)
       from AWS Systems Manager Parameter Store at startup.
How:   boto3's SSM client is synchronous; each GetParameter call runs in a
       worker thread via asyncio.to_thread so several parameters can be
       fetched concurrently without blocking the event loop.
Who:   Called once by the startup orchestrator (coffee_api.startup).

Failure Semantics:
    resolve()            → raises ParameterResolutionError on any SSM-side
                           failure (missing parameter, access denied,
                           network error, empty value)
    resolve_or_default() → logs a warning and returns the fallback instead

    Failures outside a single GetParameter call (for example the client
    cannot be constructed) are not ParameterResolutionError and propagate
    to the orchestrator, which aborts startup.
"""

import asyncio
import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from coffee_api.exceptions import ParameterResolutionError

logger = logging.getLogger(__name__)


class ParameterResolver:
    """
    Thin async wrapper over SSM GetParameter.

    Args:
        region_name: AWS region of the parameter store (default: us-east-1)
        client:      Pre-built SSM client; tests pass a MagicMock here
    """

    def __init__(self, region_name: str = "us-east-1", client: Optional[Any] = None):
        self.region_name = region_name
        self._client = client

    @property
    def client(self) -> Any:
        """SSM client, created on first use."""
        if self._client is None:
            self._client = boto3.client("ssm", region_name=self.region_name)
        return self._client

    async def resolve(self, name: str, decrypt: bool = False) -> str:
        """
        Fetch one parameter value.

        Args:
            name:    Full parameter name, e.g. "/prod/rds/coffee/host"
            decrypt: Request KMS decryption (SecureString parameters)

        Returns:
            The parameter's value.

        Raises:
            ParameterResolutionError: the parameter could not be read or is empty
        """
        client = self.client
        try:
            response = await asyncio.to_thread(
                client.get_parameter, Name=name, WithDecryption=decrypt
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "ClientError")
            raise ParameterResolutionError(name, reason=code) from e
        except BotoCoreError as e:
            raise ParameterResolutionError(name, reason=type(e).__name__) from e

        value = (response.get("Parameter") or {}).get("Value")
        if not value:
            raise ParameterResolutionError(name, reason="empty value")

        logger.debug("Resolved parameter %s", name)
        return value

    async def resolve_or_default(self, name: str, default: str, decrypt: bool = False) -> str:
        """Fetch one parameter, falling back to `default` on any parameter-level failure."""
        try:
            return await self.resolve(name, decrypt=decrypt)
        except ParameterResolutionError as e:
            logger.warning("%s; using local default", e.message)
            return default
