"""Factory classes for creating configured clients and the pipeline."""

from typing import Any, Dict, Optional, TYPE_CHECKING

import boto3
from botocore.exceptions import BotoCoreError

from .context import CopyContext
from .estimator import SizeEstimator
from .exceptions import ConfigurationError
from .models import CopyConfig
from .protocols import (
    ClientFactoryProtocol,
    CloudWatchClientProtocol,
    S3ClientProtocol,
    STSClientProtocol,
)
from .services import CopyDecisionEngine

if TYPE_CHECKING:
    from ..processors.pipeline import CopyPipeline


class ClientFactory:
    """Factory for boto3 clients sharing one session."""

    def __init__(self, session: Optional[boto3.Session] = None):
        self._session = session

    @property
    def session(self) -> boto3.Session:
        if self._session is None:
            try:
                self._session = boto3.Session()
            except BotoCoreError as e:
                raise ConfigurationError(f"Can not create AWS session: {e}") from e
        return self._session

    def _client(self, service: str, **kwargs: Any) -> Any:
        try:
            return self.session.client(service, **kwargs)
        except BotoCoreError as e:
            raise ConfigurationError(f"Can not create {service} client: {e}") from e

    def create_s3_client(self, **kwargs: Any) -> S3ClientProtocol:
        """Create S3 client with optional configuration."""
        return self._client("s3", **kwargs)

    def create_cloudwatch_client(
        self, credentials: Optional[Dict[str, str]] = None
    ) -> CloudWatchClientProtocol:
        """CloudWatch client, with temporary credentials for cross-account access."""
        if credentials is None:
            return self._client("cloudwatch")
        return self._client(
            "cloudwatch",
            aws_access_key_id=credentials["AccessKeyId"],
            aws_secret_access_key=credentials["SecretAccessKey"],
            aws_session_token=credentials["SessionToken"],
        )

    def create_sts_client(self) -> STSClientProtocol:
        return self._client("sts")


class PipelineFactory:
    """Factory for creating the complete copy pipeline."""

    @staticmethod
    def create_pipeline(
        config: CopyConfig,
        s3_client: Optional[S3ClientProtocol] = None,
        client_factory: Optional[ClientFactoryProtocol] = None,
        **pipeline_options: Any,
    ) -> "CopyPipeline":
        """Create a fully configured pipeline; pass fakes to run without AWS."""
        from ..processors.pipeline import CopyPipeline

        if client_factory is None:
            client_factory = ClientFactory()
        if s3_client is None:
            s3_client = client_factory.create_s3_client()  # type: ignore[attr-defined]

        context = CopyContext(config=config, s3_client=s3_client)
        engine = CopyDecisionEngine(context)
        estimator = SizeEstimator(
            client_factory,
            cloudwatch_role=config.cloudwatch_role,
            external_id=config.external_id,
            window_hours=config.metric_window_hours,
        )
        return CopyPipeline(context, engine, estimator, **pipeline_options)
