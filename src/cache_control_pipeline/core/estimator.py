"""Best-effort bucket object count from CloudWatch storage metrics."""

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from .exceptions import ConfigurationError, EstimationError
from .logging_config import get_logger
from .protocols import BucketSizeEstimator, ClientFactoryProtocol, CloudWatchClientProtocol

SESSION_DURATION_SECONDS = 3600
ROLE_SESSION_NAME = "PutCacheControlImpersonation"
METRIC_PERIOD_SECONDS = 3600

logger = get_logger("size-estimator")


class SizeEstimator(BucketSizeEstimator):
    """
    Estimates the number of objects in a bucket.

    Queries the ``NumberOfObjects`` S3 storage metric hourly over a trailing
    window and takes the maximum datapoint. When that fails and a
    cross-account role is configured, temporary credentials for the role
    are obtained and the query is retried with them. Any remaining failure
    yields 0 ("unknown"); estimation never aborts a run.
    """

    def __init__(
        self,
        client_factory: ClientFactoryProtocol,
        cloudwatch_role: Optional[str] = None,
        external_id: str = "",
        window_hours: int = 72,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._client_factory = client_factory
        self._cloudwatch_role = cloudwatch_role
        self._external_id = external_id
        self._window = timedelta(hours=window_hours)
        self._clock = clock

    def estimate(self, bucket: str) -> int:
        try:
            return self._estimate(bucket)
        except (EstimationError, ConfigurationError) as e:
            logger.warning(f"Failed to detect 'from' bucket size: {e}")
            return 0

    def _estimate(self, bucket: str) -> int:
        try:
            count = self.bucket_size(self._client_factory.create_cloudwatch_client(), bucket)
        except (EstimationError, ConfigurationError):
            if not self._cloudwatch_role:
                raise
            logger.info(
                f"Retrying bucket size lookup with role {self._cloudwatch_role}"
            )
            credentials = self.assume_role(self._cloudwatch_role)
            cloudwatch = self._client_factory.create_cloudwatch_client(credentials)
            count = self.bucket_size(cloudwatch, bucket)
        logger.info(f"Objects in the 'from' bucket: {count}")
        return count

    def bucket_size(self, cloudwatch: CloudWatchClientProtocol, bucket: str) -> int:
        """Maximum NumberOfObjects datapoint over the window."""
        now = self._clock()
        try:
            response = cloudwatch.get_metric_statistics(
                Namespace="AWS/S3",
                MetricName="NumberOfObjects",
                Dimensions=[
                    {"Name": "BucketName", "Value": bucket},
                    {"Name": "StorageType", "Value": "AllStorageTypes"},
                ],
                StartTime=now - self._window,
                EndTime=now,
                Period=METRIC_PERIOD_SECONDS,
                Statistics=["Maximum"],
            )
        except Exception as e:
            raise EstimationError(f"failed to detect bucket '{bucket}' size: {e}") from e

        datapoints = response.get("Datapoints", [])
        if not datapoints:
            raise EstimationError(
                f"no object count datapoints for bucket '{bucket}'; grant "
                "cloudwatch:GetMetricStatistics on the source account or pass "
                "--cross-account-cloudwatch-role"
            )
        return int(max(dp.get("Maximum", 0.0) for dp in datapoints))

    def assume_role(self, role: str) -> Dict[str, str]:
        """Temporary credentials for ``role``."""
        try:
            response = self._client_factory.create_sts_client().assume_role(
                RoleArn=role,
                RoleSessionName=ROLE_SESSION_NAME,
                ExternalId=self._external_id,
                DurationSeconds=SESSION_DURATION_SECONDS,
            )
        except Exception as e:
            raise EstimationError(
                f"assume role '{role}' for cross-account access failed: {e}"
            ) from e
        return response["Credentials"]
