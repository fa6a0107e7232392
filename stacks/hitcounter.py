import os
from typing import Any, Callable, List, Optional, Tuple
from aws_cdk import (
    RemovalPolicy,
    aws_dynamodb as dynamodb,
    aws_lambda as lambda_,
)
from constructs import Construct
from jsii.errors import JSIIError

from stacks.errors import ConfigurationError, ProvisioningError

MIN_READ_CAPACITY = 5
MAX_READ_CAPACITY = 20
DEFAULT_READ_CAPACITY = MIN_READ_CAPACITY

# Resolved from this file so synth works regardless of the working directory
HANDLER_ASSET_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "lambda", "hitcounter"
)


def resolve_read_capacity(read_capacity: Optional[int]) -> int:
    """
    Resolves the optional read capacity to a concrete value.
    Raises ConfigurationError when it is not an integer in [5, 20].
    """
    if read_capacity is None:
        return DEFAULT_READ_CAPACITY

    # bool is an int subclass, but True/False is never a meaningful capacity
    if isinstance(read_capacity, bool) or not isinstance(read_capacity, int):
        raise ConfigurationError("read_capacity", "must be an integer", read_capacity)

    if not MIN_READ_CAPACITY <= read_capacity <= MAX_READ_CAPACITY:
        raise ConfigurationError(
            "read_capacity",
            f"must be between {MIN_READ_CAPACITY} and {MAX_READ_CAPACITY}",
            read_capacity,
        )
    return read_capacity


class HitCounter(Construct):
    """
    Counts requests per URL path in front of an existing Lambda function:
    1. DynamoDB table keyed by 'path' holding a 'hits' counter.
    2. Proxy Lambda that increments the counter and forwards to the downstream function.
    3. Least-privilege grants: read/write on the table, invoke on the downstream function.

    The downstream function stays owned by the caller; it is only read and granted on.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        downstream: lambda_.IFunction,
        read_capacity: Optional[int] = None,
    ) -> None:
        # Validate before attaching to the scope so a bad config leaves the tree untouched
        self._read_capacity = resolve_read_capacity(read_capacity)

        # A duplicate construct_id is rejected here, before anything is created
        try:
            super().__init__(scope, construct_id)
        except (RuntimeError, JSIIError) as e:
            raise ProvisioningError("create_construct", (), e) from e

        self._downstream = downstream
        self._provisioned: List[str] = []

        # =================================================================
        # 1. DYNAMODB COUNTER STORE
        # =================================================================
        self._table = self._provision("create_table", lambda: dynamodb.Table(self, "Hits",
            partition_key=dynamodb.Attribute(name="path", type=dynamodb.AttributeType.STRING),
            billing_mode=dynamodb.BillingMode.PROVISIONED,
            read_capacity=self._read_capacity,
            encryption=dynamodb.TableEncryption.AWS_MANAGED,
            removal_policy=RemovalPolicy.DESTROY
        ))

        # =================================================================
        # 2. COUNTING PROXY FUNCTION
        # =================================================================
        # Both bindings are resolved here and never change for the life of the function
        self._handler = self._provision("create_handler", lambda: lambda_.Function(self, "HitCounterHandler",
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler="main.lambda_handler",
            code=lambda_.Code.from_asset(HANDLER_ASSET_DIR),
            environment={
                "DOWNSTREAM_FUNCTION_NAME": downstream.function_name,
                "HITS_TABLE_NAME": self._table.table_name
            }
        ))

        # =================================================================
        # 3. PERMISSIONS & LEAST PRIVILEGE
        # =================================================================
        self.apply_grants()

    def apply_grants(self) -> None:
        """
        Grants the proxy read/write on the table and invoke on the downstream function.
        Safe to call again: identical statements collapse into the same policy.
        """
        self._provision("grant_table_access",
            lambda: self._table.grant_read_write_data(self._handler), record=False)
        self._provision("grant_downstream_invoke",
            lambda: self._downstream.grant_invoke(self._handler), record=False)

    def _provision(self, step: str, action: Callable[[], Any], record: bool = True) -> Any:
        try:
            result = action()
        except (RuntimeError, JSIIError) as e:
            raise ProvisioningError(step, self._provisioned, e) from e
        if record:
            self._provisioned.append(result.node.path)
        return result

    @property
    def handler(self) -> lambda_.Function:
        """The counting proxy; use it as the backend of a request router."""
        return self._handler

    @property
    def table(self) -> dynamodb.Table:
        """The counter store; exposes its name and grant_read_data for viewers."""
        return self._table

    @property
    def read_capacity(self) -> int:
        return self._read_capacity

    @property
    def provisioned(self) -> Tuple[str, ...]:
        return tuple(self._provisioned)
