import boto3
import json
import os
from typing import Any, Dict, Optional
from botocore.exceptions import ClientError

# --- Environment Configuration ---
# Both bindings are fixed when the function is created
DOWNSTREAM_FUNCTION_NAME = os.environ.get('DOWNSTREAM_FUNCTION_NAME')
HITS_TABLE_NAME = os.environ.get('HITS_TABLE_NAME')

# Reused across invocations while the container is warm
_PROXY = None


class RuntimeForwardingError(Exception):
    """Raised when a hit cannot be recorded (strict mode) or the downstream call fails."""


class HitCounterProxy:
    """
    Records one hit per request path, then forwards the untouched event
    to the downstream function and returns its response untouched.

    require_count=False treats counting as best-effort telemetry;
    require_count=True refuses to forward when the hit cannot be recorded.
    """

    def __init__(self, table, lambda_client, downstream_function_name: str, require_count: bool = False):
        self.table = table
        self.lambda_client = lambda_client
        self.downstream_function_name = downstream_function_name
        self.require_count = require_count

    def record_hit(self, path: str) -> None:
        # ADD is applied by DynamoDB itself, so concurrent hits on one path are never lost
        self.table.update_item(
            Key={'path': path},
            UpdateExpression='ADD hits :incr',
            ExpressionAttributeValues={':incr': 1}
        )

    def forward(self, event: Dict[str, Any]) -> Any:
        try:
            response = self.lambda_client.invoke(
                FunctionName=self.downstream_function_name,
                Payload=json.dumps(event)
            )
        except ClientError as e:
            raise RuntimeForwardingError(
                f"Downstream invoke failed: {e.response['Error']['Message']}"
            ) from e

        payload = json.loads(response['Payload'].read())
        if response.get('FunctionError'):
            raise RuntimeForwardingError(f"Downstream function error: {payload}")
        return payload

    def handle(self, event: Dict[str, Any]) -> Any:
        path = event.get('path')

        if path is not None:
            try:
                self.record_hit(path)
            except ClientError as e:
                message = e.response['Error']['Message']
                if self.require_count:
                    raise RuntimeForwardingError(f"Hit not recorded for {path}: {message}") from e
                print(f"⚠️ Hit not recorded for {path}, forwarding anyway: {message}")
        else:
            print("⏭️ No path on event, forwarding without counting")

        return self.forward(event)


def get_proxy() -> HitCounterProxy:
    """
    Builds the boto3 clients on first use rather than at import time,
    so the module can be loaded without AWS credentials.
    """
    global _PROXY
    if _PROXY is None:
        if not HITS_TABLE_NAME or not DOWNSTREAM_FUNCTION_NAME:
            raise RuntimeError("HITS_TABLE_NAME and DOWNSTREAM_FUNCTION_NAME environment variables are required")
        table = boto3.resource('dynamodb').Table(HITS_TABLE_NAME)
        _PROXY = HitCounterProxy(table, boto3.client('lambda'), DOWNSTREAM_FUNCTION_NAME)
    return _PROXY


def lambda_handler(event: Dict[str, Any], context: Optional[Any]) -> Any:
    """
    Entry point behind API Gateway.
    1. Atomically increments the hit counter for event['path'] (best-effort).
    2. Invokes the downstream function with the original event.
    3. Returns the downstream response as-is.
    """
    print(f"request: {json.dumps(event)}")
    return get_proxy().handle(event)
