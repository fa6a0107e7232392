import os
from typing import Optional
from aws_cdk import (
    Stack,
    CfnOutput,
    aws_apigateway as apigw,
    aws_lambda as lambda_,
)
from cdk_dynamo_table_viewer import TableViewer
from constructs import Construct

from stacks.hitcounter import HitCounter

HELLO_ASSET_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "lambda", "hello"
)

class WorkshopStack(Stack):
    """
    Deploys the hit counter in front of a sample function:
    1. 'Hello' Lambda Function (the downstream service).
    2. HitCounter construct wrapping it.
    3. API Gateway REST API routing every request to the counting proxy.
    4. Read-only table viewer over the hits table.
    """
    def __init__(self, scope: Construct, construct_id: str, read_capacity: Optional[int] = None, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # =================================================================
        # 1. DOWNSTREAM FUNCTION
        # =================================================================
        hello = lambda_.Function(self, "HelloHandler",
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler="main.lambda_handler",
            code=lambda_.Code.from_asset(HELLO_ASSET_DIR)
        )

        # =================================================================
        # 2. HIT COUNTER
        # =================================================================
        self.hit_counter = HitCounter(self, "HelloHitCounter",
            downstream=hello,
            read_capacity=read_capacity
        )

        # =================================================================
        # 3. API GATEWAY (Front Door)
        # =================================================================
        gateway = apigw.LambdaRestApi(self, "Endpoint",
            handler=self.hit_counter.handler
        )

        # =================================================================
        # 4. DASHBOARD
        # =================================================================
        viewer = TableViewer(self, "ViewHitCounter",
            title="Hello Hits",
            table=self.hit_counter.table,
            sort_by="-hits"
        )

        # =================================================================
        # 5. OUTPUTS
        # =================================================================
        self.hc_endpoint = CfnOutput(self, "GatewayUrl", value=gateway.url)
        self.hc_viewer_url = CfnOutput(self, "TableViewerUrl", value=viewer.endpoint)
