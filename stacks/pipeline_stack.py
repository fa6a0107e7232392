from typing import Optional
from aws_cdk import (
    Stack,
    Stage,
    pipelines,
)
from constructs import Construct

from stacks.workshop_stack import WorkshopStack

class WorkshopStage(Stage):
    """
    Deployable unit of the pipeline: one WorkshopStack per stage.
    """
    def __init__(self, scope: Construct, construct_id: str, read_capacity: Optional[int] = None, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.workshop = WorkshopStack(self, "WebService", read_capacity=read_capacity)

class PipelineStack(Stack):
    """
    Deploys the self-mutating CI/CD Pipeline for the hit counter.

    This stack automates the following workflow:
    1. Source: Pulls the latest code from GitHub via CodeStar Connections.
    2. Synth: Installs the CDK CLI and the project, then runs 'cdk synth'.
    3. Deploy: Deploys the WorkshopStage and smoke-tests its public endpoints.
    """

    def __init__(self, scope: Construct, construct_id: str, config, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # =================================================================
        # 1. SOURCE & SYNTH
        # =================================================================
        source = pipelines.CodePipelineSource.connection(
            f"{config.github_username}/{config.github_repository}",
            "main", # Ensure this matches your primary GitHub branch
            connection_arn=config.github_connection_arn
        )

        # 'cdk synth' in CodeBuild reads the same variables as a local run
        prefix = config.name.upper()
        synth_env = {
            f"{prefix}_ACCOUNT": config.account,
            f"{prefix}_REGION": config.region,
            "GITHUB_USERNAME": config.github_username,
            "GITHUB_REPOSITORY": config.github_repository,
            "GITHUB_CONNECTION_ARN": config.github_connection_arn
        }
        if config.read_capacity is not None:
            synth_env[f"{prefix}_HITS_READ_CAPACITY"] = str(config.read_capacity)

        pipeline = pipelines.CodePipeline(self, "Pipeline",
            pipeline_name=f"HitCounter-CI-CD-{config.name}",
            synth=pipelines.CodeBuildStep("SynthStep",
                input=source,
                env=synth_env,
                install_commands=[
                    "npm install -g aws-cdk",
                    "pip install -e ."
                ],
                commands=[
                    f"cdk synth -c env={config.name}"
                ]
            )
        )

        # =================================================================
        # 2. DEPLOY STAGE
        # =================================================================
        deploy = WorkshopStage(self, "Deploy", read_capacity=config.read_capacity)
        deploy_stage = pipeline.add_stage(deploy)

        # =================================================================
        # 3. POST-DEPLOYMENT SMOKE TESTS
        # =================================================================
        deploy_stage.add_post(
            pipelines.CodeBuildStep("TestViewerEndpoint",
                env_from_cfn_outputs={
                    "ENDPOINT_URL": deploy.workshop.hc_viewer_url
                },
                commands=["curl -Ssf $ENDPOINT_URL"]
            ),
            pipelines.CodeBuildStep("TestAPIGatewayEndpoint",
                env_from_cfn_outputs={
                    "ENDPOINT_URL": deploy.workshop.hc_endpoint
                },
                commands=[
                    "curl -Ssf $ENDPOINT_URL",
                    "curl -Ssf $ENDPOINT_URL/hello",
                    "curl -Ssf $ENDPOINT_URL/test"
                ]
            )
        )
