import aws_cdk as cdk
from config import get_config
from stacks.workshop_stack import WorkshopStack

app = cdk.App()
config = get_config(app)

main_env = cdk.Environment(account=config.account, region=config.region)

# =================================================================
# 1. WORKSHOP STACK
# =================================================================
# Hello function, hit counter, API Gateway front door and table viewer.
WorkshopStack(
    app, f"HitCounterWorkshop-{config.name}",
    read_capacity=config.read_capacity,
    env=main_env
)

# =================================================================
# 2. PIPELINE STACK (Optional)
# =================================================================
if config.has_pipeline:
    from stacks.pipeline_stack import PipelineStack

    PipelineStack(
        app, f"HitCounterPipeline-{config.name}",
        config=config,
        env=main_env
    )
else:
    print("⏭️ Skipping PipelineStack: GitHub configuration is incomplete in .env")

app.synth()
