import os
from typing import Optional
from dotenv import load_dotenv

from stacks.errors import ConfigurationError
from stacks.hitcounter import resolve_read_capacity

# Load environment variables from a .env file
load_dotenv()

class EnvConfig:
    """
    Stores environment-specific configuration for the CDK stacks.
    """
    def __init__(
        self,
        env_name: str,
        account: str,
        region: str,
        read_capacity: Optional[int] = None,
        github_username: Optional[str] = None,
        github_repository: Optional[str] = None,
        github_connection_arn: Optional[str] = None
    ):
        self.name = env_name
        self.account = account
        self.region = region

        # Hit counter table tuning; None means the construct default
        self.read_capacity = read_capacity

        # GitHub Configuration
        self.github_username = github_username
        self.github_repository = github_repository
        self.github_connection_arn = github_connection_arn

    @property
    def has_pipeline(self) -> bool:
        return bool(self.github_username and self.github_repository and self.github_connection_arn)

def get_required_env(key: str) -> str:
    """
    Retrieves a required environment variable or raises a RuntimeError if missing.
    """
    value = os.getenv(key)
    if not value:
        raise RuntimeError(f"❌ MISSING CONFIG: Required environment variable '{key}' not found in .env")
    return value

def get_optional_int_env(key: str) -> Optional[int]:
    """
    Parses an optional integer variable; raises ConfigurationError if it is not a number.
    """
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(key, "must be an integer", raw) from None

def get_config(scope) -> EnvConfig:
    """
    Factory function to generate the EnvConfig object based on CDK context.
    Usage: cdk deploy -c env=prod
    """
    # Default to 'dev' environment if no context is provided
    env_name = scope.node.try_get_context("env") or "dev"
    prefix = env_name.upper()

    print(f"🔍 Initializing CDK Infrastructure for environment: {prefix}")

    # Load Mandatory Variables
    account = get_required_env(f"{prefix}_ACCOUNT")
    region = get_required_env(f"{prefix}_REGION")

    # Load Optional Variables (validated now so 'cdk synth' fails before building anything)
    read_capacity = get_optional_int_env(f"{prefix}_HITS_READ_CAPACITY")
    if read_capacity is not None:
        resolve_read_capacity(read_capacity)

    github_user = os.getenv("GITHUB_USERNAME")
    github_repo = os.getenv("GITHUB_REPOSITORY")
    github_conn = os.getenv("GITHUB_CONNECTION_ARN")

    return EnvConfig(
        env_name=env_name,
        account=account,
        region=region,
        read_capacity=read_capacity,
        github_username=github_user,
        github_repository=github_repo,
        github_connection_arn=github_conn
    )
