"""
Databricks client factories for Spark and Workspace API access.

Provides singleton access to:
- SparkSession (Databricks Connect, serverless when no cluster is configured)
- WorkspaceClient (databricks-sdk), used for identity and Volume uploads

Authentication follows the standard Databricks unified auth chain
(DATABRICKS_HOST / DATABRICKS_TOKEN, OAuth, or the Databricks Apps runtime).
"""

import functools

from databricks.connect import DatabricksSession
from databricks.sdk import WorkspaceClient
from databricks.sdk.core import Config


def _config() -> Config:
    config = Config()
    if not config.cluster_id and not config.serverless_compute_id:
        config.serverless_compute_id = "auto"
    return config


@functools.cache
def spark() -> DatabricksSession:
    """Return the shared SparkSession, creating one if necessary."""
    return DatabricksSession.builder.sdkConfig(_config()).getOrCreate()


@functools.cache
def workspace_client() -> WorkspaceClient:
    """Return the shared Databricks WorkspaceClient."""
    return WorkspaceClient(config=_config())
