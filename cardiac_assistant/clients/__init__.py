"""
Clients package exports for the remote agent platform.
"""

from cardiac_assistant.clients.agent_platform import (
    AgentPlatformClient,
    AzureAgentPlatformClient,
)

__all__ = ["AgentPlatformClient", "AzureAgentPlatformClient"]
