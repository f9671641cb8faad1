from incusdash.client.base import HypervisorClient
from incusdash.client.projects import ProjectRepository

__all__ = ["HypervisorClient", "ProjectRepository"]
