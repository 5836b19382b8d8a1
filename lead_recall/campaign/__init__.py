"""Workflow orchestration for building worklists and deploying them to moderators."""

from .service import CampaignOrchestrator, DeploymentResult

__all__ = ["CampaignOrchestrator", "DeploymentResult"]
