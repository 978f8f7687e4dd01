"""Webhook relay keeping a GitHub Projects board in sync with issues and PRs.

This package provides:
- GitHub webhook signature verification and event classification
- Repository allow-list filtering and sync decisions
- Board sync orchestration over the GitHub REST and GraphQL APIs
- The FastAPI application serving the webhook and health endpoints
"""
