"""Service orchestration layer: coordinates multi-service workflows.

Modules:
- manifest_pipeline: Orchestrates manifest extraction (fetch, enhance, LLM, decode, normalize).
"""
