"""Artifact planning: output shape per file and alias shims for relocations."""

from .alias import AliasShimEmitter, deprecation_notice
from .planner import GATEWAY_SUFFIX, ArtifactPlanner

__all__ = ["AliasShimEmitter", "ArtifactPlanner", "GATEWAY_SUFFIX", "deprecation_notice"]
