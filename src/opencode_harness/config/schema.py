"""
Pydantic configuration schema for OpenCode Harness.

This module defines all configuration models with validation.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from opencode_harness.memory.context import ContextTrackerConfig

# =============================================================================
# Memory Configuration
# =============================================================================


class MemoryConfig(BaseModel):
    """Durable memory configuration."""

    model_config = ConfigDict(extra="allow")

    enabled: bool = True
    max_entries: int = Field(default=1000, ge=1)
    prune_after_days: float = Field(default=30, ge=0)
    context_max_tokens: int = Field(default=2000, gt=0)
    compress_on_end: bool = True


# =============================================================================
# Context Tracking Configuration
# =============================================================================


class ContextConfig(BaseModel):
    """Context window tracking configuration."""

    model_config = ConfigDict(extra="allow")

    max_tokens: int = Field(default=100000, gt=0)
    compaction_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    importance_decay_rate: float = Field(default=0.95, ge=0.0, le=1.0)
    auto_compact: bool = False
    prune_threshold: float = Field(default=0.1, ge=0.0, le=1.0)
    token_counting: Literal["estimate", "tiktoken"] = "estimate"

    def tracker_config(self) -> ContextTrackerConfig:
        """Build the tracker settings from this section."""
        return ContextTrackerConfig(
            max_tokens=self.max_tokens,
            compaction_threshold=self.compaction_threshold,
            importance_decay_rate=self.importance_decay_rate,
        )


# =============================================================================
# Root Configuration
# =============================================================================


class HarnessConfig(BaseModel):
    """Root configuration stored in .opencode/.harness/config.yaml."""

    model_config = ConfigDict(extra="allow")

    version: Literal[1] = 1
    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    context: ContextConfig = Field(default_factory=ContextConfig)
