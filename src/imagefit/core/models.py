"""Shared data models for imagefit."""

from pydantic import BaseModel, ConfigDict, Field

from .constants import DEFAULT_SHARD_DEPTH, DEFAULT_SHARD_WIDTH


class ShardPolicy(BaseModel):
    """Width and depth used to split cache keys into nested path segments."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(DEFAULT_SHARD_WIDTH, ge=0)
    depth: int = Field(DEFAULT_SHARD_DEPTH, ge=0)
