from __future__ import annotations

"""Analytics configuration (hyperparameters) using Pydantic."""

from pydantic import BaseModel, Field


class AnalyticsConfig(BaseModel):
    """Hyperparameters for cross-session analytics.

    - smoothing_span: EWMA span in sessions (>1)
    - min_attempts: attempts a chapter needs before it can be ranked weak (>=1)
    - top_n: number of weak chapters reported (>=1)
    """

    smoothing_span: int = Field(5, gt=1)
    min_attempts: int = Field(3, ge=1)
    top_n: int = Field(5, ge=1)
