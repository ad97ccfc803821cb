"""Base model configuration for all reconciled data structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model with standard configuration.

    Instances are immutable; derived copies are produced with ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)
