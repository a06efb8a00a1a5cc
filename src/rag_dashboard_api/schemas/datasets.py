from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class DatasetsInfoResponse(BaseModel):
    datasets: list[dict[str, Any]] = Field(description="公开数据集目录")
