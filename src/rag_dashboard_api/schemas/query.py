from __future__ import annotations

from typing import Literal

from langchain_core.documents import Document
from pydantic import BaseModel, Field

RetrieverName = Literal["naive", "bm25", "ensemble", "cohere_rerank"]


class QueryRequest(BaseModel):
    question: str = Field(min_length=1, description="用户问题")
    retriever: RetrieverName | None = Field(default=None, description="检索策略（后端当前固定 cohere_rerank）")
    thread_id: str | None = Field(default=None, description="复用的会话线程ID")
    timeout_seconds: float | None = Field(default=None, gt=0, le=300, description="图执行超时（秒）")


class QueryResponse(BaseModel):
    answer: str = Field(description="生成回答")
    contexts: list[Document] = Field(default_factory=list, description="检索到的上下文文档")
    strategy: str = Field(description="实际使用的检索策略")
    manifests: list[str] = Field(default_factory=list, description="上下文来源标识（去重）")
    thread_id: str | None = Field(default=None, description="本次使用的会话线程ID")
