from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "rag-dashboard-api"
    app_env: str = "dev"
    log_to_stdout: bool = True
    log_to_file: bool = False
    log_dir: str = "logs"
    record_source: Literal["remote", "local"] = "remote"
    hf_base_url: str = "https://datasets-server.huggingface.co"
    hf_metrics_dataset: str = "dwb2023/gdelt-rag-evaluation-metrics"
    hf_config: str = "default"
    hf_split: str = "train"
    hf_timeout_seconds: float = 30.0
    hf_cache_ttl_seconds: int = 3600
    hf_max_rows: int = 1000
    local_data_dir: str = "data/evaluation"
    local_delimiter: str = ","
    manifest_path: str = "data/interim/manifest.json"
    graph_api_base_url: str = "http://localhost:2024"
    graph_api_timeout_seconds: float = 30.0
    graph_assistant_id: str = "gdelt"

    model_config = SettingsConfigDict(env_prefix="DASH_", env_file=".env", extra="ignore")


settings = Settings()
