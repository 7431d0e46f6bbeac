"""配置模块 -- 可通过环境变量覆盖

包含快照文件路径与日志配置。
"""

import os
from pathlib import Path
from typing import Literal

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()

# 快照文件默认名称
DATA_FILE_NAME: str = "intellitask_data.json"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _get_base_dir() -> Path:
    """获取数据基础目录"""
    return Path(os.environ.get("INTELLITASK_DATA_DIR", "data"))


def get_data_file() -> Path:
    """获取快照文件路径"""
    return Path(
        os.environ.get(
            "INTELLITASK_DATA_FILE",
            str(_get_base_dir() / DATA_FILE_NAME),
        )
    )


class LoggingConfig(BaseModel):
    """日志配置

    环境变量:
        INTELLITASK_LOG_FORMAT: 渲染模式（dev/json，默认 dev）
        INTELLITASK_LOG_LEVEL: 日志级别（默认 INFO）
    """

    log_format: Literal["dev", "json"] = Field(default="dev", description="日志渲染模式")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="日志级别",
    )


def load_logging_config() -> LoggingConfig:
    """从环境变量加载日志配置

    非法取值不阻塞启动，记录告警后使用默认值。
    """
    kwargs: dict = {}

    if val := os.environ.get("INTELLITASK_LOG_FORMAT"):
        if val.lower() in ("dev", "json"):
            kwargs["log_format"] = val.lower()
        else:
            log.warning(
                "invalid_log_format_config",
                env_var="INTELLITASK_LOG_FORMAT",
                value=val,
                fallback="dev",
            )

    if val := os.environ.get("INTELLITASK_LOG_LEVEL"):
        if val.upper() in _LOG_LEVELS:
            kwargs["log_level"] = val.upper()
        else:
            log.warning(
                "invalid_log_level_config",
                env_var="INTELLITASK_LOG_LEVEL",
                value=val,
                fallback="INFO",
            )

    return LoggingConfig(**kwargs)
