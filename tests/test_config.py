"""配置加载单元测试

验证环境变量映射、默认值与非法取值回退。
"""

from pathlib import Path

import pytest
from intellitask.config import (
    DATA_FILE_NAME,
    LoggingConfig,
    get_data_file,
    load_logging_config,
)
from pydantic import ValidationError


class TestDataFile:
    """快照文件路径"""

    def test_default_path(self, monkeypatch):
        monkeypatch.delenv("INTELLITASK_DATA_DIR", raising=False)
        monkeypatch.delenv("INTELLITASK_DATA_FILE", raising=False)
        assert get_data_file() == Path("data") / DATA_FILE_NAME

    def test_data_dir_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("INTELLITASK_DATA_DIR", str(tmp_path))
        monkeypatch.delenv("INTELLITASK_DATA_FILE", raising=False)
        assert get_data_file() == tmp_path / DATA_FILE_NAME

    def test_data_file_overrides_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv("INTELLITASK_DATA_DIR", str(tmp_path / "ignored"))
        monkeypatch.setenv("INTELLITASK_DATA_FILE", str(tmp_path / "custom.json"))
        assert get_data_file() == tmp_path / "custom.json"


class TestLoggingConfig:
    """LoggingConfig 数据模型与环境变量映射"""

    def test_default_values(self):
        config = LoggingConfig()
        assert config.log_format == "dev"
        assert config.log_level == "INFO"

    def test_invalid_format_rejected_by_model(self):
        with pytest.raises(ValidationError):
            LoggingConfig(log_format="xml")

    def test_default_when_no_env(self, monkeypatch):
        monkeypatch.delenv("INTELLITASK_LOG_FORMAT", raising=False)
        monkeypatch.delenv("INTELLITASK_LOG_LEVEL", raising=False)
        assert load_logging_config() == LoggingConfig()

    def test_values_from_env_are_normalised(self, monkeypatch):
        monkeypatch.setenv("INTELLITASK_LOG_FORMAT", "JSON")
        monkeypatch.setenv("INTELLITASK_LOG_LEVEL", "debug")
        config = load_logging_config()
        assert config.log_format == "json"
        assert config.log_level == "DEBUG"

    def test_invalid_env_values_fall_back(self, monkeypatch):
        """非法取值不阻塞启动，使用默认值"""
        monkeypatch.setenv("INTELLITASK_LOG_FORMAT", "xml")
        monkeypatch.setenv("INTELLITASK_LOG_LEVEL", "loud")
        config = load_logging_config()
        assert config.log_format == "dev"
        assert config.log_level == "INFO"
