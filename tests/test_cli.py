"""CLI 入口测试

验证进程生命周期：启动 load()，结束 save()；损坏快照不被覆盖。
"""

import json
from datetime import UTC, datetime, timedelta

import pytest
from intellitask import __main__ as cli
from intellitask.coordinator import Coordinator
from intellitask.snapshot import SnapshotManager
from intellitask.store import create_store_group


@pytest.fixture
def data_file(tmp_path, monkeypatch):
    path = tmp_path / "cli" / "data.json"
    monkeypatch.setenv("INTELLITASK_DATA_FILE", str(path))
    monkeypatch.setattr(cli, "setup_logging", lambda: None)
    return path


def _run(monkeypatch, *args: str) -> None:
    monkeypatch.setattr("sys.argv", ["intellitask", *args])
    cli.main()


class TestCli:
    """命令分发"""

    def test_no_command_prints_usage(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.argv", ["intellitask"])
        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 1
        assert "summary" in capsys.readouterr().out

    def test_unknown_command(self, monkeypatch, capsys, data_file):
        with pytest.raises(SystemExit):
            _run(monkeypatch, "explode")
        assert "explode" in capsys.readouterr().out

    def test_summary_on_fresh_start_writes_snapshot(self, monkeypatch, capsys, data_file):
        _run(monkeypatch, "summary")
        out = capsys.readouterr().out
        assert "tasks" in out
        assert data_file.exists()
        assert json.loads(data_file.read_text(encoding="utf-8"))["tasks"] == {}

    def test_due_reminders(self, monkeypatch, capsys, data_file):
        stores = create_store_group()
        coordinator = Coordinator(stores)
        task = coordinator.create_task("x")
        past = datetime.now(UTC) - timedelta(hours=1)
        coordinator.create_reminder("该提交了", past, task.id, "Task")
        SnapshotManager(stores, data_file).save()

        _run(monkeypatch, "due-reminders")
        assert "该提交了" in capsys.readouterr().out

    def test_corrupt_snapshot_is_not_overwritten(self, monkeypatch, capsys, data_file):
        data_file.parent.mkdir(parents=True)
        data_file.write_text("{broken", encoding="utf-8")

        _run(monkeypatch, "summary")

        assert "损坏" in capsys.readouterr().out
        assert data_file.read_text(encoding="utf-8") == "{broken"
