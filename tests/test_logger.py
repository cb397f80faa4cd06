from __future__ import annotations

import logging
from pathlib import Path

from promptseg.utils.logger import ColoredFormatter, resolve_logs_dir

FORMAT = "[%(levelname2)s] %(module2)s:%(funcName2)s:%(lineno2)s- %(message2)s"


def _record(level=logging.WARNING) -> logging.LogRecord:
    return logging.LogRecord(
        name="promptseg",
        level=level,
        pathname=__file__,
        lineno=42,
        msg="Best mask index: %d, IoU: %.3f",
        args=(2, 0.9),
        exc_info=None,
        func="decode",
    )


def test_plain_formatter_interpolates_args_without_color_codes() -> None:
    text = ColoredFormatter(FORMAT, use_color=False).format(_record())

    assert text == "[WARNING] test_logger:decode:42- Best mask index: 2, IoU: 0.900"
    assert "\x1b[" not in text


def test_colored_formatter_keeps_the_message() -> None:
    text = ColoredFormatter(FORMAT, use_color=True).format(_record(logging.ERROR))

    assert "Best mask index: 2, IoU: 0.900" in text
    assert "decode" in text


def test_logs_dir_can_be_overridden(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("PROMPTSEG_LOG_DIR", str(tmp_path / "logs"))
    assert resolve_logs_dir() == (tmp_path / "logs").resolve()
