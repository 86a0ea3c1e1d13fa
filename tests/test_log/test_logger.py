"""日志工具测试"""

import logging
import logging.handlers
import os

from ytree.config import LoggingSettings
from ytree.log import (
    MicrosecondFormatter,
    create_formatter,
    get_logger,
    setup_logger,
    setup_root_logger,
)


class TestGetLogger:
    """get_logger 命名测试"""

    def test_infer_module_name(self):
        assert get_logger().name == __name__

    def test_short_name_gets_prefix(self):
        assert get_logger("orm").name == "ytree.orm"

    def test_dotted_name_kept(self):
        assert get_logger("sqlalchemy.engine").name == "sqlalchemy.engine"
        assert get_logger("ytree").name == "ytree"

    def test_tree_modules_log_under_package(self):
        from ytree.orm.tree import subtree_updater

        assert subtree_updater.logger.name == "ytree.orm.tree.subtree_updater"


class TestSetupLogger:
    """setup_logger 测试"""

    def test_console_only(self):
        logger = setup_logger("test_ytree_console", level="DEBUG")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_file_handler(self, temp_dir):
        log_file = os.path.join(temp_dir, "logs", "plain.log")
        logger = setup_logger("test_ytree_file", log_file=log_file, console=False)
        logger.info("hello")

        assert isinstance(logger.handlers[0], logging.FileHandler)
        assert os.path.exists(log_file)
        logger.handlers[0].close()

    def test_rotating_file_handler(self, temp_dir):
        log_file = os.path.join(temp_dir, "rotating.log")
        logger = setup_logger(
            "test_ytree_rotating",
            log_file=log_file,
            console=False,
            file_handler_options={"maxBytes": 1024, "backupCount": 2},
        )

        handler = logger.handlers[0]
        assert isinstance(handler, logging.handlers.RotatingFileHandler)
        assert handler.maxBytes == 1024
        assert handler.backupCount == 2
        handler.close()

    def test_setup_replaces_handlers(self):
        setup_logger("test_ytree_repeat")
        logger = setup_logger("test_ytree_repeat")
        assert len(logger.handlers) == 1


class TestFormatter:
    """格式化器测试"""

    def test_microsecond_formatter(self):
        formatter = create_formatter()
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

        assert isinstance(formatter, MicrosecondFormatter)
        # 2024-01-01 00:00:00.123456
        assert len(formatter.formatTime(record).split(".")[-1]) == 6

    def test_plain_formatter(self):
        formatter = create_formatter(use_microseconds=False)
        assert not isinstance(formatter, MicrosecondFormatter)


class TestSetupRootLogger:
    """根日志器配置测试"""

    def teardown_method(self):
        root = logging.getLogger()
        for handler in list(root.handlers):
            handler.close()
        root.handlers.clear()
        root.propagate = True

    def test_from_settings(self, temp_dir):
        settings = LoggingSettings(
            level="WARNING",
            file_path=os.path.join(temp_dir, "root.log"),
            file_backup_count=2,
            enable_console=False,
        )
        logger = setup_root_logger(config=settings, console=False)

        assert logger.level == logging.WARNING
        file_handlers = [h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].backupCount == 2

    def test_from_config_file(self, temp_file, temp_dir):
        path = temp_file("log_settings.yaml", "logging:\n  level: ERROR\n  enable_console: false\n")
        logger = setup_root_logger(config_path=path)

        assert logger.level == logging.ERROR
        assert logger.handlers == []
