"""
彩色日志配置模块
命令行调试工具与测试共用的日志输出配置
- 默认使用 rich
- use_rich=False 时使用单行格式 "时间 | 级别 | 消息"，便于重定向到文件后 grep
"""
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PLAIN_FORMAT = '%(asctime)s | %(levelname)s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColorfulFormatter(logging.Formatter):
    """彩色日志格式化器，use_color=False 时输出纯文本"""

    COLORS = {
        'DEBUG': '\033[36m',      # 青色
        'INFO': '\033[32m',       # 绿色
        'WARNING': '\033[33m',    # 黄色
        'ERROR': '\033[31m',      # 红色
        'CRITICAL': '\033[35m',   # 紫色
    }
    TIME_COLOR = '\033[34m'
    RESET = '\033[0m'

    def __init__(self, fmt=None, datefmt=None, use_color: bool = True):
        super().__init__(fmt, datefmt)
        self.use_color = use_color

    def format(self, record):
        message = super().format(record)
        if not self.use_color:
            return message

        if self._fmt and '%(asctime)s' in self._fmt:
            time_str = self.formatTime(record, self.datefmt)
            message = message.replace(time_str, f"{self.TIME_COLOR}{time_str}{self.RESET}", 1)

        level_name = record.levelname
        if level_name in self.COLORS:
            colored_level = f"{self.COLORS[level_name]}{level_name}{self.RESET}"
            message = message.replace(level_name, colored_level, 1)

        return message


def setup_colorful_logging(
    level: int = logging.INFO,
    name: Optional[str] = None,
    use_rich: bool = True,
) -> logging.Logger:
    """
    设置彩色日志配置

    Args:
        level: 日志级别
        name: 日志器名称
        use_rich: 是否使用 RichHandler；否则使用 StreamHandler + ColorfulFormatter

    Returns:
        配置好的日志器
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # 避免重复添加处理器，但同步已有处理器的级别
    if logger.handlers:
        for h in logger.handlers:
            h.setLevel(level)
        return logger

    if use_rich:
        console = Console(stderr=True)
        handler = RichHandler(
            console=console,
            show_time=True,
            show_level=True,
            show_path=False,
            enable_link_path=False,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
        )
        # 时间与级别由 RichHandler 输出
        formatter = logging.Formatter('%(message)s', datefmt=DATE_FORMAT)
    else:
        stream = sys.stderr
        handler = logging.StreamHandler(stream)
        # 非终端输出（重定向/管道）不带 ANSI 颜色码
        formatter = ColorfulFormatter(PLAIN_FORMAT, datefmt=DATE_FORMAT, use_color=stream.isatty())

    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger


def get_colorful_logger(name: Optional[str] = None) -> logging.Logger:
    """获取彩色日志器"""
    return setup_colorful_logging(name=name)
