# utils/logging_config.py
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
import gzip
import os
import shutil
from datetime import datetime

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

def archive_name(default_name: str) -> str:
    # logs/latest.log.2025-08-13 → logs/2025-08-13.log.gz
    path = Path(default_name)
    stamp = path.name.rsplit(".", 1)[-1]
    return str(path.with_name(f"{stamp}.log.gz"))

def gzip_file(source: str, dest: str):
    with open(source, "rb") as f_in, gzip.open(dest, "wb") as f_out:
        shutil.copyfileobj(f_in, f_out)
    os.remove(source)

def setup_logging(log_dir: str = "logs", level: int = logging.INFO):
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)

    # 午夜輪替，舊檔壓成 YYYY-MM-DD.log.gz，保留 30 份
    file_handler = TimedRotatingFileHandler(
        str(log_path / "latest.log"), when="midnight", backupCount=30, encoding="utf-8",
    )
    file_handler.namer = archive_name
    file_handler.rotator = gzip_file

    console_handler = logging.StreamHandler()
    for handler in (file_handler, console_handler):
        handler.setFormatter(formatter)
        root.addHandler(handler)

    root.info("==== roll bot logging started %s ====", datetime.now().strftime(DATE_FORMAT))
