import logging


class ColourFormatter(logging.Formatter):

    RESET = '\x1b[0m'
    COLOURS = {
        logging.DEBUG: '\x1b[38;5;245m',
        logging.INFO: '\x1b[38;5;39m',
        logging.WARNING: '\x1b[38;5;226m',
        logging.ERROR: '\x1b[38;5;196m',
        logging.CRITICAL: '\x1b[1;38;5;196m',
    }

    def __init__(self, fmt: str = '[%(asctime)s] %(levelname)-8s %(message)s', datefmt: str = '%H:%M:%S') -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        colour = self.COLOURS.get(record.levelno)
        if colour is None:
            return message
        return f"{colour}{message}{self.RESET}"
