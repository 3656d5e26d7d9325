import logging
import sys
from datetime import datetime
from pathlib import Path

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Windows consoles often can't encode these
EMOJI_MAP = {
    '🚀': '[START]',
    '🌐': '[BROWSER]',
    '🔑': '[TOKEN]',
    '📥': '[CALLBACK]',
    '📤': '[REQUEST]',
    '✅': '[SUCCESS]',
    '❌': '[ERROR]',
    '⚠️': '[WARNING]',
    'ℹ️': '[INFO]',
    '✓': '[OK]',
}


class SafeConsoleHandler(logging.StreamHandler):
    """Console handler that safely handles emoji/Unicode on Windows."""

    def emit(self, record):
        try:
            msg = self.format(record)
            if sys.platform == 'win32':
                for emoji, replacement in EMOJI_MAP.items():
                    msg = msg.replace(emoji, replacement)
            self.stream.write(msg + self.terminator)
            self.flush()
        except UnicodeEncodeError:
            # Fallback: strip everything non-ASCII
            msg = record.getMessage().encode('ascii', 'replace').decode('ascii')
            self.stream.write(f"{record.levelname}: {msg}{self.terminator}")
            self.flush()
        except Exception:
            self.handleError(record)


def setup_logging(log_dir=Path("logs"), level="INFO"):
    """Log to a timestamped file under log_dir and to stdout. Returns the log file path."""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"oauth1_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    console_handler = SafeConsoleHandler(sys.stdout)

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        handlers=[file_handler, console_handler],
        force=True,
    )
    # urllib3 connection chatter is noise at INFO
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return log_file
