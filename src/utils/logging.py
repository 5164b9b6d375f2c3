import logging


class RealtimeNoiseFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        return "heartbeat" not in msg and "phx_reply" not in msg


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    for logger_name in ["realtime", "httpx", "streamlit.web.server"]:
        logger = logging.getLogger(logger_name)
        logger.addFilter(RealtimeNoiseFilter())
