import logging
import os
from dataclasses import dataclass


@dataclass
class BotSettings:
    port: int
    max_width: int
    max_height: int
    origin_x: int
    origin_y: int
    inter_pixel_delay_ms: int
    settle_delay_ms: int
    alpha_threshold: int
    timeout: float
    retries: int
    log_level: str
    surface_left: int
    surface_top: int
    palette: str

    @classmethod
    def from_env(cls) -> "BotSettings":
        return cls(
            port=int(os.getenv("PORT", "5600")),
            max_width=int(os.getenv("MAX_WIDTH", "50")),
            max_height=int(os.getenv("MAX_HEIGHT", "50")),
            origin_x=int(os.getenv("ORIGIN_X", "100")),
            origin_y=int(os.getenv("ORIGIN_Y", "100")),
            inter_pixel_delay_ms=int(os.getenv("PIXEL_DELAY_MS", "1000")),
            settle_delay_ms=int(os.getenv("SETTLE_DELAY_MS", "200")),
            alpha_threshold=int(os.getenv("ALPHA_THR", "128")),
            timeout=float(os.getenv("SOURCE_TIMEOUT", "10.0")),
            retries=int(os.getenv("SOURCE_RETRIES", "2")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            surface_left=int(os.getenv("SURFACE_LEFT", "0")),
            surface_top=int(os.getenv("SURFACE_TOP", "0")),
            palette=os.getenv("PALETTE", ""),
        )


SETTINGS = BotSettings.from_env()


def configure_logging() -> logging.Logger:
    logging.basicConfig(level=SETTINGS.log_level)
    return logging.getLogger("pixel-placer")
