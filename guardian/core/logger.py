"""
Guardian - Logger Module
========================

Custom tree-style logging with local timezone and daily rotation.

DESIGN:
    Structured, hierarchical output that's easy to scan visually.
    Tree-style formatting groups related information together so a
    moderation event (who, what, thresholds) reads as one block.

    Key features:
    - Tree-style formatting for structured data visualization
    - Local timezone timestamps (BOT_TIMEZONE, default Asia/Tokyo)
    - Daily log rotation in dated folders
    - Retention cleanup on startup
    - Session tracking with unique run IDs
    - Discord webhook integration for error alerts
"""

import asyncio
import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

import aiohttp


# =============================================================================
# Constants
# =============================================================================

LOGS_DIR = Path(os.getenv("LOG_DIR", "logs"))
"""Directory for all log files, organized by date."""

LOG_RETENTION_DAYS = 7
"""Number of days to retain log directories before cleanup."""

LOCAL_TZ = ZoneInfo(os.getenv("BOT_TIMEZONE", "Asia/Tokyo"))
"""Timezone used for every log timestamp."""

Details = Optional[List[Tuple[str, str]]]


# =============================================================================
# Tree Logger Class
# =============================================================================

class TreeLogger:
    """
    Custom logger with tree-style formatting.

    DESIGN:
        Uses tree-style output (├─ └─) for visual hierarchy.
        Separate error log file for quick troubleshooting.
        Optional webhook notifications for errors with details.

    Attributes:
        run_id: Unique identifier for this bot session.
        log_file: Path to the main log file.
        error_file: Path to the error-only log file.
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self, logs_dir: Path = LOGS_DIR) -> None:
        """
        Initialize logger with run ID and daily log file.

        Args:
            logs_dir: Root directory for dated log folders.
        """
        self.run_id: str = str(uuid.uuid4())[:8]
        self._webhook_url: Optional[str] = None
        self._logs_dir = logs_dir

        today = datetime.now(LOCAL_TZ).strftime("%Y-%m-%d")
        self.log_dir = logs_dir / today
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = self.log_dir / f"Guardian-{today}.log"
        self.error_file = self.log_dir / f"Guardian-Errors-{today}.log"

        self._cleanup_old_logs()
        self._write_session_header()

    def set_webhook(self, url: Optional[str]) -> None:
        """
        Set webhook URL for error notifications.

        Args:
            url: Discord webhook URL for error alerts.
        """
        self._webhook_url = url

    # =========================================================================
    # Log Cleanup
    # =========================================================================

    def _cleanup_old_logs(self) -> None:
        """Remove dated log directories older than the retention period."""
        if not self._logs_dir.exists():
            return

        now = datetime.now()
        deleted = 0

        for item in self._logs_dir.iterdir():
            if not item.is_dir():
                continue
            try:
                dir_date = datetime.strptime(item.name, "%Y-%m-%d")
            except ValueError:
                continue  # not a dated folder
            if (now - dir_date).days > LOG_RETENTION_DAYS:
                for f in item.iterdir():
                    f.unlink()
                item.rmdir()
                deleted += 1

        if deleted > 0:
            print(f"[LOG CLEANUP] Removed {deleted} old log directories")

    def _write_session_header(self) -> None:
        """Write session start marker to log file."""
        header = f"""
============================================================
NEW SESSION - RUN ID: {self.run_id}
[{datetime.now(LOCAL_TZ).strftime("%H:%M:%S %Z")}]
============================================================
"""
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(header)

    # =========================================================================
    # Core Logging
    # =========================================================================

    def _get_timestamp(self) -> str:
        """Get current timestamp like "[14:30:45 JST]"."""
        return datetime.now(LOCAL_TZ).strftime("[%H:%M:%S %Z]")

    def _write(
        self,
        message: str,
        emoji: str = "",
        include_timestamp: bool = True,
        is_error: bool = False,
    ) -> None:
        """
        Write log message to console and file.

        Args:
            message: Log message content.
            emoji: Optional emoji prefix.
            include_timestamp: Whether to prepend timestamp.
            is_error: Whether to also write to error log.
        """
        if include_timestamp:
            timestamp = self._get_timestamp()
            full_message = f"{timestamp} {emoji} {message}" if emoji else f"{timestamp} {message}"
        else:
            full_message = f"{emoji} {message}" if emoji else message

        print(full_message)

        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(f"{full_message}\n")

        if is_error:
            with open(self.error_file, "a", encoding="utf-8") as f:
                f.write(f"{full_message}\n")

    def _write_details(self, details: List[Tuple[str, str]], is_error: bool = False) -> None:
        """Write (key, value) pairs with tree connectors."""
        for i, (key, value) in enumerate(details):
            prefix = "└─" if i == len(details) - 1 else "├─"
            self._write(f"  {prefix} {key}: {value}", include_timestamp=False, is_error=is_error)

    # =========================================================================
    # Tree Formatting
    # =========================================================================

    def tree(
        self,
        title: str,
        items: List[Tuple[str, str]],
        emoji: str = "📦",
    ) -> None:
        """
        Log structured data in tree format.

        Example output:
            [14:30:45 JST] 🛡️ Spam Detected
              ├─ User: someone (123)
              ├─ Similar: 3 / 3
              └─ Action: Muted
        """
        self._write(title, emoji=emoji)
        self._write_details(items)

    # =========================================================================
    # Log Levels
    # =========================================================================

    def debug(self, msg: str, details: Details = None) -> None:
        """Log debug message (only if DEBUG env var set)."""
        if os.getenv("DEBUG"):
            self._write(msg, "🔍")
            if details:
                self._write_details(details)

    def info(self, msg: str, details: Details = None) -> None:
        """Log informational message."""
        self._write(msg, "ℹ️")
        if details:
            self._write_details(details)

    def success(self, msg: str) -> None:
        """Log success message."""
        self._write(msg, "✅")

    def warning(self, msg: str, details: Details = None) -> None:
        """Log warning message with optional structured details."""
        self._write(msg, "⚠️")
        if details:
            self._write_details(details)

    def error(self, msg: str, details: Details = None) -> None:
        """
        Log error message with optional structured details.

        DESIGN:
            Always written to both main and error log files.
            Errors with details are forwarded to the webhook if configured.
        """
        self._write(msg, "❌", is_error=True)
        if not details:
            return

        self._write_details(details, is_error=True)

        if self._webhook_url:
            try:
                asyncio.get_running_loop().create_task(self._send_webhook_error(msg, details))
            except RuntimeError:
                pass  # no running loop (startup or tests)

    def critical(self, msg: str) -> None:
        """Log critical error message."""
        self._write(msg, "🚨", is_error=True)

    # =========================================================================
    # Webhook Integration
    # =========================================================================

    async def _send_webhook_error(
        self,
        title: str,
        details: List[Tuple[str, str]],
    ) -> None:
        """Send error notification to the configured Discord webhook."""
        if not self._webhook_url:
            return

        try:
            description = "\n".join([f"**{k}:** {v}" for k, v in details])
            payload = {
                "embeds": [{
                    "title": f"❌ {title}",
                    "description": description[:4000],
                    "color": 0xDC3545,
                    "timestamp": datetime.now(LOCAL_TZ).isoformat(),
                    "footer": {"text": f"Run ID: {self.run_id}"},
                }]
            }

            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self._webhook_url,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=10),
                ) as resp:
                    if resp.status != 204:
                        print(f"Webhook error: {resp.status}")

        except Exception as e:
            print(f"Failed to send webhook: {e}")


# =============================================================================
# Global Instance
# =============================================================================

logger = TreeLogger()
"""Global logger instance, created at import time and shared by all modules."""


__all__ = [
    "logger",
    "TreeLogger",
    "LOCAL_TZ",
]
