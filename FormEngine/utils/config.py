"""Form Engine configuration module uniformly reads environment variables and provides type-safe access."""

from pydantic_settings import BaseSettings
from pydantic import Field

from loguru import logger

class Settings(BaseSettings):
    """Form Engine configuration, environment variables and fields are all capitalized."""
    LOG_FILE: str = Field("logs/form_engine.log", description="Log output file, empty to disable the file sink")
    DOCUMENT_TITLE: str = Field("Purchase Order", description="Title written into the exported document head")
    PAGE_SIZE: str = Field("Letter", description="Page size attribute of the exported body")
    PAGE_PADDING: str = Field("0.5in", description="Page padding attribute of the exported body")
    EMPTY_CELL_TEXT: str = Field("-", description="Text rendered for an empty table cell in literal mode")
    TEMPLATE_RECORD_NAMESPACE: str = Field(
        "record", description="Variable namespace used by template-mode placeholders"
    )
    TEMPLATE_ITEM_NAMESPACE: str = Field(
        "item", description="Sublist name that list-bound table rows are read from in template mode"
    )
    CURRENCY_SYMBOL: str = Field("$", description="Currency symbol used when formatting totals")
    # The change log is in memory only, older entries are dropped first.
    MAX_CHANGE_HISTORY: int = Field(50, description="Maximum number of change records kept")
    MAX_NOTIFICATIONS: int = Field(100, description="Maximum number of notifications kept on the agent")
    ENABLE_JSON_REPAIR: bool = Field(
        False, description="Whether suggestion payloads may be repaired with json_repair as a last resort"
    )
    DEFAULT_LINE_ITEM_ROWS: int = Field(5, description="Number of rows seeded into the line item table")

    class Config:
        """Pydantic configuration: allow reading from .env and be case compatible"""
        env_file = ".env"
        env_prefix = ""
        case_sensitive = False
        extra = "allow"

settings = Settings()


def print_config(config: Settings):
    """Output the current configuration items to the log in human-readable format to facilitate troubleshooting.

    Parameters:
        config: Settings instance, usually global settings."""
    message = ""
    message += "\n=== Form Engine Configuration ===\n"
    message += f"Document title: {config.DOCUMENT_TITLE}\n"
    message += f"Page: {config.PAGE_SIZE} (padding {config.PAGE_PADDING})\n"
    message += f"Empty cell text: {config.EMPTY_CELL_TEXT!r}\n"
    message += f"Template namespaces: {config.TEMPLATE_RECORD_NAMESPACE}/{config.TEMPLATE_ITEM_NAMESPACE}\n"
    message += f"Currency symbol: {config.CURRENCY_SYMBOL}\n"
    message += f"Change history size: {config.MAX_CHANGE_HISTORY}\n"
    message += f"JSON repair: {'enabled' if config.ENABLE_JSON_REPAIR else 'disabled'}\n"
    message += f"Line item rows: {config.DEFAULT_LINE_ITEM_ROWS}\n"
    message += f"Log file: {config.LOG_FILE or '(disabled)'}\n"
    message += "=========================\n"
    logger.info(message)
