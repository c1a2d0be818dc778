"""bulkops configuration."""

from bulkops.core.config.settings import BulkOpsSettings, clear_settings_cache, get_settings

__all__ = ["BulkOpsSettings", "get_settings", "clear_settings_cache"]
