from .settings import ArchiveSettings, LoggingSettings, MergeSettings, MergerSettings, default_user_settings_path

__all__ = [
    "ArchiveSettings",
    "LoggingSettings",
    "MergeSettings",
    "MergerSettings",
    "default_user_settings_path",
]
