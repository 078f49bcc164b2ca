"""App setting repository for database operations."""
from typing import Dict, Iterable, Optional, Tuple
from sqlalchemy import or_, select
from sqlalchemy.orm import Session
from batchsmith.models.app_setting import AppSetting

MAX_RETRY_ATTEMPTS_KEY = "max_retry_attempts"
RETRY_DELAY_KEY_PATTERN = "retry_attempt_%_delay"

# (key, value, description, setting_type, category)
DEFAULT_SETTINGS: Tuple[Tuple[str, str, str, str, str], ...] = (
    ("retry_attempt_2_delay", "5", "Seconds to wait before retry attempt 2", "number", "retry"),
    ("retry_attempt_3_delay", "30", "Seconds to wait before retry attempt 3", "number", "retry"),
    ("retry_attempt_4_delay", "120", "Seconds to wait before retry attempt 4 (2 minutes)", "number", "retry"),
    ("retry_attempt_5_delay", "300", "Seconds to wait before retry attempt 5 (5 minutes)", "number", "retry"),
    ("retry_attempt_6_delay", "300", "Seconds to wait before retry attempt 6 (5 minutes)", "number", "retry"),
    ("retry_attempt_7_delay", "300", "Seconds to wait before retry attempt 7 (5 minutes)", "number", "retry"),
    (MAX_RETRY_ATTEMPTS_KEY, "7", "Maximum retry attempts before failing a task", "number", "retry"),
)


def retry_delay_key(attempt: int) -> str:
    """Return the setting key holding the wait before ``attempt``."""
    return f"retry_attempt_{attempt}_delay"


class AppSettingRepository:
    """Repository for AppSetting database operations."""

    def __init__(self, db: Session):
        """
        Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def get(self, key: str) -> Optional[AppSetting]:
        """Retrieve a setting by key."""
        return self.db.scalars(select(AppSetting).where(AppSetting.key == key)).first()

    def set(self, key: str, value: str, **kwargs) -> AppSetting:
        """
        Create or update a setting.

        Args:
            key: Setting key
            value: Setting value (stored as text)
            **kwargs: Additional setting attributes

        Returns:
            AppSetting: Stored setting
        """
        setting = self.get(key)
        if setting is None:
            setting = AppSetting(key=key, value=value, **kwargs)
            self.db.add(setting)
        else:
            setting.value = value
            for attribute, attribute_value in kwargs.items():
                setattr(setting, attribute, attribute_value)
        self.db.commit()
        self.db.refresh(setting)
        return setting

    def get_retry_settings(self) -> Dict[str, str]:
        """
        Read all retry policy settings.

        Returns:
            Dict[str, str]: Raw key/value pairs for retry delays and max attempts
        """
        settings = self.db.scalars(
            select(AppSetting).where(
                or_(
                    AppSetting.key.like(RETRY_DELAY_KEY_PATTERN),
                    AppSetting.key == MAX_RETRY_ATTEMPTS_KEY,
                )
            )
        ).all()
        return {setting.key: setting.value for setting in settings}

    def seed_defaults(
        self, defaults: Iterable[Tuple[str, str, str, str, str]] = DEFAULT_SETTINGS
    ) -> int:
        """
        Insert default settings that do not exist yet.

        Returns:
            int: Number of settings inserted
        """
        inserted = 0
        for key, value, description, setting_type, category in defaults:
            if self.get(key) is not None:
                continue
            self.db.add(
                AppSetting(
                    key=key,
                    value=value,
                    description=description,
                    setting_type=setting_type,
                    category=category,
                )
            )
            inserted += 1
        self.db.commit()
        return inserted
