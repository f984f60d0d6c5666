"""Settings repository for app-level key/value pairs."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.settings import AppSetting

_TRUE = "true"
_FALSE = "false"


class SQLModelSettingsRepository:
    """SQLModel-based settings repository.

    Also serves as the scheduler's durable record store through
    ``get_flag``/``set_flag``.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[AppSetting]:
        with self.session_factory() as session:
            setting = session.exec(select(AppSetting).where(AppSetting.key == key)).first()
            if setting:
                session.expunge(setting)
            return setting

    def set(self, key: str, value: str, description: str | None = None) -> AppSetting:
        with self.session_factory() as session:
            setting = session.exec(select(AppSetting).where(AppSetting.key == key)).first()
            if setting:
                setting.value = value
                setting.description = description
            else:
                setting = AppSetting(key=key, value=value, description=description)
            session.add(setting)
            session.commit()
            session.refresh(setting)
            session.expunge(setting)
            return setting

    def delete(self, key: str) -> None:
        with self.session_factory() as session:
            setting = session.exec(select(AppSetting).where(AppSetting.key == key)).first()
            if setting:
                session.delete(setting)
                session.commit()

    def get_flag(self, key: str) -> Optional[bool]:
        setting = self.get(key)
        if setting is None:
            return None
        return setting.value.strip().lower() in {_TRUE, "1", "yes", "on"}

    def set_flag(self, key: str, value: bool, description: str | None = None) -> None:
        self.set(key, _TRUE if value else _FALSE, description)


__all__ = ["SQLModelSettingsRepository"]
