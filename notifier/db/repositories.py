from __future__ import annotations

from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from notifier.db import models

ModelT = TypeVar("ModelT")


class BaseRepository(Generic[ModelT]):
    model: type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def create(self, **kwargs) -> ModelT:
        entity = self.model(**kwargs)
        self.db.add(entity)
        self.db.flush()
        return entity

    def get(self, entity_id) -> ModelT | None:
        return self.db.get(self.model, entity_id)

    def update(self, entity: ModelT, **kwargs) -> ModelT:
        for key, value in kwargs.items():
            setattr(entity, key, value)
        self.db.flush()
        return entity


class SystemSettingsRepository(BaseRepository[models.SystemSettings]):
    model = models.SystemSettings

    def get_current(self) -> models.SystemSettings | None:
        return self.get(models.SYSTEM_SETTINGS_ROW_ID)

    def upsert(self, **kwargs) -> models.SystemSettings:
        """Create the settings row or update it in place.  Flushes only."""
        current = self.get_current()
        if current is None:
            return self.create(id=models.SYSTEM_SETTINGS_ROW_ID, **kwargs)
        return self.update(current, **kwargs)
