"""Per-user category preference stores.

The classifier depends only on the ``PreferenceStore`` protocol, so the
storage medium can be swapped (database in the API, memory in tests).
"""

import logging
from typing import Protocol

from sqlalchemy.orm import Session

from src.models.category_preference import UserCategoryPreference
from src.models.enums import CategoryTag

logger = logging.getLogger(__name__)


class PreferenceStore(Protocol):
    """Read-many / write-rare mapping of (user, normalized key) to a category."""

    def get(self, user_id: int, key: str) -> CategoryTag | None: ...

    def set(self, user_id: int, key: str, value: CategoryTag) -> None: ...

    def delete(self, user_id: int, key: str) -> bool: ...

    def all_for_user(self, user_id: int) -> dict[str, CategoryTag]: ...


class InMemoryPreferenceStore:
    """Dict-backed store, used for tests and callers without a database."""

    def __init__(self, initial: dict[int, dict[str, CategoryTag]] | None = None):
        self._data: dict[int, dict[str, CategoryTag]] = {
            user_id: dict(prefs) for user_id, prefs in (initial or {}).items()
        }

    def get(self, user_id: int, key: str) -> CategoryTag | None:
        return self._data.get(user_id, {}).get(key)

    def set(self, user_id: int, key: str, value: CategoryTag) -> None:
        self._data.setdefault(user_id, {})[key] = CategoryTag(value)

    def delete(self, user_id: int, key: str) -> bool:
        return self._data.get(user_id, {}).pop(key, None) is not None

    def all_for_user(self, user_id: int) -> dict[str, CategoryTag]:
        return dict(self._data.get(user_id, {}))


class SqlAlchemyPreferenceStore:
    """Store backed by the ``user_category_preferences`` table."""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, user_id: int, key: str) -> UserCategoryPreference | None:
        return (
            self.db.query(UserCategoryPreference)
            .filter(
                UserCategoryPreference.user_id == user_id,
                UserCategoryPreference.normalized_key == key,
            )
            .first()
        )

    def get(self, user_id: int, key: str) -> CategoryTag | None:
        preference = self._find(user_id, key)
        if preference is None:
            return None

        tag = CategoryTag.parse(preference.category)
        if tag is None:
            logger.warning(
                f"Ignoring stored preference '{key}' -> '{preference.category}' for user {user_id}"
            )
        return tag

    def set(self, user_id: int, key: str, value: CategoryTag) -> None:
        """Upsert a preference; the last write for a key wins."""
        tag = CategoryTag(value)
        existing = self._find(user_id, key)

        if existing:
            existing.category = tag.value
        else:
            self.db.add(
                UserCategoryPreference(
                    user_id=user_id,
                    normalized_key=key,
                    category=tag.value,
                )
            )

        self.db.commit()
        logger.info(f"Recorded category preference: '{key}' -> {tag.value} (user {user_id})")

    def delete(self, user_id: int, key: str) -> bool:
        existing = self._find(user_id, key)
        if existing is None:
            return False

        self.db.delete(existing)
        self.db.commit()
        return True

    def all_for_user(self, user_id: int) -> dict[str, CategoryTag]:
        preferences = (
            self.db.query(UserCategoryPreference)
            .filter(UserCategoryPreference.user_id == user_id)
            .order_by(UserCategoryPreference.normalized_key)
            .all()
        )
        result = {}
        for preference in preferences:
            tag = CategoryTag.parse(preference.category)
            if tag is not None:
                result[preference.normalized_key] = tag
        return result
