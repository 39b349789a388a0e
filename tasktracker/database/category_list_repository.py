"""Repository for category lists, and the category directory built on it."""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from tasktracker.models.category import CategoryItem, CategoryList
from tasktracker.database.models import CategoryListDB
from tasktracker.engine.categories import (
    CategoryDisplayInfo,
    generate_category_key,
    generate_slug,
    parse_category_key,
)
from tasktracker.errors import StoreFailureError, FieldValidationError

logger = logging.getLogger(__name__)


class CategoryListRepository:
    """Repository for CategoryList database operations."""

    def __init__(self, db: Session):
        self.db = db

    def is_slug_unique(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        """Check that no other list uses ``slug``."""
        q = self.db.query(CategoryListDB.id).filter(CategoryListDB.slug == slug)
        if exclude_id:
            q = q.filter(CategoryListDB.id != exclude_id)
        return q.first() is None

    def save(self, category_list: CategoryList) -> CategoryList:
        """Create or update a category list.

        Missing slugs are derived from titles, for the list and for each item.
        """
        slug = category_list.slug or generate_slug(category_list.title)
        categories = [
            CategoryItem(title=item.title, slug=item.slug or generate_slug(item.title))
            for item in category_list.categories
        ]
        category_list = category_list.model_copy(update={"slug": slug, "categories": categories})

        if not self.is_slug_unique(slug, category_list.id):
            raise FieldValidationError(
                [f'Slug "{slug}" already exists. Please choose a different title.']
            )

        try:
            row = None
            if category_list.id:
                row = self.db.query(CategoryListDB).filter(CategoryListDB.id == category_list.id).first()
            if row is None:
                row = CategoryListDB.from_pydantic(category_list)
                self.db.add(row)
            else:
                row.title = category_list.title
                row.slug = slug
                row.categories = [item.model_dump() for item in categories]
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Saved category list {row.id} ({slug})")
            return row.to_pydantic()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save category list {slug}: {type(e).__name__}: {str(e)}")
            raise StoreFailureError(f"Failed to save category list {slug}") from e

    def get_all(self) -> List[CategoryList]:
        """Get all category lists ordered by title."""
        rows = self.db.query(CategoryListDB).order_by(CategoryListDB.title).all()
        return [row.to_pydantic() for row in rows]

    def get_by_slug(self, slug: str) -> Optional[CategoryList]:
        """Get a category list by slug."""
        row = self.db.query(CategoryListDB).filter(CategoryListDB.slug == slug).first()
        return row.to_pydantic() if row else None

    def delete(self, list_id: str) -> bool:
        """Delete a category list by ID."""
        row = self.db.query(CategoryListDB).filter(CategoryListDB.id == list_id).first()
        if not row:
            return False
        try:
            self.db.delete(row)
            self.db.commit()
            logger.debug(f"Deleted category list {list_id}")
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete category list {list_id}: {type(e).__name__}: {str(e)}")
            raise StoreFailureError(f"Failed to delete category list {list_id}") from e


class DatabaseCategoryDirectory:
    """Resolves category keys to titles using the stored category lists."""

    def __init__(self, repository: CategoryListRepository):
        self.repository = repository

    def get_list_title(self, list_slug: str) -> Optional[str]:
        category_list = self.repository.get_by_slug(list_slug)
        return category_list.title if category_list else None

    def get_display_info(self, category_key: Optional[str]) -> CategoryDisplayInfo:
        if not category_key:
            return CategoryDisplayInfo()

        list_slug, item_slug = parse_category_key(category_key)
        if list_slug is None:
            return CategoryDisplayInfo(item_title=category_key, full_display=category_key)

        category_list = self.repository.get_by_slug(list_slug)
        if category_list is None:
            return CategoryDisplayInfo(
                list_title=list_slug,
                item_title=item_slug,
                full_display=generate_category_key(list_slug, item_slug),
            )

        # Items may be stored with the bare slug or with the full key
        full_key = generate_category_key(list_slug, item_slug)
        item = next(
            (c for c in category_list.categories if c.slug in (item_slug, full_key)),
            None,
        )
        item_title = item.title if item else item_slug
        return CategoryDisplayInfo(
            list_title=category_list.title,
            item_title=item_title,
            full_display=f"{category_list.title}: {item_title}",
        )
