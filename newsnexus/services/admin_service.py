"""Read-only table viewer for administrators."""

from typing import Any, Dict, List

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from newsnexus.core.exceptions import ValidationError
from newsnexus.database import models
from newsnexus.repositories.base_repository import BaseRepository
from newsnexus.services.base_service import BaseService

# Keyed by model class name, matching the names the admin UI lists
TABLE_MODELS = {
    model.__name__: model
    for model in (
        models.User,
        models.NewsArticleAggregatorSource,
        models.EntityWhoFoundArticle,
        models.IngestionRequest,
        models.Article,
        models.ArticleContent,
        models.State,
        models.ArtificialIntelligence,
        models.AiStateProposal,
        models.HumanStateConfirmation,
        models.AiArticleApproval,
        models.ArticleApproval,
    )
}


def row_to_dict(instance: Any) -> Dict[str, Any]:
    mapper = inspect(instance).mapper
    return {attr.key: getattr(instance, attr.key) for attr in mapper.column_attrs}


class AdminService(BaseService):
    """Dump whole tables as plain dicts."""

    async def get_table(self, table_name: str) -> List[Dict[str, Any]]:
        """Return every row of one whitelisted table, ordered by id.

        Raises:
            ValidationError: If ``table_name`` is not a known model
        """
        return await self.execute(table_name)

    def validate(self, table_name: str):
        if table_name not in TABLE_MODELS:
            raise ValidationError(
                f"Unknown table: {table_name}",
                details={"availableTables": sorted(TABLE_MODELS)},
            )

    async def run(self, table_name: str) -> List[Dict[str, Any]]:
        repository = BaseRepository(self.session, TABLE_MODELS[table_name])
        try:
            rows = await repository.get_all(limit=None)
        except SQLAlchemyError as e:
            raise self._persistence_error(f"Failed to read table {table_name}", e) from e

        self.logger.info(f"Admin read of {table_name}", extra={"rows": len(rows)})
        return [row_to_dict(row) for row in rows]
