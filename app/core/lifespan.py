from contextlib import asynccontextmanager
import logging

from app.core.scoring_config import get_scoring_config
from app.services.coaching_rules import get_coaching_rules
from app.taxonomy import get_default_taxonomy_provider

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    # Read-only tables are loaded once per process before serving requests.
    get_scoring_config()
    taxonomy = get_default_taxonomy_provider()
    rules = get_coaching_rules()
    logger.info(
        "analysis_tables_loaded taxonomy=%s coaching_rules=%s",
        type(taxonomy).__name__,
        len(rules),
    )
    yield
