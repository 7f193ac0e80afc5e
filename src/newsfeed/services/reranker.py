# src/newsfeed/services/reranker.py
"""
Relevance re-ranking (caller side)

The re-ranker itself is an external model. This module owns the contract
around it: build the request, bound the call, and accept the answer only if
it is a permutation of the input ids. Any failure keeps the date order.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

from src.newsfeed.exceptions import ReRankError
from src.newsfeed.schemas.article import Article
from src.newsfeed.schemas.rerank import ArticleForRanking, RerankRequest, RerankResponse

logger = logging.getLogger(__name__)


class RelevanceReranker(ABC):
    """Orders articles by predicted interest given category click counts."""

    @abstractmethod
    async def rerank(self, request: RerankRequest) -> RerankResponse:
        pass


def build_rerank_request(articles: Sequence[Article], clicks: Dict[str, int]) -> RerankRequest:
    return RerankRequest(
        articles=[ArticleForRanking(**article.to_ranking_dict()) for article in articles],
        user_category_clicks=dict(clicks),
    )


def validate_permutation(article_ids: Sequence[str], response: RerankResponse) -> List[str]:
    """
    Check that the re-ranked ids are exactly the input ids, each once.

    Raises:
        ReRankError: lengths differ, an id is unknown, or an id repeats
    """
    returned = list(response.prioritized_article_ids)
    if len(returned) != len(article_ids):
        raise ReRankError(f"Expected {len(article_ids)} ids, got {len(returned)}")
    if len(set(returned)) != len(returned):
        raise ReRankError("Duplicate ids in re-ranked order")
    unknown = set(returned) - set(article_ids)
    if unknown:
        raise ReRankError(f"{len(unknown)} unknown id(s) in re-ranked order")
    return returned


async def apply_reranking(
    articles: List[Article],
    clicks: Optional[Dict[str, int]],
    reranker: Optional[RelevanceReranker],
    timeout: float = 10.0,
) -> Tuple[List[Article], Optional[str]]:
    """
    Re-order ``articles`` with ``reranker``.

    Returns:
        (articles, reasoning). On any failure the input order is returned
        with reasoning None; articles are never dropped.
    """
    if not articles:
        return [], None
    if not clicks or reranker is None:
        return list(articles), None

    try:
        request = build_rerank_request(articles, clicks)
        try:
            response = await asyncio.wait_for(reranker.rerank(request), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise ReRankError(f"Re-ranker timed out after {timeout}s") from e
        except ReRankError:
            raise
        except Exception as e:
            raise ReRankError(f"Re-ranker failed: {type(e).__name__}: {e}") from e

        by_id = {article.id: article for article in articles}
        ordered_ids = validate_permutation(list(by_id), response)
    except ReRankError as e:
        logger.warning(f"[Reranker] Keeping date order: {e}")
        return list(articles), None

    logger.info(f"[Reranker] Re-ordered {len(ordered_ids)} articles")
    return [by_id[article_id] for article_id in ordered_ids], response.reasoning
