# ranking.py
"""Ranking of scored candidates and the award decision."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import pandas as pd

logger = logging.getLogger(__name__)

NO_CANDIDATES_MESSAGE = "No candidates to award."
UNSCORED_WINNER_MESSAGE = "Cannot determine a winner. Make sure the bids have been scored."


def rank_candidates(scored: pd.DataFrame,
                    score_column: str = 'final_score') -> pd.DataFrame:
    """
    Sorts candidates by score (descending) and assigns 1-based ranks

    Ties keep their original row order, and every row gets its own rank
    number: two equal scores become rank 1 and rank 2, never 1 and 1.

    Args:
        scored: DataFrame with one row per candidate
        score_column: Column holding the final score

    Returns:
        New DataFrame sorted by rank with an integer 'rank' column
    """
    # mergesort is the stable choice in pandas
    result = scored.sort_values(score_column, ascending=False, kind='mergesort')
    result['rank'] = pd.Series(range(1, len(result) + 1), index=result.index, dtype='int64')
    return result


@dataclass(frozen=True)
class AwardDecision:
    """Outcome of an award attempt."""

    awarded: bool
    message: str
    winner: Optional[Dict[str, Any]] = None
    final_score: Optional[float] = None
    tender: Any = None  # awarded tender record, when awarding a tender


def select_winner(ranked: pd.DataFrame,
                  score_column: str = 'final_score') -> AwardDecision:
    """
    Picks the rank 1 candidate as winner

    Fails (awarded=False) when there is no candidate or when the top score
    is exactly 0, which is read as "nothing has been scored yet".

    Args:
        ranked: Output of rank_candidates()
        score_column: Column holding the final score
    """
    if ranked.empty:
        logger.info("Award refused: no candidates")
        return AwardDecision(awarded=False, message=NO_CANDIDATES_MESSAGE)

    top = ranked.loc[ranked['rank'] == 1].iloc[0] if 'rank' in ranked.columns else ranked.iloc[0]
    top_score = float(top[score_column])
    if top_score == 0:
        logger.info("Award refused: top score is 0")
        return AwardDecision(awarded=False, message=UNSCORED_WINNER_MESSAGE,
                             final_score=top_score)

    winner = top.to_dict()
    logger.info("Award to candidate with score %.2f", top_score)
    return AwardDecision(
        awarded=True,
        message="Winner selected.",
        winner=winner,
        final_score=top_score,
    )
