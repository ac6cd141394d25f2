"""Conversion of tabular inputs into the engine's typed inputs."""

from __future__ import annotations

import polars as pl

from knockout_odds.core.exceptions import ConfigurationError
from knockout_odds.core.logging import get_logger

logger = get_logger(__name__)


def _require_columns(dataframe: pl.DataFrame, *columns: str) -> None:
    missing = [c for c in columns if c not in dataframe.columns]
    if missing:
        raise ConfigurationError(
            f"Missing required columns {missing}; have {dataframe.columns}"
        )


def ratings_from_frame(
    dataframe: pl.DataFrame,
    name_column: str = "player",
    rating_column: str = "rating",
) -> dict[str, float]:
    """Build a ratings table from a DataFrame.

    Args:
        dataframe: One row per player.
        name_column: Column holding unique player names. Defaults to "player".
        rating_column: Column holding numeric ratings. Defaults to "rating".

    Returns:
        Mapping of player name to rating.

    Raises:
        ConfigurationError: If a column is missing, a name repeats, or a
            name is null or a rating is null, NaN or infinite.
    """
    _require_columns(dataframe, name_column, rating_column)
    ratings_df = dataframe.select(
        pl.col(name_column).cast(pl.Utf8),
        pl.col(rating_column).cast(pl.Float64),
    )

    invalid_rows = ratings_df.filter(
        pl.col(name_column).is_null()
        | pl.col(rating_column).is_null()
        | ~pl.col(rating_column).is_finite()
    )
    if invalid_rows.height:
        raise ConfigurationError(
            f"{invalid_rows.height} rating rows have a null name or a null "
            f"or non-finite rating: {invalid_rows[name_column].to_list()}"
        )

    duplicates = (
        ratings_df.group_by(name_column)
        .agg(pl.len().alias("n"))
        .filter(pl.col("n") > 1)
        .sort(name_column)
    )
    if duplicates.height:
        raise ConfigurationError(
            f"Duplicate player names in ratings: "
            f"{duplicates[name_column].to_list()}"
        )

    ratings = dict(
        zip(
            ratings_df[name_column].to_list(),
            ratings_df[rating_column].to_list(),
        )
    )
    logger.debug("Loaded ratings for %d players", len(ratings))
    return ratings


def fixture_from_frame(
    dataframe: pl.DataFrame,
    player1_column: str = "player1",
    player2_column: str = "player2",
) -> list[tuple[str, str]]:
    """Build an ordered first-round fixture from a DataFrame.

    Row order is draw order: row ``k`` is first-round match ``k``.

    Raises:
        ConfigurationError: If a column is missing or a name is null.
    """
    _require_columns(dataframe, player1_column, player2_column)
    fixture_df = dataframe.select(
        pl.col(player1_column).cast(pl.Utf8),
        pl.col(player2_column).cast(pl.Utf8),
    )
    null_count = fixture_df.null_count().sum_horizontal().item()
    if null_count:
        raise ConfigurationError(
            f"Fixture has {null_count} empty player slot(s)"
        )
    return list(fixture_df.iter_rows())
