import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

import numpy as np
import pandas as pd

FEATURE_SET = ['year', 'driver_perf', 'const_perf', 'circuit_perf']

EntityRating = Mapping[str, float]


@dataclass(frozen=True)
class EntityRatings:
    drivers: EntityRating
    constructors: EntityRating
    circuits: EntityRating


def build_ratings(table: pd.DataFrame, entity_column: str) -> EntityRating:
    positions = pd.to_numeric(table['position'], errors='coerce')
    means = positions.groupby(table[entity_column]).mean().dropna()

    return MappingProxyType({str(name): float(perf) for name, perf in means.items()})


def build_entity_ratings(table: pd.DataFrame) -> EntityRatings:
    ratings = EntityRatings(
        drivers=build_ratings(table, 'driver'),
        constructors=build_ratings(table, 'constructor'),
        circuits=build_ratings(table, 'circuit'),
    )

    logging.info(
        f"Ratings Built: {len(ratings.drivers)} Drivers, "
        f"{len(ratings.constructors)} Constructors, {len(ratings.circuits)} Circuits"
    )
    return ratings


def mean_rating(ratings: EntityRating) -> float:
    if not ratings:
        raise ValueError("No Ratings Available - Cannot Compute Fallback")
    return float(np.mean(list(ratings.values())))


def lookup_rating(ratings: EntityRating, name: str, kind: str) -> float:
    perf = ratings.get(name)
    if perf is None:
        fallback = mean_rating(ratings)
        logging.warning(f"No {kind.title()} Rating for '{name}' - Using Mean Rating {fallback:.3f}")
        return fallback
    return perf


def assemble_features(
    driver: str,
    constructor: str,
    circuit: str,
    year: int,
    driver_ratings: EntityRating,
    constructor_ratings: EntityRating,
    circuit_ratings: EntityRating,
) -> pd.DataFrame:
    return pd.DataFrame(
        [{
            'year': int(year),
            'driver_perf': lookup_rating(driver_ratings, driver, 'driver'),
            'const_perf': lookup_rating(constructor_ratings, constructor, 'constructor'),
            'circuit_perf': lookup_rating(circuit_ratings, circuit, 'circuit'),
        }],
        columns=FEATURE_SET,
    )


def build_training_frame(table: pd.DataFrame, ratings: EntityRatings) -> tuple[pd.DataFrame, pd.Series]:
    features = pd.DataFrame({
        'year': table['year'].astype(int),
        'driver_perf': table['driver'].map(dict(ratings.drivers)),
        'const_perf': table['constructor'].map(dict(ratings.constructors)),
        'circuit_perf': table['circuit'].map(dict(ratings.circuits)),
    }, columns=FEATURE_SET)
    target = pd.to_numeric(table['position'], errors='coerce')

    mask = features.notna().all(axis=1) & target.notna()
    if not mask.all():
        logging.warning(f"Skipping {int((~mask).sum())} Rows Without Complete Features")

    return features[mask].reset_index(drop=True), target[mask].astype(float).reset_index(drop=True)
